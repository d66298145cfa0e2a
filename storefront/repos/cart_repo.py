# storefront/repos/cart_repo.py
import uuid

from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.listing import ListingModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_listings(self, user_id: uuid.UUID) -> list[ListingModel]:
        """Listings in the user's cart, in the order they were added."""
        return list(
            self.db.execute(
                select(ListingModel)
                .join(CartItemModel, CartItemModel.listing_id == ListingModel.id)
                .where(CartItemModel.user_id == user_id)
                .order_by(CartItemModel.id)
            ).scalars()
        )

    def get_cart_item(self, user_id: uuid.UUID, listing_id: uuid.UUID) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.user_id == user_id,
                CartItemModel.listing_id == listing_id,
            )
        ).scalar_one_or_none()

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.commit()
        return item

    def delete_cart_item(self, user_id: uuid.UUID, listing_id: uuid.UUID) -> int:
        result = self.db.execute(
            delete(CartItemModel).where(
                CartItemModel.user_id == user_id,
                CartItemModel.listing_id == listing_id,
            )
        )
        self.db.commit()
        return result.rowcount

    def clear_cart(self, user_id: uuid.UUID) -> int:
        result = self.db.execute(delete(CartItemModel).where(CartItemModel.user_id == user_id))
        self.db.commit()
        return result.rowcount

    def rollback(self):
        self.db.rollback()

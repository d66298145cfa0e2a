# storefront/services/cart_service.py
from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.listing import ListingModel
from storefront.data.models.user import UserModel
from storefront.repos.cart_repo import CartRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def cart_total(listings: list[ListingModel]) -> Decimal:
    # listings without a price contribute nothing
    return sum((l.price for l in listings if l.price is not None), Decimal("0.00"))


class CartService:
    """
    The cart is an ordered, duplicate-free list of listing references owned by one user.
    Commands (add, remove) change it, the query (get) only reads.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)

    # query
    def get_cart(self, user: UserModel) -> Dict[str, Any]:
        listings = self.repo.get_cart_listings(user.id)
        return {
            "items": listings,
            "total": cart_total(listings),
        }

    def contains(self, user: UserModel | None, listing: ListingModel) -> bool:
        if user is None:
            return False
        return self.repo.get_cart_item(user.id, listing.id) is not None

    # commands
    def add_listing(self, user: UserModel, listing: ListingModel) -> bool:
        """Append the listing; returns False, changing nothing, if it is already in the cart."""
        if self.repo.get_cart_item(user.id, listing.id):
            logger.info(f"Listing {listing.id} already in cart of user {user.id}")
            return False

        try:
            self.repo.add_cart_item(CartItemModel(user_id=user.id, listing_id=listing.id))
        except IntegrityError:
            # a concurrent request added it first
            self.repo.rollback()
            return False

        logger.info(f"Listing {listing.id} added to cart of user {user.id}")
        return True

    def remove_listing(self, user: UserModel, listing_id) -> None:
        removed = self.repo.delete_cart_item(user.id, listing_id)
        logger.info(f"Removed {removed} cart entries for listing {listing_id} of user {user.id}")

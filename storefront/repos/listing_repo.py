# storefront/repos/listing_repo.py
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from storefront.data.models.listing import ListingModel


class ListingRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_listings(self) -> list[ListingModel]:
        return list(self.db.execute(select(ListingModel)).scalars())

    def get_listing(self, listing_id: uuid.UUID, with_author: bool = False) -> ListingModel | None:
        if not with_author:
            return self.db.get(ListingModel, listing_id)
        return self.db.execute(
            select(ListingModel)
            .options(joinedload(ListingModel.author))
            .where(ListingModel.id == listing_id)
        ).scalar_one_or_none()

    def create_listing(self, listing: ListingModel) -> ListingModel:
        self.db.add(listing)
        self.db.commit()
        self.db.refresh(listing)
        return listing

    def update_listing(self, listing: ListingModel, new_data: dict) -> ListingModel:
        for key, value in new_data.items():
            setattr(listing, key, value)
        self.db.commit()
        self.db.refresh(listing)
        return listing

    def delete_listing(self, listing: ListingModel) -> None:
        self.db.delete(listing)
        self.db.commit()

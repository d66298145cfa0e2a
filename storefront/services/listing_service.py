# storefront/services/listing_service.py
from sqlalchemy.orm import Session

from storefront.data.models.listing import ListingModel
from storefront.data.models.user import UserModel
from storefront.domain.errors import NotFound, ValidationError, ImageUploadFailed
from storefront.domain.schemas import ListingIn, ImageUpload, parse_id
from storefront.repos.listing_repo import ListingRepo
from storefront.services.image_client import ImageClient
from storefront.tasks.images import delete_image_task
from storefront.utils.settings import IMAGE_FOLDER, DEFAULT_IMAGE_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ListingService:
    """
    Listing CRUD. Authorship is checked by the route guards before any
    mutating method here is called.
    """

    def __init__(self, db: Session, image_client: ImageClient):
        self.repo = ListingRepo(db)
        self.image_client = image_client

    # query
    def list_listings(self) -> list[ListingModel]:
        return self.repo.list_listings()

    def get_listing(self, listing_id: str, with_author: bool = False) -> ListingModel:
        try:
            lid = parse_id(listing_id)
        except ValidationError:
            raise NotFound("Listing not found")

        listing = self.repo.get_listing(lid, with_author=with_author)
        if not listing:
            raise NotFound("Listing not found")
        return listing

    # commands
    def create_listing(self, author: UserModel, form: ListingIn, image: ImageUpload | None = None) -> ListingModel:
        listing = ListingModel(
            title=form.title,
            description=form.description,
            price=form.price,
            image_url=DEFAULT_IMAGE_URL,
            author_id=author.id,
        )

        if image is not None:
            # upload failure propagates before anything is persisted
            ref = self.image_client.upload(image.data, image.mime_type, IMAGE_FOLDER)
            listing.image_url = ref.url
            listing.image_filename = ref.filename

        created = self.repo.create_listing(listing)
        logger.info(f"Listing {created.id} created by {author.id}")
        return created

    def update_listing(self, listing: ListingModel, form: ListingIn, image: ImageUpload | None = None) -> ListingModel:
        new_data = {
            "title": form.title,
            "description": form.description,
            "price": form.price,
        }

        if image is not None:
            if listing.image_filename:
                self._delete_image(listing.image_filename)
            ref = self.image_client.upload(image.data, image.mime_type, IMAGE_FOLDER)
            new_data["image_url"] = ref.url
            new_data["image_filename"] = ref.filename
        else:
            new_data["image_url"] = listing.image_url
            new_data["image_filename"] = listing.image_filename

        updated = self.repo.update_listing(listing, new_data)
        logger.info(f"Listing {updated.id} updated")
        return updated

    def delete_listing(self, listing: ListingModel) -> None:
        listing_id, filename = listing.id, listing.image_filename
        self.repo.delete_listing(listing)
        logger.info(f"Listing {listing_id} deleted")

        if filename:
            try:
                delete_image_task.delay(filename)
            except Exception as e:
                logger.error(f"Could not queue cleanup of image {filename}: {e}")

    def _delete_image(self, filename: str) -> None:
        try:
            self.image_client.delete(filename)
        except ImageUploadFailed as e:
            logger.warning(f"Failed to delete previous image {filename}: {e.message}")

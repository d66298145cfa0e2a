# storefront/tasks/images.py
from storefront.celery_worker import celery_app
from storefront.domain.errors import ImageUploadFailed
from storefront.services.image_client import ImageClient
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def build_image_client() -> ImageClient:
    return ImageClient()


@celery_app.task(name="storefront.tasks.images.delete_image_task")
def delete_image_task(filename: str):
    """
    Best-effort removal of a deleted listing's image. A failure is only
    logged; the listing is already gone either way.
    """
    try:
        deleted = build_image_client().delete(filename)
    except ImageUploadFailed as e:
        logger.warning(f"Failed to delete image {filename}: {e.message}")
        deleted = False

    return {"filename": filename, "deleted": deleted}

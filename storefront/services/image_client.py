# storefront/services/image_client.py
import base64

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from storefront.domain.errors import ImageUploadFailed
from storefront.domain.schemas import ImageRef
from storefront.utils.retry import http_retry
from storefront.utils.settings import (
    CLOUDINARY_CLOUD_NAME,
    CLOUDINARY_API_KEY,
    CLOUDINARY_API_SECRET,
    IMAGE_UPLOAD_TIMEOUT,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ImageClient:
    """Uploads listing images to Cloudinary and deletes them again."""

    def __init__(
        self,
        cloud_name: str | None = None,
        api_key: str | None = None,
        api_secret: str | None = None,
        timeout: int = IMAGE_UPLOAD_TIMEOUT,
    ):
        self.cloud_name = cloud_name or CLOUDINARY_CLOUD_NAME
        self.api_key = api_key or CLOUDINARY_API_KEY
        self.api_secret = api_secret or CLOUDINARY_API_SECRET
        self.timeout = timeout
        cloudinary.config(
            cloud_name=self.cloud_name,
            api_key=self.api_key,
            api_secret=self.api_secret,
            secure=True,
        )

    def upload(self, data: bytes, mime_type: str, folder: str) -> ImageRef:
        self._check_credentials()
        data_uri = f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"

        body = self._call("upload", self._upload, data_uri, folder)
        try:
            ref = ImageRef(url=body["secure_url"], filename=body["public_id"])
        except (KeyError, TypeError):
            raise ImageUploadFailed("Image service returned an unexpected response")

        logger.info(f"Uploaded image {ref.filename}")
        return ref

    def delete(self, filename: str) -> bool:
        self._check_credentials()
        body = self._call("destroy", self._destroy, filename)
        logger.info(f"Destroy image {filename}: {body.get('result')}")
        return body.get("result") == "ok"

    def _check_credentials(self) -> None:
        if not (self.cloud_name and self.api_key and self.api_secret):
            raise ImageUploadFailed("Image service credentials are not configured")

    def _call(self, action: str, fn, *args) -> dict:
        try:
            return fn(*args)
        except CloudinaryError as e:
            logger.error(f"Image service {action} failed: {e}")
            raise ImageUploadFailed(str(e) or f"Image service {action} failed") from e

    @http_retry()
    def _upload(self, data_uri: str, folder: str) -> dict:
        return cloudinary.uploader.upload(data_uri, folder=folder, timeout=self.timeout)

    @http_retry()
    def _destroy(self, filename: str) -> dict:
        return cloudinary.uploader.destroy(filename, timeout=self.timeout)

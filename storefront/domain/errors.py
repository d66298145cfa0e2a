# storefront/domain/errors.py


class StorefrontError(Exception):
    """Base for failures that are shown to the user as a flashed message."""

    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateIdentity(StorefrontError):
    default_message = "A user with the given username is already registered"


class InvalidCredentials(StorefrontError):
    default_message = "Password or username is incorrect"


class NotFound(StorefrontError):
    default_message = "Not found"


class Unauthorized(StorefrontError):
    default_message = "You do not have permission to do that!"


class EmptyCart(StorefrontError):
    default_message = "Your cart is empty."


class ImageUploadFailed(StorefrontError):
    default_message = "Image service request failed"


class ValidationError(StorefrontError):
    default_message = "Invalid input"

# storefront/domain/schemas.py
import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, ValidationError as PydanticValidationError

from storefront.domain.errors import ValidationError


class RegisterIn(BaseModel):
    """Registration form."""

    username: str = Field(..., min_length=1, max_length=150)
    email: str = Field(..., max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=1)

    @field_validator("username", "email", mode="before")
    @classmethod
    def strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > 72:
            raise ValueError("Password must be at most 72 bytes long")
        return value


class ListingIn(BaseModel):
    """Listing create/edit form; the image travels separately as a file."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)


class ImageRef(BaseModel):
    """Where the image service stored a file, and the id needed to delete it."""

    url: str
    filename: str


def parse_form(schema: type[BaseModel], **data) -> BaseModel:
    """Validate form data, turning pydantic errors into one readable ValidationError."""
    try:
        return schema(**data)
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(problems) from e


def parse_id(raw: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(raw))
    except (TypeError, ValueError):
        raise ValidationError("Invalid id")


class ImageUpload(BaseModel):
    """A file received from a form, held in memory until it is forwarded."""

    data: bytes
    mime_type: str = "application/octet-stream"

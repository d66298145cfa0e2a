import uuid

from sqlalchemy import Column, String, Text, Numeric, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from storefront.data.database import Base
from storefront.utils.settings import DEFAULT_IMAGE_URL


class ListingModel(Base):
    __tablename__ = "listings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=True)

    # image_filename is the image service's public id, needed to delete the file later
    image_url = Column(String(500), nullable=False, default=DEFAULT_IMAGE_URL)
    image_filename = Column(String(255), nullable=True)

    author_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    author = relationship("UserModel")

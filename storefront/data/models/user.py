import uuid

from sqlalchemy import Column, String, DateTime, Uuid
from datetime import datetime, timezone

from storefront.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(150), nullable=False, unique=True, index=True)
    email = Column(String(254), nullable=False, unique=True, index=True)
    salt = Column(String(64), nullable=False)
    password_hash = Column(String(128), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

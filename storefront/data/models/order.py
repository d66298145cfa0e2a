import uuid

from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from storefront.data.database import Base

DEFAULT_ORDER_STATUS = "Order Placed"


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    order_number = Column(String(16), nullable=False, unique=True)
    customer_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    status = Column(String, nullable=False, default=DEFAULT_ORDER_STATUS)
    total_amount = Column(Numeric(10, 2), nullable=False)
    order_date = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    estimated_delivery = Column(DateTime(timezone=True), nullable=True)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        order_by="OrderItemModel.id",
        cascade="all, delete-orphan",
    )

    @property
    def listings(self):
        # lines whose listing was deleted since checkout are skipped
        return [item.listing for item in self.items if item.listing is not None]


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    listing_id = Column(Uuid, ForeignKey("listings.id", ondelete="SET NULL"), nullable=True)

    order = relationship("OrderModel", back_populates="items")
    listing = relationship("ListingModel")

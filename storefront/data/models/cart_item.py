from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint, Uuid

from storefront.data.database import Base


class CartItemModel(Base):
    """One listing reference in a user's cart; the integer key keeps insertion order."""

    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    listing_id = Column(Uuid, ForeignKey("listings.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "listing_id", name="u_cart_listing"),)

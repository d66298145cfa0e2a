# import every model so SQLAlchemy registers it in Base.metadata

from storefront.data.models.user import UserModel
from storefront.data.models.listing import ListingModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.order import OrderModel, OrderItemModel

__all__ = ["UserModel", "ListingModel", "CartItemModel", "OrderModel", "OrderItemModel"]

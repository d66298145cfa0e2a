# storefront/services/order_service.py
import secrets
import uuid
from datetime import datetime, timezone, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel, OrderItemModel, DEFAULT_ORDER_STATUS
from storefront.data.models.user import UserModel
from storefront.domain.errors import EmptyCart, NotFound, Unauthorized
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.services.cart_service import cart_total
from storefront.utils.settings import DELIVERY_DAYS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def generate_order_number() -> str:
    """16 uppercase hex characters from the OS CSPRNG."""
    return secrets.token_hex(8).upper()


class OrderService:
    """Turns a cart into an order and serves a customer's order history."""

    def __init__(self, db: Session):
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)

    def checkout(self, user: UserModel) -> OrderModel:
        """
        1. Resolves the cart to listings
        2. Freezes the items and the total in a new order
        3. Clears the cart
        """
        listings = self.cart_repo.get_cart_listings(user.id)
        if not listings:
            raise EmptyCart()

        now = datetime.now(timezone.utc)
        order = OrderModel(
            order_number=generate_order_number(),
            customer_id=user.id,
            items=[OrderItemModel(listing_id=l.id) for l in listings],
            total_amount=cart_total(listings),
            status=DEFAULT_ORDER_STATUS,
            order_date=now,
            estimated_delivery=now + timedelta(days=DELIVERY_DAYS),
        )
        created = self.repo.create_order(order)
        logger.info(f"Order {created.order_number} placed by user {user.id} ({len(listings)} items)")

        # the order stands even if this fails; the cart is then left stale
        try:
            self.cart_repo.clear_cart(user.id)
        except SQLAlchemyError as e:
            self.cart_repo.rollback()
            logger.error(f"Order {created.order_number} placed but cart of user {user.id} not cleared: {e}")

        return created

    def list_orders(self, user: UserModel) -> list[OrderModel]:
        return self.repo.list_orders_for_customer(user.id)

    def get_order(self, order_id: uuid.UUID, user: UserModel) -> OrderModel:
        order = self.repo.get_order(order_id)

        if not order:
            raise NotFound("Order not found.")

        if order.customer_id != user.id:
            raise Unauthorized("You are not authorized to view this order.")

        return order

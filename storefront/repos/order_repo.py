# storefront/repos/order_repo.py
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.order import OrderModel, OrderItemModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order

    def get_order(self, order_id: uuid.UUID) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items).selectinload(OrderItemModel.listing))
            .where(OrderModel.id == order_id)
        ).scalar_one_or_none()

    def list_orders_for_customer(self, customer_id: uuid.UUID) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .options(selectinload(OrderModel.items).selectinload(OrderItemModel.listing))
                .where(OrderModel.customer_id == customer_id)
                .order_by(OrderModel.order_date.desc())
            ).scalars()
        )


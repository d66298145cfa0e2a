# storefront/api/routers/orders.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from storefront.api.deps import redirect, render, require_user
from storefront.api.flash import flash
from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.domain.errors import EmptyCart, NotFound, Unauthorized, ValidationError
from storefront.domain.schemas import parse_id
from storefront.services.order_service import OrderService

router = APIRouter(tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.post("/orders/checkout")
def checkout(
    request: Request,
    user: UserModel = Depends(require_user),
    db: Session = Depends(get_db),
):
    """
    Turns the cart into an order and empties the cart.
    """
    svc = get_service(db)
    try:
        order = svc.checkout(user)
    except EmptyCart as e:
        flash(request, e.message, "error")
        return redirect("/cart")

    flash(request, f"Order placed successfully! Your order ID is #{order.order_number}")
    return redirect("/my-orders")


@router.get("/my-orders")
def my_orders(
    request: Request,
    user: UserModel = Depends(require_user),
    db: Session = Depends(get_db),
):
    orders = get_service(db).list_orders(user)
    return render(request, "orders/my_orders.html", orders=orders)


@router.get("/orders/{order_id}")
def order_status(
    request: Request,
    order_id: str,
    user: UserModel = Depends(require_user),
    db: Session = Depends(get_db),
):
    """
    Order details, only for the customer who placed it.
    """
    svc = get_service(db)
    try:
        order = svc.get_order(parse_id(order_id), user)
    except ValidationError:
        flash(request, "Invalid order ID.", "error")
        return redirect("/my-orders")
    except (NotFound, Unauthorized) as e:
        flash(request, e.message, "error")
        return redirect("/my-orders")

    return render(request, "orders/order_status.html", order=order)

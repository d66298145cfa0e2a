"""Checkout and order history."""

import re
import uuid
from datetime import timedelta
from decimal import Decimal

from sqlalchemy import select

from conftest import create_listing, get_listing, get_user
from storefront.data.models import CartItemModel, OrderModel
from storefront.services.order_service import OrderService, generate_order_number

ORDER_NUMBER = re.compile(r"^[0-9A-F]{16}$")


def orders_of(db, username):
    db.expire_all()
    user = get_user(db, username)
    return list(db.execute(select(OrderModel).where(OrderModel.customer_id == user.id)).scalars())


def cart_size(db, username):
    db.expire_all()
    user = get_user(db, username)
    return len(db.execute(select(CartItemModel).where(CartItemModel.user_id == user.id)).all())


def fill_cart(seller, buyer, db, prices):
    for n, price in enumerate(prices):
        create_listing(seller, title=f"Item {n}", price=price)
        buyer.post(f"/cart/add/{get_listing(db, f'Item {n}').id}")


def test_checkout_with_empty_cart(bob, db):
    resp = bob.post("/orders/checkout")

    assert str(resp.url).endswith("/cart")
    assert "Your cart is empty." in resp.text
    assert orders_of(db, "bob") == []


def test_checkout_freezes_cart_into_order(alice, bob, db):
    fill_cart(alice, bob, db, ["50", "12.25", "7"])

    resp = bob.post("/orders/checkout")

    assert str(resp.url).endswith("/my-orders")
    [order] = orders_of(db, "bob")
    assert f"Order placed successfully! Your order ID is #{order.order_number}" in resp.text
    assert ORDER_NUMBER.match(order.order_number)
    assert order.total_amount == Decimal("69.25")
    assert [l.title for l in order.listings] == ["Item 0", "Item 1", "Item 2"]
    assert order.status == "Order Placed"
    assert order.estimated_delivery - order.order_date == timedelta(days=5)
    assert cart_size(db, "bob") == 0


def test_later_price_change_does_not_touch_order(alice, bob, db):
    fill_cart(alice, bob, db, ["50"])
    bob.post("/orders/checkout")
    listing = get_listing(db, "Item 0")

    alice.put(f"/listings/{listing.id}", data={"title": "Item 0", "description": "", "price": "80"})

    [order] = orders_of(db, "bob")
    assert order.total_amount == Decimal("50.00")
    assert [l.id for l in order.listings] == [listing.id]


def test_deleted_listing_drops_out_of_order_items(alice, bob, db):
    fill_cart(alice, bob, db, ["50", "10"])
    bob.post("/orders/checkout")

    alice.delete(f"/listings/{get_listing(db, 'Item 0').id}")

    [order] = orders_of(db, "bob")
    assert [l.title for l in order.listings] == ["Item 1"]
    assert order.total_amount == Decimal("60.00")


def test_order_numbers_are_unique(alice, bob, db):
    numbers = {generate_order_number() for _ in range(500)}
    assert len(numbers) == 500
    assert all(ORDER_NUMBER.match(n) for n in numbers)

    for round_ in range(3):
        create_listing(alice, title=f"Round {round_}")
        bob.post(f"/cart/add/{get_listing(db, f'Round {round_}').id}")
        bob.post("/orders/checkout")

    placed = [o.order_number for o in orders_of(db, "bob")]
    assert len(placed) == 3
    assert len(set(placed)) == 3


def test_my_orders_lists_newest_first(alice, bob, db):
    for round_ in range(3):
        create_listing(alice, title=f"Round {round_}")
        bob.post(f"/cart/add/{get_listing(db, f'Round {round_}').id}")
        bob.post("/orders/checkout")

    orders = OrderService(db).list_orders(get_user(db, "bob"))
    dates = [o.order_date for o in orders]
    assert dates == sorted(dates, reverse=True)

    page = bob.get("/my-orders").text
    positions = [page.index(o.order_number) for o in orders]
    assert positions == sorted(positions)


def test_order_status_for_customer(alice, bob, db):
    fill_cart(alice, bob, db, ["50"])
    bob.post("/orders/checkout")
    [order] = orders_of(db, "bob")

    page = bob.get(f"/orders/{order.id}")

    assert page.status_code == 200
    assert f"Order #{order.order_number}" in page.text
    assert "Item 0" in page.text
    assert "Order Placed" in page.text


def test_order_status_errors_redirect_to_history(bob):
    missing = bob.get(f"/orders/{uuid.uuid4()}")
    assert str(missing.url).endswith("/my-orders")
    assert "Order not found." in missing.text

    malformed = bob.get("/orders/garbage")
    assert "Invalid order ID." in malformed.text


def test_orders_require_login(client):
    assert client.get("/my-orders", follow_redirects=False).headers["location"] == "/login"
    assert client.post("/orders/checkout", follow_redirects=False).headers["location"] == "/login"


def test_marketplace_scenario(alice, bob, db):
    # alice sells, bob buys
    create_listing(alice, title="Lamp", price="50")
    lamp = get_listing(db, "Lamp")

    bob.post(f"/cart/add/{lamp.id}")
    bob.post("/orders/checkout")

    [order] = orders_of(db, "bob")
    assert order.total_amount == Decimal("50.00")
    assert [l.id for l in order.listings] == [lamp.id]
    assert cart_size(db, "bob") == 0
    assert order.order_number in bob.get("/my-orders").text

    resp = alice.get(f"/orders/{order.id}")
    assert str(resp.url).endswith("/my-orders")
    assert "You are not authorized to view this order." in resp.text
    assert order.order_number not in resp.text

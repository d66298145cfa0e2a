# storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from storefront.api.deps import get_image_client, redirect, render, require_user
from storefront.api.flash import flash
from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.domain.errors import NotFound, ValidationError
from storefront.domain.schemas import parse_id
from storefront.services.cart_service import CartService
from storefront.services.image_client import ImageClient
from storefront.services.listing_service import ListingService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("")
def view_cart(
    request: Request,
    user: UserModel = Depends(require_user),
    db: Session = Depends(get_db),
):
    cart = get_service(db).get_cart(user)
    return render(request, "orders/cart.html", cart=cart["items"], total=cart["total"])


@router.post("/add/{listing_id}")
def add_to_cart(
    request: Request,
    listing_id: str,
    user: UserModel = Depends(require_user),
    db: Session = Depends(get_db),
    image_client: ImageClient = Depends(get_image_client),
):
    try:
        listing = ListingService(db, image_client).get_listing(listing_id)
    except NotFound as e:
        flash(request, e.message, "error")
        return redirect("/listings")

    if get_service(db).add_listing(user, listing):
        flash(request, "Item added to cart!")
    else:
        flash(request, "Item is already in your cart.", "error")
    return redirect(f"/listings/{listing.id}")


@router.delete("/remove/{listing_id}")
def remove_from_cart(
    request: Request,
    listing_id: str,
    user: UserModel = Depends(require_user),
    db: Session = Depends(get_db),
):
    try:
        get_service(db).remove_listing(user, parse_id(listing_id))
    except ValidationError:
        # nothing with a malformed id can be in the cart
        pass
    flash(request, "Item removed from cart.")
    return redirect("/cart")

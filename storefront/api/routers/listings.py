# storefront/api/routers/listings.py
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from sqlalchemy.orm import Session

from storefront.api.deps import (
    get_current_user,
    get_image_client,
    redirect,
    render,
    require_author,
    require_user,
)
from storefront.api.flash import flash
from storefront.data.database import get_db
from storefront.data.models.listing import ListingModel
from storefront.data.models.user import UserModel
from storefront.domain.errors import ImageUploadFailed, NotFound, ValidationError
from storefront.domain.schemas import ImageUpload, ListingIn, parse_form
from storefront.services.cart_service import CartService
from storefront.services.image_client import ImageClient
from storefront.services.listing_service import ListingService

router = APIRouter(prefix="/listings", tags=["listings"])


def get_service(db: Session, image_client: ImageClient):
    return ListingService(db, image_client)


def read_image(upload: UploadFile | None) -> ImageUpload | None:
    # browsers post an empty, unnamed part when no file was chosen
    if upload is None or not upload.filename:
        return None
    data = upload.file.read()
    if not data:
        return None
    return ImageUpload(data=data, mime_type=upload.content_type or "application/octet-stream")


@router.get("")
def index(
    request: Request,
    user: UserModel | None = Depends(get_current_user),
    db: Session = Depends(get_db),
    image_client: ImageClient = Depends(get_image_client),
):
    listings = get_service(db, image_client).list_listings()
    return render(request, "listings/index.html", listings=listings)


@router.get("/new")
def new_form(request: Request, user: UserModel = Depends(require_user)):
    return render(request, "listings/new.html")


@router.post("")
def create(
    request: Request,
    title: str = Form(""),
    description: str = Form(""),
    price: str = Form(""),
    image: UploadFile | None = File(None),
    user: UserModel = Depends(require_user),
    db: Session = Depends(get_db),
    image_client: ImageClient = Depends(get_image_client),
):
    svc = get_service(db, image_client)
    try:
        form = parse_form(ListingIn, title=title, description=description, price=price)
        svc.create_listing(user, form, read_image(image))
    except (ValidationError, ImageUploadFailed) as e:
        flash(request, f"Failed to upload image or create listing: {e.message}", "error")
        return redirect("/listings/new")

    flash(request, "Listing created successfully!")
    return redirect("/listings")


@router.get("/{listing_id}")
def show(
    request: Request,
    listing_id: str,
    user: UserModel | None = Depends(get_current_user),
    db: Session = Depends(get_db),
    image_client: ImageClient = Depends(get_image_client),
):
    try:
        listing = get_service(db, image_client).get_listing(listing_id, with_author=True)
    except NotFound as e:
        flash(request, e.message, "error")
        return redirect("/listings")

    in_cart = CartService(db).contains(user, listing)
    return render(request, "listings/show.html", listing=listing, in_cart=in_cart)


@router.get("/{listing_id}/edit")
def edit_form(request: Request, listing: ListingModel = Depends(require_author)):
    return render(request, "listings/edit.html", listing=listing)


@router.put("/{listing_id}")
def update(
    request: Request,
    title: str = Form(""),
    description: str = Form(""),
    price: str = Form(""),
    image: UploadFile | None = File(None),
    listing: ListingModel = Depends(require_author),
    db: Session = Depends(get_db),
    image_client: ImageClient = Depends(get_image_client),
):
    svc = get_service(db, image_client)
    edit_url = f"/listings/{listing.id}/edit"
    try:
        form = parse_form(ListingIn, title=title, description=description, price=price)
    except ValidationError as e:
        flash(request, e.message, "error")
        return redirect(edit_url)

    try:
        svc.update_listing(listing, form, read_image(image))
    except ImageUploadFailed as e:
        flash(request, f"Error uploading new image: {e.message}", "error")
        return redirect(edit_url)

    flash(request, "Listing updated successfully!")
    return redirect(f"/listings/{listing.id}")


@router.delete("/{listing_id}")
def delete(
    request: Request,
    listing: ListingModel = Depends(require_author),
    db: Session = Depends(get_db),
    image_client: ImageClient = Depends(get_image_client),
):
    get_service(db, image_client).delete_listing(listing)
    flash(request, "Listing deleted successfully!")
    return redirect("/listings")

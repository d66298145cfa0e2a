# storefront/api/deps.py
from pathlib import Path

from fastapi import Depends, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from storefront.api.flash import flash, pop_flashed_messages
from storefront.api.sessions import rotate_session
from storefront.data.database import get_db
from storefront.data.models.listing import ListingModel
from storefront.data.models.user import UserModel
from storefront.domain.errors import NotFound, ValidationError
from storefront.domain.schemas import parse_id
from storefront.services.image_client import ImageClient
from storefront.services.listing_service import ListingService
from storefront.services.user_service import UserService

SESSION_USER_KEY = "user_id"

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


class GuardRedirect(Exception):
    """Raised by a guard to end the request with a flashed error and a redirect."""

    def __init__(self, url: str, message: str):
        self.url = url
        self.message = message
        super().__init__(message)


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=303)


def render(request: Request, name: str, **context):
    context["messages"] = pop_flashed_messages(request)
    context["current_user"] = getattr(request.state, "user", None)
    return templates.TemplateResponse(request, name, context)


def login_user(request: Request, user: UserModel) -> None:
    rotate_session(request)
    request.session[SESSION_USER_KEY] = str(user.id)


def logout_user(request: Request) -> None:
    rotate_session(request)
    request.session.pop(SESSION_USER_KEY, None)


def get_image_client() -> ImageClient:
    return ImageClient()


def get_current_user(request: Request, db: Session = Depends(get_db)) -> UserModel | None:
    """Resolve the session's user once per request and bind it to ``request.state``."""
    user = None
    raw_id = request.session.get(SESSION_USER_KEY)
    if raw_id:
        try:
            user = UserService(db).get_user(parse_id(raw_id))
        except ValidationError:
            user = None
        if user is None:
            # account vanished or the id is garbage
            logout_user(request)
    request.state.user = user
    return user


def require_user(user: UserModel | None = Depends(get_current_user)) -> UserModel:
    if user is None:
        raise GuardRedirect("/login", "You must be logged in")
    return user


def require_author(
    listing_id: str,
    user: UserModel = Depends(require_user),
    db: Session = Depends(get_db),
    image_client: ImageClient = Depends(get_image_client),
) -> ListingModel:
    try:
        listing = ListingService(db, image_client).get_listing(listing_id)
    except NotFound as e:
        raise GuardRedirect("/listings", e.message)

    if listing.author_id != user.id:
        raise GuardRedirect(f"/listings/{listing.id}", "You do not have permission to do that!")
    return listing


async def guard_redirect_handler(request: Request, exc: GuardRedirect):
    flash(request, exc.message, "error")
    return redirect(exc.url)

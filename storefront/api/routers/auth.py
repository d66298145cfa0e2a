# storefront/api/routers/auth.py
from fastapi import APIRouter, Depends, Form, Request
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_user, login_user, logout_user, redirect, render
from storefront.api.flash import flash
from storefront.data.database import get_db
from storefront.domain.errors import DuplicateIdentity, InvalidCredentials, ValidationError
from storefront.domain.schemas import RegisterIn, parse_form
from storefront.services.user_service import UserService

router = APIRouter(tags=["auth"])


def get_service(db: Session):
    return UserService(db)


@router.get("/register")
def register_form(request: Request, user=Depends(get_current_user)):
    return render(request, "auth/register.html")


@router.post("/register")
def register(
    request: Request,
    username: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        payload = parse_form(RegisterIn, username=username, email=email, password=password)
        user = svc.register(payload)
    except (DuplicateIdentity, ValidationError) as e:
        flash(request, e.message, "error")
        return redirect("/register")

    login_user(request, user)
    flash(request, "Welcome! You are now logged in.")
    return redirect("/listings")


@router.get("/login")
def login_form(request: Request, user=Depends(get_current_user)):
    return render(request, "auth/login.html")


@router.post("/login")
def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        user = svc.authenticate(username, password)
    except InvalidCredentials as e:
        flash(request, e.message, "error")
        return redirect("/login")

    login_user(request, user)
    flash(request, "Welcome back!")
    return redirect("/listings")


@router.get("/logout")
def logout(request: Request):
    logout_user(request)
    flash(request, "Logged out successfully.")
    return redirect("/listings")

# storefront/api/flash.py
from starlette.requests import Request

FLASH_KEY = "_flash"


def flash(request: Request, message: str, category: str = "success") -> None:
    request.session.setdefault(FLASH_KEY, []).append({"category": category, "message": message})


def pop_flashed_messages(request: Request) -> dict[str, list[str]]:
    """Drain the mailbox, grouped by category."""
    grouped: dict[str, list[str]] = {}
    for entry in request.session.pop(FLASH_KEY, []):
        grouped.setdefault(entry["category"], []).append(entry["message"])
    return grouped

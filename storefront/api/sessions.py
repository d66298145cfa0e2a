# storefront/api/sessions.py
import secrets

from starlette.concurrency import run_in_threadpool
from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from storefront.utils.settings import SESSION_COOKIE_NAME, SESSION_TTL_SECONDS


class ServerSessionMiddleware:
    """
    Exposes a server-side session as ``request.session``.

    The cookie only carries an opaque random id; the data lives in ``store``
    (anything with ``load``/``save``/``delete``). A session that ends the
    request empty is deleted and its cookie expired.
    """

    def __init__(
        self,
        app: ASGIApp,
        store,
        cookie_name: str = SESSION_COOKIE_NAME,
        max_age: int = SESSION_TTL_SECONDS,
        https_only: bool = False,
    ):
        self.app = app
        self.store = store
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.security_flags = "httponly; samesite=lax" + ("; secure" if https_only else "")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        connection = HTTPConnection(scope)
        session_id = connection.cookies.get(self.cookie_name)
        data = None
        if session_id:
            data = await run_in_threadpool(self.store.load, session_id)
        if data is None:
            session_id = None
            data = {}
        scope["session"] = data
        control = scope["session_control"] = {"rotate": False}

        async def send_wrapper(message: Message) -> None:
            nonlocal session_id
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                previous_id = session_id
                if control["rotate"]:
                    session_id = None
                if scope["session"]:
                    if session_id is None:
                        session_id = secrets.token_urlsafe(32)
                    await run_in_threadpool(self.store.save, session_id, scope["session"], self.max_age)
                    headers.append("Set-Cookie", self._cookie(session_id, self.max_age))
                elif previous_id is not None:
                    headers.append("Set-Cookie", self._cookie("null", 0))
                if previous_id is not None and previous_id != session_id:
                    await run_in_threadpool(self.store.delete, previous_id)
            await send(message)

        await self.app(scope, receive, send_wrapper)

    def _cookie(self, value: str, max_age: int) -> str:
        expires = "; expires=Thu, 01 Jan 1970 00:00:00 GMT" if max_age == 0 else ""
        return f"{self.cookie_name}={value}; path=/; Max-Age={max_age}{expires}; {self.security_flags}"


def rotate_session(connection: HTTPConnection) -> None:
    """Issue a fresh session id with this response; the old id is deleted from the store."""
    connection.scope["session_control"]["rotate"] = True


class MethodOverrideMiddleware:
    """HTML forms can only POST; ``?_method=PUT`` or ``?_method=DELETE`` picks the real verb."""

    allowed = {"PUT", "PATCH", "DELETE"}

    def __init__(self, app: ASGIApp, param: str = "_method"):
        self.app = app
        self.param = param

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["method"] == "POST":
            override = HTTPConnection(scope).query_params.get(self.param, "").upper()
            if override in self.allowed:
                scope = dict(scope, method=override)
        await self.app(scope, receive, send)

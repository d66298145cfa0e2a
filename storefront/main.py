# storefront/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse
import uvicorn

from storefront.api.deps import GuardRedirect, guard_redirect_handler
from storefront.api.routers import auth, carts, health, listings, orders
from storefront.api.sessions import MethodOverrideMiddleware, ServerSessionMiddleware
from storefront.data.database import init_db
from storefront.services.session_store import RedisSessionStore
from storefront.utils.settings import PORT
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database tables ready")
    yield


def create_app(session_store=None, init_database: bool = True) -> FastAPI:
    app = FastAPI(
        title="Storefront",
        version="1.0.0",
        lifespan=lifespan if init_database else None,
    )

    # added last, runs first: the verb is fixed before routing sees the request
    app.add_middleware(ServerSessionMiddleware, store=session_store or RedisSessionStore())
    app.add_middleware(MethodOverrideMiddleware)

    app.add_exception_handler(GuardRedirect, guard_redirect_handler)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(listings.router)
    app.include_router(carts.router)
    app.include_router(orders.router)

    @app.get("/", include_in_schema=False)
    def root():
        return RedirectResponse("/listings", status_code=303)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=PORT)

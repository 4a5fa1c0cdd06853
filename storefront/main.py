# storefront/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.core.config import get_settings
from storefront.database import create_db_and_tables
from storefront.services.totals import InvalidPriceError

# Table models must be imported before create_all() runs
from storefront.models import user, product, cart, wishlist, order, tier_application  # noqa: F401

from storefront.routers import cart as cart_routes
from storefront.routers import orders as order_routes
from storefront.routers import products as product_routes
from storefront.routers import tier_applications as tier_application_routes
from storefront.routers import users as user_routes
from storefront.routers import wishlist as wishlist_routes

settings = get_settings()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("storefront")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Create missing tables before serving; fail fast if the DB is unreachable.
    """
    logger.info("Startup: creating tables on %s", settings.DATABASE_URL.split("@")[-1])
    try:
        create_db_and_tables()
    except Exception:
        logger.exception("Startup: database unavailable")
        raise
    logger.info("Startup: ready")
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InvalidPriceError)
async def invalid_price_handler(request: Request, exc: InvalidPriceError):
    # A stored price that cannot be totalled is a catalog data problem
    logger.error("%s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "A product in your cart has an invalid price"},
    )


for module in (
    user_routes,
    tier_application_routes,
    product_routes,
    cart_routes,
    wishlist_routes,
    order_routes,
):
    app.include_router(module.router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Liveness probe."""
    return {"status": "ok", "service": "storefront-backend"}

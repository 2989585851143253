# cafe/main.py
from contextlib import asynccontextmanager
from datetime import timedelta
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from cafe.core.cart_session import get_cart_registry
from cafe.core.config import get_settings
from cafe.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from cafe.models import menu as _menu_models  # noqa: F401
from cafe.models import order as _order_models  # noqa: F401


# Routers
from cafe.routers.menu import router as menu_router
from cafe.routers.cart import router as cart_router
from cafe.routers.orders import router as orders_router
from cafe.routers.staff import router as staff_router
from cafe.routers.admin import router as admin_router
from cafe.routers.feeds import router as feeds_router

settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.
      - Prune cart sessions idle longer than the cookie lifetime.

    Shutdown:
      - No special cleanup needed for sync engine.
    """
    logger.info("Startup: connecting to Supabase Postgres...")
    try:
        create_db_and_tables()
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"Startup: DB connection FAILED: {e}")
        raise
    get_cart_registry().prune(timedelta(days=settings.CART_SESSION_DAYS))
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

# Versioned API prefix, e.g. /api/v1
app.include_router(menu_router, prefix=settings.API_V1_STR)
app.include_router(cart_router, prefix=settings.API_V1_STR)
app.include_router(orders_router, prefix=settings.API_V1_STR)
app.include_router(staff_router, prefix=settings.API_V1_STR)
app.include_router(admin_router, prefix=settings.API_V1_STR)
app.include_router(feeds_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "klaseco-cafe"}

# zerowaste/main.py
from contextlib import asynccontextmanager
from pathlib import Path
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi import FastAPI

from zerowaste.core.config import get_settings
from zerowaste.core.errors import register_exception_handlers
from zerowaste.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from zerowaste.models import user as _user_models  # noqa: F401
from zerowaste.models import product as _product_models  # noqa: F401
from zerowaste.models import cart as _cart_models  # noqa: F401
from zerowaste.models import order as _order_models  # noqa: F401
from zerowaste.models import wishlist as _wishlist_models  # noqa: F401

# Routers
from zerowaste.routers.auth import router as auth_router
from zerowaste.routers.users import router as users_router
from zerowaste.routers.products import router as products_router
from zerowaste.routers.cart import router as cart_router
from zerowaste.routers.wishlist import router as wishlist_router
from zerowaste.routers.orders import router as orders_router
from zerowaste.routers.payment import router as payment_router
from zerowaste.routers.admin import router as admin_router

settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.

    Shutdown:
      - No special cleanup needed for sync engine.
    """
    logger.info("Startup: connecting to database...")
    try:
        create_db_and_tables()
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"Startup: DB connection FAILED: {e}")
        raise
    if not settings.MIDTRANS_SERVER_KEY:
        logger.warning("Startup: Midtrans keys missing, payment endpoints will fail.")
    yield
    logger.info("Shutdown: bye.")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

register_exception_handlers(app)


# --- CORS configuration ---
origins = list(dict.fromkeys([*settings.CORS_ORIGINS, settings.FRONTEND_URL]))

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API prefix, e.g. /api
app.include_router(auth_router, prefix=settings.API_PREFIX)
app.include_router(users_router, prefix=settings.API_PREFIX)
app.include_router(products_router, prefix=settings.API_PREFIX)
app.include_router(cart_router, prefix=settings.API_PREFIX)
app.include_router(wishlist_router, prefix=settings.API_PREFIX)
app.include_router(orders_router, prefix=settings.API_PREFIX)
app.include_router(payment_router, prefix=settings.API_PREFIX)
app.include_router(admin_router, prefix=settings.API_PREFIX)

# Local storage files are served where BASE_URL/uploads/<file> points
if settings.STORAGE_BACKEND == "local":
    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "zerowaste-backend"}

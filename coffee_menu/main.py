import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from coffee_menu.core.config import (
    BOOTSTRAP_MAIN_ADMIN_PASSWORD,
    BOOTSTRAP_MAIN_ADMIN_USERNAME,
    CORS_ORIGINS,
    DATABASE_URL,
)
from coffee_menu.core.database import Base, SessionLocal, engine
from coffee_menu.core.logging_setup import configure_logging
from coffee_menu.core.startup_checks import validate_database_environment, validate_token_settings
from coffee_menu.middleware.observability import ObservabilityMiddleware
from coffee_menu.middleware.rate_limit import ClientRateLimitMiddleware
import coffee_menu.models  # registers every table on Base.metadata before create_all

from coffee_menu.routers.admin_categories import router as admin_categories_router
from coffee_menu.routers.admin_tenants import router as admin_tenants_router
from coffee_menu.routers.auth import router as auth_router
from coffee_menu.routers.public_menu import router as public_menu_router
from coffee_menu.routers.shop_admin import router as shop_admin_router
from coffee_menu.services.admin_bootstrap import upsert_main_admin

configure_logging()

logger = logging.getLogger(__name__)
BOOTSTRAP_PREFIX = "[ADMIN_BOOTSTRAP]"


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


app = FastAPI(
    title="Coffee Menu API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ClientRateLimitMiddleware)
app.add_middleware(ObservabilityMiddleware)


def _bootstrap_main_admin() -> None:
    if not BOOTSTRAP_MAIN_ADMIN_PASSWORD:
        logger.info("%s skipped: configure BOOTSTRAP_MAIN_ADMIN_PASSWORD.", BOOTSTRAP_PREFIX)
        return

    db = SessionLocal()
    try:
        admin, created = upsert_main_admin(
            db,
            username=BOOTSTRAP_MAIN_ADMIN_USERNAME,
            password=BOOTSTRAP_MAIN_ADMIN_PASSWORD,
        )
        logger.info(
            "%s %s id=%s username=%s",
            BOOTSTRAP_PREFIX,
            "created" if created else "updated",
            admin.id,
            admin.username,
        )
    except Exception:
        logger.exception("%s ERROR bootstrap failed", BOOTSTRAP_PREFIX)
        raise
    finally:
        db.close()


def _startup_tasks() -> None:
    try:
        validate_database_environment()
        validate_token_settings()
        if DATABASE_URL.startswith("sqlite"):
            Base.metadata.create_all(bind=engine)
        _bootstrap_main_admin()
    except Exception:
        logger.exception("[STARTUP] ERROR startup failed")
        raise


# Routers
app.include_router(public_menu_router)
app.include_router(auth_router)
app.include_router(admin_tenants_router)
app.include_router(admin_categories_router)
app.include_router(shop_admin_router)


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}

from __future__ import annotations

import logging

from coffee_menu.core.config import DATABASE_URL, IS_PROD, load_token_settings

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"


def validate_database_environment() -> None:
    if IS_PROD and DATABASE_URL.startswith("sqlite"):
        logger.critical("%s SQLite is forbidden in production", STARTUP_PREFIX)
        raise RuntimeError("SQLite is forbidden in production environment")


def validate_token_settings() -> None:
    try:
        settings = load_token_settings()
    except RuntimeError:
        logger.critical("%s token settings invalid; set JWT_SECRET", STARTUP_PREFIX)
        raise

    if IS_PROD and len(settings.secret) < 32:
        logger.warning("%s JWT_SECRET is shorter than 32 characters", STARTUP_PREFIX)
    logger.info(
        "%s token settings loaded algorithm=%s expire_hours=%s",
        STARTUP_PREFIX,
        settings.algorithm,
        settings.expire_hours,
    )

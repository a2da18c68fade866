from __future__ import annotations

import logging
import os

from services.api.app.db.database import get_engine
from services.api.app.db.models import Base

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "y"}


def auto_create_enabled() -> bool:
    return os.getenv("KEBAP_DB_AUTO_CREATE", "true").strip().lower() in _TRUTHY


def init_db() -> None:
    """Create the catalog, order, session and event tables when auto-create is on."""

    if not auto_create_enabled():
        logger.info("KEBAP_DB_AUTO_CREATE is off; leaving the schema alone")
        return

    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    logger.info("Tables ready on %s", engine.url.render_as_string(hide_password=True))

from __future__ import annotations

import os

from services.api.app.services.catalog_base import CatalogSource
from services.api.app.services.catalog_memory import InMemoryCatalog
from sqlalchemy.orm import Session


def get_catalog(db: Session) -> CatalogSource:
    """Select a catalog source based on env vars.

    Defaults to the in-memory demo catalog so tests and local dev are deterministic unless
    explicitly configured otherwise.
    """

    mode = os.getenv("KEBAP_CATALOG_SOURCE", "memory").strip().lower()

    if mode == "memory":
        return InMemoryCatalog.demo()

    if mode == "sql":
        from services.api.app.services.catalog_sql import SqlCatalog

        return SqlCatalog(db)

    raise ValueError(f"Unknown KEBAP_CATALOG_SOURCE={mode!r}. Expected memory or sql.")

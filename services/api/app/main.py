"""Kebap orders API service entrypoint."""

import logging
import os

from fastapi import FastAPI

from services.api.app.db.init_db import init_db
from services.api.app.routers.audit import router as audit_router
from services.api.app.routers.catalog import router as catalog_router
from services.api.app.routers.order import router as order_router
from services.api.app.routers.session import router as session_router
from services.api.app.services.order_session import session_store

logging.basicConfig(
    level=os.getenv("KEBAP_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Kebap Orders API")

app.include_router(catalog_router)
app.include_router(session_router)
app.include_router(order_router)
app.include_router(audit_router)


@app.on_event("startup")
def _startup() -> None:
    init_db()
    # Live sessions are rebuilt from the database on first use.
    session_store.reset()


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}

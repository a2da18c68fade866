from __future__ import annotations

from fastapi import APIRouter, Depends
from packages.shared.schemas.events import EventV1
from services.api.app.db.deps import get_db
from services.api.app.db.models import EventLog
from sqlalchemy.orm import Session

router = APIRouter()


@router.get("/v1/events", response_model=list[EventV1])
def list_events(
    owner_id: str,
    entity_id: str | None = None,
    db: Session = Depends(get_db),
) -> list[EventV1]:
    q = db.query(EventLog).filter(EventLog.owner_id == owner_id)
    if entity_id is not None:
        q = q.filter(EventLog.entity_id == entity_id)

    rows = q.order_by(EventLog.created_at.desc()).limit(200).all()

    return [
        EventV1(
            id=r.id,
            owner_id=r.owner_id,
            entity_type=r.entity_type,
            entity_id=r.entity_id,
            event_type=r.event_type,
            payload=r.event_payload_json,
            created_at=r.created_at.isoformat(),
        )
        for r in rows
    ]

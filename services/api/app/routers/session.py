from __future__ import annotations

from fastapi import APIRouter
from services.api.app.models.session import (
    OrderContextOut,
    SessionOwnerRequest,
    SessionStartRequest,
)
from services.api.app.services.order_session import OrderContext, session_store

router = APIRouter()


@router.get("/v1/session/{owner_id}", response_model=OrderContextOut)
def get_session(owner_id: str) -> OrderContextOut:
    return _context_out(owner_id, session_store.get(owner_id).context)


@router.post("/v1/session/start", response_model=OrderContextOut)
def start_order(payload: SessionStartRequest) -> OrderContextOut:
    session = session_store.get(payload.owner_id)
    context = session.start_order(payload.mode, payload.address_id)
    return _context_out(payload.owner_id, context)


@router.post("/v1/session/browse", response_model=OrderContextOut)
def set_browsing_only(payload: SessionOwnerRequest) -> OrderContextOut:
    context = session_store.get(payload.owner_id).set_browsing_only()
    return _context_out(payload.owner_id, context)


@router.post("/v1/session/clear", response_model=OrderContextOut)
def clear_session(payload: SessionOwnerRequest) -> OrderContextOut:
    context = session_store.get(payload.owner_id).clear()
    return _context_out(payload.owner_id, context)


@router.post("/v1/session/logout", response_model=OrderContextOut)
def logout(payload: SessionOwnerRequest) -> OrderContextOut:
    session_store.discard(payload.owner_id)
    return _context_out(payload.owner_id, OrderContext())


def _context_out(owner_id: str, context: OrderContext) -> OrderContextOut:
    return OrderContextOut(
        owner_id=owner_id,
        mode=context.mode,
        address_id=context.address_id,
        browsing_only=context.browsing_only,
        is_active=context.is_active,
        state=context.state.value,
    )

from __future__ import annotations

import os

from fastapi import APIRouter, Depends, HTTPException
from packages.shared.schemas.order_v1 import OrderSummaryV1
from services.api.app.db.deps import get_db
from services.api.app.models.order import (
    CartLineModel,
    MenuCartLine,
    OrderQuoteRequest,
    OrderQuoteResponse,
    OrderSubmitRequest,
    OrderSubmitResponse,
    ProductCartLine,
    ReorderRequest,
    ReorderResponse,
    SkippedLineOut,
)
from services.api.app.routers.catalog import catalog_dep
from services.api.app.services.cart import (
    Cart,
    CartMenuLine,
    CartProductLine,
    MenuSelection,
    ProductCustomization,
)
from services.api.app.services.catalog_base import CatalogSource
from services.api.app.services.menu_validation import CountOutOfRange
from services.api.app.services.order_session import session_store
from services.api.app.services.orders_base import (
    MenuSelectionInvalidError,
    OrderStateError,
    OrderSubmissionError,
    OrderValidationError,
)
from services.api.app.services.orders_sql import SqlOrdersRepository
from services.api.app.services.reorder import rebuild_cart
from services.api.app.services.translator import translate
from sqlalchemy.orm import Session

router = APIRouter()


def _history_limit() -> int:
    return int(os.getenv("KEBAP_ORDERS_HISTORY_LIMIT", "20"))


def _raise_order_http_error(e: Exception) -> None:
    if isinstance(e, MenuSelectionInvalidError):
        detail = {
            "code": e.code,
            "message": str(e),
            "menu_id": e.menu_id,
            "group_name": e.error.group_name,
        }
        if isinstance(e.error, CountOutOfRange):
            detail.update({"min": e.error.min, "max": e.error.max, "actual": e.error.actual})
        else:
            detail["product_id"] = e.error.product_id
        raise HTTPException(status_code=422, detail=detail) from e

    if isinstance(e, OrderValidationError):
        raise HTTPException(status_code=422, detail={"code": e.code, "message": str(e)}) from e

    if isinstance(e, OrderStateError):
        raise HTTPException(status_code=409, detail={"code": e.code, "message": str(e)}) from e

    if isinstance(e, OrderSubmissionError):
        raise HTTPException(
            status_code=503, detail={"code": "submission_failed", "message": str(e)}
        ) from e

    raise HTTPException(status_code=500, detail="Internal Server Error") from e


@router.post("/v1/orders/quote", response_model=OrderQuoteResponse)
def quote_order(
    payload: OrderQuoteRequest,
    catalog: CatalogSource = Depends(catalog_dep),
) -> OrderQuoteResponse:
    try:
        translated = translate(_cart_from_lines(payload.lines), payload.mode, catalog)
    except Exception as e:
        _raise_order_http_error(e)

    return OrderQuoteResponse(
        mode=payload.mode,
        lines=translated.lines,
        previews=translated.previews,
        total_cents=translated.total_cents,
        items_count=translated.items_count,
    )


@router.post("/v1/orders", response_model=OrderSubmitResponse)
def submit_order(
    payload: OrderSubmitRequest,
    db: Session = Depends(get_db),
    catalog: CatalogSource = Depends(catalog_dep),
) -> OrderSubmitResponse:
    mode, address_id = payload.mode, payload.address_id
    if mode is None:
        # Snapshot once: later session changes must not affect this submission.
        context = session_store.get(payload.owner_id).context
        if not context.is_active:
            _raise_order_http_error(OrderStateError())
        mode, address_id = context.mode, context.address_id

    repo = SqlOrdersRepository(db, catalog)
    try:
        order_id = repo.submit(payload.owner_id, _cart_from_lines(payload.lines), mode, address_id)
    except Exception as e:
        _raise_order_http_error(e)

    summary = repo.get_order(payload.owner_id, order_id)
    if summary is None:
        raise HTTPException(status_code=500, detail="Internal Server Error")

    return OrderSubmitResponse(
        order_id=order_id,
        status=summary.status,
        mode=summary.mode,
        total_cents=summary.total_cents,
        items_count=summary.items_count,
    )


@router.get("/v1/orders", response_model=list[OrderSummaryV1])
def list_my_orders(
    owner_id: str,
    limit: int | None = None,
    db: Session = Depends(get_db),
    catalog: CatalogSource = Depends(catalog_dep),
) -> list[OrderSummaryV1]:
    limit = limit if limit is not None else _history_limit()
    if limit < 1:
        raise HTTPException(status_code=422, detail="limit must be positive")

    return SqlOrdersRepository(db, catalog).observe_my_orders(owner_id, limit=limit)


@router.post("/v1/orders/{order_id}/reorder", response_model=ReorderResponse)
def reorder(
    order_id: str,
    payload: ReorderRequest,
    db: Session = Depends(get_db),
    catalog: CatalogSource = Depends(catalog_dep),
) -> ReorderResponse:
    summary = SqlOrdersRepository(db, catalog).get_order(payload.owner_id, order_id)
    if summary is None:
        raise HTTPException(status_code=404, detail="Order not found")

    result = rebuild_cart(summary.reorder_lines, catalog)

    return ReorderResponse(
        order_id=order_id,
        lines=_lines_from_cart(result.cart),
        skipped=[
            SkippedLineOut(index=s.index, kind=s.kind, ref_id=s.ref_id, reason=s.reason)
            for s in result.skipped
        ],
    )


def _cart_from_lines(lines: list[CartLineModel]) -> Cart:
    cart = Cart()
    for line in lines:
        if isinstance(line, ProductCartLine):
            cart.add_product(
                line.product_id,
                ProductCustomization.of(line.removed_ingredients),
                qty=line.qty,
            )
        elif isinstance(line, MenuCartLine):
            cart.add_menu(
                line.menu_id,
                {
                    group_id: [
                        MenuSelection(
                            product_id=s.product_id,
                            customization=ProductCustomization.of(s.removed_ingredients),
                        )
                        for s in chosen
                    ]
                    for group_id, chosen in line.selections.items()
                },
                qty=line.qty,
            )
    return cart


def _lines_from_cart(cart: Cart) -> list[CartLineModel]:
    out: list[CartLineModel] = []
    for line in cart.lines:
        if isinstance(line, CartProductLine):
            out.append(
                ProductCartLine(
                    line_id=line.line_id,
                    product_id=line.product_id,
                    qty=line.qty,
                    removed_ingredients=sorted(line.customization.removed_ingredients),
                )
            )
        elif isinstance(line, CartMenuLine):
            out.append(
                MenuCartLine(
                    line_id=line.line_id,
                    menu_id=line.menu_id,
                    qty=line.qty,
                    selections={
                        group_id: [
                            {
                                "product_id": s.product_id,
                                "removed_ingredients": sorted(
                                    s.customization.removed_ingredients
                                ),
                            }
                            for s in chosen
                        ]
                        for group_id, chosen in line.selections.items()
                    },
                )
            )
    return out

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from packages.shared.schemas.order_v1 import OrderModeV1
from services.api.app.db.deps import get_db
from services.api.app.models.catalog import (
    CategoryOut,
    MenuAllowedOut,
    MenuGroupOut,
    MenuOut,
    PricesOut,
    ProductOut,
)
from services.api.app.services.catalog_base import CatalogSource, Prices
from services.api.app.services.catalog_factory import get_catalog
from services.api.app.services.pricing import price_for
from sqlalchemy.orm import Session

router = APIRouter()


def catalog_dep(db: Session = Depends(get_db)) -> CatalogSource:
    try:
        return get_catalog(db)
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e


@router.get("/v1/catalog/categories", response_model=list[CategoryOut])
def list_categories(catalog: CatalogSource = Depends(catalog_dep)) -> list[CategoryOut]:
    return [
        CategoryOut(
            id=c.id,
            name=c.name,
            order=c.order,
            image_path=c.image_path,
            type=c.type.value,
        )
        for c in catalog.observe_categories()
    ]


@router.get("/v1/catalog/products", response_model=list[ProductOut])
def list_products(
    category_id: str | None = None,
    mode: OrderModeV1 | None = None,
    catalog: CatalogSource = Depends(catalog_dep),
) -> list[ProductOut]:
    return [
        ProductOut(
            id=p.id,
            name=p.name,
            description=p.description,
            image_path=p.image_path,
            category_id=p.category_id,
            order=p.order,
            ingredients=list(p.ingredients),
            prices=_prices_out(p.prices),
            display_price_cents=price_for(p, mode),
        )
        for p in catalog.observe_products(category_id)
    ]


@router.get("/v1/catalog/menus", response_model=list[MenuOut])
def list_menus(
    mode: OrderModeV1 | None = None,
    catalog: CatalogSource = Depends(catalog_dep),
) -> list[MenuOut]:
    out: list[MenuOut] = []
    for m in catalog.observe_menus():
        out.append(
            MenuOut(
                id=m.id,
                name=m.name,
                description=m.description,
                image_path=m.image_path,
                order=m.order,
                prices=_prices_out(m.prices),
                groups=[
                    MenuGroupOut(
                        id=g.id,
                        name=g.name,
                        min=g.min,
                        max=g.max,
                        allowed=[
                            MenuAllowedOut(
                                product_id=a.product_id,
                                delta=_prices_out(a.delta) if a.delta else None,
                                default=a.default,
                                allow_ingredient_removal=a.allow_ingredient_removal,
                            )
                            for a in g.allowed
                        ],
                    )
                    for g in m.groups
                ],
                display_price_cents=price_for(m, mode),
            )
        )
    return out


def _prices_out(prices: Prices) -> PricesOut:
    return PricesOut(pickup=prices.pickup, delivery=prices.delivery)

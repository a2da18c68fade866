from __future__ import annotations

from pydantic import BaseModel, Field


class PricesOut(BaseModel):
    pickup: int | None = None
    delivery: int | None = None


class CategoryOut(BaseModel):
    id: str
    name: str
    order: int
    image_path: str | None = None
    type: str


class ProductOut(BaseModel):
    id: str
    name: str
    description: str | None = None
    image_path: str | None = None
    category_id: str
    order: int
    ingredients: list[str] = Field(default_factory=list)
    prices: PricesOut

    # Resolved for the requested mode; null means the product cannot be ordered.
    display_price_cents: int | None = None


class MenuAllowedOut(BaseModel):
    product_id: str
    delta: PricesOut | None = None
    default: bool = False
    allow_ingredient_removal: bool = True


class MenuGroupOut(BaseModel):
    id: str
    name: str
    min: int
    max: int
    allowed: list[MenuAllowedOut] = Field(default_factory=list)


class MenuOut(BaseModel):
    id: str
    name: str
    description: str | None = None
    image_path: str | None = None
    order: int
    prices: PricesOut
    groups: list[MenuGroupOut] = Field(default_factory=list)
    display_price_cents: int | None = None

from __future__ import annotations

from services.api.app.services.catalog_base import (
    Category,
    CategoryType,
    Menu,
    MenuAllowed,
    MenuGroup,
    Prices,
    Product,
    order_by_ids,
)


class InMemoryCatalog:
    name = "memory"

    def __init__(
        self,
        categories: list[Category] | None = None,
        products: list[Product] | None = None,
        menus: list[Menu] | None = None,
    ) -> None:
        self._categories = list(categories or [])
        self._products = list(products or [])
        self._menus = list(menus or [])

    @classmethod
    def demo(cls) -> InMemoryCatalog:
        return cls(DEMO_CATEGORIES, DEMO_PRODUCTS, DEMO_MENUS)

    def observe_categories(self) -> list[Category]:
        return sorted((c for c in self._categories if c.active), key=lambda c: (c.order, c.id))

    def observe_products(self, category_id: str | None = None) -> list[Product]:
        products = [p for p in self._products if p.active]
        if category_id is not None:
            products = [p for p in products if p.category_id == category_id]
        return sorted(products, key=lambda p: (p.order, p.id))

    def observe_menus(self) -> list[Menu]:
        return sorted((m for m in self._menus if m.active), key=lambda m: (m.order, m.id))

    def get_products_by_ids(self, ids: list[str]) -> list[Product]:
        return order_by_ids(self._products, ids)

    def get_menus_by_ids(self, ids: list[str]) -> list[Menu]:
        return order_by_ids(self._menus, ids)


DEMO_CATEGORIES = [
    Category(id="kebabs", name="Kebabs", order=1, active=True, image_path="categories/kebabs.png"),
    Category(id="sides", name="Sides", order=2, active=True, image_path="categories/sides.png"),
    Category(id="drinks", name="Drinks", order=3, active=True, image_path="categories/drinks.png"),
    Category(
        id="menus",
        name="Menus",
        order=4,
        active=True,
        image_path="categories/menus.png",
        type=CategoryType.MENUS,
    ),
    Category(id="desserts", name="Desserts", order=5, active=False),
]

DEMO_PRODUCTS = [
    Product(
        id="kebab-classic",
        name="Classic Kebab",
        category_id="kebabs",
        prices=Prices(pickup=650, delivery=750),
        description="Veal and chicken in pita bread",
        image_path="products/kebab-classic.png",
        order=1,
        ingredients=("lettuce", "tomato", "onion", "yogurt sauce"),
    ),
    Product(
        id="durum",
        name="Durum",
        category_id="kebabs",
        prices=Prices(pickup=700, delivery=800),
        image_path="products/durum.png",
        order=2,
        ingredients=("lettuce", "tomato", "onion", "garlic sauce"),
    ),
    Product(
        id="falafel-wrap",
        name="Falafel Wrap",
        category_id="kebabs",
        prices=Prices(pickup=600, delivery=None),
        image_path="products/falafel-wrap.png",
        order=3,
        ingredients=("lettuce", "tomato", "tahini"),
    ),
    Product(
        id="lahmacun",
        name="Lahmacun",
        category_id="kebabs",
        prices=Prices(pickup=500, delivery=550),
        active=False,
        order=4,
    ),
    Product(
        id="fries",
        name="Fries",
        category_id="sides",
        prices=Prices(pickup=250, delivery=300),
        image_path="products/fries.png",
        order=1,
    ),
    Product(
        id="cocacola",
        name="Coca-Cola",
        category_id="drinks",
        prices=Prices(pickup=180, delivery=200),
        order=1,
    ),
    Product(
        id="cocacola-zero",
        name="Coca-Cola Zero",
        category_id="drinks",
        prices=Prices(pickup=180, delivery=200),
        order=2,
    ),
    Product(
        id="water",
        name="Water",
        category_id="drinks",
        prices=Prices(),
        order=3,
    ),
]

DEMO_MENUS = [
    Menu(
        id="menu-kebab",
        name="Kebab Menu",
        prices=Prices(pickup=950, delivery=1100),
        image_path="menus/menu-kebab.png",
        order=1,
        groups=(
            MenuGroup(
                id="main",
                name="Main",
                min=1,
                max=1,
                allowed=(
                    MenuAllowed(product_id="kebab-classic", default=True),
                    MenuAllowed(product_id="durum", delta=Prices(pickup=50, delivery=50)),
                ),
            ),
            MenuGroup(
                id="side",
                name="Side",
                min=1,
                max=1,
                allowed=(MenuAllowed(product_id="fries", default=True),),
            ),
            MenuGroup(
                id="drink",
                name="Drink",
                min=1,
                max=1,
                allowed=(
                    MenuAllowed(product_id="cocacola", default=True),
                    MenuAllowed(product_id="cocacola-zero"),
                ),
            ),
        ),
    ),
    Menu(
        id="menu-old",
        name="Old Menu",
        prices=Prices(pickup=800, delivery=900),
        active=False,
        order=2,
    ),
]

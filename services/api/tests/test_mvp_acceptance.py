from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient


@pytest.fixture()
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    db_path = tmp_path / "kebap_acceptance.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("KEBAP_DB_AUTO_CREATE", "true")
    monkeypatch.setenv("KEBAP_CATALOG_SOURCE", "memory")

    from services.api.app.main import app

    with TestClient(app) as c:
        yield c


def _cart() -> list[dict]:
    return [
        {
            "type": "product",
            "product_id": "kebab-classic",
            "qty": 1,
            "removed_ingredients": ["onion", "lettuce"],
        },
        {"type": "product", "product_id": "fries", "qty": 2},
        {
            "type": "menu",
            "menu_id": "menu-kebab",
            "qty": 1,
            "selections": {
                "main": [{"product_id": "kebab-classic"}],
                "side": [{"product_id": "fries"}],
                "drink": [{"product_id": "cocacola-zero"}],
            },
        },
    ]


def test_mvp_pickup_order_and_reorder(client: TestClient) -> None:
    owner = "u-1"

    # Browse the catalog with pickup prices.
    products = client.get(
        "/v1/catalog/products", params={"category_id": "kebabs", "mode": "PICKUP"}
    ).json()
    classic = next(p for p in products if p["id"] == "kebab-classic")
    assert classic["display_price_cents"] == 650

    # Pick a mode.
    ctx = client.post("/v1/session/start", json={"owner_id": owner, "mode": "PICKUP"}).json()
    assert ctx["is_active"] is True
    assert ctx["state"] == "PICKUP_READY"

    # Quote, then submit against the session context.
    quote = client.post("/v1/orders/quote", json={"mode": "PICKUP", "lines": _cart()}).json()
    assert quote["total_cents"] == 650 + 2 * 250 + 950
    assert quote["items_count"] == 4
    assert quote["previews"][0]["text"] == "Classic Kebab (without lettuce, onion)"

    submitted = client.post("/v1/orders", json={"owner_id": owner, "lines": _cart()})
    assert submitted.status_code == 200
    order = submitted.json()
    assert order["mode"] == "PICKUP"
    assert order["total_cents"] == quote["total_cents"]

    # History shows the order with its snapshot.
    (summary,) = client.get("/v1/orders", params={"owner_id": owner}).json()
    assert summary["id"] == order["order_id"]
    assert summary["status"] == "PENDING"
    assert summary["address_id"] is None
    assert summary["items_count"] == 4
    assert [line["type"] for line in summary["reorder_lines"]] == ["product", "product", "menu"]

    # Reorder rebuilds the same cart.
    reordered = client.post(
        f"/v1/orders/{order['order_id']}/reorder", json={"owner_id": owner}
    ).json()
    assert reordered["skipped"] == []
    assert len(reordered["lines"]) == 3
    assert reordered["lines"][0]["removed_ingredients"] == ["lettuce", "onion"]
    assert reordered["lines"][2]["selections"]["drink"][0]["product_id"] == "cocacola-zero"

    requote = client.post(
        "/v1/orders/quote", json={"mode": "PICKUP", "lines": reordered["lines"]}
    ).json()
    assert requote["total_cents"] == quote["total_cents"]

    # The audit trail has both the session and the order events.
    events = client.get("/v1/events", params={"owner_id": owner}).json()
    event_types = {e["event_type"] for e in events}
    assert "SESSION_STARTED" in event_types
    assert "ORDER_SUBMITTED" in event_types

    order_events = client.get(
        "/v1/events", params={"owner_id": owner, "entity_id": order["order_id"]}
    ).json()
    assert len(order_events) == 1
    assert order_events[0]["payload"]["total_cents"] == order["total_cents"]


def test_mvp_delivery_requires_address_from_session(client: TestClient) -> None:
    owner = "u-2"

    client.post("/v1/session/start", json={"owner_id": owner, "mode": "DELIVERY"})
    blocked = client.post("/v1/orders", json={"owner_id": owner, "lines": _cart()})
    assert blocked.status_code == 409

    client.post(
        "/v1/session/start",
        json={"owner_id": owner, "mode": "DELIVERY", "address_id": "addr-1"},
    )
    ok = client.post("/v1/orders", json={"owner_id": owner, "lines": _cart()})
    assert ok.status_code == 200
    assert ok.json()["total_cents"] == 750 + 2 * 300 + 1100

    client.post("/v1/session/logout", json={"owner_id": owner})
    ctx = client.get(f"/v1/session/{owner}").json()
    assert ctx["is_active"] is False
    assert ctx["state"] == "EMPTY"

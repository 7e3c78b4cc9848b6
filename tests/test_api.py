"""
HTTP surface: camelCase payloads, status codes, no-cache headers and the
admin session guard.
"""
import logging

import pytest

from conftest import ADMIN_HEADERS

RANGE = {"startDate": "2025-06-01", "endDate": "2025-06-03"}


def _rental_body(items, **overrides) -> dict:
    body = {
        "customerName": "Ada Lovelace",
        "customerEmail": "ada@example.com",
        "phoneNumber": "+15555550100",
        "items": items,
        **RANGE,
    }
    body.update(overrides)
    return body


# ── Catalog ───────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_products_are_listed_without_caching(client, products):
    r = await client.get("/api/products")
    assert r.status_code == 200
    assert "no-store" in r.headers["cache-control"]
    body = r.json()
    assert [p["name"] for p in body] == ["Dinner Plates", "Glasses", "Cutlery Set"]
    assert body[0]["totalStock"] == 100
    assert body[0]["category"] == "plates"


@pytest.mark.asyncio
async def test_unknown_product_is_404(client, products):
    r = await client.get("/api/products/999")
    assert r.status_code == 404
    assert r.json()["error"] == "ProductNotFoundError"


# ── Inventory ─────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_available_stock_reflects_reservations(client, products):
    plates = products["plates"].id
    r = await client.post("/api/rentals", json=_rental_body([{"productId": plates, "quantity": 30}]))
    assert r.status_code == 201

    r = await client.get("/api/inventory/available", params=RANGE)
    assert r.status_code == 200
    assert "no-store" in r.headers["cache-control"]
    stock = r.json()["stockByProduct"]
    assert stock[str(plates)] == 70
    assert stock[str(products["glasses"].id)] == 100


@pytest.mark.asyncio
async def test_daily_inventory_grid(client, products):
    plates = products["plates"].id
    await client.post(
        "/api/rentals",
        json=_rental_body([{"productId": plates, "quantity": 10}], startDate="2025-06-02", endDate="2025-06-02"),
    )
    r = await client.get("/api/inventory/daily", params=RANGE)
    assert r.status_code == 200
    grid = r.json()["dailyInventory"]
    assert sorted(grid) == ["2025-06-01", "2025-06-02", "2025-06-03"]
    assert grid["2025-06-01"][str(plates)] == 100
    assert grid["2025-06-02"][str(plates)] == 90


@pytest.mark.asyncio
async def test_stock_on_single_date(client, products):
    r = await client.get("/api/inventory/2025-06-01")
    assert r.status_code == 200
    assert r.json()["date"] == "2025-06-01"
    assert r.json()["stockByProduct"][str(products["cutlery"].id)] == 100


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params,error",
    [
        ({}, "InvalidDateError"),
        ({"startDate": "2025-06-01", "endDate": "not-a-date"}, "InvalidDateError"),
        ({"startDate": "2025-06-03", "endDate": "2025-06-01"}, "InvalidRangeError"),
        ({"startDate": "2025-01-01", "endDate": "2026-06-01"}, "RangeTooLargeError"),
    ],
)
async def test_bad_inventory_ranges_are_400(client, products, params, error):
    r = await client.get("/api/inventory/available", params=params)
    assert r.status_code == 400
    assert r.json()["error"] == error


# ── Pricing / rentals ─────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_calculate_price(client, products):
    r = await client.post("/api/calculate-price", json={"items": [{"productId": products["plates"].id, "quantity": 60}]})
    assert r.status_code == 200
    assert r.json() == {"totalAmount": 30.0}

    r = await client.post(
        "/api/calculate-price",
        json={"items": [
            {"productId": products["plates"].id, "quantity": 30},
            {"productId": products["glasses"].id, "quantity": 30},
        ]},
    )
    assert r.json() == {"totalAmount": 15.0}


@pytest.mark.asyncio
async def test_create_rental_returns_camel_case(client, products, notifier):
    plates = products["plates"].id
    r = await client.post("/api/rentals", json=_rental_body([{"productId": plates, "quantity": 30}]))
    assert r.status_code == 201
    body = r.json()
    assert body["customerName"] == "Ada Lovelace"
    assert body["startDate"] == "2025-06-01"
    assert body["endDate"] == "2025-06-03"
    assert body["totalAmount"] == 15.0
    assert body["status"] == "pending"
    assert body["items"] == [{"id": body["items"][0]["id"], "rentalId": body["id"], "productId": plates, "quantity": 30}]
    assert notifier.events[0]["rental_id"] == body["id"]


@pytest.mark.asyncio
async def test_insufficient_stock_is_400_with_product_id(client, products):
    plates = products["plates"].id
    await client.post("/api/rentals", json=_rental_body([{"productId": plates, "quantity": 30}]))

    r = await client.post("/api/rentals", json=_rental_body([{"productId": plates, "quantity": 80}]))
    assert r.status_code == 400
    body = r.json()
    assert body["productId"] == plates
    assert body["available"] == 70
    assert "Not enough inventory available for product ID" in body["detail"]


@pytest.mark.asyncio
async def test_rental_with_bad_date_is_400(client, products, rental_count):
    r = await client.post(
        "/api/rentals",
        json=_rental_body([{"productId": products["plates"].id, "quantity": 1}], startDate="2025-02-30"),
    )
    assert r.status_code == 400
    assert r.json()["error"] == "InvalidDateError"
    assert await rental_count() == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["startDate", "items", "customerEmail"])
async def test_rental_missing_fields_is_400(client, products, missing):
    body = _rental_body([{"productId": products["plates"].id, "quantity": 1}])
    del body[missing]
    r = await client.post("/api/rentals", json=body)
    assert r.status_code == 400
    assert r.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_rental_reads(client, products):
    plates = products["plates"].id
    created = []
    for qty in (5, 6):
        r = await client.post("/api/rentals", json=_rental_body([{"productId": plates, "quantity": qty}]))
        created.append(r.json()["id"])

    r = await client.get(f"/api/rentals/{created[0]}")
    assert r.status_code == 200
    assert r.json()["items"][0]["quantity"] == 5

    r = await client.get("/api/rentals")
    assert {rental["id"] for rental in r.json()} == set(created)

    r = await client.get("/api/orders/recent")
    assert len(r.json()) == 2

    r = await client.get("/api/rental-items")
    assert [item["quantity"] for item in r.json()] == [5, 6]

    r = await client.get("/api/rentals/999")
    assert r.status_code == 404


# ── Admin ─────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_admin_routes_require_session(client, products):
    r = await client.patch(f"/api/admin/products/{products['plates'].id}", json={"totalStock": 5})
    assert r.status_code == 401

    r = await client.patch(
        f"/api/admin/products/{products['plates'].id}",
        json={"totalStock": 5},
        headers={"X-Admin-Session": "wrong"},
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_admin_updates_product(client, products):
    r = await client.patch(
        f"/api/admin/products/{products['plates'].id}",
        json={"totalStock": 150, "co2Saved": 0.07},
        headers=ADMIN_HEADERS,
    )
    assert r.status_code == 200
    assert r.json()["totalStock"] == 150
    assert r.json()["co2Saved"] == pytest.approx(0.07)

    r = await client.patch(
        f"/api/admin/products/{products['plates'].id}", json={"totalStock": -1}, headers=ADMIN_HEADERS
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_admin_cancel_restores_availability(client, products):
    plates = products["plates"].id
    r = await client.post("/api/rentals", json=_rental_body([{"productId": plates, "quantity": 40}]))
    rental_id = r.json()["id"]

    r = await client.post(f"/api/admin/rentals/{rental_id}/cancel", headers=ADMIN_HEADERS)
    assert r.status_code == 200
    assert r.json()["status"] == "cancelled"

    r = await client.get("/api/inventory/available", params=RANGE)
    assert r.json()["stockByProduct"][str(plates)] == 100


@pytest.mark.asyncio
async def test_admin_status_update(client, products):
    r = await client.post("/api/rentals", json=_rental_body([{"productId": products["plates"].id, "quantity": 1}]))
    rental_id = r.json()["id"]

    r = await client.patch(f"/api/admin/rentals/{rental_id}/status", json={"status": "confirmed"}, headers=ADMIN_HEADERS)
    assert r.status_code == 200
    assert r.json()["status"] == "confirmed"

    r = await client.patch(f"/api/admin/rentals/{rental_id}/status", json={"status": "pending"}, headers=ADMIN_HEADERS)
    assert r.status_code == 409
    assert r.json()["error"] == "InvalidStatusTransitionError"


# ── Impact / health / logging ─────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_impact_endpoint(client, products):
    await client.post("/api/rentals", json=_rental_body([{"productId": products["cutlery"].id, "quantity": 10}]))
    r = await client.get("/api/impact")
    assert r.status_code == 200
    body = r.json()
    assert body["wasteDiverted"] == 10
    assert body["co2Saved"] == pytest.approx(1.0)
    assert body["waterSaved"] == pytest.approx(10.0)
    assert body["totalRentals"] == 1
    assert body["potentialImpact"] == 300 * 365


@pytest.mark.asyncio
async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"
    assert r.json()["dependencies"] == {"database": "ok"}


@pytest.mark.asyncio
async def test_api_requests_are_logged(client, products, caplog):
    caplog.set_level(logging.INFO, logger="rental_service.access")
    await client.get("/api/products")
    assert any(
        record.name == "rental_service.access" and "GET /api/products 200" in record.getMessage()
        for record in caplog.records
    )

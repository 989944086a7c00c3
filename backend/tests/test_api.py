from datetime import datetime, timedelta, timezone

from jose import jwt

from utils.auth_utils import ALGORITHM, SECRET_KEY


def _create_spool(client, headers, spool_payload, **overrides):
    resp = client.post("/consumables/", json={**spool_payload, **overrides}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def _create_accessory(client, headers, category_id, **fields):
    payload = {"category_id": category_id, "name": "Spare nozzle", **fields}
    resp = client.post("/accessories/", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_requests_without_a_token_are_rejected(client):
    resp = client.get("/consumables/")
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Authorization header is missing"


def test_expired_and_forged_tokens_are_rejected(client):
    expired = jwt.encode(
        {"sub": "owner-1", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)}, SECRET_KEY, algorithm=ALGORITHM
    )
    resp = client.get("/brands/", headers={"Authorization": f"Bearer {expired}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token has expired"

    forged = jwt.encode({"sub": "owner-1"}, "not-the-secret", algorithm=ALGORITHM)
    resp = client.get("/brands/", headers={"Authorization": f"Bearer {forged}"})
    assert resp.status_code == 401


def test_token_without_subject_is_rejected(client):
    token = jwt.encode({"email": "maker@example.com"}, SECRET_KEY, algorithm=ALGORITHM)
    resp = client.get("/brands/", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token does not identify a user"


def test_brand_crud_and_conflicts(client, headers):
    resp = client.post("/brands/", json={"name": "Polymaker", "website": "https://polymaker.com"}, headers=headers)
    assert resp.status_code == 201
    brand = resp.json()

    resp = client.post("/brands/", json={"name": "Polymaker"}, headers=headers)
    assert resp.status_code == 409

    resp = client.patch(f"/brands/{brand['id']}", json={"description": "PolyTerra"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["description"] == "PolyTerra"

    resp = client.delete(f"/brands/{brand['id']}", headers=headers)
    assert resp.status_code == 200
    assert client.get(f"/brands/{brand['id']}", headers=headers).status_code == 404


def test_brand_in_use_cannot_be_deleted(client, headers, spool_payload):
    _create_spool(client, headers, spool_payload)
    resp = client.delete(f"/brands/{spool_payload['brand_id']}", headers=headers)
    assert resp.status_code == 409


def test_consumable_type_temperature_range_is_validated(client, headers):
    resp = client.post(
        "/consumable-types/", json={"name": "PETG", "print_temp_min": 250, "print_temp_max": 220}, headers=headers
    )
    assert resp.status_code == 400


def test_presets_are_listed_and_protected(client, headers):
    resp = client.get("/accessory-categories/", headers=headers)
    assert resp.status_code == 200
    categories = resp.json()
    assert {c["name"] for c in categories if c["is_preset"]} == {
        "Build Plates", "Lubricants", "Nozzles", "Motion Parts", "Electronics", "Other",
    }

    preset = categories[0]
    assert client.delete(f"/accessory-categories/{preset['id']}", headers=headers).status_code == 409
    resp = client.post("/accessory-categories/", json={"name": "Nozzles"}, headers=headers)
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Category name conflicts with preset category"

    resp = client.post("/accessory-categories/", json={"name": "Enclosure"}, headers=headers)
    assert resp.status_code == 201
    assert resp.json()["is_preset"] is False


def test_consumable_lifecycle_over_http(client, headers, spool_payload):
    spool = _create_spool(client, headers, spool_payload)
    assert spool["status"] == "unopened"
    assert spool["remaining_weight"] == 1000

    resp = client.post("/usage-records/", json={
        "consumable_id": spool["id"], "amount_used": 300, "usage_date": "2026-02-01", "project_name": "Benchy",
    }, headers=headers)
    assert resp.status_code == 201
    assert resp.json()["warning"] is None
    assert resp.json()["consumable"]["remaining_weight"] == 700

    resp = client.post("/usage-records/", json={
        "consumable_id": spool["id"], "amount_used": 800, "usage_date": "2026-02-02",
    }, headers=headers)
    assert resp.status_code == 201
    body = resp.json()
    assert body["warning"] == "Warning: Usage amount exceeds remaining inventory"
    assert body["consumable"]["remaining_weight"] == 0
    assert body["consumable"]["status"] == "depleted"

    resp = client.delete(f"/usage-records/{body['record']['id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["remaining_weight"] == 700

    resp = client.get(f"/usage-records/total/{spool['id']}", headers=headers)
    assert resp.json()["total_usage"] == 300

    resp = client.patch(f"/consumables/{spool['id']}/open", json={"opened_at": "2026-02-03"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["opened_at"] == "2026-02-03"
    assert resp.json()["status"] == "opened"

    resp = client.get(f"/consumables/{spool['id']}/audit", headers=headers)
    assert [a["change_type"] for a in resp.json()] == ["usage", "usage", "usage_revert"]


def test_open_without_body_uses_today(client, headers, spool_payload):
    spool = _create_spool(client, headers, spool_payload)
    resp = client.patch(f"/consumables/{spool['id']}/open", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["is_opened"] is True
    assert resp.json()["opened_days"] == 0


def test_batch_create_over_http(client, headers, spool_payload):
    resp = client.post("/consumables/batch", json={**spool_payload, "quantity": 3}, headers=headers)
    assert resp.status_code == 201
    assert resp.json()["count"] == 3

    resp = client.post("/consumables/batch", json={**spool_payload, "quantity": 0}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Quantity must be at least 1"

    assert len(client.get("/consumables/", headers=headers).json()) == 3


def test_consumable_validation_errors(client, headers, spool_payload):
    resp = client.post("/consumables/", json={**spool_payload, "color_hex": "blue"}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid color format"

    resp = client.post("/consumables/", json={**spool_payload, "brand_id": "nope"}, headers=headers)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Brand not found"

    missing_weight = {k: v for k, v in spool_payload.items() if k != "weight"}
    assert client.post("/consumables/", json=missing_weight, headers=headers).status_code == 422


def test_consumable_filters_over_http(client, headers, spool_payload):
    _create_spool(client, headers, spool_payload)
    _create_spool(client, headers, spool_payload, color="Blue", color_hex="#0000FF", is_opened=True)

    resp = client.get("/consumables/", params={"status": "opened"}, headers=headers)
    assert [c["color"] for c in resp.json()] == ["Blue"]
    resp = client.get("/consumables/", params={"is_opened": "false"}, headers=headers)
    assert [c["color"] for c in resp.json()] == ["Red"]


def test_other_owners_cannot_see_or_touch_resources(client, headers, other_headers, spool_payload):
    spool = _create_spool(client, headers, spool_payload)

    assert client.get(f"/consumables/{spool['id']}", headers=other_headers).status_code == 404
    assert client.get("/consumables/", headers=other_headers).json() == []
    resp = client.post("/usage-records/", json={
        "consumable_id": spool["id"], "amount_used": 10, "usage_date": "2026-02-01",
    }, headers=other_headers)
    assert resp.status_code == 404
    assert client.delete(f"/consumables/{spool['id']}", headers=other_headers).status_code == 404


def test_accessory_lifecycle_over_http(client, headers, nozzle_category):
    accessory = _create_accessory(client, headers, nozzle_category.id, quantity=10, low_stock_threshold=3)
    assert accessory["status"] == "available"

    resp = client.post(f"/accessories/{accessory['id']}/usage", json={"usage_date": "2026-03-01", "quantity": 7}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "low_stock"
    assert resp.json()["remaining_qty"] == 3

    resp = client.post(f"/accessories/{accessory['id']}/usage", json={"usage_date": "2026-03-02", "quantity": 4}, headers=headers)
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Usage quantity exceeds remaining stock"

    resp = client.post(f"/accessories/{accessory['id']}/usage", json={"usage_date": "2026-03-02", "quantity": 3}, headers=headers)
    assert resp.json()["status"] == "depleted"
    assert len(resp.json()["usage_records"]) == 2

    alerts = client.get("/accessories/alerts", headers=headers).json()
    assert [a["alert_type"] for a in alerts] == ["low_stock"]

    resp = client.patch(f"/accessories/{accessory['id']}", json={"quantity": 15}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["remaining_qty"] == 5
    assert resp.json()["status"] == "available"

    resp = client.get(f"/accessories/{accessory['id']}/audit", headers=headers)
    assert [a["change_type"] for a in resp.json()] == ["usage", "usage", "restock"]


def test_durable_session_over_http(client, headers, nozzle_category):
    tool = _create_accessory(client, headers, nozzle_category.id, name="Nozzle wrench", usage_type="durable")

    resp = client.post(f"/accessories/{tool['id']}/start-using", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "in_use"

    assert client.post(f"/accessories/{tool['id']}/start-using", headers=headers).status_code == 409
    resp = client.delete(f"/accessories/{tool['id']}", headers=headers)
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Cannot delete accessory that is in use"

    resp = client.post(f"/accessories/{tool['id']}/stop-using", json={"notes": "Nozzle swap"}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "available"
    assert len(body["usage_records"]) == 1
    assert body["usage_records"][0]["duration"] >= 0
    assert body["usage_records"][0]["purpose"] == "Nozzle swap"

    assert client.post(f"/accessories/{tool['id']}/stop-using", headers=headers).status_code == 409
    assert client.delete(f"/accessories/{tool['id']}", headers=headers).status_code == 200
    assert client.get(f"/accessories/{tool['id']}", headers=headers).status_code == 404


def test_mark_replaced_over_http(client, headers, nozzle_category):
    accessory = _create_accessory(client, headers, nozzle_category.id, replacement_cycle=90)
    resp = client.post(f"/accessories/{accessory['id']}/replaced", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["last_replaced_at"] is not None


def test_list_accessories_by_status(client, headers, nozzle_category):
    _create_accessory(client, headers, nozzle_category.id, quantity=2)
    gone = _create_accessory(client, headers, nozzle_category.id, name="Wiper", quantity=1)
    client.post(f"/accessories/{gone['id']}/usage", json={"usage_date": "2026-03-01", "quantity": 1}, headers=headers)

    resp = client.get("/accessories/", params={"status": "depleted"}, headers=headers)
    assert [a["name"] for a in resp.json()] == ["Wiper"]


def test_dashboard_endpoints(client, headers, spool_payload):
    spool = _create_spool(client, headers, spool_payload)
    _create_spool(client, headers, spool_payload, color="red", is_opened=True)
    client.post("/usage-records/", json={
        "consumable_id": spool["id"], "amount_used": 850, "usage_date": "2026-02-01",
    }, headers=headers)

    overview = client.get("/dashboard/inventory", headers=headers).json()
    assert overview["by_color"][0]["count"] == 2
    assert overview["by_brand"][0]["total_remaining_weight"] == 1150

    stats = client.get("/dashboard/stats", headers=headers).json()
    assert stats["total_consumables"] == 2
    assert stats["opened_count"] == 1
    assert [item["percent_remaining"] for item in stats["low_stock_items"]] == [15]

    assert client.get("/dashboard/stats", params={"low_stock_ratio": 2}, headers=headers).status_code == 400


def test_price_stats_and_remaining_totals(client, headers, spool_payload, brand, pla):
    assert client.get("/dashboard/prices", headers=headers).json() == {
        "trend": [], "average_price": 0.0, "min_price": 0.0, "max_price": 0.0, "total_count": 0,
    }

    _create_spool(client, headers, spool_payload, price=90.0, purchase_date="2026-03-01")
    cheap = _create_spool(client, headers, spool_payload, color="White", price=60.0, purchase_date="2026-01-15")
    client.post("/usage-records/", json={
        "consumable_id": cheap["id"], "amount_used": 400, "usage_date": "2026-02-01",
    }, headers=headers)

    prices = client.get("/dashboard/prices", headers=headers).json()
    assert [(p["purchase_date"], p["price"]) for p in prices["trend"]] == [("2026-01-15", 60.0), ("2026-03-01", 90.0)]
    assert prices["trend"][0]["brand_name"] == "Bambu Lab"
    assert (prices["average_price"], prices["min_price"], prices["max_price"], prices["total_count"]) == (75.0, 60.0, 90.0, 2)

    by_brand = client.get(f"/dashboard/remaining/brand/{brand.id}", headers=headers).json()
    assert by_brand["total_remaining_weight"] == 1600
    by_type = client.get(f"/dashboard/remaining/type/{pla.id}", headers=headers).json()
    assert by_type["total_remaining_weight"] == 1600
    by_color = client.get("/dashboard/remaining/color/WHITE", headers=headers).json()
    assert by_color == {"group": "color", "key": "WHITE", "total_remaining_weight": 600}
    assert client.get("/dashboard/remaining/color/Blue", headers=headers).json()["total_remaining_weight"] == 0


def test_brand_palette_over_http(client, headers, other_headers, brand):
    url = f"/brands/{brand.id}/colors/"
    resp = client.post(url, json={"color_name": " Jade White ", "color_hex": "#F0F0E8"}, headers=headers)
    assert resp.status_code == 201
    color = resp.json()
    assert color["color_name"] == "Jade White"

    assert client.post(url, json={"color_name": "Jade White"}, headers=headers).status_code == 409
    assert client.post(url, json={"color_name": "Bad", "color_hex": "#FFF"}, headers=headers).status_code == 400
    assert client.get(url, headers=other_headers).status_code == 404

    resp = client.post(f"{url}import", json={"colors": [
        {"color_name": "Jade White"}, {"color_name": "Black", "color_hex": "nope"}, {"color_name": " "},
    ]}, headers=headers)
    assert resp.json() == {"created": 1}

    palette = client.get(url, headers=headers).json()
    assert [(c["color_name"], c["color_hex"]) for c in palette] == [("Black", "#CCCCCC"), ("Jade White", "#F0F0E8")]

    resp = client.patch(f"{url}{color['id']}", json={"color_hex": "#FFFFFF"}, headers=headers)
    assert resp.json()["color_hex"] == "#FFFFFF"
    assert client.delete(f"{url}{color['id']}", headers=headers).json() == {"message": "Color deleted successfully"}
    assert client.delete(f"{url}{color['id']}", headers=headers).status_code == 404


def test_maintenance_records_over_http(client, headers, other_headers):
    resp = client.post("/maintenance/", json={
        "maintenance_date": "2026-04-02", "maintenance_type": "lubrication", "description": "  Z rods  ",
    }, headers=headers)
    assert resp.status_code == 201
    record = resp.json()
    assert record["description"] == "Z rods"

    client.post("/maintenance/", json={"maintenance_date": "2026-05-10", "maintenance_type": "cleaning"}, headers=headers)
    assert client.post("/maintenance/", json={
        "maintenance_date": "2026-05-10", "maintenance_type": "painting",
    }, headers=headers).status_code == 422

    listed = client.get("/maintenance/", headers=headers).json()
    assert [r["maintenance_type"] for r in listed] == ["cleaning", "lubrication"]
    assert client.get("/maintenance/", headers=other_headers).json() == []
    assert client.get(f"/maintenance/{record['id']}", headers=other_headers).status_code == 404

    resp = client.patch(f"/maintenance/{record['id']}", json={"maintenance_type": "calibration"}, headers=headers)
    assert resp.json()["maintenance_type"] == "calibration"
    assert resp.json()["maintenance_date"] == "2026-04-02"

    assert client.delete(f"/maintenance/{record['id']}", headers=headers).status_code == 200
    assert client.get(f"/maintenance/{record['id']}", headers=headers).status_code == 404

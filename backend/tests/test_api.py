import pytest

from app.main import app
from conftest import BASE_CONFIG, login


async def test_health(client):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


# ── Auth ──

async def test_login_and_session(client):
    headers = await login(client, "alice")

    resp = await client.get("/api/auth/session", headers=headers)

    assert resp.status_code == 200
    assert resp.json() == {"id": 2, "username": "alice", "role": "user"}


async def test_login_rejects_bad_password(client):
    resp = await client.post("/api/auth/login", json={"username": "alice", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json() == {"message": "Invalid credentials"}


async def test_login_rejects_disabled_account(client):
    resp = await client.post("/api/auth/login", json={"username": "ghost", "password": "ghost-password"})
    assert resp.status_code == 403


async def test_session_requires_token(client):
    resp = await client.get("/api/auth/session")
    assert resp.status_code == 401
    assert resp.json()["message"] == "Not authenticated"

    resp = await client.get("/api/auth/session", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401


async def test_password_change_is_admin_only(client, user_headers, admin_headers):
    body = {"new_password": "a-much-longer-secret"}
    assert (await client.put("/api/auth/password", json=body, headers=user_headers)).status_code == 403

    resp = await client.put("/api/auth/password", json=body, headers=admin_headers)
    assert resp.status_code == 200

    resp = await client.post("/api/auth/login", json={"username": "admin", "password": "a-much-longer-secret"})
    assert resp.status_code == 200


# ── Catalog ──

async def test_catalog_reads_are_public(client):
    resp = await client.get("/api/tours")
    assert resp.status_code == 200
    tours = resp.json()
    assert tours[0]["code"] == "KYO-01"
    assert tours[0]["basePrice"] == 50000
    assert tours[0]["durationDays"] == 2

    resp = await client.get("/api/hotels/1")
    assert resp.json()["doubleRoomPrice"] == 22000

    resp = await client.get("/api/vehicles/42")
    assert resp.status_code == 404
    assert resp.json() == {"message": "Vehicle not found"}


async def test_admin_manages_tours(client, admin_headers):
    new_tour = {
        "name": "Hokkaido Snow", "code": "HKD-01", "location": "Sapporo",
        "durationDays": 5, "basePrice": 95000,
    }
    resp = await client.post("/api/tours", json=new_tour, headers=admin_headers)
    assert resp.status_code == 201
    tour_id = resp.json()["id"]

    resp = await client.put(f"/api/tours/{tour_id}", json={"basePrice": 99000}, headers=admin_headers)
    assert resp.json()["basePrice"] == 99000
    assert resp.json()["name"] == "Hokkaido Snow"

    resp = await client.post("/api/tours", json=new_tour, headers=admin_headers)
    assert resp.status_code == 400

    resp = await client.delete(f"/api/tours/{tour_id}", headers=admin_headers)
    assert resp.json() == {"message": "Tour deleted successfully"}
    assert (await client.get(f"/api/tours/{tour_id}")).status_code == 404


async def test_catalog_writes_require_admin(client, user_headers):
    resp = await client.delete("/api/tours/1", headers=user_headers)
    assert resp.status_code == 403

    resp = await client.delete("/api/tours/1")
    assert resp.status_code == 401


async def test_invalid_catalog_payload_is_400(client, admin_headers):
    resp = await client.post(
        "/api/seasons",
        json={"name": "Bad", "startMonth": 13, "endMonth": 2},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert "startMonth" in resp.json()["message"]


@pytest.mark.parametrize("month, name", [(4, "Cherry Blossom"), (12, "Winter Holidays"), (1, "Winter Holidays")])
async def test_season_for_month(client, month, name):
    resp = await client.get(f"/api/seasons/month/{month}")
    assert resp.status_code == 200
    assert resp.json()["name"] == name


async def test_season_for_month_errors(client):
    assert (await client.get("/api/seasons/month/13")).status_code == 400
    resp = await client.get("/api/seasons/month/7")
    assert resp.status_code == 404
    assert resp.json() == {"message": "No season found for this month"}


async def test_special_services_upsert(client, admin_headers):
    resp = await client.put(
        "/api/special-services/onsenPass",
        json={"label": "Onsen day pass", "surcharge": 2500, "sortOrder": 9},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["code"] == "onsenPass"

    codes = [r["code"] for r in (await client.get("/api/special-services")).json()]
    assert codes == ["geishaShow", "teaCeremony", "sumoShow", "airportTransfer", "onsenPass"]


# ── Currency ──

async def test_rates_endpoint(client):
    resp = await client.get("/api/currency/rates")
    body = resp.json()
    assert body["base"] == "JPY"
    assert body["rates"]["USD"] == 0.0067
    assert body["source"] == "live"
    assert "fetchedAt" in body


async def test_convert_endpoint(client):
    resp = await client.get("/api/currency/convert", params={"amount": 90000, "from": "JPY", "to": "usd"})
    body = resp.json()
    assert body["convertedAmount"] == pytest.approx(603.0)
    assert body["toCurrency"] == "USD"
    assert body["formatted"] == "$603.00"


async def test_convert_rejects_unknown_currency(client):
    resp = await client.get("/api/currency/convert", params={"amount": 1, "to": "GBP"})
    assert resp.status_code == 400
    assert resp.json() == {"message": "Unsupported currency: GBP"}


# ── Calculator ──

async def test_calculator_quote(client, user_headers):
    body = dict(BASE_CONFIG, currency="USD", specialServices={"airportTransfer": True})

    resp = await client.post("/api/calculator", json=body, headers=user_headers)

    assert resp.status_code == 200
    result = resp.json()
    assert result["currency"] == "USD"
    assert result["rawTotalJpy"] == 93000
    assert result["total"] == pytest.approx(623.1)
    assert [item["code"] for item in result["lineItems"]] == [
        "tour", "vehicle", "driver", "service_airportTransfer",
    ]


async def test_calculator_requires_login(client):
    resp = await client.post("/api/calculator", json=BASE_CONFIG)
    assert resp.status_code == 401


async def test_calculator_reports_unresolvable_input(client, user_headers):
    resp = await client.post("/api/calculator", json=dict(BASE_CONFIG, tourId=99), headers=user_headers)
    assert resp.status_code == 400
    assert resp.json() == {"message": "Tour 99 not found"}


async def test_calculator_rejects_malformed_body(client, user_headers):
    resp = await client.post("/api/calculator", json={"tourId": 1}, headers=user_headers)
    assert resp.status_code == 400
    assert "message" in resp.json()


# ── Wizard ──

async def test_wizard_requires_client_id(client, user_headers):
    resp = await client.get("/api/wizard", headers=user_headers)
    assert resp.status_code == 400


async def test_wizard_flow(client):
    headers = await login(client, "alice", client_id="kiosk-1")
    headers["X-Client-Id"] = "kiosk-1"

    state = (await client.get("/api/wizard", headers=headers)).json()
    assert state["currentStep"] == 1
    assert state["isValid"] is False

    state = (await client.post("/api/wizard/next", headers=headers)).json()
    assert state["currentStep"] == 1

    await client.patch("/api/wizard/data", json={
        "startDate": "2025-10-01", "endDate": "2025-10-03",
        "tourId": 1, "vehicleId": 1, "participants": 2, "currency": "USD",
    }, headers=headers)
    for _ in range(5):
        state = (await client.post("/api/wizard/next", headers=headers)).json()
    assert state["currentStep"] == 6

    state = (await client.post("/api/wizard/submit", headers=headers)).json()
    assert state["calculation"]["total"] == pytest.approx(603.0)
    assert state["isCalculating"] is False

    state = (await client.post("/api/wizard/prev", headers=headers)).json()
    assert state["currentStep"] == 5

    resp = await client.delete("/api/wizard", headers=headers)
    assert resp.json() == {"discarded": True}


async def test_wizard_submit_before_summary_is_400(client):
    headers = await login(client, "alice")
    headers["X-Client-Id"] = "kiosk-2"

    resp = await client.post("/api/wizard/submit", headers=headers)

    assert resp.status_code == 400
    assert resp.json()["message"] == "Complete all steps before requesting a quote"


async def test_wizard_rejects_bad_field(client):
    headers = await login(client, "alice")
    headers["X-Client-Id"] = "kiosk-3"

    resp = await client.patch("/api/wizard/data", json={"participants": "many"}, headers=headers)

    assert resp.status_code == 400


async def test_customer_switch_on_shared_device_clears_wizard(client):
    alice = await login(client, "alice", client_id="shared")
    alice["X-Client-Id"] = "shared"
    await client.patch("/api/wizard/data", json={"tourId": 1, "startDate": "2025-10-01", "endDate": "2025-10-02"},
                       headers=alice)
    await client.post("/api/wizard/next", headers=alice)

    bob = await login(client, "bob", client_id="shared")
    bob["X-Client-Id"] = "shared"
    state = (await client.get("/api/wizard", headers=bob)).json()

    assert state["currentStep"] == 1
    assert state["formData"]["tourId"] == 0
    assert state["formData"]["startDate"] is None


async def test_admin_wizard_survives_relogin(client):
    admin = await login(client, "admin", client_id="office")
    admin["X-Client-Id"] = "office"
    await client.patch("/api/wizard/data", json={"tourId": 1}, headers=admin)

    admin = await login(client, "admin", client_id="office")
    admin["X-Client-Id"] = "office"
    state = (await client.get("/api/wizard", headers=admin)).json()

    assert state["formData"]["tourId"] == 1


async def test_logout_clears_device_wizard(client):
    alice = await login(client, "alice", client_id="kiosk-4")
    alice["X-Client-Id"] = "kiosk-4"
    await client.patch("/api/wizard/data", json={"tourId": 1}, headers=alice)

    await client.post("/api/auth/logout", headers=alice)
    state = (await client.get("/api/wizard", headers=alice)).json()

    # Monitor recorded the logout; seeing alice again is another change
    assert state["formData"]["tourId"] == 0


async def test_logout_requires_token(client):
    admin = await login(client, "admin", client_id="office")
    admin["X-Client-Id"] = "office"
    await client.patch("/api/wizard/data", json={"tourId": 1}, headers=admin)

    resp = await client.post("/api/auth/logout", headers={"X-Client-Id": "office"})
    assert resp.status_code == 401

    state = (await client.get("/api/wizard", headers=admin)).json()
    assert state["formData"]["tourId"] == 1


async def test_logout_from_another_user_leaves_device_alone(client):
    alice = await login(client, "alice", client_id="kiosk-5")
    alice["X-Client-Id"] = "kiosk-5"
    await client.patch("/api/wizard/data", json={"tourId": 1}, headers=alice)

    bob = await login(client, "bob")
    bob["X-Client-Id"] = "kiosk-5"
    resp = await client.post("/api/auth/logout", headers=bob)
    assert resp.status_code == 200

    state = (await client.get("/api/wizard", headers=alice)).json()
    assert state["formData"]["tourId"] == 1


def test_catalog_operation_ids_are_unique():
    operation_ids = [
        operation["operationId"]
        for path in app.openapi()["paths"].values()
        for operation in path.values()
    ]
    assert len(operation_ids) == len(set(operation_ids))
    assert {"list_tours", "get_vehicle", "create_hotel", "update_guide", "delete_season"} <= set(operation_ids)

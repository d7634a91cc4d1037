from datetime import date

import pytest

from smartwater.domain.chemicals.service import usage_total_cost
from smartwater.models import Maintenance, User


def _vendor(admin_client, **extra):
    response = admin_client.post("/api/vendors", json={"name": "Pool Supply Co", **extra})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def visit(db, org, pool_client):
    maintenance = Maintenance(
        organization_id=org.id, client_id=pool_client.id, scheduled_date=date(2025, 6, 3), type="cleaning"
    )
    db.add(maintenance)
    db.commit()
    db.refresh(maintenance)
    return maintenance


# ============================================================================
# Vendors
# ============================================================================


def test_vendor_crud(admin_client):
    vendor = _vendor(admin_client, category="chemicals", phone="(555) 123-4567", email="Sales@PoolSupply.com")
    assert vendor["phone"] == "+15551234567"
    assert vendor["isActive"] is True

    url = f"/api/vendors/{vendor['id']}"
    updated = admin_client.patch(url, json={"contactName": "Dana", "name": None}).json()
    assert updated["contactName"] == "Dana"
    assert updated["name"] == "Pool Supply Co"

    assert admin_client.delete(url).json() == {"success": True}
    assert admin_client.get(url).status_code == 404


def test_vendor_validation(admin_client):
    assert admin_client.post("/api/vendors", json={"name": " "}).status_code == 422
    assert admin_client.post("/api/vendors", json={"name": "X", "category": "snacks"}).status_code == 422


def test_active_filter(admin_client):
    _vendor(admin_client, name="Active Supply")
    _vendor(admin_client, name="Old Supply", isActive=False)

    assert [v["name"] for v in admin_client.get("/api/vendors", params={"active": True}).json()] == ["Active Supply"]
    assert [v["name"] for v in admin_client.get("/api/vendors", params={"active": False}).json()] == ["Old Supply"]
    assert len(admin_client.get("/api/vendors").json()) == 2


def test_vendor_communications(admin_client, admin):
    vendor = _vendor(admin_client)
    url = f"/api/vendors/{vendor['id']}/communications"

    logged = admin_client.post(url, json={"channel": "call", "subject": "Shock backorder"})
    assert logged.status_code == 201
    link = logged.json()
    assert (link["entityType"], link["entityId"]) == ("vendor", vendor["id"])
    assert link["occurredAt"] is not None
    assert link["createdBy"] == admin.id

    assert [c["subject"] for c in admin_client.get(url).json()] == ["Shock backorder"]
    assert admin_client.post(url, json={"channel": "fax"}).status_code == 422


def test_vendors_are_scoped(admin_client, login, make_user, other_org):
    vendor = _vendor(admin_client)
    outsider = login(make_user(other_org, "org_admin", "outsider"))
    assert outsider.get(f"/api/vendors/{vendor['id']}").status_code == 404
    assert outsider.get("/api/vendors").json() == []


# ============================================================================
# Chemical prices
# ============================================================================


def test_usage_total_cost():
    assert usage_total_cost(2.5, 1299) == 3248
    assert usage_total_cost(1, None) is None


def test_price_list(admin_client):
    vendor = _vendor(admin_client)
    price = admin_client.post(
        "/api/chemical-prices",
        json={"chemicalType": "shock", "name": "Cal-hypo 1lb", "unit": "lb", "unitCost": 450, "vendorId": vendor["id"]},
    )
    assert price.status_code == 201
    assert price.json()["vendorName"] == "Pool Supply Co"

    price_id = price.json()["id"]
    updated = admin_client.patch(f"/api/chemical-prices/{price_id}", json={"unitCost": 500, "unit": None}).json()
    assert (updated["unitCost"], updated["unit"]) == (500, "lb")

    assert len(admin_client.get("/api/chemical-prices").json()) == 1
    assert admin_client.delete(f"/api/chemical-prices/{price_id}").json() == {"success": True}
    assert admin_client.patch(f"/api/chemical-prices/{price_id}", json={"unitCost": 1}).status_code == 404


def test_price_rejects_foreign_vendor_and_bad_values(admin_client, login, make_user, other_org):
    outsider = login(make_user(other_org, "org_admin", "outsider"))
    foreign = _vendor(outsider)

    response = admin_client.post(
        "/api/chemical-prices",
        json={"chemicalType": "acid", "name": "Muriatic", "unit": "gal", "unitCost": 900, "vendorId": foreign["id"]},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Vendor not found in your organization"

    bad = {"chemicalType": "acid", "name": "Muriatic", "unit": "gal", "unitCost": -1}
    assert admin_client.post("/api/chemical-prices", json=bad).status_code == 422
    bad = {"chemicalType": "lemonade", "name": "X", "unit": "gal", "unitCost": 1}
    assert admin_client.post("/api/chemical-prices", json=bad).status_code == 422


# ============================================================================
# Chemical usage
# ============================================================================


def test_usage_falls_back_to_active_price(admin_client, visit):
    admin_client.post(
        "/api/chemical-prices",
        json={"chemicalType": "liquid_chlorine", "name": "Old", "unit": "gal", "unitCost": 500},
    )
    admin_client.post(
        "/api/chemical-prices",
        json={"chemicalType": "liquid_chlorine", "name": "Current", "unit": "gal", "unitCost": 650},
    )
    admin_client.post(
        "/api/chemical-prices",
        json={"chemicalType": "liquid_chlorine", "name": "Retired", "unit": "gal", "unitCost": 999, "isActive": False},
    )

    response = admin_client.post(
        "/api/chemical-usage", json={"maintenanceId": visit.id, "chemicalType": "liquid_chlorine", "amount": 1.5}
    )
    assert response.status_code == 201
    usage = response.json()
    assert (usage["unit"], usage["unitCost"], usage["totalCost"]) == ("gal", 650, 975)

    listed = admin_client.get(f"/api/chemical-usage/maintenance/{visit.id}").json()
    assert [u["id"] for u in listed] == [usage["id"]]


def test_usage_with_explicit_cost(admin_client):
    work_order = admin_client.post("/api/work-orders", json={"title": "Green to clean"}).json()
    usage = admin_client.post(
        "/api/chemical-usage",
        json={"workOrderId": work_order["id"], "chemicalType": "algaecide", "amount": 2, "unit": "qt", "unitCost": 1200},
    ).json()
    assert usage["totalCost"] == 2400
    assert len(admin_client.get(f"/api/chemical-usage/work-order/{work_order['id']}").json()) == 1


def test_usage_without_price_has_no_cost(admin_client, visit):
    usage = admin_client.post(
        "/api/chemical-usage",
        json={"maintenanceId": visit.id, "chemicalType": "salt", "amount": 40, "unit": "lb"},
    ).json()
    assert usage["unitCost"] is None
    assert usage["totalCost"] is None


def test_usage_requires_a_link_and_unit(admin_client, visit):
    response = admin_client.post("/api/chemical-usage", json={"chemicalType": "acid", "amount": 1, "unit": "gal"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Either maintenanceId or workOrderId is required"

    response = admin_client.post(
        "/api/chemical-usage", json={"maintenanceId": visit.id, "chemicalType": "acid", "amount": 1}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Unit is required"

    response = admin_client.post(
        "/api/chemical-usage", json={"maintenanceId": 9999, "chemicalType": "acid", "amount": 1, "unit": "gal"}
    )
    assert response.status_code == 404

    response = admin_client.post(
        "/api/chemical-usage", json={"maintenanceId": visit.id, "chemicalType": "acid", "amount": 0, "unit": "gal"}
    )
    assert response.status_code == 422


def test_technician_records_usage(technician, login, db, visit):
    tech = login(db.get(User, technician.user_id))
    response = tech.post(
        "/api/chemical-usage",
        json={"maintenanceId": visit.id, "chemicalType": "tablets", "amount": 3, "unit": "each"},
    )
    assert response.status_code == 201
    assert tech.post(
        "/api/chemical-prices", json={"chemicalType": "tablets", "name": "X", "unit": "each", "unitCost": 1}
    ).status_code == 201

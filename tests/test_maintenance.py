from smartwater.models import User
from smartwater.models_business import ChemicalUsage
from smartwater.models_work_order import WorkOrder


def _order(admin_client, pool_client, **extra):
    body = {
        "clientId": pool_client.id,
        "title": "Weekly cleaning",
        "frequency": "weekly",
        "dayOfWeek": 2,
        "startDate": "2025-06-01",
        "endDate": "2025-06-30",
        "address": "12 Palm Way",
        **extra,
    }
    response = admin_client.post("/api/maintenance-orders", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def test_maintenance_visit_lifecycle(admin_client, pool_client, technician):
    created = admin_client.post(
        "/api/maintenances",
        json={"clientId": pool_client.id, "scheduledDate": "2025-06-03", "type": "chemical_balance"},
    )
    assert created.status_code == 201
    visit = created.json()
    assert visit["status"] == "scheduled"
    assert visit["completed"] is False

    assigned = admin_client.patch(f"/api/maintenances/{visit['id']}/technician", json={"technicianId": technician.id})
    assert assigned.json()["technicianId"] == technician.id

    done = admin_client.patch(f"/api/maintenances/{visit['id']}", json={"status": "completed"}).json()
    assert done["completed"] is True

    listed = admin_client.get("/api/maintenances", params={"status": "completed"}).json()
    assert [m["id"] for m in listed] == [visit["id"]]


def test_maintenance_date_filters(admin_client, pool_client):
    for day in ("2025-06-01", "2025-06-15", "2025-07-01"):
        admin_client.post("/api/maintenances", json={"clientId": pool_client.id, "scheduledDate": day, "type": "cleaning"})
    june = admin_client.get("/api/maintenances", params={"startDate": "2025-06-01", "endDate": "2025-06-30"}).json()
    assert len(june) == 2


def test_blank_maintenance_type_is_rejected(admin_client, pool_client):
    response = admin_client.post(
        "/api/maintenances", json={"clientId": pool_client.id, "scheduledDate": "2025-06-03", "type": "  "}
    )
    assert response.status_code == 422


def test_generate_visits_creates_work_orders(admin_client, pool_client, technician):
    order = _order(admin_client, pool_client, technicianId=technician.id)

    response = admin_client.post(f"/api/maintenance-orders/{order['id']}/generate-visits", json={})
    assert response.status_code == 201
    result = response.json()
    # Tuesdays in June 2025
    assert [v["scheduledDate"] for v in result["visits"]] == ["2025-06-03", "2025-06-10", "2025-06-17", "2025-06-24"]
    assert result["generated"] == 4
    first = result["visits"][0]
    assert first["category"] == "maintenance"
    assert first["status"] == "pending"
    assert first["technicianId"] == technician.id
    assert first["location"] == "12 Palm Way"

    again = admin_client.post(f"/api/maintenance-orders/{order['id']}/generate-visits", json={}).json()
    assert again["generated"] == 0

    visits = admin_client.get(f"/api/maintenance-orders/{order['id']}/work-orders").json()
    assert len(visits) == 4


def test_generate_visits_honours_requested_window(admin_client, pool_client):
    order = _order(admin_client, pool_client)
    result = admin_client.post(
        f"/api/maintenance-orders/{order['id']}/generate-visits",
        json={"fromDate": "2025-06-15", "toDate": "2025-06-20"},
    ).json()
    assert [v["scheduledDate"] for v in result["visits"]] == ["2025-06-17"]


def test_paused_order_cannot_generate_visits(admin_client, pool_client):
    order = _order(admin_client, pool_client, status="paused")
    response = admin_client.post(f"/api/maintenance-orders/{order['id']}/generate-visits", json={})
    assert response.status_code == 400
    assert response.json()["detail"] == "Can only generate visits for active maintenance orders"


def test_deleting_order_keeps_visits(admin_client, pool_client, db):
    order = _order(admin_client, pool_client)
    admin_client.post(f"/api/maintenance-orders/{order['id']}/generate-visits", json={})
    assert admin_client.delete(f"/api/maintenance-orders/{order['id']}").status_code == 200

    visits = db.query(WorkOrder).all()
    assert len(visits) == 4
    assert all(v.maintenance_order_id is None for v in visits)


def test_other_organization_gets_403_on_orders(admin_client, pool_client, login, make_user, other_org):
    order = _order(admin_client, pool_client)
    outsider = login(make_user(other_org, "org_admin", "outsider"))
    assert outsider.get(f"/api/maintenance-orders/{order['id']}").status_code == 403
    assert outsider.get("/api/maintenance-orders").json() == []


def test_repair_assignment_and_completion(admin_client, pool_client, technician):
    repair = admin_client.post(
        "/api/repairs",
        json={"clientId": pool_client.id, "issueType": "pump", "description": "Pump is loud", "priority": "high"},
    ).json()
    assert repair["status"] == "pending"

    assigned = admin_client.patch(f"/api/repairs/{repair['id']}", json={"technicianId": technician.id}).json()
    assert assigned["status"] == "assigned"
    assert assigned["technician"]["id"] == technician.id

    completed = admin_client.patch(f"/api/repairs/{repair['id']}", json={"status": "completed"}).json()
    assert completed["completionDate"] is not None


def test_repair_created_with_technician_starts_assigned(admin_client, pool_client, technician):
    repair = admin_client.post(
        "/api/repairs",
        json={"clientId": pool_client.id, "issueType": "leak", "description": "Drip", "technicianId": technician.id},
    ).json()
    assert repair["status"] == "assigned"


def test_client_repair_requests(db, login, make_user, org, pool_client, technician):
    from smartwater.models import Client

    portal_user = make_user(org, "client", "homeowner")
    own = Client(organization_id=org.id, user_id=portal_user.id, contact_name="Homeowner")
    db.add(own)
    db.commit()
    portal = login(portal_user)

    forbidden = portal.post(
        "/api/repairs", json={"clientId": pool_client.id, "issueType": "leak", "description": "Not mine"}
    )
    assert forbidden.status_code == 403

    response = portal.post(
        "/api/repairs",
        json={
            "clientId": own.id,
            "issueType": "leak",
            "description": "Water by the filter",
            "status": "in_progress",
            "technicianId": technician.id,
        },
    )
    assert response.status_code == 201
    assert response.json()["status"] == "pending"
    assert response.json()["technicianId"] is None
    assert len(portal.get("/api/repairs").json()) == 1


def test_technician_cannot_delete_maintenance(admin_client, pool_client, technician, login, db):
    visit = admin_client.post(
        "/api/maintenances", json={"clientId": pool_client.id, "scheduledDate": "2025-06-03", "type": "cleaning"}
    ).json()
    tech = login(db.get(User, technician.user_id))
    assert tech.delete(f"/api/maintenances/{visit['id']}").status_code == 403


def test_deleting_visit_removes_its_chemical_usage(admin_client, pool_client, db):
    visit = admin_client.post(
        "/api/maintenances", json={"clientId": pool_client.id, "scheduledDate": "2025-06-03", "type": "cleaning"}
    ).json()
    admin_client.post(
        "/api/chemical-usage",
        json={"maintenanceId": visit["id"], "chemicalType": "salt", "amount": 40, "unit": "lb"},
    )

    assert admin_client.delete(f"/api/maintenances/{visit['id']}").json() == {"success": True}
    assert db.query(ChemicalUsage).count() == 0


def test_client_portal_cannot_read_maintenance_orders(admin_client, pool_client, login, make_user, org):
    order = _order(admin_client, pool_client)
    portal = login(make_user(org, "client", "homeowner"))

    for path in ("", f"/{order['id']}", f"/{order['id']}/work-orders"):
        response = portal.get(f"/api/maintenance-orders{path}")
        assert response.status_code == 403
        assert response.json()["detail"] == "Staff access required"

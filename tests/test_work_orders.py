from datetime import date, datetime
from types import SimpleNamespace

import pytest

from smartwater.domain.work_orders.audit import diff_work_order, field_label
from smartwater.domain.work_orders.hours import calculate_duration, summarize_technician_hours
from smartwater.models import User
from smartwater.models_business import ChemicalUsage, InventoryItem
from smartwater.models_work_order import WorkOrder, WorkOrderTimeEntry


def _work_order(admin_client, **extra):
    response = admin_client.post("/api/work-orders", json={"title": "Replace filter", **extra})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def filter_cartridge(db, org):
    item = InventoryItem(organization_id=org.id, name="Filter cartridge", quantity=10, min_stock_level=2, unit_cost=4500)
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


# ============================================================================
# Pure helpers
# ============================================================================


def test_duration_rounds_and_subtracts_breaks():
    start = datetime(2025, 6, 3, 8, 0, 0)
    assert calculate_duration(start, datetime(2025, 6, 3, 10, 0, 40), 15) == 106
    assert calculate_duration(start, datetime(2025, 6, 3, 8, 30, 0)) == 30


def test_field_label():
    assert field_label("scheduledDate") == "scheduled date"
    assert field_label("title") == "title"


def test_diff_ignores_unchanged_and_unsent_fields():
    current = SimpleNamespace(
        title="Old", description=None, category="repair", status="pending", priority="medium",
        scheduled_date=date(2025, 6, 3), technician_id=None, project_id=None, project_phase_id=None,
        checklist=None, notes=None,
    )
    entries = diff_work_order(
        current,
        {"title": "Old", "status": "in_progress", "technicianId": 4, "scheduledDate": date(2025, 6, 4), "notes": ""},
    )
    by_field = {e["field_name"]: e for e in entries}
    assert set(by_field) == {"status", "technicianId", "scheduledDate"}
    assert by_field["status"]["description"] == 'Status changed from "pending" to "in_progress"'
    assert by_field["technicianId"]["action"] == "assigned"
    assert by_field["scheduledDate"]["old_value"] == "2025-06-03"
    assert by_field["scheduledDate"]["description"] == "Changed scheduled date"


def test_hours_summary_groups_by_technician():
    entry = SimpleNamespace(duration=90, clock_in=datetime(2025, 6, 3, 8), clock_out=datetime(2025, 6, 3, 9, 30))
    orders = [
        SimpleNamespace(id=1, title="A", technician_id=5, status="completed", maintenance_order_id=3,
                        scheduled_date=date(2025, 6, 3), time_entries=[entry]),
        SimpleNamespace(id=2, title="B", technician_id=5, status="in_progress", maintenance_order_id=None,
                        scheduled_date=None, time_entries=[]),
        SimpleNamespace(id=3, title="C", technician_id=None, status="pending", maintenance_order_id=None,
                        scheduled_date=date(2025, 6, 3), time_entries=[]),
        SimpleNamespace(id=4, title="D", technician_id=5, status="pending", maintenance_order_id=None,
                        scheduled_date=date(2025, 8, 1), time_entries=[]),
    ]
    (summary,) = summarize_technician_hours(orders, date(2025, 6, 1), date(2025, 6, 30))
    assert summary["technicianId"] == 5
    assert summary["totalMinutes"] == 90
    assert summary["completedOrders"] == 1
    assert summary["activeOrders"] == 1
    assert summary["maintenanceVisits"] == 1
    assert summary["workOrders"] == 1
    assert summary["entries"][0]["workOrderTitle"] == "A"


# ============================================================================
# API
# ============================================================================


def test_create_applies_defaults_and_logs_creation(admin_client, pool_client):
    work_order = _work_order(admin_client, clientId=pool_client.id)
    assert (work_order["category"], work_order["status"], work_order["priority"]) == ("other", "pending", "medium")

    logs = admin_client.get(f"/api/work-orders/{work_order['id']}/audit-logs").json()
    assert logs[0]["action"] == "created"
    assert logs[0]["description"] == 'Work order "Replace filter" created'
    assert logs[0]["userName"] == "Owner"


def test_update_writes_audit_trail(admin_client, technician):
    work_order = _work_order(admin_client)
    admin_client.patch(
        f"/api/work-orders/{work_order['id']}",
        json={"status": "in_progress", "technicianId": technician.id, "checklist": [{"text": "Backwash"}]},
    )
    actions = {log["action"] for log in admin_client.get(f"/api/work-orders/{work_order['id']}/audit-logs").json()}
    assert {"created", "status_changed", "assigned", "checklist_updated"} <= actions

    detail = admin_client.get(f"/api/work-orders/{work_order['id']}").json()
    assert detail["technician"]["id"] == technician.id
    assert detail["checklist"] == [{"text": "Backwash", "completed": False}]


def test_explicit_null_does_not_clear_required_fields(admin_client):
    work_order = _work_order(admin_client)
    updated = admin_client.patch(f"/api/work-orders/{work_order['id']}", json={"status": None, "title": None}).json()
    assert updated["status"] == "pending"
    assert updated["title"] == "Replace filter"


def test_phase_must_belong_to_project(admin_client, pool_client):
    first = admin_client.post(
        "/api/projects", json={"clientId": pool_client.id, "name": "One", "startDate": "2025-01-01"}
    ).json()
    second = admin_client.post(
        "/api/projects", json={"clientId": pool_client.id, "name": "Two", "startDate": "2025-01-01"}
    ).json()
    phase = admin_client.post("/api/project-phases", json={"projectId": second["id"], "name": "Dig"}).json()

    response = admin_client.post(
        "/api/work-orders", json={"title": "X", "projectId": first["id"], "projectPhaseId": phase["id"]}
    )
    assert response.status_code == 400


def test_filters(admin_client):
    _work_order(admin_client, category="repair")
    _work_order(admin_client, category="inspection", status="completed")
    assert len(admin_client.get("/api/work-orders", params={"category": "repair"}).json()) == 1
    assert len(admin_client.get("/api/work-orders", params={"status": "completed"}).json()) == 1


def test_notes(admin_client):
    work_order = _work_order(admin_client)
    admin_client.post(f"/api/work-orders/{work_order['id']}/notes", json={"content": "Gate was locked"})
    notes = admin_client.get(f"/api/work-orders/{work_order['id']}/notes").json()
    assert notes[0]["content"] == "Gate was locked"
    assert admin_client.post(f"/api/work-orders/{work_order['id']}/notes", json={"content": " "}).status_code == 422


def test_part_items_move_inventory(admin_client, filter_cartridge, db):
    work_order = _work_order(admin_client)
    url = f"/api/work-orders/{work_order['id']}/items"

    item = admin_client.post(
        url,
        json={"description": "Cartridge", "quantity": 3, "unitPrice": 4500, "inventoryItemId": filter_cartridge.id},
    ).json()
    assert item["totalPrice"] == 13500
    db.refresh(filter_cartridge)
    assert filter_cartridge.quantity == 7

    admin_client.patch(f"{url}/{item['id']}", json={"quantity": 1})
    db.refresh(filter_cartridge)
    assert filter_cartridge.quantity == 9

    admin_client.delete(f"{url}/{item['id']}")
    db.refresh(filter_cartridge)
    assert filter_cartridge.quantity == 10


def test_labor_items_leave_inventory_alone(admin_client, filter_cartridge, db):
    work_order = _work_order(admin_client)
    admin_client.post(
        f"/api/work-orders/{work_order['id']}/items",
        json={"itemType": "labor", "description": "Install", "quantity": 2, "unitPrice": 8000,
              "inventoryItemId": filter_cartridge.id},
    )
    db.refresh(filter_cartridge)
    assert filter_cartridge.quantity == 10


def test_stock_never_goes_negative(admin_client, filter_cartridge, db):
    work_order = _work_order(admin_client)
    admin_client.post(
        f"/api/work-orders/{work_order['id']}/items",
        json={"description": "Lots", "quantity": 25, "unitPrice": 100, "inventoryItemId": filter_cartridge.id},
    )
    db.refresh(filter_cartridge)
    assert filter_cartridge.quantity == 0


def test_clock_in_and_out(admin_client, db):
    work_order = _work_order(admin_client)
    url = f"/api/work-orders/{work_order['id']}"

    response = admin_client.post(f"{url}/clock-out", json={})
    assert response.status_code == 400
    assert response.json()["detail"] == "No open time entry found. Please clock in first."

    entry = admin_client.post(f"{url}/clock-in", json={"notes": "Arrived"}).json()
    assert entry["clockOut"] is None

    closed = admin_client.post(f"{url}/clock-out", json={"breakMinutes": 0}).json()
    assert closed["id"] == entry["id"]
    assert closed["clockOut"] is not None
    assert closed["duration"] == 0
    assert closed["notes"] == "Arrived"


def test_manual_time_entry_duration(admin_client):
    work_order = _work_order(admin_client)
    url = f"/api/work-orders/{work_order['id']}/time-entries"
    entry = admin_client.post(
        url, json={"clockIn": "2025-06-03T08:00:00", "clockOut": "2025-06-03T11:00:00", "breakMinutes": 30}
    ).json()
    assert entry["duration"] == 150

    updated = admin_client.patch(f"{url}/{entry['id']}", json={"breakMinutes": 0}).json()
    assert updated["duration"] == 180


def test_technician_hours_summary(admin_client, technician, db):
    work_order = _work_order(admin_client, technicianId=technician.id, scheduledDate="2025-06-03")
    db.add(
        WorkOrderTimeEntry(
            work_order_id=work_order["id"],
            user_id=technician.user_id,
            clock_in=datetime(2025, 6, 3, 8),
            clock_out=datetime(2025, 6, 3, 9),
            duration=60,
        )
    )
    db.commit()

    summary = admin_client.get(
        "/api/work-orders/technician-hours/summary", params={"startDate": "2025-06-01", "endDate": "2025-06-30"}
    ).json()
    assert summary[0]["technicianId"] == technician.id
    assert summary[0]["totalMinutes"] == 60


def test_team_members(admin_client, make_user, org, other_org):
    work_order = _work_order(admin_client)
    url = f"/api/work-orders/{work_order['id']}/team"
    helper = make_user(org, "technician", "helper")

    member = admin_client.post(url, json={"userId": helper.id}).json()
    assert member["role"] == "helper"
    assert member["userEmail"] == "helper@example.com"

    outsider = make_user(other_org, "technician", "outsider")
    assert admin_client.post(url, json={"userId": outsider.id}).status_code == 400

    updated = admin_client.patch(f"{url}/{member['id']}", json={"role": "lead", "isActive": False}).json()
    assert (updated["role"], updated["isActive"]) == ("lead", False)
    assert admin_client.delete(f"{url}/{member['id']}").status_code == 200
    assert admin_client.get(url).json() == []


def test_client_portal_is_refused(login, make_user, org):
    portal = login(make_user(org, "client", "homeowner"))
    response = portal.get("/api/work-orders")
    assert response.status_code == 403
    assert response.json()["detail"] == "Staff access required"


def test_cross_organization_work_order_is_404(admin_client, login, make_user, other_org, db):
    work_order = _work_order(admin_client)
    outsider = login(make_user(other_org, "org_admin", "outsider"))
    assert outsider.get(f"/api/work-orders/{work_order['id']}").status_code == 404
    assert outsider.post(f"/api/work-orders/{work_order['id']}/clock-in", json={}).status_code == 404
    assert db.get(WorkOrder, work_order["id"]) is not None


def test_technician_can_work_orders(technician, login, db):
    tech = login(db.get(User, technician.user_id))
    assert tech.post("/api/work-orders", json={"title": "Site visit"}).status_code == 201


def test_delete_drops_chemical_usage_and_unlinks_invoices(admin_client, pool_client, db):
    work_order = _work_order(admin_client, clientId=pool_client.id)
    admin_client.post(
        "/api/chemical-usage",
        json={"workOrderId": work_order["id"], "chemicalType": "algaecide", "amount": 2, "unit": "qt"},
    )
    invoice = admin_client.post(
        "/api/invoices",
        json={"clientId": pool_client.id, "workOrderId": work_order["id"], "issueDate": "2025-06-01",
              "dueDate": "2025-06-30"},
    ).json()

    assert admin_client.delete(f"/api/work-orders/{work_order['id']}").json() == {"success": True}
    assert admin_client.get(f"/api/work-orders/{work_order['id']}").status_code == 404
    assert db.query(ChemicalUsage).count() == 0
    assert admin_client.get(f"/api/invoices/{invoice['id']}").json()["workOrderId"] is None


def test_part_must_reference_own_inventory(admin_client, db, other_org):
    foreign = InventoryItem(organization_id=other_org.id, name="Their cartridge", quantity=5)
    db.add(foreign)
    db.commit()

    work_order = _work_order(admin_client)
    response = admin_client.post(
        f"/api/work-orders/{work_order['id']}/items",
        json={"description": "Cartridge", "quantity": 1, "unitPrice": 4500, "inventoryItemId": foreign.id},
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Inventory item not found"


def test_list_omits_client_unless_hydrated(admin_client, pool_client):
    _work_order(admin_client, clientId=pool_client.id)

    plain = admin_client.get("/api/work-orders").json()[0]
    assert "client" not in plain
    hydrated = admin_client.get("/api/work-orders", params={"includeClient": True}).json()[0]
    assert hydrated["client"]["companyName"] == "Sunset HOA"
    assert hydrated["technician"] is None

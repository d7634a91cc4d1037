import pytest

from smartwater.domain.invoices.totals import calculate_invoice_totals, line_amount, parse_quantity
from smartwater.models import Client
from smartwater.models_business import InventoryItem


def _invoice(admin_client, client_id, **extra):
    payload = {"clientId": client_id, "issueDate": "2025-06-01", "dueDate": "2025-06-30", **extra}
    response = admin_client.post("/api/invoices", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


LINES = [
    {"description": "Labor", "quantity": "2", "unitPrice": 5000},
    {"description": "Chlorine tabs", "quantity": "1.5", "unitPrice": 1000},
]


# ============================================================================
# Totals
# ============================================================================


@pytest.mark.parametrize("raw, expected", [("2", 2.0), ("0.5", 0.5), ("0", 1.0), ("abc", 1.0), (None, 1.0)])
def test_parse_quantity(raw, expected):
    assert parse_quantity(raw) == expected


def test_line_amount_rounds_to_cents():
    assert line_amount("0.333", 1000) == 333


def test_percent_discount_replaces_flat_amount_and_tax_applies_after():
    totals = calculate_invoice_totals(
        [{"quantity": "2", "unit_price": 5000}, {"quantity": "1.5", "unit_price": 1000}],
        tax_rate="10",
        discount_percent="10",
        discount_amount=999,
    )
    assert totals == {"subtotal": 11500, "discount_amount": 1150, "tax_amount": 1035, "total": 11385}


def test_flat_discount_without_percent():
    totals = calculate_invoice_totals([{"quantity": "1", "unit_price": 10000}], "0", None, 2500)
    assert totals["total"] == 7500


# ============================================================================
# API
# ============================================================================


def test_create_computes_totals_and_numbers(admin_client, pool_client):
    assert admin_client.get("/api/invoices/next-number").json() == {"invoiceNumber": "INV-00001"}

    invoice = _invoice(admin_client, pool_client.id, items=LINES, taxRate="10", discountPercent="10")
    assert invoice["invoiceNumber"] == "INV-00001"
    assert invoice["status"] == "draft"
    assert (invoice["subtotal"], invoice["total"], invoice["amountDue"]) == (11500, 11385, 11385)
    assert [i["amount"] for i in invoice["items"]] == [10000, 1500]
    assert invoice["clientName"] == "Sunset HOA"

    assert admin_client.get("/api/invoices/next-number").json() == {"invoiceNumber": "INV-00002"}


@pytest.mark.parametrize(
    "missing, message",
    [("clientId", "Client is required"), ("issueDate", "Issue date is required"), ("dueDate", "Due date is required")],
)
def test_required_fields(admin_client, pool_client, missing, message):
    payload = {"clientId": pool_client.id, "issueDate": "2025-06-01", "dueDate": "2025-06-30"}
    payload.pop(missing)
    response = admin_client.post("/api/invoices", json=payload)
    assert response.status_code == 400
    assert response.json()["detail"] == message


def test_duplicate_number_conflicts(admin_client, pool_client):
    _invoice(admin_client, pool_client.id, invoiceNumber="2025-001")
    response = admin_client.post(
        "/api/invoices",
        json={"clientId": pool_client.id, "issueDate": "2025-06-01", "dueDate": "2025-06-30", "invoiceNumber": "2025-001"},
    )
    assert response.status_code == 409


def test_bad_quantity_rejected(admin_client, pool_client):
    response = admin_client.post(
        "/api/invoices",
        json={
            "clientId": pool_client.id,
            "issueDate": "2025-06-01",
            "dueDate": "2025-06-30",
            "items": [{"description": "X", "quantity": "-1", "unitPrice": 100}],
        },
    )
    assert response.status_code == 422


def test_lines_recalculate(admin_client, pool_client):
    invoice = _invoice(admin_client, pool_client.id, items=LINES[:1])
    url = f"/api/invoices/{invoice['id']}"

    item = admin_client.post(f"{url}/items", json={"description": "Filter", "unitPrice": 2500}).json()
    assert admin_client.get(url).json()["total"] == 12500

    admin_client.delete(f"{url}/items/{item['id']}")
    assert admin_client.get(url).json()["total"] == 10000

    updated = admin_client.patch(url, json={"discountAmount": 1000, "taxRate": "5"}).json()
    assert updated["total"] == 9450


def test_payments_drive_status(admin_client, pool_client):
    invoice = _invoice(admin_client, pool_client.id, items=LINES, taxRate="10", discountPercent="10")
    url = f"/api/invoices/{invoice['id']}"

    admin_client.post(f"{url}/payments", json={"amount": 5000, "paymentMethod": "check"})
    current = admin_client.get(url).json()
    assert (current["status"], current["amountPaid"], current["amountDue"]) == ("partial", 5000, 6385)

    final = admin_client.post(f"{url}/payments", json={"amount": 6385, "paymentMethod": "card"}).json()
    current = admin_client.get(url).json()
    assert current["status"] == "paid"
    assert current["amountDue"] == 0
    assert current["paidDate"] is not None
    assert len(current["payments"]) == 2

    admin_client.delete(f"{url}/payments/{final['id']}")
    current = admin_client.get(url).json()
    assert (current["status"], current["amountDue"], current["paidDate"]) == ("partial", 6385, None)


def test_removing_only_payment_reverts_to_sent(admin_client, pool_client):
    invoice = _invoice(admin_client, pool_client.id, items=LINES[:1])
    url = f"/api/invoices/{invoice['id']}"
    admin_client.post(f"{url}/send")
    payment = admin_client.post(f"{url}/payments", json={"amount": 100}).json()

    admin_client.delete(f"{url}/payments/{payment['id']}")
    assert admin_client.get(url).json()["status"] == "sent"


def test_removing_surplus_payment_keeps_invoice_paid(admin_client, pool_client):
    invoice = _invoice(admin_client, pool_client.id, items=[{"description": "Resurface", "unitPrice": 100000}])
    url = f"/api/invoices/{invoice['id']}"
    admin_client.post(f"{url}/payments", json={"amount": 100000})
    surplus = admin_client.post(f"{url}/payments", json={"amount": 50000}).json()
    paid_date = admin_client.get(url).json()["paidDate"]

    admin_client.delete(f"{url}/payments/{surplus['id']}")
    current = admin_client.get(url).json()
    assert (current["status"], current["amountPaid"], current["amountDue"]) == ("paid", 100000, 0)
    assert paid_date is not None
    assert current["paidDate"] == paid_date


def test_links_must_belong_to_organization(admin_client, pool_client, db, other_org):
    payload = {"clientId": pool_client.id, "issueDate": "2025-06-01", "dueDate": "2025-06-30"}
    response = admin_client.post("/api/invoices", json={**payload, "workOrderId": 9999})
    assert response.status_code == 404
    assert response.json()["detail"] == "Work order not found"

    foreign = InventoryItem(organization_id=other_org.id, name="Their pump", quantity=1)
    db.add(foreign)
    db.commit()
    lines = [{"description": "Pump", "unitPrice": 100, "inventoryItemId": foreign.id}]
    assert admin_client.post("/api/invoices", json={**payload, "items": lines}).status_code == 404


def test_payment_must_be_positive(admin_client, pool_client):
    invoice = _invoice(admin_client, pool_client.id)
    assert admin_client.post(f"/api/invoices/{invoice['id']}/payments", json={"amount": 0}).status_code == 422


def test_mark_overdue(admin_client, pool_client, login, make_user, org):
    overdue = _invoice(admin_client, pool_client.id, items=LINES[:1], dueDate="2020-01-01")
    _invoice(admin_client, pool_client.id, items=LINES[:1], dueDate="2020-01-01")  # still draft
    admin_client.post(f"/api/invoices/{overdue['id']}/send")

    assert admin_client.post("/api/invoices/mark-overdue").json() == {"success": True, "updated": 1}
    assert admin_client.get(f"/api/invoices/{overdue['id']}").json()["status"] == "overdue"

    staff = login(make_user(org, "office_staff", "frontdesk"))
    assert staff.post("/api/invoices/mark-overdue").status_code == 403


def test_inventory_deducted_once(admin_client, pool_client, db, org):
    stock = InventoryItem(organization_id=org.id, name="Pump seal", quantity=10, min_stock_level=0, unit_cost=1200)
    db.add(stock)
    db.commit()

    invoice = _invoice(
        admin_client,
        pool_client.id,
        items=[{"description": "Pump seal", "quantity": "3", "unitPrice": 2000, "inventoryItemId": stock.id}],
    )
    url = f"/api/invoices/{invoice['id']}"
    db.refresh(stock)
    assert stock.quantity == 10

    admin_client.post(f"{url}/send")
    db.refresh(stock)
    assert stock.quantity == 7

    admin_client.patch(url, json={"status": "draft"})
    admin_client.patch(url, json={"status": "sent"})
    db.refresh(stock)
    assert stock.quantity == 7


def test_other_organization_is_denied(admin_client, pool_client, login, make_user, other_org):
    invoice = _invoice(admin_client, pool_client.id)
    outsider = login(make_user(other_org, "org_admin", "outsider"))

    response = outsider.get(f"/api/invoices/{invoice['id']}")
    assert response.status_code == 403
    assert response.json()["detail"] == "Access denied"
    assert outsider.get("/api/invoices").json() == []


def test_client_sees_only_their_invoices(admin_client, pool_client, login, make_user, org, db):
    homeowner = make_user(org, "client", "homeowner")
    own = Client(organization_id=org.id, user_id=homeowner.id, contact_name="Homeowner")
    db.add(own)
    db.commit()

    mine = _invoice(admin_client, own.id)
    theirs = _invoice(admin_client, pool_client.id)

    portal = login(homeowner)
    assert [i["id"] for i in portal.get("/api/invoices").json()] == [mine["id"]]
    assert portal.get(f"/api/invoices/{theirs['id']}").status_code == 403
    assert portal.post(f"/api/invoices/{mine['id']}/payments", json={"amount": 100}).status_code == 403

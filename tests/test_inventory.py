from smartwater.models_business import Vendor


def _item(admin_client, **extra):
    response = admin_client.post("/api/inventory", json={"name": "Chlorine tabs", **extra})
    assert response.status_code == 201, response.text
    return response.json()


def test_create_defaults(admin_client):
    item = _item(admin_client)
    assert item["unit"] == "each"
    assert item["quantity"] == 0
    assert item["isActive"] is True
    assert item["isLowStock"] is True


def test_low_stock_listing(admin_client):
    _item(admin_client, name="Plenty", quantity=50, minStockLevel=5)
    _item(admin_client, name="At threshold", quantity=5, minStockLevel=5)
    _item(admin_client, name="Retired", quantity=0, minStockLevel=5, isActive=False)

    names = [i["name"] for i in admin_client.get("/api/inventory/low-stock").json()]
    assert names == ["At threshold"]


def test_filters_and_update(admin_client):
    item = _item(admin_client, category="chemicals", quantity=3)
    _item(admin_client, name="Pump seal", category="parts", isActive=False)

    assert [i["id"] for i in admin_client.get("/api/inventory", params={"category": "chemicals"}).json()] == [item["id"]]
    assert len(admin_client.get("/api/inventory", params={"activeOnly": True}).json()) == 1

    updated = admin_client.patch(f"/api/inventory/{item['id']}", json={"quantity": 12, "unitCost": 899}).json()
    assert (updated["quantity"], updated["unitCost"]) == (12, 899)


def test_negative_values_rejected(admin_client):
    assert admin_client.post("/api/inventory", json={"name": "X", "quantity": -1}).status_code == 422
    assert admin_client.post("/api/inventory", json={"name": "  "}).status_code == 422


def test_vendor_must_belong_to_organization(admin_client, db, org, other_org):
    foreign = Vendor(organization_id=other_org.id, name="Elsewhere Supply")
    own = Vendor(organization_id=org.id, name="Pool Supply Co")
    db.add_all([foreign, own])
    db.commit()

    response = admin_client.post("/api/inventory", json={"name": "Net", "vendorId": foreign.id})
    assert response.status_code == 400
    assert response.json()["detail"] == "Vendor not found"

    assert _item(admin_client, vendorId=own.id)["vendorId"] == own.id


def test_delete_and_isolation(admin_client, login, make_user, other_org):
    item = _item(admin_client)
    outsider = login(make_user(other_org, "org_admin", "outsider"))
    assert outsider.get(f"/api/inventory/{item['id']}").status_code == 404

    assert admin_client.delete(f"/api/inventory/{item['id']}").json() == {"success": True}
    assert admin_client.get(f"/api/inventory/{item['id']}").status_code == 404


def test_technician_cannot_create(login, make_user, org):
    tech = login(make_user(org, "technician", "tech2"))
    assert tech.get("/api/inventory").status_code == 200
    assert tech.post("/api/inventory", json={"name": "X"}).status_code == 403

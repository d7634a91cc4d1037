from smartwater.models import Client


def test_create_and_list_clients(admin_client):
    response = admin_client.post(
        "/api/clients",
        json={"companyName": "Sunset HOA", "email": "Board@Sunset.org", "phone": "(555) 222-3333", "poolSize": 20000},
    )
    assert response.status_code == 201
    created = response.json()
    assert created["email"] == "board@sunset.org"
    assert created["phone"] == "+15552223333"

    listed = admin_client.get("/api/clients").json()
    assert [c["id"] for c in listed] == [created["id"]]


def test_client_needs_a_name(admin_client):
    response = admin_client.post("/api/clients", json={"email": "nobody@example.com"})
    assert response.status_code == 400


def test_invalid_contract_type_is_422(admin_client):
    response = admin_client.post("/api/clients", json={"companyName": "X", "contractType": "lifetime"})
    assert response.status_code == 422


def test_search_filters_clients(admin_client):
    admin_client.post("/api/clients", json={"companyName": "Sunset HOA"})
    admin_client.post("/api/clients", json={"companyName": "Marina Club", "contractType": "commercial"})

    assert [c["companyName"] for c in admin_client.get("/api/clients", params={"search": "sun"}).json()] == ["Sunset HOA"]
    by_type = admin_client.get("/api/clients", params={"contractType": "commercial"}).json()
    assert [c["companyName"] for c in by_type] == ["Marina Club"]


def test_update_and_delete_client(admin_client, pool_client):
    response = admin_client.patch(f"/api/clients/{pool_client.id}", json={"notes": "Gate code 1234"})
    assert response.json()["notes"] == "Gate code 1234"
    assert response.json()["companyName"] == "Sunset HOA"

    assert admin_client.delete(f"/api/clients/{pool_client.id}").json()["success"] is True
    assert admin_client.get(f"/api/clients/{pool_client.id}").status_code == 404


def test_export_csv(admin_client, pool_client):
    response = admin_client.get("/api/clients/export")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.strip().splitlines()
    assert lines[0].startswith("ID,Company Name")
    assert "Sunset HOA" in lines[1]


def test_other_organization_cannot_see_client(login, make_user, other_org, pool_client):
    outsider = login(make_user(other_org, "org_admin", "outsider"))
    assert outsider.get("/api/clients").json() == []
    assert outsider.get(f"/api/clients/{pool_client.id}").status_code == 404
    assert outsider.patch(f"/api/clients/{pool_client.id}", json={"notes": "x"}).status_code == 404
    assert outsider.delete(f"/api/clients/{pool_client.id}").status_code == 404


def test_system_admin_sees_all_organizations(login, make_user, pool_client, other_org, db):
    db.add(Client(organization_id=other_org.id, company_name="Elsewhere"))
    db.commit()
    root = login(make_user(None, "system_admin", "root"))
    assert len(root.get("/api/clients").json()) == 2


def test_client_login_only_sees_own_record(db, login, make_user, org, pool_client):
    portal_user = make_user(org, "client", "homeowner")
    own = Client(organization_id=org.id, user_id=portal_user.id, contact_name="Homeowner")
    db.add(own)
    db.commit()

    portal = login(portal_user)
    assert [c["id"] for c in portal.get("/api/clients").json()] == [own.id]
    assert portal.get(f"/api/clients/{pool_client.id}").status_code == 403
    assert portal.post("/api/clients", json={"companyName": "Mine"}).status_code == 403


def test_technician_cannot_create_clients(login, technician, db):
    from smartwater.models import User

    tech_user = db.get(User, technician.user_id)
    response = login(tech_user).post("/api/clients", json={"companyName": "Nope"})
    assert response.status_code == 403
    assert response.json()["detail"]["required"] == {"resource": "clients", "action": "create"}


def test_linked_portal_user_must_be_in_organization(admin_client, make_user, other_org):
    stranger = make_user(other_org, "client", "stranger")
    response = admin_client.post("/api/clients", json={"companyName": "X", "userId": stranger.id})
    assert response.status_code == 400

from smartwater.models import User


def _project(admin_client, pool_client, **extra):
    body = {"clientId": pool_client.id, "name": "Resurface main pool", "startDate": "2025-03-01", **extra}
    response = admin_client.post("/api/projects", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def test_technician_crud(admin_client, make_user, org):
    user = make_user(org, "technician", "newtech")
    created = admin_client.post("/api/technicians", json={"userId": user.id, "specialization": "Heaters"})
    assert created.status_code == 201
    tech_id = created.json()["id"]

    assert admin_client.post("/api/technicians", json={"userId": user.id}).status_code == 409

    with_users = admin_client.get("/api/technicians-with-users").json()
    assert with_users[0]["user"]["name"] == "Newtech"

    updated = admin_client.patch(f"/api/technicians/{tech_id}", json={"active": False}).json()
    assert updated["active"] is False
    assert admin_client.delete(f"/api/technicians/{tech_id}").status_code == 200


def test_technician_user_must_be_in_organization(admin_client, make_user, other_org):
    stranger = make_user(other_org, "technician", "stranger")
    assert admin_client.post("/api/technicians", json={"userId": stranger.id}).status_code == 400


def test_project_lifecycle(admin_client, pool_client):
    project = _project(admin_client, pool_client, budget=1250000)
    assert project["status"] == "planning"
    assert project["budget"] == 1250000

    updated = admin_client.patch(f"/api/projects/{project['id']}", json={"status": "in_progress", "completion": 40})
    assert updated.json()["completion"] == 40

    assert admin_client.patch(f"/api/projects/{project['id']}", json={"completion": 140}).status_code == 422

    archived = admin_client.patch(f"/api/projects/{project['id']}", json={"isArchived": True}).json()
    assert archived["isArchived"] is True
    assert admin_client.get("/api/projects").json() == []
    assert len(admin_client.get("/api/projects", params={"includeArchived": True}).json()) == 1


def test_project_requires_client_in_organization(admin_client, db, other_org):
    from smartwater.models import Client

    foreign = Client(organization_id=other_org.id, company_name="Foreign")
    db.add(foreign)
    db.commit()
    response = admin_client.post(
        "/api/projects", json={"clientId": foreign.id, "name": "X", "startDate": "2025-01-01"}
    )
    assert response.status_code == 404


def test_phases_and_assignments(admin_client, pool_client, technician):
    project = _project(admin_client, pool_client)

    phase = admin_client.post(
        "/api/project-phases", json={"projectId": project["id"], "name": "Drain", "order": 1}
    ).json()
    admin_client.post("/api/project-phases", json={"projectId": project["id"], "name": "Plaster", "order": 2})
    phases = admin_client.get(f"/api/projects/{project['id']}/phases").json()
    assert [p["name"] for p in phases] == ["Drain", "Plaster"]

    done = admin_client.patch(f"/api/project-phases/{phase['id']}", json={"status": "completed", "percentComplete": 100})
    assert done.json()["status"] == "completed"

    assignment = admin_client.post(
        f"/api/projects/{project['id']}/assignments", json={"technicianId": technician.id, "role": "lead"}
    )
    assert assignment.status_code == 201
    duplicate = admin_client.post(f"/api/projects/{project['id']}/assignments", json={"technicianId": technician.id})
    assert duplicate.status_code == 409

    detail = admin_client.get(f"/api/projects/{project['id']}").json()
    assert len(detail["phases"]) == 2
    assert detail["assignments"][0]["role"] == "lead"

    removed = admin_client.delete(f"/api/projects/{project['id']}/assignments/{assignment.json()['id']}")
    assert removed.status_code == 200


def test_technician_may_view_but_not_create_projects(admin_client, login, pool_client, technician, db):
    _project(admin_client, pool_client)
    tech = login(db.get(User, technician.user_id))
    assert len(tech.get("/api/projects").json()) == 1
    response = tech.post("/api/projects", json={"clientId": pool_client.id, "name": "X", "startDate": "2025-01-01"})
    assert response.status_code == 403


def test_deleting_phase_and_project_keeps_work_orders(admin_client, pool_client):
    project = _project(admin_client, pool_client)
    phase = admin_client.post("/api/project-phases", json={"projectId": project["id"], "name": "Drain"}).json()
    job = admin_client.post(
        "/api/work-orders",
        json={"title": "Drain pool", "projectId": project["id"], "projectPhaseId": phase["id"]},
    ).json()
    second = admin_client.post(
        "/api/work-orders",
        json={"title": "Inspect shell", "projectId": project["id"], "projectPhaseId": phase["id"]},
    ).json()

    assert admin_client.delete(f"/api/project-phases/{phase['id']}").json() == {"success": True}
    relinked = admin_client.get(f"/api/work-orders/{job['id']}").json()
    assert relinked["projectPhaseId"] is None
    assert relinked["projectId"] == project["id"]

    assert admin_client.delete(f"/api/projects/{project['id']}").json() == {"success": True}
    for work_order_id in (job["id"], second["id"]):
        kept = admin_client.get(f"/api/work-orders/{work_order_id}")
        assert kept.status_code == 200
        assert kept.json()["projectId"] is None

import os

# Configure the app for an in-memory database before anything imports it
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CSRF_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest
from fastapi.testclient import TestClient

from smartwater.database import Base, SessionLocal, engine
from smartwater.main import app
from smartwater.models import Client, Organization, Technician, User
from smartwater.rate_limiter import login_rate_limit, register_rate_limit
from smartwater.security_utils import hash_password

PASSWORD = "password123"


async def _no_rate_limit():
    return None


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    app.dependency_overrides[login_rate_limit] = _no_rate_limit
    app.dependency_overrides[register_rate_limit] = _no_rate_limit
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def anon():
    return TestClient(app)


@pytest.fixture
def make_org(db):
    def _make(name="Blue Lagoon Pools"):
        org = Organization(name=name, slug=name.lower().replace(" ", "-"))
        db.add(org)
        db.commit()
        db.refresh(org)
        return org

    return _make


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(org, role="org_admin", username=None, password=PASSWORD, active=True):
        counter["n"] += 1
        username = username or f"{role}{counter['n']}"
        user = User(
            username=username,
            email=f"{username}@example.com",
            password=hash_password(password) if password else "",
            name=username.title(),
            role=role,
            organization_id=org.id if org else None,
            active=active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def login():
    def _login(user, password=PASSWORD):
        client = TestClient(app)
        response = client.post("/api/auth/login", json={"username": user.username, "password": password})
        assert response.status_code == 200, response.text
        return client

    return _login


@pytest.fixture
def org(make_org):
    return make_org()


@pytest.fixture
def other_org(make_org):
    return make_org("Crystal Waters")


@pytest.fixture
def admin(make_user, org):
    return make_user(org, "org_admin", "owner")


@pytest.fixture
def admin_client(login, admin):
    return login(admin)


@pytest.fixture
def pool_client(db, org):
    """A client record (the customer, not an HTTP client)"""
    record = Client(organization_id=org.id, company_name="Sunset HOA", contact_name="Dana Reyes", email="hoa@example.com")
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


@pytest.fixture
def technician(db, make_user, org):
    user = make_user(org, "technician", "tech")
    tech = Technician(user_id=user.id, organization_id=org.id, specialization="Pumps")
    db.add(tech)
    db.commit()
    db.refresh(tech)
    return tech

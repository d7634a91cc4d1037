from smartwater.models_communication import CommunicationProvider
from smartwater.security_utils import decrypt_secret, encrypt_secret

URL = "/api/communication-providers"

TWILIO = {
    "type": "twilio",
    "name": "Main line",
    "accountSid": "AC1234567890",
    "authToken": "super-secret-token",
    "phoneNumber": "+15551234567",
}


def _provider(admin_client, **overrides):
    response = admin_client.post(URL, json={**TWILIO, **overrides})
    assert response.status_code == 201, response.text
    return response.json()["provider"]


def test_encrypt_round_trip_and_bad_token():
    token = encrypt_secret("abc")
    assert token != "abc"
    assert decrypt_secret(token) == "abc"
    assert decrypt_secret("not-a-token") is None
    assert encrypt_secret(None) is None


def test_credentials_are_masked_and_encrypted(admin_client, db):
    provider = _provider(admin_client, settings={"region": "us1"})
    assert provider["accountSid"] == "AC123..."
    assert provider["authToken"] == "[MASKED]"
    assert provider["settings"] == "[MASKED]"
    assert provider["apiKey"] is None
    assert provider["isActive"] is True

    stored = db.get(CommunicationProvider, provider["id"])
    assert stored.auth_token != "super-secret-token"
    assert decrypt_secret(stored.auth_token) == "super-secret-token"


def test_single_default_per_type(admin_client):
    first = _provider(admin_client, isDefault=True)
    second = _provider(admin_client, name="Backup line", isDefault=True)
    email = _provider(
        admin_client,
        type="smtp",
        name="Office mail",
        email="office@example.com",
        apiKey="k",
        isDefault=True,
    )

    listing = admin_client.get(URL).json()
    assert listing["success"] is True
    assert listing["count"] == 3
    defaults = {p["id"]: p["isDefault"] for p in listing["providers"]}
    assert defaults == {first["id"]: False, second["id"]: True, email["id"]: True}


def test_create_validation(admin_client):
    response = admin_client.post(URL, json={"name": "No type"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid provider data. Type and name are required."

    assert admin_client.post(URL, json={"type": "pigeon", "name": "Coop"}).status_code == 400

    response = admin_client.post(URL, json={"type": "gmail", "name": "Inbox", "email": "a@example.com"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Gmail provider requires email, clientId, and clientSecret fields"


def test_update_keeps_secrets_when_blank(admin_client, db):
    provider = _provider(admin_client)
    url = f"{URL}/{provider['id']}"

    response = admin_client.patch(url, json={"name": "Renamed", "authToken": "", "isActive": False})
    body = response.json()
    assert body["success"] is True
    assert body["provider"]["name"] == "Renamed"
    assert body["provider"]["isActive"] is False

    stored = db.get(CommunicationProvider, provider["id"])
    db.refresh(stored)
    assert decrypt_secret(stored.auth_token) == "super-secret-token"

    admin_client.patch(url, json={"authToken": "rotated"})
    db.refresh(stored)
    assert decrypt_secret(stored.auth_token) == "rotated"


def test_delete(admin_client):
    provider = _provider(admin_client)
    response = admin_client.delete(f"{URL}/{provider['id']}")
    assert response.json() == {"success": True, "message": "Communication provider deleted"}
    assert admin_client.get(f"{URL}/{provider['id']}").status_code == 404


def test_admin_only_and_org_scoped(admin_client, login, make_user, org, other_org):
    provider = _provider(admin_client)

    staff = login(make_user(org, "office_staff", "frontdesk"))
    assert staff.get(URL).status_code == 403

    outsider = login(make_user(other_org, "org_admin", "outsider"))
    response = outsider.get(f"{URL}/{provider['id']}")
    assert response.status_code == 403
    assert response.json()["detail"] == "Access denied"
    assert outsider.get(URL).json()["count"] == 0

import pytest

from conftest import DEFAULT_DOMAIN, auth_header


@pytest.fixture
def member(client, create_domain, create_user):
    """Non-admin user with access to domains a and b; c exists but is off limits."""
    for name in ("a", "b", "c"):
        create_domain(name)
    user_id, token = create_user("member", domain="a,b")
    return user_id, auth_header(token)


def test_member_allowed_on_own_domains_only(client, member):
    _, headers = member

    assert client.get("/a/data", headers=headers).status_code == 200
    assert client.get("/b/data", headers=headers).status_code == 200

    response = client.get("/c/data", headers=headers)
    assert response.status_code == 403
    assert response.json() == {"error": "Access denied to this domain"}


def test_removing_domain_revokes_access(client, admin_token, member):
    user_id, headers = member

    response = client.delete(f"/admin/users/{user_id}/domains/a", headers=auth_header(admin_token))
    assert response.status_code == 200
    assert response.json()["domains"] == ["b"]

    assert client.get("/a/data", headers=headers).status_code == 403
    assert client.get("/b/data", headers=headers).status_code == 200


def test_adding_domain_grants_access(client, admin_token, member):
    user_id, headers = member
    assert client.get("/c/data", headers=headers).status_code == 403

    response = client.post(
        f"/admin/users/{user_id}/domains", json={"domain": "c"}, headers=auth_header(admin_token)
    )
    assert response.status_code == 200
    assert response.json()["domains"] == ["a", "b", "c"]
    assert client.get("/c/data", headers=headers).status_code == 200


def test_authentication_is_checked_before_domain(client):
    response = client.get("/does-not-exist/data")

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized, no token provided"}


def test_unknown_domain(client, member):
    _, headers = member

    response = client.get("/does-not-exist/data", headers=headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Domain not found"}


def test_admin_bypasses_membership(client, admin_token, member):
    # the seeded admin is only a member of the default domain
    response = client.post("/c/data", json={"key": "k", "value": "v"}, headers=auth_header(admin_token))
    assert response.status_code == 201


def test_upsert_is_idempotent(client, member):
    _, headers = member

    for _ in range(3):
        response = client.post("/a/data", json={"key": "k", "value": "v"}, headers=headers)
        assert response.status_code == 201
        assert response.json()["data"]["value"] == "v"

    data = client.get("/a/data", headers=headers).json()["data"]
    assert [(item["key"], item["value"]) for item in data] == [("k", "v")]


def test_record_shape(client, member):
    _, headers = member
    client.post("/a/data", json={"key": "k", "value": "v"}, headers=headers)

    record = client.get("/a/data/k", headers=headers).json()["data"]
    assert set(record) == {"key", "value", "isDeleted", "createdAt", "modifiedAt"}
    assert record["isDeleted"] is False


def test_delete_then_recreate(client, member):
    _, headers = member
    client.post("/a/data", json={"key": "k", "value": "v1"}, headers=headers)

    response = client.delete("/a/data/k", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Key deleted"}
    assert client.get("/a/data/k", headers=headers).status_code == 404
    assert client.get("/a/data", headers=headers).json()["data"] == []

    response = client.post("/a/data", json={"key": "k", "value": "v2"}, headers=headers)
    assert response.status_code == 201
    assert response.json()["data"]["isDeleted"] is False

    data = client.get("/a/data", headers=headers).json()["data"]
    assert [(item["key"], item["value"]) for item in data] == [("k", "v2")]


def test_delete_missing_key_is_404(client, member):
    _, headers = member

    response = client.delete("/a/data/missing", headers=headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Key not found"}


def test_delete_twice_is_404(client, member):
    _, headers = member
    client.post("/a/data", json={"key": "k", "value": "v"}, headers=headers)

    assert client.delete("/a/data/k", headers=headers).status_code == 200
    assert client.delete("/a/data/k", headers=headers).status_code == 404


def test_put_updates_live_key(client, member):
    _, headers = member
    client.post("/a/data", json={"key": "k", "value": "v"}, headers=headers)

    response = client.put("/a/data/k", json={"value": "w"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["key"] == "k"
    assert response.json()["data"]["value"] == "w"


def test_put_does_not_resurrect_deleted_key(client, member):
    _, headers = member
    client.post("/a/data", json={"key": "k", "value": "v"}, headers=headers)
    client.delete("/a/data/k", headers=headers)

    assert client.put("/a/data/k", json={"value": "w"}, headers=headers).status_code == 404
    assert client.get("/a/data/k", headers=headers).status_code == 404


def test_put_missing_key_is_404(client, member):
    _, headers = member
    assert client.put("/a/data/ghost", json={"value": "w"}, headers=headers).status_code == 404


def test_records_are_private_per_user(client, create_user, member):
    _, headers = member
    _, other_token = create_user("other", domain="a")
    client.post("/a/data", json={"key": "k", "value": "mine"}, headers=headers)

    response = client.get("/a/data/k", headers=auth_header(other_token))
    assert response.status_code == 404


def test_records_are_scoped_per_domain(client, member):
    _, headers = member
    client.post("/a/data", json={"key": "k", "value": "in-a"}, headers=headers)

    assert client.get("/b/data/k", headers=headers).status_code == 404


def test_post_requires_key(client, member):
    _, headers = member

    response = client.post("/a/data", json={"value": "v"}, headers=headers)
    assert response.status_code == 400
    assert response.json() == {"error": "key is required"}


def test_deleted_domain_becomes_unreachable(client, admin_token, member):
    _, headers = member
    client.post("/a/data", json={"key": "k", "value": "v"}, headers=headers)

    client.delete("/admin/domains/a", headers=auth_header(admin_token))

    assert client.get("/a/data", headers=headers).status_code == 404


def test_default_domain_is_seeded(client, admin_token):
    assert client.get(f"/{DEFAULT_DOMAIN}/data", headers=auth_header(admin_token)).status_code == 200

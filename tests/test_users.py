from conftest import auth, user_by_email

from teamspace.models.enums import GlobalRole

def test_update_profile_name(client, login):
    jwt = login("me@example.com")

    r = client.patch("/users/me", json={"name": "Me"}, headers=auth(jwt))
    assert r.status_code == 200
    assert r.json()["name"] == "Me"

def test_global_role_change_is_admin_only(client, db_session, login):
    admin_jwt = login("root@example.com", GlobalRole.admin)
    user_jwt = login("user@example.com")
    user_id = user_by_email(db_session, "user@example.com").id

    r = client.patch(f"/users/{user_id}/role", json={"role": "owner"}, headers=auth(user_jwt))
    assert r.status_code == 403

    r = client.patch(f"/users/{user_id}/role", json={"role": "OWNER"}, headers=auth(admin_jwt))
    assert r.status_code == 200, r.text
    assert r.json()["role"] == "owner"

    # the new role applies on the next request
    r = client.post("/projects", json={"name": "solo"}, headers=auth(user_jwt))
    assert r.status_code == 200, r.text

def test_org_creation_requires_global_owner_or_admin(client, login):
    member_jwt = login("plain-member@example.com")
    r = client.post("/orgs", json={"name": "x"}, headers=auth(member_jwt))
    assert r.status_code == 403
    assert r.json()["code"] == "not_authorized"
    assert client.get("/orgs", headers=auth(member_jwt)).json() == []

    for email, role in (("gowner@example.com", GlobalRole.owner), ("gadmin@example.com", GlobalRole.admin)):
        r = client.post("/orgs", json={"name": email}, headers=auth(login(email, role)))
        assert r.status_code == 200, r.text

def test_registering_with_an_organization_promotes_to_owner(client, db_session):
    r = client.post(
        "/auth/request-link",
        json={"email": "founder@example.com", "organization": {"name": "  Founders  ", "allow_member_invite": True}},
    )
    assert r.status_code == 200, r.text
    jwt = client.post("/auth/redeem", json={"token": r.json()["token"]}).json()["access_token"]

    assert client.get("/users/me", headers=auth(jwt)).json()["role"] == "owner"

    orgs = client.get("/orgs", headers=auth(jwt)).json()
    assert [o["name"] for o in orgs] == ["Founders"]
    assert orgs[0]["settings"]["allow_member_invite"] is True

    members = client.get(f"/orgs/{orgs[0]['id']}/members", headers=auth(jwt)).json()
    assert [(m["email"], m["role"]) for m in members] == [("founder@example.com", "owner")]

def test_organization_payload_is_ignored_for_existing_accounts(client, login):
    jwt = login("existing@example.com")

    r = client.post("/auth/request-link", json={"email": "existing@example.com", "organization": {"name": "late"}})
    assert r.status_code == 200

    assert client.get("/users/me", headers=auth(jwt)).json()["role"] == "member"
    assert client.get("/orgs", headers=auth(jwt)).json() == []

def test_team_directory_lists_users(client, login):
    jwt = login("zed@example.com")
    login("amy@example.com")

    r = client.get("/users", headers=auth(jwt))
    assert r.status_code == 200
    assert [u["email"] for u in r.json()] == ["amy@example.com", "zed@example.com"]

    assert client.get("/users").status_code == 401

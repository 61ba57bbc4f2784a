import uuid

import pytest
from conftest import auth, user_by_email
from sqlalchemy.exc import IntegrityError

from teamspace.models.enums import Role
from teamspace.models.membership import Membership

def test_owner_removes_member(client, db_session, org_team):
    org_id, jwts, emails = org_team["org_id"], org_team["jwts"], org_team["emails"]
    member_id = user_by_email(db_session, emails["member"]).id

    r = client.delete(f"/orgs/{org_id}/members/{member_id}", headers=auth(jwts["owner"]))
    assert r.status_code == 200, r.text

    r = client.get(f"/orgs/{org_id}/members", headers=auth(jwts["owner"]))
    assert emails["member"] not in {m["email"] for m in r.json()}

    # removed members lose access immediately
    r = client.get(f"/orgs/{org_id}", headers=auth(jwts["member"]))
    assert r.status_code == 403

def test_owner_cannot_be_removed(client, db_session, org_team):
    org_id, jwts, emails = org_team["org_id"], org_team["jwts"], org_team["emails"]
    owner_id = user_by_email(db_session, emails["owner"]).id

    r = client.delete(f"/orgs/{org_id}/members/{owner_id}", headers=auth(jwts["owner"]))
    assert r.status_code == 409
    assert r.json()["code"] == "owner_protected"

def test_non_owners_cannot_remove(client, db_session, org_team):
    org_id, jwts, emails = org_team["org_id"], org_team["jwts"], org_team["emails"]
    member_id = user_by_email(db_session, emails["member"]).id

    for who in ("admin", "member", "outsider"):
        r = client.delete(f"/orgs/{org_id}/members/{member_id}", headers=auth(jwts[who]))
        assert r.status_code == 403, who

def test_remove_unknown_member_is_not_found(client, org_team):
    r = client.delete(
        f"/orgs/{org_team['org_id']}/members/{uuid.uuid4()}", headers=auth(org_team["jwts"]["owner"])
    )
    assert r.status_code == 404

def test_member_role_changes(client, db_session, org_team):
    org_id, jwts, emails = org_team["org_id"], org_team["jwts"], org_team["emails"]
    member_id = user_by_email(db_session, emails["member"]).id
    owner_id = user_by_email(db_session, emails["owner"]).id

    r = client.patch(f"/orgs/{org_id}/members/{member_id}/role", json={"role": "admin"}, headers=auth(jwts["admin"]))
    assert r.status_code == 403

    r = client.patch(f"/orgs/{org_id}/members/{member_id}/role", json={"role": "Admin"}, headers=auth(jwts["owner"]))
    assert r.status_code == 200, r.text
    assert r.json()["role"] == "admin"

    r = client.patch(f"/orgs/{org_id}/members/{member_id}/role", json={"role": "owner"}, headers=auth(jwts["owner"]))
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_role"

    r = client.patch(f"/orgs/{org_id}/members/{owner_id}/role", json={"role": "member"}, headers=auth(jwts["owner"]))
    assert r.status_code == 409
    assert r.json()["code"] == "owner_protected"

def test_members_listing_is_member_only(client, org_team):
    org_id, jwts = org_team["org_id"], org_team["jwts"]

    r = client.get(f"/orgs/{org_id}/members", headers=auth(jwts["member"]))
    assert r.status_code == 200
    assert sorted(m["role"] for m in r.json()) == ["admin", "member", "owner"]

    r = client.get(f"/orgs/{org_id}/members", headers=auth(jwts["outsider"]))
    assert r.status_code == 403

def test_membership_key_rejects_a_second_row(db_session, org_team):
    member_id = user_by_email(db_session, org_team["emails"]["member"]).id
    org_id = uuid.UUID(org_team["org_id"])
    # a fresh identity map, so the insert reaches the database
    db_session.expunge_all()

    db_session.add(Membership(user_id=member_id, org_id=org_id, role=Role.admin))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()

    assert db_session.get(Membership, {"user_id": member_id, "org_id": org_id}).role == Role.member

import uuid
from datetime import timedelta

from conftest import auth, uniq_email, user_by_email
from sqlalchemy import select

from teamspace.auth.tokens import as_utc, new_invitation_token, now_utc
from teamspace.models.enums import GlobalRole, InvitationStatus, Role
from teamspace.models.invitation import Invitation
from teamspace.models.membership import Membership

def invite(client, jwt: str, org_id: str, email: str, role: str = "member"):
    return client.post(f"/orgs/{org_id}/invites", json={"email": email, "role": role}, headers=auth(jwt))

def token_of(response) -> str:
    link = response.json()["invite_link"]
    assert link, response.text
    return link.rsplit("/", 1)[-1]

def expire(db_session, invitation_id) -> None:
    inv = db_session.get(Invitation, uuid.UUID(str(invitation_id)))
    inv.expires_at = now_utc() - timedelta(minutes=1)
    db_session.commit()

def test_invite_lookup_accept(client, db_session, org_team, login):
    org_id, jwts = org_team["org_id"], org_team["jwts"]
    email = uniq_email("invitee")

    r = invite(client, jwts["owner"], org_id, email, "admin")
    assert r.status_code == 200, r.text
    body = r.json()
    # smtp is not configured in tests, so the link comes back to the caller
    assert body["status"] == "pending"
    assert body["message"] == "invitation created (email not configured)"
    token = token_of(r)

    r = client.get(f"/invitations/{token}")
    assert r.status_code == 200, r.text
    assert r.json()["organization_name"] == "team-org"
    assert r.json()["role"] == "admin"
    assert r.json()["email"] == email

    invitee_jwt = login(email)
    r = client.post(f"/invitations/{token}/accept", headers=auth(invitee_jwt))
    assert r.status_code == 200, r.text
    assert r.json()["organization"]["id"] == org_id

    user = user_by_email(db_session, email)
    m = db_session.get(Membership, {"user_id": user.id, "org_id": uuid.UUID(org_id)})
    assert m is not None and m.role == Role.admin
    inv = db_session.scalar(select(Invitation).where(Invitation.token == token))
    assert inv.status == InvitationStatus.accepted

    # single use
    r = client.post(f"/invitations/{token}/accept", headers=auth(invitee_jwt))
    assert r.status_code == 409
    assert r.json()["code"] == "invitation_used_or_expired"

def test_accept_with_wrong_email_leaves_invitation_pending(client, db_session, org_team, login):
    org_id, jwts = org_team["org_id"], org_team["jwts"]
    r = invite(client, jwts["owner"], org_id, uniq_email("intended"))
    token = token_of(r)

    r = client.post(f"/invitations/{token}/accept", headers=auth(jwts["outsider"]))
    assert r.status_code == 403
    assert r.json()["code"] == "wrong_email"
    assert r.json()["detail"] == "This invitation was sent to a different email address"

    inv = db_session.scalar(select(Invitation).where(Invitation.token == token))
    assert inv.status == InvitationStatus.pending

def test_email_match_is_case_insensitive(client, org_team, login):
    org_id, jwts = org_team["org_id"], org_team["jwts"]
    email = uniq_email("mixed")
    token = token_of(invite(client, jwts["owner"], org_id, email.upper()))

    r = client.post(f"/invitations/{token}/accept", headers=auth(login(email)))
    assert r.status_code == 200, r.text

def test_duplicate_and_member_invites_conflict(client, org_team):
    org_id, jwts, emails = org_team["org_id"], org_team["jwts"], org_team["emails"]
    email = uniq_email("dup")

    assert invite(client, jwts["owner"], org_id, email).status_code == 200
    r = invite(client, jwts["owner"], org_id, email)
    assert r.status_code == 409
    assert r.json()["code"] == "already_invited"

    r = invite(client, jwts["owner"], org_id, emails["member"])
    assert r.status_code == 409
    assert r.json()["code"] == "already_member"

def test_expired_invitation_flips_on_read(client, db_session, org_team):
    org_id, jwts = org_team["org_id"], org_team["jwts"]
    r = invite(client, jwts["owner"], org_id, uniq_email("late"))
    invitation_id, token = r.json()["id"], token_of(r)
    expire(db_session, invitation_id)

    r = client.get(f"/invitations/{token}")
    assert r.status_code == 410
    assert r.json()["code"] == "invitation_expired"

    db_session.expire_all()
    assert db_session.get(Invitation, uuid.UUID(invitation_id)).status == InvitationStatus.expired

    # the second read sees a terminal status
    r = client.get(f"/invitations/{token}")
    assert r.status_code == 409

def test_reinvite_after_expiry_issues_new_invitation(client, db_session, org_team):
    org_id, jwts = org_team["org_id"], org_team["jwts"]
    email = uniq_email("again")
    first = invite(client, jwts["owner"], org_id, email)
    expire(db_session, first.json()["id"])

    second = invite(client, jwts["owner"], org_id, email)
    assert second.status_code == 200, second.text
    assert second.json()["id"] != first.json()["id"]

    db_session.expire_all()
    rows = db_session.scalars(select(Invitation).where(Invitation.email == email)).all()
    assert sorted(r.status.value for r in rows) == ["expired", "pending"]

def test_invite_permissions(client, db_session, org_team):
    org_id, jwts = org_team["org_id"], org_team["jwts"]

    assert invite(client, jwts["admin"], org_id, uniq_email("by-admin")).status_code == 200
    assert invite(client, jwts["member"], org_id, uniq_email("by-member")).status_code == 403
    assert invite(client, jwts["outsider"], org_id, uniq_email("by-outsider")).status_code == 403

    # owner is never grantable through an invitation
    r = invite(client, jwts["owner"], org_id, uniq_email("boss"), "owner")
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_role"

    r = client.patch(
        f"/orgs/{org_id}", json={"settings": {"allow_member_invite": True}}, headers=auth(jwts["owner"])
    )
    assert r.status_code == 200
    assert invite(client, jwts["member"], org_id, uniq_email("by-member")).status_code == 200

def test_invite_role_is_normalized(client, org_team):
    r = invite(client, org_team["jwts"]["owner"], org_team["org_id"], uniq_email("caps"), " ADMIN ")
    assert r.status_code == 200, r.text
    assert r.json()["role"] == "admin"

def test_sent_email_hides_link(client, org_team, monkeypatch):
    sent = []

    def fake_send(subject: str, body: str, to_email: str) -> bool:
        sent.append((subject, body, to_email))
        return True

    monkeypatch.setattr("teamspace.notify.email.send_email", fake_send)
    email = uniq_email("mailed")

    r = invite(client, org_team["jwts"]["owner"], org_team["org_id"], email)
    assert r.status_code == 200, r.text
    assert r.json()["invite_link"] is None
    assert r.json()["message"] == "invitation sent"

    assert len(sent) == 1
    subject, body, to_email = sent[0]
    assert to_email == email
    assert "team-org" in subject
    assert "/invite/" in body

def test_list_invitations_expires_stale_rows(client, db_session, org_team):
    org_id, jwts = org_team["org_id"], org_team["jwts"]
    r = invite(client, jwts["owner"], org_id, uniq_email("stale"))
    expire(db_session, r.json()["id"])
    invite(client, jwts["owner"], org_id, uniq_email("fresh"))

    r = client.get(f"/orgs/{org_id}/invitations", headers=auth(jwts["admin"]))
    assert r.status_code == 200
    assert sorted(i["status"] for i in r.json()) == ["expired", "pending"]

    r = client.get(f"/orgs/{org_id}/invitations", headers=auth(jwts["member"]))
    assert r.status_code == 403

def test_cancel_invitation_is_owner_only_and_org_scoped(client, org_team, login):
    org_id, jwts = org_team["org_id"], org_team["jwts"]
    invitation_id = invite(client, jwts["owner"], org_id, uniq_email("cancel")).json()["id"]

    r = client.delete(f"/orgs/{org_id}/invitations/{invitation_id}", headers=auth(jwts["admin"]))
    assert r.status_code == 403

    # an owner of another org cannot reach it through their own org id
    other_jwt = login(uniq_email("other-owner"), GlobalRole.owner)
    other_org = client.post("/orgs", json={"name": "other"}, headers=auth(other_jwt)).json()["id"]
    r = client.delete(f"/orgs/{other_org}/invitations/{invitation_id}", headers=auth(other_jwt))
    assert r.status_code == 404

    r = client.delete(f"/orgs/{org_id}/invitations/{invitation_id}", headers=auth(jwts["owner"]))
    assert r.status_code == 200
    r = client.get(f"/orgs/{org_id}/invitations", headers=auth(jwts["owner"]))
    assert r.json() == []

def test_unknown_token_is_not_found(client):
    r = client.get("/invitations/does-not-exist")
    assert r.status_code == 404

def test_invitation_tokens_do_not_collide():
    tokens = {new_invitation_token() for _ in range(2000)}
    assert len(tokens) == 2000
    assert all(len(t) == 64 for t in tokens)

def test_accept_expired_invitation(client, db_session, org_team, login):
    org_id, jwts = org_team["org_id"], org_team["jwts"]
    email = uniq_email("slow")
    r = invite(client, jwts["owner"], org_id, email)
    invitation_id, token = r.json()["id"], token_of(r)
    expire(db_session, invitation_id)

    invitee_jwt = login(email)
    r = client.post(f"/invitations/{token}/accept", headers=auth(invitee_jwt))
    assert r.status_code == 410

    db_session.expire_all()
    assert db_session.get(Invitation, uuid.UUID(invitation_id)).status == InvitationStatus.expired
    user = user_by_email(db_session, email)
    assert db_session.get(Membership, {"user_id": user.id, "org_id": uuid.UUID(org_id)}) is None

def test_acme_end_to_end(client, db_session, login):
    a_jwt = login("a@example.com", GlobalRole.owner)
    r = client.post("/orgs", json={"name": "Acme"}, headers=auth(a_jwt))
    assert r.status_code == 200
    org_id = r.json()["id"]

    r = invite(client, a_jwt, org_id, "b@example.com", "member")
    assert r.status_code == 200
    token = token_of(r)
    inv = db_session.scalar(select(Invitation).where(Invitation.token == token))
    assert inv.status == InvitationStatus.pending
    assert abs(as_utc(inv.expires_at) - as_utc(inv.created_at) - timedelta(days=7)) < timedelta(minutes=1)

    b_jwt = login("b@example.com")
    r = client.post(f"/invitations/{token}/accept", headers=auth(b_jwt))
    assert r.status_code == 200, r.text
    assert r.json()["organization"]["name"] == "Acme"

    r = client.get(f"/orgs/{org_id}/members", headers=auth(b_jwt))
    assert sorted((m["email"], m["role"]) for m in r.json()) == [
        ("a@example.com", "owner"),
        ("b@example.com", "member"),
    ]

    r = client.post(f"/invitations/{token}/accept", headers=auth(b_jwt))
    assert r.status_code == 409
    assert r.json()["code"] == "invitation_used_or_expired"

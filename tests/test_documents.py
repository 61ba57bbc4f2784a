from conftest import auth, user_by_email

from teamspace.models.enums import GlobalRole

def test_document_visibility(client, db_session, org_team, login):
    jwts, emails = org_team["jwts"], org_team["emails"]
    owner = auth(jwts["owner"])
    project_id = client.post("/projects", json={"name": "p", "org_id": org_team["org_id"]}, headers=owner).json()["id"]

    r = client.post(
        "/documents",
        json={"title": "kickoff", "project_id": project_id, "doc_type": "meeting", "tags": ["q3"]},
        headers=owner,
    )
    assert r.status_code == 200, r.text
    project_doc = r.json()["id"]

    # org members see project documents, outsiders do not
    r = client.get(f"/documents/{project_doc}", headers=auth(jwts["member"]))
    assert r.status_code == 200
    assert r.json()["doc_type"] == "meeting"
    r = client.get(f"/documents/{project_doc}", headers=auth(jwts["outsider"]))
    assert r.status_code == 403
    r = client.get("/documents", headers=auth(jwts["outsider"]))
    assert r.json() == []

    # a global admin sees everything
    admin_jwt = login("root@example.com", GlobalRole.admin)
    r = client.get(f"/documents/{project_doc}", headers=auth(admin_jwt))
    assert r.status_code == 200
    r = client.get("/documents", headers=auth(admin_jwt))
    assert [d["id"] for d in r.json()] == [project_doc]

def test_unscoped_documents_public_and_collaborators(client, db_session, login):
    author_jwt = login("author@example.com", GlobalRole.owner)
    collab_jwt = login("collab@example.com")
    reader_jwt = login("reader@example.com")
    collab_id = str(user_by_email(db_session, "collab@example.com").id)

    r = client.post("/documents", json={"title": "private", "collaborator_ids": [collab_id]}, headers=auth(author_jwt))
    assert r.status_code == 200, r.text
    private_doc = r.json()["id"]
    assert r.json()["collaborator_ids"] == [collab_id]

    r = client.post("/documents", json={"title": "open", "is_public": True}, headers=auth(author_jwt))
    public_doc = r.json()["id"]

    assert client.get(f"/documents/{private_doc}", headers=auth(collab_jwt)).status_code == 200
    assert client.get(f"/documents/{private_doc}", headers=auth(reader_jwt)).status_code == 403
    assert client.get(f"/documents/{public_doc}", headers=auth(reader_jwt)).status_code == 200

    # viewing is not editing
    r = client.patch(f"/documents/{public_doc}", json={"title": "mine"}, headers=auth(reader_jwt))
    assert r.status_code == 403
    r = client.delete(f"/documents/{private_doc}", headers=auth(collab_jwt))
    assert r.status_code == 403

    r = client.patch(f"/documents/{private_doc}", json={"content": "draft", "collaborator_ids": []}, headers=auth(author_jwt))
    assert r.status_code == 200
    assert r.json()["content"] == "draft"
    assert client.get(f"/documents/{private_doc}", headers=auth(collab_jwt)).status_code == 403

    r = client.delete(f"/documents/{private_doc}", headers=auth(author_jwt))
    assert r.status_code == 200
    assert client.get(f"/documents/{private_doc}", headers=auth(author_jwt)).status_code == 404

def test_unscoped_document_requires_global_role(client, login):
    r = client.post("/documents", json={"title": "nope"}, headers=auth(login("plain@example.com")))
    assert r.status_code == 403

def test_unknown_collaborator_is_invalid_reference(client, login):
    jwt = login("author@example.com", GlobalRole.owner)
    r = client.post(
        "/documents",
        json={"title": "d", "collaborator_ids": ["00000000-0000-0000-0000-000000000000"]},
        headers=auth(jwt),
    )
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_reference"

def test_org_owner_manages_documents_it_does_not_own(client, db_session, org_team):
    org_id, jwts, emails = org_team["org_id"], org_team["jwts"], org_team["emails"]
    owner, admin, member = auth(jwts["owner"]), auth(jwts["admin"]), auth(jwts["member"])
    project_id = client.post("/projects", json={"name": "p", "org_id": org_id}, headers=owner).json()["id"]
    admin_id = str(user_by_email(db_session, emails["admin"]).id)
    assert client.patch(f"/projects/{project_id}", json={"owner_id": admin_id}, headers=owner).status_code == 200

    # the admin now owns the project, so it may write documents there
    r = client.post("/documents", json={"title": "plan", "project_id": project_id}, headers=admin)
    assert r.status_code == 200, r.text
    doc_id = r.json()["id"]
    assert r.json()["owner_id"] == admin_id

    r = client.patch(f"/documents/{doc_id}", json={"title": "by org owner"}, headers=owner)
    assert r.status_code == 200, r.text
    assert r.json()["title"] == "by org owner"
    assert client.patch(f"/documents/{doc_id}", json={"title": "x"}, headers=member).status_code == 403

    r = client.delete(f"/documents/{doc_id}", headers=owner)
    assert r.status_code == 200
    assert client.get(f"/documents/{doc_id}", headers=admin).status_code == 404

def test_document_in_deleted_project_keeps_only_direct_access(client, org_team):
    org_id, jwts = org_team["org_id"], org_team["jwts"]
    owner, member = auth(jwts["owner"]), auth(jwts["member"])
    project_id = client.post("/projects", json={"name": "p", "org_id": org_id}, headers=owner).json()["id"]
    doc_id = client.post("/documents", json={"title": "d", "project_id": project_id}, headers=owner).json()["id"]
    assert client.get(f"/documents/{doc_id}", headers=member).status_code == 200

    assert client.delete(f"/projects/{project_id}", headers=owner).status_code == 200

    # project-derived access is gone, direct ownership is not
    assert client.get(f"/documents/{doc_id}", headers=member).status_code == 403
    assert client.get("/documents", headers=member).json() == []
    assert client.get(f"/documents/{doc_id}", headers=owner).status_code == 200

    r = client.post("/documents", json={"title": "late", "project_id": project_id}, headers=owner)
    assert r.status_code == 404

from conftest import auth

from teamspace.models.enums import GlobalRole

def test_tenant_isolation_projects(client, login):
    a = login("a@example.com", GlobalRole.owner)
    b = login("b@example.com", GlobalRole.owner)

    r = client.post("/orgs", json={"name": "org-a"}, headers=auth(a))
    assert r.status_code == 200
    org_a = r.json()["id"]

    r = client.post("/orgs", json={"name": "org-b"}, headers=auth(b))
    assert r.status_code == 200

    r = client.post("/projects", json={"name": "p1", "org_id": org_a}, headers=auth(a))
    assert r.status_code == 200
    project_a = r.json()["id"]

    r = client.post("/tasks", json={"title": "t1", "project_id": project_a}, headers=auth(a))
    assert r.status_code == 200
    task_a = r.json()["id"]

    # b is not a member of org_a, should be blocked
    r = client.get(f"/orgs/{org_a}", headers=auth(b))
    assert r.status_code == 403
    r = client.get("/projects", headers=auth(b))
    assert r.json() == []

    # also block direct access attempts (even if you guessed the ids)
    r = client.get(f"/projects/{project_a}", headers=auth(b))
    assert r.status_code == 403
    r = client.patch(f"/projects/{project_a}", json={"name": "hacked"}, headers=auth(b))
    assert r.status_code == 403
    r = client.get(f"/tasks/{task_a}", headers=auth(b))
    assert r.status_code == 403
    r = client.patch(f"/tasks/{task_a}", json={"title": "hacked"}, headers=auth(b))
    assert r.status_code == 403
    r = client.post("/tasks", json={"title": "nope", "project_id": project_a}, headers=auth(b))
    assert r.status_code == 403
    r = client.post("/projects", json={"name": "nope", "org_id": org_a}, headers=auth(b))
    assert r.status_code == 403

def test_cross_org_write_routes_denied(client, login):
    owner_a = login("owner-a@example.com", GlobalRole.owner)
    owner_b = login("owner-b@example.com", GlobalRole.owner)
    org_a = client.post("/orgs", json={"name": "org-a"}, headers=auth(owner_a)).json()["id"]

    r = client.post(f"/orgs/{org_a}/invites", json={"email": "x@example.com", "role": "member"}, headers=auth(owner_b))
    assert r.status_code == 403
    r = client.patch(f"/orgs/{org_a}", json={"name": "nope"}, headers=auth(owner_b))
    assert r.status_code == 403
    r = client.delete(f"/orgs/{org_a}", headers=auth(owner_b))
    assert r.status_code == 403

def test_org_delete_soft_deletes_its_projects(client, login):
    owner = login("owner@example.com", GlobalRole.owner)
    org_id = client.post("/orgs", json={"name": "doomed"}, headers=auth(owner)).json()["id"]
    project_id = client.post("/projects", json={"name": "p", "org_id": org_id}, headers=auth(owner)).json()["id"]

    r = client.delete(f"/orgs/{org_id}", headers=auth(owner))
    assert r.status_code == 200

    r = client.get(f"/orgs/{org_id}", headers=auth(owner))
    assert r.status_code == 404
    r = client.get(f"/projects/{project_id}", headers=auth(owner))
    assert r.status_code == 404
    r = client.get("/orgs", headers=auth(owner))
    assert r.json() == []

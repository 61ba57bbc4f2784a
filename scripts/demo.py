from __future__ import annotations

import os
import time

import requests
from rich import print

BASE = os.getenv("API_BASE_URL", "http://127.0.0.1:8000")

def post(path: str, *, jwt: str | None = None, json: dict | None = None) -> requests.Response:
    headers = {"content-type": "application/json"}
    if jwt:
        headers["authorization"] = f"bearer {jwt}"
    return requests.post(f"{BASE}{path}", headers=headers, json=json, timeout=10)

def get(path: str, *, jwt: str | None = None) -> requests.Response:
    headers = {}
    if jwt:
        headers["authorization"] = f"bearer {jwt}"
    return requests.get(f"{BASE}{path}", headers=headers, timeout=10)

def login(email: str, organization: dict | None = None) -> str:
    body: dict = {"email": email}
    if organization:
        body["organization"] = organization
    r = post("/auth/request-link", json=body)
    r.raise_for_status()
    token = r.json()["token"]

    r2 = post("/auth/redeem", json={"token": token})
    r2.raise_for_status()
    return r2.json()["access_token"]

def wait_ready(timeout_s: float = 30.0) -> None:
    deadline = time.time() + timeout_s
    last_err: requests.RequestException | None = None

    while time.time() < deadline:
        try:
            r = get("/ready")
            if r.status_code == 200:
                return
        except requests.RequestException as e:
            last_err = e
        time.sleep(0.5)

    if last_err:
        raise RuntimeError(f"api not ready after {timeout_s}s (last error: {last_err})")
    raise RuntimeError(f"api not ready after {timeout_s}s")

def main() -> None:
    print("[bold]demo: auth -> create org -> invite -> accept -> project -> task -> member denied[/bold]")

    wait_ready()
    print("[green]ready ok[/green]")

    stamp = int(time.time())
    owner_email = f"owner+{stamp}@example.com"
    member_email = f"member+{stamp}@example.com"

    # registering with an organization makes the owner
    owner_jwt = login(owner_email, organization={"name": f"demo org {stamp}"})
    member_jwt = login(member_email)
    print("owner and member authed")

    r = get("/orgs", jwt=owner_jwt)
    r.raise_for_status()
    org_id = r.json()[0]["id"]
    print("created org:", org_id)

    r = post(f"/orgs/{org_id}/invites", jwt=owner_jwt, json={"email": member_email, "role": "member"})
    r.raise_for_status()
    invite_link = r.json()["invite_link"]
    if invite_link is None:
        raise RuntimeError("invitation was emailed; demo needs SMTP unset to read the link")
    token = invite_link.rsplit("/", 1)[-1]
    print("invited:", member_email)

    r = get(f"/invitations/{token}")
    r.raise_for_status()
    print("invitation details:", r.json()["organization_name"], r.json()["role"])

    r = post(f"/invitations/{token}/accept", jwt=member_jwt)
    r.raise_for_status()
    print("member joined:", r.json()["organization"]["name"])

    r = post("/projects", jwt=owner_jwt, json={"name": "demo project", "org_id": org_id})
    r.raise_for_status()
    project_id = r.json()["id"]
    print("created project:", project_id)

    r = post("/tasks", jwt=owner_jwt, json={"title": "demo task", "project_id": project_id})
    r.raise_for_status()
    print("created task:", r.json()["id"])

    # plain members can read but not write tasks
    r = get(f"/projects/{project_id}/tasks", jwt=member_jwt)
    r.raise_for_status()
    print("member listed tasks:", len(r.json()))

    r = post("/tasks", jwt=member_jwt, json={"title": "not allowed", "project_id": project_id})
    print("member task create ->", r.status_code, r.json().get("code"))

    print("[bold green]demo complete[/bold green]")

if __name__ == "__main__":
    main()

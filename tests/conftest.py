import os
import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from teamspace.config import settings
from teamspace.db import get_db
from teamspace.main import create_app
from teamspace.models import Base
from teamspace.models.enums import GlobalRole, Role
from teamspace.models.membership import Membership
from teamspace.models.user import User

def _engine():
    database_url = os.environ.get("DATABASE_URL", "sqlite+pysqlite://")
    if database_url.startswith("sqlite"):
        # one shared in-memory database, reachable from the test client's worker thread
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, pool_pre_ping=True)

@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    # no redis and no smtp in tests
    monkeypatch.setattr(settings, "rate_limit_enabled", False)
    monkeypatch.setattr(settings, "smtp_host", None)
    monkeypatch.setattr(settings, "smtp_from", None)

@pytest.fixture()
def db_session() -> Session:
    engine = _engine()
    Base.metadata.create_all(engine)

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session: Session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()

@pytest.fixture()
def client(db_session: Session) -> TestClient:
    app = create_app()

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    return TestClient(app)

def uniq_email(prefix: str) -> str:
    return f"{prefix}+{uuid.uuid4().hex[:10]}@example.com"

def auth(jwt: str) -> dict[str, str]:
    return {"authorization": f"bearer {jwt}"}

def _login(client, email: str) -> str:
    r = client.post("/auth/request-link", json={"email": email})
    assert r.status_code == 200, r.text
    token = r.json()["token"]

    r = client.post("/auth/redeem", json={"token": token})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]

def user_by_email(db: Session, email: str) -> User:
    user = db.scalar(select(User).where(User.email == email.lower()))
    assert user is not None
    return user

def add_membership(db: Session, email: str, org_id, role: Role) -> None:
    user = user_by_email(db, email)
    db.add(Membership(user_id=user.id, org_id=uuid.UUID(str(org_id)), role=role))
    db.commit()

@pytest.fixture()
def login(client, db_session):
    """Log in through the magic-link flow, optionally promoting the global role."""

    def _do(email: str, global_role: GlobalRole | None = None) -> str:
        jwt = _login(client, email)
        if global_role is not None:
            user = user_by_email(db_session, email)
            user.role = global_role
            db_session.commit()
        return jwt

    return _do

@pytest.fixture()
def org_team(client, db_session, login):
    """An org with an owner, an admin and a plain member, plus an outsider."""
    emails = {name: uniq_email(name) for name in ("owner", "admin", "member", "outsider")}
    jwts = {name: login(email) for name, email in emails.items() if name != "owner"}
    jwts["owner"] = login(emails["owner"], GlobalRole.owner)

    r = client.post("/orgs", json={"name": "team-org"}, headers=auth(jwts["owner"]))
    assert r.status_code == 200, r.text
    org_id = r.json()["id"]

    add_membership(db_session, emails["admin"], org_id, Role.admin)
    add_membership(db_session, emails["member"], org_id, Role.member)

    return {"org_id": org_id, "emails": emails, "jwts": jwts}

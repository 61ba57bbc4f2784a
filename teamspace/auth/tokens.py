import hashlib
import hmac
import secrets
import uuid
import jwt
from datetime import datetime, timedelta, timezone
from teamspace.config import settings

def now_utc() -> datetime:
    return datetime.now(timezone.utc)

# some drivers (sqlite) hand back naive datetimes; everything is stored as utc
def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

def new_magic_token() -> str:
    return secrets.token_urlsafe(32)

def hash_magic_token(token: str) -> str:
    msg = token.encode("utf-8")
    key = settings.magic_link_pepper.encode("utf-8")
    digest = hmac.new(key, msg, hashlib.sha256).hexdigest()
    return digest

def magic_link_expiry() -> datetime:
    return now_utc() + timedelta(minutes=settings.magic_link_expires_minutes)

# 32 random bytes, hex encoded; the token alone authenticates an invite lookup
def new_invitation_token() -> str:
    return secrets.token_hex(32)

def invitation_expiry(issued_at: datetime | None = None) -> datetime:
    base = issued_at or now_utc()
    return base + timedelta(days=settings.invitation_expires_days)

def invite_link(token: str) -> str:
    return f"{settings.frontend_url.rstrip('/')}/invite/{token}"

def issue_access_token(user_id: str | uuid.UUID) -> str:
    user_id = str(user_id)
    iat = now_utc()
    exp = iat + timedelta(minutes=settings.jwt_expires_minutes)
    payload = {
        "sub": user_id,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": int(iat.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")

def decode_access_token(token: str) -> dict:
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=["HS256"],
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
    )

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from teamspace.db import db_ping
from teamspace.redis_client import redis_ping

router = APIRouter(tags=["health"])

@router.get("/health")
def health() -> dict:
    return {"status": "ok"}

# readiness probe
@router.get("/ready")
def ready():
    checks = {"db": db_ping(), "redis": redis_ping()}
    ok = all(checks.values())

    # 200 only when the database and redis both answer, 503 with details otherwise
    body = {"status": "ok" if ok else "unready", "checks": checks}
    return JSONResponse(status_code=200 if ok else 503, content=body)

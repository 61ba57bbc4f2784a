import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from teamspace.config import settings
from teamspace.errors import AppError, ErrorKind
from teamspace.routes.auth import router as auth_router
from teamspace.routes.comments import router as comments_router
from teamspace.routes.documents import router as documents_router
from teamspace.routes.health import router as health_router
from teamspace.routes.invitations import router as invitations_router
from teamspace.routes.orgs import router as orgs_router
from teamspace.routes.projects import router as projects_router
from teamspace.routes.sprints import router as sprints_router
from teamspace.routes.tasks import router as tasks_router
from teamspace.routes.users import router as users_router

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.not_found: 404,
    ErrorKind.forbidden: 403,
    ErrorKind.unauthenticated: 401,
    ErrorKind.conflict: 409,
    ErrorKind.expired: 410,
    ErrorKind.invalid_reference: 400,
}

async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    status = STATUS_BY_KIND[exc.kind]
    logger.info("%s %s -> %d %s", request.method, request.url.path, status, exc.code)
    headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None
    return JSONResponse(
        status_code=status,
        content={"detail": exc.message, "code": exc.code},
        headers=headers,
    )

def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title=settings.app_name, version="0.1.0")
    app.add_exception_handler(AppError, app_error_handler)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(orgs_router)
    app.include_router(invitations_router)
    app.include_router(projects_router)
    app.include_router(tasks_router)
    app.include_router(sprints_router)
    app.include_router(comments_router)
    app.include_router(documents_router)
    return app

app = create_app()

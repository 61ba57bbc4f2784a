import logging
from datetime import datetime, timedelta

from sqlalchemy import and_, or_, update
from sqlalchemy.orm import Session

from teamspace.auth.tokens import now_utc
from teamspace.config import settings
from teamspace.models.project import Project

logger = logging.getLogger(__name__)

def auto_delete_window() -> timedelta:
    return timedelta(days=settings.project_auto_delete_days)

def calculate_auto_delete_at(base: datetime | None = None) -> datetime:
    return (base or now_utc()) + auto_delete_window()

# soft-deletes projects whose auto_delete_at passed, or that never got one and are older than the window
def soft_delete_expired_projects(db: Session, now: datetime | None = None) -> int:
    now = now or now_utc()
    cutoff = now - auto_delete_window()

    result = db.execute(
        update(Project)
        .where(
            Project.deleted_at.is_(None),
            or_(
                Project.auto_delete_at <= now,
                and_(Project.auto_delete_at.is_(None), Project.created_at <= cutoff),
            ),
        )
        .values(deleted_at=now)
        .execution_options(synchronize_session=False)
    )
    db.commit()

    count = result.rowcount or 0
    if count:
        logger.info("soft-deleted %d project(s) at %s", count, now.isoformat())
    return count

import logging

from teamspace.config import settings
from teamspace.db import SessionLocal
from teamspace.jobs.project_cleanup import soft_delete_expired_projects

logger = logging.getLogger("cleanup_projects")

# run from cron: soft-deletes projects past their auto-delete date
def main() -> int:
    logging.basicConfig(level=settings.log_level.upper())

    if not settings.project_auto_delete_enabled:
        logger.info("project auto-delete disabled (PROJECT_AUTO_DELETE_ENABLED=false), nothing to do")
        return 0

    with SessionLocal() as db:
        count = soft_delete_expired_projects(db)

    print(f"soft-deleted {count} project(s)")
    return count

if __name__ == "__main__":
    main()

"""
Background scheduler for periodic tasks.

An upload is written to disk before its row is inserted, so a crash in
between leaves a binary nothing points to. The sweep below removes such
objects once they are old enough that no upload can still be in flight.
"""

import logging
import time
from typing import Optional
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import sessionmaker
from fileshare.core.config import Settings
from fileshare.models.file import File
from fileshare.storage.local_storage import LocalStorage

logger = logging.getLogger(__name__)


def sweep_orphaned_uploads(
    session_factory: sessionmaker,
    storage: LocalStorage,
    grace_seconds: int,
) -> int:
    """Delete stored objects no file row references. Returns how many went."""
    db = session_factory()
    try:
        referenced = {filename for (filename,) in db.query(File.filename).all()}
    except Exception as e:
        logger.error(f"Error in sweep_orphaned_uploads: {str(e)}")
        return 0
    finally:
        db.close()

    cutoff = time.time() - grace_seconds
    deleted = 0
    for entry in storage.iter_objects():
        if entry.name in referenced:
            continue
        try:
            if entry.stat().st_mtime > cutoff:
                continue
            entry.unlink()
            deleted += 1
            logger.info(f"Deleted orphaned upload: {entry.name}")
        except OSError as e:
            logger.error(f"Error deleting orphaned upload {entry.name}: {str(e)}")

    if deleted > 0:
        logger.info(f"Sweep completed: Deleted {deleted} orphaned uploads")
    else:
        logger.info("Sweep completed: No orphaned uploads found")
    return deleted


def start_scheduler(
    settings: Settings,
    session_factory: sessionmaker,
    storage: LocalStorage,
) -> Optional[BackgroundScheduler]:
    """Start the sweep job, or return None when the interval is 0"""
    if settings.ORPHAN_SWEEP_INTERVAL_HOURS <= 0:
        logger.info("Orphaned upload sweep disabled")
        return None

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        sweep_orphaned_uploads,
        trigger=IntervalTrigger(hours=settings.ORPHAN_SWEEP_INTERVAL_HOURS),
        args=[session_factory, storage, settings.ORPHAN_GRACE_SECONDS],
        id="sweep_orphaned_uploads",
        name="Sweep orphaned uploads",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        f"Background scheduler started. Sweep scheduled every "
        f"{settings.ORPHAN_SWEEP_INTERVAL_HOURS} hours."
    )
    return scheduler


def stop_scheduler(scheduler: Optional[BackgroundScheduler]) -> None:
    if scheduler is not None and scheduler.running:
        scheduler.shutdown()
        logger.info("Background scheduler stopped.")

import logging
from sqlalchemy import or_
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from fileshare.core.config import Settings
from fileshare.core.database import Base
from fileshare.core.security import get_password_hash
# Imported so their tables are registered on Base.metadata
from fileshare.models.user import User, UserRole
from fileshare.models.file import File  # noqa: F401
from fileshare.models.comment import Comment  # noqa: F401

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_PASSWORD = "admin123"


def create_tables(engine: Engine) -> None:
    # Creates missing tables only; existing ones are left untouched
    # In production, use migrations (Alembic) instead of create_all
    Base.metadata.create_all(bind=engine)


def seed_admin(session_factory: sessionmaker, settings: Settings) -> bool:
    """
    Create the initial admin account on first startup.

    Skipped when the configured username or email is already taken, e.g.
    the seeded admin was deleted and someone registered with its address.
    Seeding never stops startup: a unique-constraint clash is logged instead.
    """
    if not settings.SEED_ADMIN:
        return False

    db = session_factory()
    try:
        existing = db.query(User).filter(
            or_(User.username == settings.ADMIN_USERNAME, User.email == settings.ADMIN_EMAIL)
        ).first()
        if existing:
            if existing.username != settings.ADMIN_USERNAME:
                logger.warning(
                    f"Admin email {settings.ADMIN_EMAIL} belongs to user "
                    f"'{existing.username}', skipping admin seed"
                )
            return False

        db.add(User(
            username=settings.ADMIN_USERNAME,
            email=settings.ADMIN_EMAIL,
            password=get_password_hash(settings.ADMIN_PASSWORD),
            role=UserRole.ADMIN.value,
        ))
        db.commit()
    except IntegrityError:
        # Another process seeded (or registered) the same account in between
        db.rollback()
        logger.warning("Admin account already exists, skipping admin seed")
        return False
    finally:
        db.close()

    logger.info(f"Seeded admin account '{settings.ADMIN_USERNAME}'")
    if settings.ADMIN_PASSWORD == DEFAULT_ADMIN_PASSWORD:
        logger.warning("Admin account uses the default password, change ADMIN_PASSWORD")
    return True

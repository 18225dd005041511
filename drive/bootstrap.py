# drive/bootstrap.py
import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from drive.core.config import Settings
from drive.core.security import hash_password
from drive.core.storage import ensure_user_dir
from drive.models.database import SessionLocal, init_db
from drive.models.user import User

logger = structlog.get_logger()


def ensure_default_admin(db: Session, settings: Settings) -> User | None:
    # returns the new admin, or None if the email is already taken
    email = settings.admin_email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        return None

    admin = User(
        name=settings.admin_name,
        email=email,
        password=hash_password(settings.admin_password),
        is_admin=True,
    )
    db.add(admin)
    try:
        db.commit()
    except IntegrityError:
        # another worker created it first
        db.rollback()
        return None
    db.refresh(admin)

    ensure_user_dir(settings.upload_dir, admin.id)
    logger.info("default_admin_created", user_id=admin.id, email=email)
    return admin


def startup(settings: Settings) -> None:
    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    init_db()

    if not settings.admin_bootstrap:
        return
    db = SessionLocal()
    try:
        ensure_default_admin(db, settings)
    except Exception as exc:
        logger.error("default_admin_create_failed", error=str(exc), exc_info=exc)
    finally:
        db.close()

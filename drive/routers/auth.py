import structlog
from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from drive.core.config import get_settings
from drive.core.errors import EmailAlreadyRegistered, InvalidCredentials
from drive.core.security import create_access_token, hash_password, verify_password
from drive.core.storage import ensure_user_dir
from drive.models.database import get_db
from drive.models.user import User
from drive.schemas import AuthResponse, LoginRequest, RegisterRequest

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = structlog.get_logger()


def issue_token(user: User) -> str:
    return create_access_token(user.id, user.email, bool(user.is_admin))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    # Check if user exists
    if db.query(User).filter(User.email == body.email).first():
        raise EmailAlreadyRegistered()

    user = User(name=body.name, email=body.email, password=hash_password(body.password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent registration for the same email
        db.rollback()
        raise EmailAlreadyRegistered()
    db.refresh(user)

    try:
        ensure_user_dir(get_settings().upload_dir, user.id)
    except OSError as exc:
        logger.error("user_dir_create_failed", user_id=user.id, error=str(exc))

    logger.info("user_registered", user_id=user.id)
    return {"message": "Registration successful", "token": issue_token(user), "user": user}


@router.post("/login", response_model=AuthResponse)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == body.email).first()

    # same answer for unknown email and wrong password
    if not user or not verify_password(user.password, body.password):
        logger.info("login_failed", email=body.email)
        raise InvalidCredentials()

    logger.info("login_succeeded", user_id=user.id)
    return {"message": "Login successful", "token": issue_token(user), "user": user}

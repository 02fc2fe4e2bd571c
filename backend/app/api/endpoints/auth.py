from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.auth import create_user_token, get_current_user
from app.core.federated import (
    FederatedIdentityError,
    GoogleIdentityVerifier,
    get_identity_verifier,
)
from app.core.logging_config import log_request_event
from app.core.security import get_password_hash, verify_password
from app.api.validation import require_fields, require_field
from app.models.user import User, USER_ROLE
from app.schemas.base import Message
from app.schemas.user import (
    GoogleLogin,
    TokenResponse,
    User as UserSchema,
    UserLogin,
    UserRegister,
)
from app.services import accounts
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def _commit_user(db: Session) -> None:
    """Commit, turning an active-user uniqueness clash into a 400."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="User already exists")


@router.post("/register", response_model=Message, status_code=status.HTTP_201_CREATED)
def register(
    request: Request, payload: UserRegister, db: Session = Depends(get_db)
):
    """Create a local account with a hashed password."""
    require_fields(
        [
            (payload.user_name, "Username"),
            (payload.email, "Email"),
            (payload.password, "Password"),
        ]
    )

    if accounts.email_taken(db, payload.email):
        raise HTTPException(status_code=400, detail="User already exists")

    if accounts.user_name_taken(db, payload.user_name):
        raise HTTPException(status_code=400, detail="Username already taken")

    user = User(
        user_name=payload.user_name,
        email=payload.email,
        password_hash=get_password_hash(payload.password),
        role=USER_ROLE,
    )
    db.add(user)
    _commit_user(db)
    db.refresh(user)

    log_request_event(
        request,
        event_type="auth.register.success",
        message="User registered",
        user_id=user.id,
        username=user.user_name,
        event_category="authentication",
    )

    return {"message": "User created successfully"}


@router.post("/login", response_model=TokenResponse)
def login(request: Request, payload: UserLogin, db: Session = Depends(get_db)):
    """Exchange a user name and password for a bearer token."""
    require_fields(
        [(payload.user_name, "Username"), (payload.password, "Password")]
    )

    user = accounts.find_by_user_name(db, payload.user_name)
    if not user:
        log_request_event(
            request,
            event_type="auth.login.failure",
            message="Login attempt for unknown user",
            level=logging.WARNING,
            username=payload.user_name,
            event_category="authentication",
            reason="unknown_user",
        )
        raise HTTPException(status_code=404, detail="User not found")

    if not verify_password(payload.password, user.password_hash):
        log_request_event(
            request,
            event_type="auth.login.failure",
            message="Login attempt with invalid credentials",
            level=logging.WARNING,
            user_id=user.id,
            username=user.user_name,
            event_category="authentication",
            reason="bad_credentials",
        )
        raise HTTPException(status_code=400, detail="Invalid credentials")

    log_request_event(
        request,
        event_type="auth.login.success",
        message="User logged in",
        user_id=user.id,
        username=user.user_name,
        event_category="authentication",
        auth_method="password",
    )

    return {"token": create_user_token(user), "user": user}


@router.post("/google-login", response_model=TokenResponse)
def google_login(
    request: Request,
    payload: GoogleLogin,
    db: Session = Depends(get_db),
    verifier: GoogleIdentityVerifier = Depends(get_identity_verifier),
):
    """Exchange a Google identity assertion for a bearer token."""
    require_field(payload.token, "Token")

    try:
        identity = verifier.verify(payload.token)
    except FederatedIdentityError as e:
        log_request_event(
            request,
            event_type="auth.google.failure",
            message=f"Google assertion rejected: {e}",
            level=logging.WARNING,
            event_category="authentication",
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Google token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = accounts.find_by_email(db, identity.email)
    if user and user.google_id and user.google_id != identity.subject:
        log_request_event(
            request,
            event_type="auth.google.failure",
            message="Google account does not match the account linked to this email",
            level=logging.WARNING,
            user_id=user.id,
            username=user.user_name,
            event_category="authentication",
            reason="google_subject_mismatch",
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Google token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if user:
        if not user.google_id:
            user.google_id = identity.subject
            _commit_user(db)
            db.refresh(user)
    else:
        user = User(
            user_name=accounts.derive_user_name(db, identity.name, identity.email),
            email=identity.email,
            password_hash=None,
            role=USER_ROLE,
            google_id=identity.subject,
        )
        db.add(user)
        _commit_user(db)
        db.refresh(user)
        logger.info(f"New user created from Google sign-in: {user.id}")

        log_request_event(
            request,
            event_type="auth.user.created",
            message="New user account created via Google sign-in",
            user_id=user.id,
            username=user.user_name,
            event_category="authentication",
            auth_provider="google",
        )

    log_request_event(
        request,
        event_type="auth.login.success",
        message="User logged in via Google",
        user_id=user.id,
        username=user.user_name,
        event_category="authentication",
        auth_method="google",
    )

    return {"token": create_user_token(user), "user": user}


@router.get("/me", response_model=UserSchema)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return current_user

# Overview: Password hashing, credential checks and staff account management.

"""
Authentication Service

WHY: Every action must be attributable. Uses bcrypt for password hashing.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, default 12)
- Minimum 6 characters required
- Session tokens managed separately (see session_service.py)
- Deactivated users cannot authenticate
"""

import bcrypt
from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import User
from ..permissions import ALL_ROLES, is_valid_role
from bakery.time_utils import utcnow

MIN_PASSWORD_LENGTH = 6

USER_MUTABLE_FIELDS = {"name", "email", "phone", "role", "is_active"}


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""


def validate_password_strength(password) -> None:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed hash in the database
        return False


def _validate_role(role) -> str:
    if not is_valid_role(role):
        raise ValidationError(
            f"Invalid role: {role}",
            details={"allowed": list(ALL_ROLES)},
        )
    return role


def _normalize_email(email) -> str:
    if not isinstance(email, str) or "@" not in email:
        raise ValidationError("A valid email is required")
    return email.strip().lower()


def create_user(
    *,
    name: str,
    email: str,
    password: str,
    role: str,
    phone: str | None = None,
) -> User:
    """
    Create new staff user with bcrypt password hashing.

    Raises:
        ValidationError: bad role, email or password
        ConflictError: email already registered
    """
    if not name or not str(name).strip():
        raise ValidationError("name is required")
    email = _normalize_email(email)
    _validate_role(role)

    if db.session.query(User.id).filter(User.email == email).first() is not None:
        raise ConflictError("Email is already registered")

    user = User(
        name=str(name).strip(),
        email=email,
        phone=phone,
        role=role,
        password_hash=hash_password(password),
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Email is already registered")
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Return the active user matching the credentials, or None.

    Updates last_login_at on success.
    """
    if not email or not password:
        return None

    user = db.session.query(User).filter(
        User.email == email.strip().lower(),
        User.is_active.is_(True),
    ).first()
    if user is None or not verify_password(password, user.password_hash):
        return None

    user.last_login_at = utcnow()
    db.session.commit()
    return user


def list_users() -> list[User]:
    return db.session.query(User).order_by(User.name.asc(), User.id.asc()).all()


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User not found: {user_id}")
    return user


def update_user(user_id: int, data: dict) -> User:
    """Partial update; a non-empty password is re-hashed."""
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    user = get_user(user_id)

    for key in data:
        if key not in USER_MUTABLE_FIELDS and key != "password":
            raise ValidationError(f"Field not allowed: {key}")

    if "role" in data:
        _validate_role(data["role"])
    if "email" in data:
        email = _normalize_email(data["email"])
        clash = db.session.query(User.id).filter(User.email == email, User.id != user.id).first()
        if clash is not None:
            raise ConflictError("Email is already registered")
        data = {**data, "email": email}
    if "name" in data and not str(data["name"] or "").strip():
        raise ValidationError("name cannot be blank")
    if "is_active" in data and not isinstance(data["is_active"], bool):
        raise ValidationError("is_active must be a boolean")

    for key, value in data.items():
        if key in USER_MUTABLE_FIELDS:
            setattr(user, key, value)

    if data.get("password"):
        user.password_hash = hash_password(data["password"])

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Email is already registered")
    return user


def deactivate_user(user_id: int, *, actor_id: int) -> User:
    """
    Deactivate instead of deleting: sales and movements keep their author.

    All of the user's sessions are revoked in the same commit.
    """
    from .session_service import revoke_user_sessions

    if user_id == actor_id:
        raise ConflictError("You cannot deactivate your own account")

    user = get_user(user_id)
    user.is_active = False
    revoke_user_sessions(user.id, reason="User deactivated", commit=False)
    db.session.commit()
    return user

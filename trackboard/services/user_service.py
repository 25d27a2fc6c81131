"""
User Service — signup, login, invite / set-password flow, admin CRUD.

Login is a three-way branch, not a pass/fail:

    no account with that e-mail      → NotFoundError           (404)
    account has no password yet      → LoginResult(setup_required)
    account active                   → verify → token or AuthenticationError (401)
"""

import logging
from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError

from trackboard.core.caller import Caller
from trackboard.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from trackboard.models import db
from trackboard.models.auth import ROLE_ADMIN, ROLE_USER, ROLES, User
from trackboard.models.project import Project
from trackboard.models.work_item import WorkItem, WorkItemComment
from trackboard.services.jwt_service import generate_token_for_user
from trackboard.utils.crypto import hash_password, verify_password
from trackboard.utils.validation import as_text

logger = logging.getLogger(__name__)


@dataclass
class LoginResult:
    user: User
    token: dict | None = None

    @property
    def setup_required(self) -> bool:
        return self.token is None


# ═══════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════
def normalize_email(email: str | None) -> str:
    """Validate syntax and return the lower-cased address."""
    email = as_text(email, "email")
    if not email:
        raise ValidationError("Email is required", details={"email": "required"})
    try:
        valid = validate_email(email, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email: {e}", details={"email": "invalid"})
    return valid.normalized.lower()


def _require(value, field: str, strip: bool = True) -> str:
    value = as_text(value, field, strip=strip)
    if not value:
        raise ValidationError(f"{field} is required", details={field: "required"})
    return value


def _check_role(role: str) -> str:
    if role not in ROLES:
        raise ValidationError(
            f"role must be one of: {', '.join(ROLES)}", details={"role": "invalid"}
        )
    return role


def _ensure_unique(username: str | None = None, email: str | None = None, exclude_id: str | None = None):
    if username is not None:
        q = User.query.filter_by(username=username)
        if exclude_id:
            q = q.filter(User.id != exclude_id)
        if q.first():
            raise ConflictError("User", "username", username)
    if email is not None:
        q = User.query.filter_by(email=email)
        if exclude_id:
            q = q.filter(User.id != exclude_id)
        if q.first():
            raise ConflictError("User", "email", email)


def _commit_user(user: User) -> User:
    """Commit, turning a unique-constraint race into a ConflictError."""
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("User", "username or email", f"{user.username}/{user.email}")
    return user


def _available_username(base: str) -> str:
    candidate = base
    n = 1
    while User.query.filter_by(username=candidate).first():
        n += 1
        candidate = f"{base}{n}"
    return candidate


# ═══════════════════════════════════════════════════════════════
# Authentication
# ═══════════════════════════════════════════════════════════════
def signup(username: str, email: str, password: str) -> User:
    """Register an account. The first account ever created becomes admin."""
    username = _require(username, "username")
    email = normalize_email(email)
    password = _require(password, "password", strip=False)

    _ensure_unique(username=username, email=email)

    role = ROLE_ADMIN if User.query.count() == 0 else ROLE_USER
    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=role,
    )
    db.session.add(user)
    _commit_user(user)
    logger.info("User signed up id=%s username=%s role=%s", user.id, user.username, user.role)
    return user


def login(email: str, password: str) -> LoginResult:
    """Resolve a login attempt to one of its three outcomes."""
    email = as_text(email, "email").lower()
    password = as_text(password, "password", strip=False)
    if not email:
        raise ValidationError("Email and password are required")

    user = get_user_by_email(email)
    if not user:
        raise NotFoundError("User")

    if not user.is_activated:
        logger.info("Login for invited user %s — password setup required", user.id)
        return LoginResult(user=user)

    if not verify_password(password, user.password_hash):
        logger.warning("Failed login for user %s", user.id)
        raise AuthenticationError("Invalid credentials")

    return LoginResult(user=user, token=generate_token_for_user(user))


def set_password(email: str, password: str) -> User:
    """Activate an invited account. Refused once a password exists."""
    email = as_text(email, "email").lower()
    if not email:
        raise ValidationError("Email is required", details={"email": "required"})
    password = _require(password, "password", strip=False)

    user = get_user_by_email(email)
    if not user:
        raise NotFoundError("User")
    if user.is_activated:
        raise ValidationError("Password has already been set for this account")

    user.password_hash = hash_password(password)
    db.session.commit()
    logger.info("Password set, account activated id=%s", user.id)
    return user


# ═══════════════════════════════════════════════════════════════
# Lookups
# ═══════════════════════════════════════════════════════════════
def get_user_by_id(user_id: str) -> User | None:
    return db.session.get(User, user_id)


def get_user_by_email(email: str) -> User | None:
    return User.query.filter_by(email=email.strip().lower()).first()


def get_user_or_404(user_id: str) -> User:
    user = get_user_by_id(user_id)
    if not user:
        raise NotFoundError("User", user_id)
    return user


def list_users() -> list[User]:
    return User.query.order_by(User.created_at, User.username).all()


# ═══════════════════════════════════════════════════════════════
# Admin CRUD
# ═══════════════════════════════════════════════════════════════
def invite_user(email: str, username: str | None = None, role: str = ROLE_USER) -> User:
    """Create an inactive account; the invitee sets a password later."""
    email = normalize_email(email)
    role = _check_role(role or ROLE_USER)
    _ensure_unique(email=email)

    username = as_text(username, "username")
    if username:
        _ensure_unique(username=username)
    else:
        username = _available_username(email.split("@", 1)[0])

    user = User(username=username, email=email, password_hash=None, role=role)
    db.session.add(user)
    _commit_user(user)
    logger.info("User invited id=%s email=%s", user.id, user.email)
    return user


def create_user(username: str, email: str, password: str | None = None, role: str = ROLE_USER) -> User:
    """Direct add by an admin. Without a password the account is invited."""
    username = _require(username, "username")
    email = normalize_email(email)
    role = _check_role(role or ROLE_USER)
    password = as_text(password, "password", strip=False)
    _ensure_unique(username=username, email=email)

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password) if password else None,
        role=role,
    )
    db.session.add(user)
    _commit_user(user)
    logger.info("User created id=%s username=%s role=%s", user.id, user.username, user.role)
    return user


def update_user(user_id: str, data: dict) -> User:
    """Admin update of username / email / role. Unknown keys are ignored."""
    user = get_user_or_404(user_id)

    changes = {}
    if "username" in data:
        changes["username"] = _require(data["username"], "username")
        _ensure_unique(username=changes["username"], exclude_id=user.id)
    if "email" in data:
        changes["email"] = normalize_email(data["email"])
        _ensure_unique(email=changes["email"], exclude_id=user.id)
    if "role" in data:
        changes["role"] = _check_role(data["role"])

    for field, value in changes.items():
        setattr(user, field, value)

    _commit_user(user)
    logger.info("User updated id=%s", user.id)
    return user


def delete_user(user_id: str, caller: Caller) -> None:
    """Remove an account.

    Refused for the caller's own account and for creators of any project.
    Memberships go with the user; assignments and authorship are cleared.
    """
    user = get_user_or_404(user_id)
    if user.id == caller.id:
        raise ValidationError("You cannot remove your own account")
    if Project.query.filter_by(created_by_id=user.id).first():
        raise ValidationError("User created one or more projects and cannot be removed")

    WorkItem.query.filter_by(assigned_to_id=user.id).update({"assigned_to_id": None})
    WorkItem.query.filter_by(created_by_id=user.id).update({"created_by_id": None})
    WorkItemComment.query.filter_by(author_id=user.id).update({"author_id": None})
    db.session.delete(user)
    db.session.commit()
    logger.info("User removed id=%s by %s", user_id, caller.id)

# Overview: Service-layer operations for auth; password hashing, credential checks and registration.

"""
Authentication Service

WHY: Every invoice records who created it, so every action needs a known
user. Passwords are hashed with bcrypt; clear-text passwords are never
written to the store.

Registration is a silent no-op when the username is already taken: the
caller gets None back and nothing is written.
"""

from __future__ import annotations

import bcrypt
from dataclasses import dataclass
from flask import current_app, has_app_context

from ..extensions import store
from ..models import User, UserRole, UserPermissions
from ..permissions import DEFAULT_ROLE_PERMISSIONS
from ..storage import new_record_id
from ..validation import ValidationError


DEFAULT_BCRYPT_ROUNDS = 12


class LoginStatus:
    OK = "ok"
    INVALID_CREDENTIALS = "invalid_credentials"
    INACTIVE = "inactive"


@dataclass
class LoginResult:
    status: str
    user: User | None = None

    @property
    def ok(self) -> bool:
        return self.status == LoginStatus.OK


def _bcrypt_rounds() -> int:
    if has_app_context():
        return int(current_app.config.get("BCRYPT_ROUNDS", DEFAULT_BCRYPT_ROUNDS))
    return DEFAULT_BCRYPT_ROUNDS


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt (cost factor from BCRYPT_ROUNDS, default 12).
    """
    if not password:
        raise ValidationError("password is required")
    salt = bcrypt.gensalt(rounds=_bcrypt_rounds())
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns True if password matches hash, False otherwise (including a
    malformed hash).
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def get_user_by_username(username: str) -> User | None:
    return store.users.find(lambda u: u.username == username)


def authenticate(username: str, password: str) -> LoginResult:
    """
    Check credentials.

    An inactive account with the right password yields INACTIVE rather than
    INVALID_CREDENTIALS so the caller can say why sign-in was refused.
    """
    user = get_user_by_username(username)
    if user is None or not verify_password(password, user.password_hash):
        return LoginResult(LoginStatus.INVALID_CREDENTIALS)

    if not user.is_active:
        return LoginResult(LoginStatus.INACTIVE, user)

    return LoginResult(LoginStatus.OK, user)


def default_permissions_for(role: str) -> UserPermissions:
    return UserPermissions(**DEFAULT_ROLE_PERMISSIONS[role])


def register_user(
    username: str,
    password: str,
    role: str = UserRole.MEMBER,
    permissions: UserPermissions | None = None,
) -> User | None:
    """
    Create a user, or return None if the username already exists.

    Without explicit permissions the role defaults apply: full flags for
    Superadmin/Admin, member defaults otherwise.

    Raises:
        ValidationError: blank username/password or unknown role
    """
    username = (username or "").strip()
    if not username:
        raise ValidationError("username is required")
    if not password:
        raise ValidationError("password is required")
    if role not in UserRole.ALL:
        raise ValidationError(f"role must be one of: {', '.join(UserRole.ALL)}")

    if get_user_by_username(username) is not None:
        current_app.logger.info("Registration skipped, username %r already exists", username)
        return None

    user = User(
        id=new_record_id(),
        username=username,
        password_hash=hash_password(password),
        role=role,
        is_active=True,
        permissions=permissions or default_permissions_for(role),
    )
    store.users.add(user)
    current_app.logger.info("Registered user %s (%s)", user.username, user.role)
    return user

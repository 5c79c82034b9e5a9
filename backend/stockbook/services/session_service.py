# Overview: Service-layer operations for the signed-in session; login, logout and permission sync.

"""
Session Management

The store holds one current-session slot: the signed-in user's id plus a
snapshot of that user taken at login.

SYNC: every read of the session re-reads the canonical user record. If the
role, active flag or permission flags changed (by the user or by someone on
the team page) the snapshot is replaced and written back, so a revocation
takes effect on the very next check. A session whose user was deleted is
cleared.
"""

from __future__ import annotations

from flask import current_app

from ..extensions import store
from ..models import SessionRecord, User
from . import auth_service
from .auth_service import LoginResult


def start_session(user: User) -> SessionRecord:
    record = SessionRecord(user_id=user.id, user=user)
    store.session.set(record)
    return record


def login(username: str, password: str) -> LoginResult:
    """Authenticate and, on success, replace the current session."""
    result = auth_service.authenticate(username, password)
    if result.ok:
        start_session(result.user)
        current_app.logger.info("User %s signed in", result.user.username)
    return result


def logout() -> None:
    store.session.clear()


def sync_session() -> SessionRecord | None:
    """
    Bring the cached session snapshot in line with the canonical user record.

    Returns the (possibly refreshed) session, or None when signed out.
    """
    record = store.session.get()
    if record is None:
        return None

    canonical = store.users.get(record.user_id)
    if canonical is None:
        current_app.logger.info("Session user %s no longer exists, signing out", record.user_id)
        logout()
        return None

    if canonical.access_snapshot() != record.user.access_snapshot():
        current_app.logger.info("Refreshing session for %s after access change", canonical.username)
        record = start_session(canonical)

    return record


def get_current_user() -> User | None:
    """The signed-in user as of the latest sync, or None."""
    record = sync_session()
    return record.user if record else None

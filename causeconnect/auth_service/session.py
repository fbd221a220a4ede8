"""
Session manager, built on Flask-Login.

Flask-Login keeps one id per browser session in `_user_id`. Ours is the
identity token issued by serialize_user(): a signed JWT whose `jti` names a
server-side session record. Logging out deletes that record, so a copied
cookie stops resolving even while its signature and expiry are still good.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import flask_login
from flask import current_app, redirect, session, url_for
from flask_login import LoginManager, UserMixin

from causeconnect.auth_service.utils import create_token, verify_token
from causeconnect.database.models import User
from causeconnect.database.registry import Stores, get_stores
from causeconnect.database.stores import StoreError

login_manager = LoginManager()
login_manager.login_view = "auth.login_form"


class SessionUser(UserMixin):
    """The logged-in User, plus the token it was loaded from."""

    def __init__(self, user: User, token: str):
        self.user = user
        self.token = token
        self.id = user.id
        self.email = user.email

    def get_id(self) -> str:
        return self.token

    def __repr__(self):
        return f"<SessionUser id={self.id} email={self.email!r}>"


def serialize_user(stores: Stores, user: User) -> str:
    """Open a session record for `user` and return the token naming it."""
    expires_minutes = current_app.config["SESSION_EXPIRATION_MINUTES"]
    session_id = secrets.token_urlsafe(32)
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    stores.sessions.create_session(session_id, user.id, expires_at)
    return create_token(user.id, session_id, expires_minutes=expires_minutes)


def deserialize_user(stores: Stores, token: str) -> Optional[User]:
    """
    Resolve a session token back into a User.

    Returns:
        User, or None when the token is invalid/expired, its session record
        is gone, or the id no longer resolves in the store.
    """
    claims = verify_token(token)
    if claims is None:
        return None

    record = stores.sessions.get_session(claims.session_id)
    if record is None or record.user_id != claims.user_id:
        logging.info("[Auth] Session record missing, treating request as anonymous")
        return None
    if record.expires_at <= datetime.now(timezone.utc):
        return None
    return stores.users.get_user_by_id(claims.user_id)


@login_manager.user_loader
def load_user(token: str) -> Optional[SessionUser]:
    try:
        user = deserialize_user(get_stores(), token)
    except StoreError:
        # Pages still render, as if logged out
        logging.exception("[Auth] Could not resolve session")
        return None
    return SessionUser(user, token) if user else None


@login_manager.unauthorized_handler
def unauthorized():
    return redirect(url_for(login_manager.login_view))


def login_user(user: User) -> None:
    token = serialize_user(get_stores(), user)
    # Drop anything left over from the anonymous session, flashes included.
    session.clear()
    flask_login.login_user(SessionUser(user, token))


def logout_user() -> None:
    """
    End the session and delete its server-side record.

    The cookie is cleared before the record is deleted.

    Raises:
        StoreError: If the record could not be deleted.
    """
    token = session.get("_user_id")
    flask_login.logout_user()

    claims = verify_token(token) if token else None
    if claims is not None:
        get_stores().sessions.delete_session(claims.session_id)

"""
Authentication helpers.
Provides password hashing, credential verification, and the identity token
embedded in the session cookie.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from flask import current_app

from causeconnect.database.models import User
from causeconnect.database.stores import UserStore

ph = PasswordHasher()

TOKEN_ALGORITHM = "HS256"


class AuthenticationError(Exception):
    """Credentials were rejected. The message is safe to show to the user."""


# --- PASSWORDS ---
def hash_password(plain: str) -> str:
    """
    Hash a plaintext password with Argon2.

    Raises:
        ValueError: If the password is empty.
    """
    if not plain:
        raise ValueError("Password cannot be empty")
    return ph.hash(plain)


def verify_password(password_hash: str, plain: str) -> bool:
    if not password_hash or not plain:
        return False
    try:
        return ph.verify(password_hash, plain)
    except (VerificationError, InvalidHashError):
        return False


GMAIL_DOMAINS = ("gmail.com", "googlemail.com")

# Providers whose mailboxes ignore everything after the separator
SUBADDRESS_SEPARATORS = {
    "outlook.com": "+",
    "hotmail.com": "+",
    "live.com": "+",
    "icloud.com": "+",
    "me.com": "+",
    "yahoo.com": "-",
}


def normalize_email(email: Optional[str]) -> str:
    """
    Canonical form used for storage and lookup.

    Lower-cases the address; for the providers above also drops the
    subaddress tag, and for Gmail the dots in the local part, with
    googlemail.com folded into gmail.com.
    """
    email = (email or "").strip().lower()
    local, at, domain = email.rpartition("@")
    if not at or not local:
        return email

    if domain in GMAIL_DOMAINS:
        local = local.split("+", 1)[0].replace(".", "")
        domain = "gmail.com"
    elif domain in SUBADDRESS_SEPARATORS:
        local = local.split(SUBADDRESS_SEPARATORS[domain], 1)[0]

    if not local:
        return email
    return f"{local}@{domain}"


# --- LOCAL STRATEGY ---
def authenticate(store: UserStore, email: str, password: str) -> User:
    """
    Verify an email/password pair against the credential store.

    Args:
        store (UserStore): Where users are looked up.
        email (str): Submitted email, normalised before lookup.
        password (str): Submitted plaintext password.

    Returns:
        User: The matching user record.

    Raises:
        AuthenticationError: Unknown email or wrong password.
        StoreError: The lookup itself failed.
    """
    user = store.get_user_by_email(normalize_email(email))
    if not user:
        raise AuthenticationError("Incorrect username.")
    if not verify_password(user.password_hash, password):
        raise AuthenticationError("Incorrect password.")
    return user

# --- IDENTITY TOKEN ---
class TokenClaims(NamedTuple):
    user_id: int
    session_id: str


def create_token(user_id: int, session_id: str, secret: str = None, expires_minutes: int = None) -> str:
    """
    Issue a signed JWT carrying the user id and the server-side session id.

    Args:
        user_id (int): The id stored in the `sub` claim.
        session_id (str): The session record id stored in the `jti` claim.
        secret (str, optional): Signing key. Defaults to the app SECRET_KEY.
        expires_minutes (int, optional): Lifetime. Defaults to the app
            SESSION_EXPIRATION_MINUTES.

    Returns:
        str: Encoded JWT string.
    """
    if secret is None:
        secret = current_app.config["SECRET_KEY"]
    if expires_minutes is None:
        expires_minutes = current_app.config["SESSION_EXPIRATION_MINUTES"]

    now = datetime.now(timezone.utc)
    payload = {
        # PyJWT requires `sub` to be a string
        "sub": str(user_id),
        "jti": session_id,
        "exp": now + timedelta(minutes=expires_minutes),
        "iat": now,
    }
    return jwt.encode(payload, secret, algorithm=TOKEN_ALGORITHM)


def verify_token(token: str, secret: str = None) -> Optional[TokenClaims]:
    """
    Validate a token and return its claims.

    Returns:
        TokenClaims: (user_id, session_id) if valid, None if missing,
        expired or tampered with.
    """
    if not token:
        return None
    if secret is None:
        secret = current_app.config["SECRET_KEY"]
    try:
        payload = jwt.decode(token, secret, algorithms=[TOKEN_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logging.info("[Auth] Session token expired")
        return None
    except jwt.InvalidTokenError:
        logging.warning("[Auth] Rejected invalid session token")
        return None

    try:
        user_id = int(payload["sub"])
        session_id = str(payload["jti"])
    except (KeyError, TypeError, ValueError):
        return None
    return TokenClaims(user_id=user_id, session_id=session_id)

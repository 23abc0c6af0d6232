# Overview: Service-layer operations for session; encapsulates business logic and database work.

"""
Session Token Management Service

Tokens are cryptographically secure, hashed in database, and time-limited.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage (fast, one-way)
- Absolute expiry (Config.SESSION_TTL_HOURS), checked lazily on use
- Deleted on logout
"""

import secrets
import hashlib
from dataclasses import dataclass
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import Session, User
from storefront.time_utils import utcnow


DEFAULT_SESSION_TTL_HOURS = 168


@dataclass
class SessionContext:
    """Resolved bearer token: the session row and its owner."""
    user: User
    session: Session


def generate_token() -> str:
    """
    Generate cryptographically secure random token.

    Returns 64-character hex string (32 bytes of entropy).
    This is the plaintext token sent to client (never stored).
    """
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """Hex SHA-256 of the token; tokens are high-entropy so no salt/bcrypt."""
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def _session_ttl() -> timedelta:
    hours = current_app.config.get("SESSION_TTL_HOURS", DEFAULT_SESSION_TTL_HOURS)
    return timedelta(hours=hours)


def create_session(user_id: int) -> tuple[Session, str]:
    """
    Create new session token for user.

    Returns (session_record, plaintext_token).
    Client receives plaintext_token, database stores only the hash.
    """
    user = db.session.query(User).filter_by(id=user_id).first()
    if not user:
        raise ValueError("User not found")

    plaintext_token = generate_token()
    now = utcnow()

    session = Session(
        user_id=user_id,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        expires_at=now + _session_ttl(),
    )

    db.session.add(session)
    db.session.commit()

    return session, plaintext_token


def validate_session(token: str) -> SessionContext | None:
    """
    Resolve a bearer token.

    Returns None if the token is unknown or expired. An expired session is
    indistinguishable from a missing one; the row itself is left for
    purge_expired_sessions().
    """
    if not token:
        return None

    session = db.session.query(Session).filter_by(token_hash=hash_token(token)).first()
    if not session:
        return None

    if session.expires_at <= utcnow():
        return None

    user = session.user
    if not user:
        return None

    return SessionContext(user=user, session=session)


def delete_session(token: str) -> bool:
    """
    Delete the session for token (logout).

    Returns True if a row was deleted. Unknown tokens are a no-op so logout
    is idempotent.
    """
    deleted = db.session.query(Session).filter_by(token_hash=hash_token(token)).delete()
    db.session.commit()
    return deleted > 0


def purge_expired_sessions() -> int:
    """
    Delete sessions past their expiry.

    Returns count of sessions deleted. Maintenance only (flask sessions purge);
    request handling never depends on it.
    """
    deleted = db.session.query(Session).filter(Session.expires_at <= utcnow()).delete()
    db.session.commit()
    return deleted

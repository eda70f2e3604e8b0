"""Credential store: persisted user records and their token fields.

Every mutation commits immediately. A failed commit is rolled back so the
previously persisted row stays intact, and the fault is surfaced as
``InternalFailure`` (or ``EmailInUse`` for a uniqueness violation).
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db
from models.user import User, default_avatar_url

from .errors import EmailInUse, InternalFailure


def _commit() -> None:
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error("User store write failed: %s", exc)
        raise InternalFailure() from exc


def create_user(
    email: str,
    password: str,
    verification_token: str,
    subscription: str | None = None,
) -> User:
    """Persist a new unverified user with a hashed password."""

    user = User(
        email=email,
        verification_token=verification_token,
        subscription=subscription or "starter",
        avatar_url=default_avatar_url(email),
        verify=False,
        token=None,
    )
    user.set_password(password)
    db.session.add(user)
    try:
        _commit()
    except IntegrityError as exc:
        raise EmailInUse() from exc
    return user


def find_by_email(email: str) -> User | None:
    if not email:
        return None
    return User.query.filter_by(email=email).first()


def find_by_id(user_id: int | str | None) -> User | None:
    """Return the user for an id, accepting the string form used as JWT subject."""

    if user_id is None:
        return None
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        return None
    return db.session.get(User, user_id)


def find_by_verification_token(verification_token: str) -> User | None:
    # Consumed tokens are stored as "", which must never match.
    if not verification_token:
        return None
    return User.query.filter_by(verification_token=verification_token).first()


def save(user: User) -> User:
    db.session.add(user)
    _commit()
    return user


def set_session_token(user: User, token: str | None) -> User:
    """Store the last issued bearer credential, or clear it with ``None``."""

    user.token = token
    return save(user)


def set_avatar_url(user: User, avatar_url: str) -> User:
    user.avatar_url = avatar_url
    return save(user)

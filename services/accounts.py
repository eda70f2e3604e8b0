"""
Registration, verification and authentication use cases.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from datetime import timedelta

from flask import current_app
from flask_jwt_extended import create_access_token

from models.user import SUBSCRIPTIONS, User

from . import users
from .errors import (
    AlreadyVerified,
    EmailInUse,
    InvalidCredentials,
    NotFound,
    NotVerified,
    ValidationError,
)
from .mailer import VerificationMailer

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PASSWORD_PATTERN = re.compile(r"^(?=.*[A-Za-z])(?=.*\d)(?=.*[@$!%*#?&])[A-Za-z\d@$!%*#?&]{8,}$")
PASSWORD_POLICY = (
    "Password must contain at least 8 characters, one letter, one digit, "
    "and one special character (@$!%*#?&)."
)


def generate_verification_token() -> str:
    return uuid.uuid4().hex


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


@dataclass(frozen=True)
class AccountSettings:
    access_token_expires: timedelta

    @classmethod
    def from_config(cls, config) -> "AccountSettings":
        return cls(access_token_expires=config.get("JWT_ACCESS_TOKEN_EXPIRES") or timedelta(hours=1))


@dataclass
class RegisterResult:
    email: str
    subscription: str


@dataclass
class LoginResult:
    token: str
    email: str
    subscription: str


@dataclass
class AccountService:
    """Handles registration, verification, login and logout flows."""

    settings: AccountSettings
    mailer: VerificationMailer

    # -------------------------------------- registration --------------------------------------
    def register(self, email: str, password: str, subscription: str | None = None) -> RegisterResult:
        """Create an unverified account and dispatch its verification link.

        The account stays persisted even when dispatch fails; the caller sees
        ``DispatchFailure`` and can recover through ``resend_verification``.
        """

        email = (email or "").strip()
        if users.find_by_email(email) is not None:
            raise EmailInUse()

        if not is_valid_email(email):
            raise ValidationError("A valid email address is required.")
        if not PASSWORD_PATTERN.match(password or ""):
            raise ValidationError(PASSWORD_POLICY)
        if subscription is not None and subscription not in SUBSCRIPTIONS:
            raise ValidationError(f"Subscription must be one of: {', '.join(SUBSCRIPTIONS)}.")

        user = users.create_user(
            email,
            password,
            verification_token=generate_verification_token(),
            subscription=subscription,
        )
        current_app.logger.info("Registered user %s", user.id)

        self.mailer.send_verification(user.email, user.verification_token)
        return RegisterResult(email=user.email, subscription=user.subscription)

    # -------------------------------------- verification --------------------------------------
    def resend_verification(self, email: str) -> None:
        user = users.find_by_email((email or "").strip())
        if user is None:
            raise NotFound("User not found.")
        if user.verify:
            raise AlreadyVerified()
        # The existing token is redispatched, never rotated.
        self.mailer.send_verification(user.email, user.verification_token)

    def confirm_verification(self, verification_token: str) -> User:
        user = users.find_by_verification_token((verification_token or "").strip())
        if user is None:
            raise NotFound("User not found.")
        user.mark_verified()
        users.save(user)
        current_app.logger.info("Verified user %s", user.id)
        return user

    # -------------------------------------- authentication --------------------------------------
    def login(self, email: str, password: str) -> LoginResult:
        user = users.find_by_email((email or "").strip())
        if user is None:
            raise NotFound("User not found.")
        # Credentials are checked before verification status.
        if not user.check_password(password or ""):
            raise InvalidCredentials()
        if not user.verify:
            raise NotVerified()

        token = create_access_token(
            identity=str(user.id),
            additional_claims={"email": user.email, "subscription": user.subscription},
            expires_delta=self.settings.access_token_expires,
        )
        users.set_session_token(user, token)
        current_app.logger.info("User %s logged in", user.id)
        return LoginResult(token=token, email=user.email, subscription=user.subscription)

    def current_user(self, user: User) -> dict:
        return {"email": user.email, "subscription": user.subscription}

    def logout(self, user: User) -> None:
        users.set_session_token(user, None)
        current_app.logger.info("User %s logged out", user.id)

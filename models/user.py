"""User model definition."""

import hashlib
from datetime import datetime

from werkzeug.security import check_password_hash, generate_password_hash

from . import db


SUBSCRIPTIONS = ("starter", "pro", "business")


def default_avatar_url(email: str) -> str:
    """Return the Gravatar identicon URL for the given email."""

    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
    return f"https://www.gravatar.com/avatar/{digest}?s=250&d=identicon"


class User(db.Model):
    """Represents an account owning a private set of contacts."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    verify = db.Column(
        db.Boolean,
        nullable=False,
        default=False,
        server_default=db.text("false"),
    )
    verification_token = db.Column(db.String(64), nullable=False, index=True)
    subscription = db.Column(
        db.Enum(*SUBSCRIPTIONS, name="subscription_tier"),
        nullable=False,
        default="starter",
        server_default=db.text("'starter'"),
    )
    token = db.Column(db.Text, nullable=True)
    avatar_url = db.Column(db.String(512), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    contacts = db.relationship(
        "Contact",
        back_populates="owner",
        cascade="all, delete-orphan",
    )

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def mark_verified(self) -> None:
        """Flip the account to verified and consume the verification token."""

        self.verify = True
        self.verification_token = ""

    def to_dict(self) -> dict:
        return {"email": self.email, "subscription": self.subscription}

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"

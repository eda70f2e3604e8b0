"""Tests for the User model helpers."""

from models import db
from models.user import User, default_avatar_url


def test_password_hash_round_trip(app):
    """Passwords are stored salted and verified against the plaintext given to set_password."""

    with app.app_context():
        user = User(email="hash@example.com", verification_token="abc")
        user.set_password("Passw0rd!")

        assert user.password_hash != "Passw0rd!"
        assert user.check_password("Passw0rd!") is True
        assert user.check_password("Passw0rd?") is False

        other = User(email="hash2@example.com", verification_token="def")
        other.set_password("Passw0rd!")
        assert other.password_hash != user.password_hash


def test_user_defaults_and_verification(app):
    """New users start unverified with a token; verification consumes it."""

    with app.app_context():
        user = User(email="helper@example.com", verification_token="tok-1")
        user.set_password("Passw0rd!")
        db.session.add(user)
        db.session.commit()
        db.session.refresh(user)

        assert user.verify is False
        assert user.subscription == "starter"
        assert user.token is None
        assert user.verification_token == "tok-1"

        user.mark_verified()
        db.session.commit()
        db.session.refresh(user)

        assert user.verify is True
        assert user.verification_token == ""


def test_check_password_without_hash_is_false():
    assert User(email="x@example.com").check_password("anything") is False


def test_default_avatar_is_deterministic():
    first = default_avatar_url("Alice@Example.com")
    assert first == default_avatar_url("alice@example.com ")
    assert first.startswith("https://www.gravatar.com/avatar/")

"""Helpers shared by the test modules."""

from __future__ import annotations

from email import message_from_string
from email.message import Message

from flask import Flask
from flask.testing import FlaskClient

from models import db
from models.user import User
from services import users

PASSWORD = "Passw0rd!"


def create_user(app: Flask, email: str, password: str = PASSWORD, *, verified: bool = True) -> int:
    """Persist a user directly through the credential store and return its id."""

    with app.app_context():
        user = users.create_user(email, password, verification_token=f"token-{email}")
        if verified:
            user.mark_verified()
            users.save(user)
        return user.id


def login(client: FlaskClient, email: str, password: str = PASSWORD) -> str:
    response = client.post("/users/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.get_json()
    return response.get_json()["token"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def get_user(app: Flask, user_id: int) -> User:
    with app.app_context():
        user = users.find_by_id(user_id)
        db.session.expunge(user)
        return user


def message_text(message: Message | str) -> str:
    """Return the decoded text of every body part of a MIME message."""

    if isinstance(message, str):
        message = message_from_string(message)
    return "".join(
        part.get_payload(decode=True).decode(part.get_content_charset() or "utf-8")
        for part in message.walk()
        if not part.is_multipart()
    )

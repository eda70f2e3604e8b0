"""Bearer-token gate for protected routes.

Flask-JWT-Extended verifies signature and expiry. The callbacks registered
here resolve the token subject to a stored user and reject any token that is
not the one currently persisted for that user (cleared on logout, replaced on
the next login).
"""

from __future__ import annotations

from functools import wraps
from http import HTTPStatus

from flask import g, jsonify, request
from flask_jwt_extended import JWTManager, current_user, jwt_required

from models.user import User
from services import users


def presented_token() -> str | None:
    """Return the raw credential from the ``Authorization: Bearer`` header."""

    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def _unauthorized(detail: str):
    response = jsonify(
        {
            "error": HTTPStatus.UNAUTHORIZED.phrase,
            "detail": detail,
            "request_id": g.get("request_id"),
        }
    )
    response.status_code = HTTPStatus.UNAUTHORIZED
    response.headers["WWW-Authenticate"] = "Bearer"
    return response


def register_auth_gate(jwt: JWTManager) -> None:
    """Attach user lookup, revocation and 401 error callbacks to ``jwt``."""

    @jwt.user_lookup_loader
    def _load_user(_jwt_header, jwt_data) -> User | None:
        return users.find_by_id(jwt_data.get("sub"))

    @jwt.token_in_blocklist_loader
    def _is_revoked(_jwt_header, jwt_data) -> bool:
        # The session identity map serves the later user lookup from this load.
        user = users.find_by_id(jwt_data.get("sub"))
        if user is None:
            return False
        return not user.token or user.token != presented_token()

    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        return _unauthorized("Not authorized.")

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        return _unauthorized("Not authorized.")

    @jwt.expired_token_loader
    def _expired_token(_jwt_header, _jwt_data):
        return _unauthorized("Token has expired.")

    @jwt.revoked_token_loader
    def _revoked_token(_jwt_header, _jwt_data):
        return _unauthorized("Not authorized.")

    @jwt.user_lookup_error_loader
    def _unknown_user(_jwt_header, _jwt_data):
        return _unauthorized("Not authorized.")


def auth_required(view):
    """Admit the request only with a valid bearer token for an existing user."""

    @wraps(view)
    @jwt_required()
    def wrapper(*args, **kwargs):
        g.current_user = current_user._get_current_object()
        return view(*args, **kwargs)

    return wrapper

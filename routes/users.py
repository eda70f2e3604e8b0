"""Users blueprint: signup, verification, login, logout, profile and avatar."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, g, jsonify, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import Unauthorized

from services import AccountService, AccountSettings, AvatarPipeline
from services.errors import InternalFailure
from utils.auth_gate import auth_required
from utils.request_validation import parse_json_request, string_field

users_bp = Blueprint("users", __name__)


def _accounts() -> AccountService:
    return AccountService(
        settings=AccountSettings.from_config(current_app.config),
        mailer=current_app.extensions["mailer"],
    )


@users_bp.route("/signup", methods=["POST"])
def signup() -> tuple:
    """Register a new account and send its verification link."""
    payload = parse_json_request(request)
    result = _accounts().register(
        string_field(payload, "email"),
        string_field(payload, "password"),
        subscription=string_field(payload, "subscription", default=None),
    )
    return (
        jsonify(
            {
                "message": "Registration successful.",
                "user": {"email": result.email, "subscription": result.subscription},
            }
        ),
        HTTPStatus.CREATED,
    )


@users_bp.route("/login", methods=["POST"])
def login() -> tuple:
    """Authenticate a verified user and return a bearer token."""
    payload = parse_json_request(request, required_keys=("email", "password"))
    result = _accounts().login(string_field(payload, "email"), string_field(payload, "password"))
    return (
        jsonify(
            {
                "token": result.token,
                "user": {"email": result.email, "subscription": result.subscription},
            }
        ),
        HTTPStatus.OK,
    )


@users_bp.route("/current", methods=["GET"])
@auth_required
def current():
    return jsonify(_accounts().current_user(g.current_user)), HTTPStatus.OK


@users_bp.route("/logout", methods=["GET", "POST"])
@auth_required
def logout():
    """Clear the stored session token; the presented token stops working."""
    try:
        _accounts().logout(g.current_user)
    except (InternalFailure, SQLAlchemyError) as exc:
        raise Unauthorized("Not authorized.") from exc
    return "", HTTPStatus.NO_CONTENT


@users_bp.route("/verify", methods=["POST"])
def resend_verification():
    """Send the verification link again for an unverified account."""
    payload = parse_json_request(request, required_keys=("email",))
    _accounts().resend_verification(string_field(payload, "email"))
    return jsonify({"message": "Verification email sent."}), HTTPStatus.OK


@users_bp.route("/verify/<verification_token>", methods=["GET"])
def confirm_verification(verification_token: str):
    _accounts().confirm_verification(verification_token)
    return jsonify({"message": "Verification successful."}), HTTPStatus.OK


@users_bp.route("/avatars", methods=["PATCH"])
@auth_required
def update_avatar():
    """Replace the caller's avatar with an uploaded image."""
    pipeline = AvatarPipeline.from_config(current_app.config)
    avatar_url = pipeline.run(g.current_user.id, request.files.get("avatar"))
    return jsonify({"avatarURL": avatar_url}), HTTPStatus.OK

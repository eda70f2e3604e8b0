"""Domain errors raised by the account, avatar and contact workflows."""

from __future__ import annotations

from http import HTTPStatus


class AccountError(Exception):
    """Base class for errors that map onto a structured HTTP response."""

    status_code = HTTPStatus.BAD_REQUEST
    default_message = "Request could not be processed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AccountError):
    default_message = "Bad Request"


class EmailInUse(AccountError):
    status_code = HTTPStatus.CONFLICT
    default_message = "Email is already in use."


class NotFound(AccountError):
    status_code = HTTPStatus.NOT_FOUND
    default_message = "Not found."


class UserNotFound(NotFound):
    default_message = "User not found."


class InvalidCredentials(AccountError):
    status_code = HTTPStatus.UNAUTHORIZED
    default_message = "Email or password is wrong."


class NotVerified(AccountError):
    status_code = HTTPStatus.UNAUTHORIZED
    default_message = "Email is not verified."


class AlreadyVerified(AccountError):
    default_message = "Verification has already been passed."


class InvalidToken(AccountError):
    status_code = HTTPStatus.UNAUTHORIZED
    default_message = "Not authorized."


class InvalidUpload(AccountError):
    default_message = "Invalid upload."


class DispatchFailure(AccountError):
    status_code = HTTPStatus.SERVICE_UNAVAILABLE
    default_message = "Verification email could not be sent. Request a new one via /users/verify."


class InternalFailure(AccountError):
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message = "An unexpected error occurred."

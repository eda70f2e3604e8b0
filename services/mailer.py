"""
Email adapter for verification messages.

Messages go out over SMTP using the credentials in the app config. With
``MAIL_SUPPRESS_SEND`` enabled they are recorded in ``outbox`` instead.
"""

from __future__ import annotations

import smtplib
import socket
import ssl
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from flask import Flask, current_app

from .errors import DispatchFailure


@dataclass(frozen=True)
class MailSettings:
    base_url: str
    server: str | None
    port: int
    username: str | None
    password: str | None
    sender: str | None
    use_ssl: bool
    suppress_send: bool

    @classmethod
    def from_config(cls, config) -> "MailSettings":
        port = int(config.get("MAIL_PORT") or 465)
        return cls(
            base_url=(config.get("BASE_URL") or "").rstrip("/"),
            server=config.get("MAIL_SERVER"),
            port=port,
            username=config.get("MAIL_USERNAME"),
            password=config.get("MAIL_PASSWORD"),
            sender=config.get("MAIL_DEFAULT_SENDER") or config.get("MAIL_USERNAME"),
            use_ssl=bool(config.get("MAIL_USE_SSL", port == 465)),
            suppress_send=bool(config.get("MAIL_SUPPRESS_SEND", False)),
        )

    @property
    def configured(self) -> bool:
        return bool(self.server and self.username and self.password and self.sender)


class VerificationMailer:
    """Flask extension dispatching verification links."""

    def __init__(self, app: Flask | None = None):
        self.outbox: list[MIMEMultipart] = []
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        app.extensions["mailer"] = self

    @staticmethod
    def verification_link(settings: MailSettings, verification_token: str) -> str:
        return f"{settings.base_url}/users/verify/{verification_token}"

    def build_message(self, settings: MailSettings, email: str, verification_token: str) -> MIMEMultipart:
        link = self.verification_link(settings, verification_token)
        msg = MIMEMultipart("alternative")
        msg["Subject"] = "Verification Mail"
        msg["From"] = settings.sender or "no-reply@localhost"
        msg["To"] = email
        msg.attach(MIMEText(f"Your verification code: {verification_token}\nOr open: {link}", "plain", "utf-8"))
        msg.attach(
            MIMEText(
                f'<p>Your verification code: {verification_token}</p>'
                f'<a href="{link}" target="_blank">Or click here</a>',
                "html",
                "utf-8",
            )
        )
        return msg

    def send_verification(self, email: str, verification_token: str) -> None:
        """Send the verification link or raise ``DispatchFailure``."""

        settings = MailSettings.from_config(current_app.config)
        msg = self.build_message(settings, email, verification_token)

        if settings.suppress_send:
            self.outbox.append(msg)
            current_app.logger.info("Verification mail to %s recorded (sending suppressed)", email)
            return

        if not settings.configured:
            current_app.logger.warning("SMTP configuration missing; verification mail to %s not sent", email)
            raise DispatchFailure()

        try:
            if settings.use_ssl:
                context = ssl.create_default_context()
                with smtplib.SMTP_SSL(settings.server, settings.port, context=context) as server:
                    server.login(settings.username, settings.password)
                    server.sendmail(settings.sender, [email], msg.as_string())
            else:
                with smtplib.SMTP(settings.server, settings.port) as server:
                    server.ehlo()
                    server.starttls(context=ssl.create_default_context())
                    server.login(settings.username, settings.password)
                    server.sendmail(settings.sender, [email], msg.as_string())
        except (smtplib.SMTPException, socket.error) as exc:
            current_app.logger.error("Failed to send verification mail to %s: %s", email, exc)
            raise DispatchFailure() from exc

        current_app.logger.info("Verification mail sent to %s", email)

"""Account, verification and avatar workflows."""

from .accounts import AccountService, AccountSettings
from .avatars import AvatarPipeline, AvatarSettings
from .mailer import MailSettings, VerificationMailer

__all__ = [
    "AccountService",
    "AccountSettings",
    "AvatarPipeline",
    "AvatarSettings",
    "MailSettings",
    "VerificationMailer",
]

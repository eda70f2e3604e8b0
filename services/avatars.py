"""Avatar ingestion: validate, hold, normalize, persist and link an upload.

Each step takes the previous step's result and raises on failure, which
aborts the remaining steps. The permanent avatar area is only touched by an
atomic rename. The prior avatar is copied aside first and moved back if the
user record cannot be updated, so it and ``avatar_url`` survive any failure.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from flask import current_app
from PIL import Image, ImageOps, UnidentifiedImageError
from werkzeug.datastructures import FileStorage

from models.user import User
from storage import AbstractStorage, LocalStorage

from . import users
from .errors import InternalFailure, InvalidUpload, UserNotFound

MAX_AVATAR_SIZE_DEFAULT = 1024 * 1024  # 1 MiB
AVATAR_SIZE_DEFAULT = 250


@dataclass(frozen=True)
class AvatarSettings:
    upload_dir: str
    avatar_dir: str
    url_prefix: str
    size: int
    max_bytes: int

    @classmethod
    def from_config(cls, config) -> "AvatarSettings":
        return cls(
            upload_dir=config["UPLOAD_DIR"],
            avatar_dir=config["AVATAR_DIR"],
            url_prefix=(config.get("AVATAR_URL_PREFIX") or "/avatars").rstrip("/"),
            size=int(config.get("AVATAR_SIZE", AVATAR_SIZE_DEFAULT)),
            max_bytes=int(config.get("MAX_AVATAR_SIZE", MAX_AVATAR_SIZE_DEFAULT)),
        )


@dataclass
class ValidatedUpload:
    file: FileStorage
    extension: str
    size: int


@dataclass
class HeldUpload:
    relative_path: str
    path: Path


@dataclass
class AvatarPipeline:
    """Runs one avatar upload for one authenticated user."""

    settings: AvatarSettings
    transient: AbstractStorage
    public: AbstractStorage

    @classmethod
    def from_config(cls, config) -> "AvatarPipeline":
        settings = AvatarSettings.from_config(config)
        return cls(
            settings=settings,
            transient=LocalStorage(settings.upload_dir),
            public=LocalStorage(settings.avatar_dir),
        )

    def run(self, user_id: int, file: FileStorage | None) -> str:
        """Process ``file`` as the new avatar of ``user_id`` and return its public URL."""

        upload = self.validate(file)
        held = self.hold(user_id, upload)
        previous = None
        try:
            self.normalize(held)
            user = self.resolve_owner(user_id)
            previous = self.backup(user_id)
            filename = self.persist(user_id, held)
        except Exception:
            self.transient.delete(held.relative_path)
            if previous:
                self.public.delete(previous)
            raise

        try:
            avatar_url = self.link(user, filename)
        except Exception:
            self.restore(filename, previous)
            raise
        if previous:
            self.public.delete(previous)
        return avatar_url

    def validate(self, file: FileStorage | None) -> ValidatedUpload:
        if not isinstance(file, FileStorage) or not (file.filename or "").strip():
            raise InvalidUpload("An avatar file is required.")

        if not (file.mimetype or "").startswith("image/"):
            raise InvalidUpload("Avatar must be an image.")

        file.stream.seek(0, os.SEEK_END)
        size = file.stream.tell()
        file.stream.seek(0)
        if size > self.settings.max_bytes:
            raise InvalidUpload("Avatar exceeds the maximum upload size of 1MB.")

        extension = Path(file.filename).suffix.lower() or ".img"
        return ValidatedUpload(file=file, extension=extension, size=size)

    def hold(self, user_id: int, upload: ValidatedUpload) -> HeldUpload:
        # One pending upload per user; a newer one overwrites the older.
        relative_path = self.transient.save(upload.file, f"{user_id}{upload.extension}")
        return HeldUpload(relative_path=relative_path, path=self.transient.path_for(relative_path))

    def normalize(self, held: HeldUpload) -> None:
        """Crop and resize to a square JPEG, overwriting the held file."""

        try:
            with Image.open(held.path) as source:
                image = ImageOps.exif_transpose(source)
                image = ImageOps.fit(
                    image.convert("RGB"),
                    (self.settings.size, self.settings.size),
                    Image.LANCZOS,
                )
        except (UnidentifiedImageError, Image.DecompressionBombError) as exc:
            raise InvalidUpload("Avatar file could not be decoded as an image.") from exc
        except OSError as exc:
            current_app.logger.error("Avatar decode failed for %s: %s", held.relative_path, exc)
            raise InternalFailure("Avatar processing failed.") from exc

        try:
            image.save(held.path, format="JPEG", quality=90)
        except OSError as exc:
            current_app.logger.error("Avatar encode failed for %s: %s", held.relative_path, exc)
            raise InternalFailure("Avatar processing failed.") from exc

    def resolve_owner(self, user_id: int) -> User:
        user = users.find_by_id(user_id)
        if user is None:
            raise UserNotFound()
        return user

    def backup(self, user_id: int) -> str | None:
        try:
            return self.public.backup(f"{user_id}.jpg")
        except OSError as exc:
            current_app.logger.error("Avatar backup failed for user %s: %s", user_id, exc)
            raise InternalFailure("Avatar processing failed.") from exc

    def persist(self, user_id: int, held: HeldUpload) -> str:
        try:
            return self.public.replace_from(held.path, f"{user_id}.jpg")
        except OSError as exc:
            current_app.logger.error("Avatar persist failed for user %s: %s", user_id, exc)
            raise InternalFailure("Avatar processing failed.") from exc

    def link(self, user: User, filename: str) -> str:
        avatar_url = f"{self.settings.url_prefix}/{filename}"
        users.set_avatar_url(user, avatar_url)
        current_app.logger.info("Avatar replaced for user %s", user.id)
        return avatar_url

    def restore(self, filename: str, previous: str | None) -> None:
        """Put the prior avatar back after a failed link, or drop the unlinked file."""

        if previous:
            self.public.replace_from(self.public.path_for(previous), filename)
        else:
            self.public.delete(filename)
        current_app.logger.warning("Avatar link failed; restored previous file %s", filename)

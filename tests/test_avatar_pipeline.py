"""Avatar upload, normalization and replacement tests."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from helpers import bearer, create_user, get_user, login
from services import AvatarPipeline, users
from services.errors import InternalFailure, UserNotFound


def _jpeg_bytes(size=(400, 300), color=None) -> bytes:
    if color is None:
        image = Image.effect_noise(size, 64).convert("RGB")
    else:
        image = Image.new("RGB", size, color)
    buffer = BytesIO()
    image.save(buffer, format="JPEG")
    return buffer.getvalue()


def _upload(client, token: str, data: bytes, filename: str = "me.jpg", content_type: str = "image/jpeg"):
    return client.patch(
        "/users/avatars",
        data={"avatar": (BytesIO(data), filename, content_type)},
        headers=bearer(token),
        content_type="multipart/form-data",
    )


@pytest.fixture()
def account(app, client):
    user_id = create_user(app, "pat@example.com")
    return user_id, login(client, "pat@example.com")


def test_upload_resizes_and_links_avatar(app, client, account):
    user_id, token = account
    payload = _jpeg_bytes()
    assert len(payload) < 1024 * 1024

    response = _upload(client, token, payload)

    assert response.status_code == 200
    assert response.get_json() == {"avatarURL": f"/avatars/{user_id}.jpg"}

    stored = Path(app.config["AVATAR_DIR"]) / f"{user_id}.jpg"
    with Image.open(stored) as image:
        assert image.size == (250, 250)
        assert image.format == "JPEG"

    assert get_user(app, user_id).avatar_url == f"/avatars/{user_id}.jpg"
    assert list(Path(app.config["UPLOAD_DIR"]).iterdir()) == []


def test_png_upload_is_reencoded_as_jpeg(app, client, account):
    user_id, token = account
    buffer = BytesIO()
    Image.new("RGBA", (600, 200), (10, 200, 30, 128)).save(buffer, format="PNG")

    response = _upload(client, token, buffer.getvalue(), filename="me.png", content_type="image/png")

    assert response.status_code == 200
    with Image.open(Path(app.config["AVATAR_DIR"]) / f"{user_id}.jpg") as image:
        assert image.size == (250, 250)
        assert image.mode == "RGB"


def test_second_upload_replaces_previous_avatar(app, client, account):
    user_id, token = account
    assert _upload(client, token, _jpeg_bytes(color=(255, 0, 0))).status_code == 200
    assert _upload(client, token, _jpeg_bytes(color=(0, 0, 255))).status_code == 200

    files = list(Path(app.config["AVATAR_DIR"]).iterdir())
    assert [f.name for f in files] == [f"{user_id}.jpg"]
    with Image.open(files[0]) as image:
        red, green, blue = image.convert("RGB").getpixel((125, 125))
    assert blue > 200 and red < 50


def test_oversize_upload_is_rejected_before_storage(app, client, account):
    user_id, token = account
    before = get_user(app, user_id).avatar_url

    response = _upload(client, token, b"\xff" * (2 * 1024 * 1024))

    assert response.status_code == 400
    assert list(Path(app.config["AVATAR_DIR"]).iterdir()) == []
    assert list(Path(app.config["UPLOAD_DIR"]).iterdir()) == []
    assert get_user(app, user_id).avatar_url == before


def test_non_image_content_type_is_rejected(app, client, account):
    _, token = account

    response = _upload(client, token, b"%PDF-1.4", filename="doc.pdf", content_type="application/pdf")

    assert response.status_code == 400
    assert list(Path(app.config["UPLOAD_DIR"]).iterdir()) == []


def test_missing_file_is_rejected(client, account):
    _, token = account

    response = client.patch(
        "/users/avatars",
        data={"other": "value"},
        headers=bearer(token),
        content_type="multipart/form-data",
    )

    assert response.status_code == 400


def test_undecodable_image_keeps_previous_avatar(app, client, account):
    user_id, token = account
    assert _upload(client, token, _jpeg_bytes(color=(255, 0, 0))).status_code == 200
    stored = Path(app.config["AVATAR_DIR"]) / f"{user_id}.jpg"
    previous = stored.read_bytes()

    response = _upload(client, token, b"definitely not an image")

    assert response.status_code == 400
    assert stored.read_bytes() == previous
    assert get_user(app, user_id).avatar_url == f"/avatars/{user_id}.jpg"
    assert list(Path(app.config["UPLOAD_DIR"]).iterdir()) == []


def test_pipeline_aborts_when_user_vanished(app, monkeypatch):
    """The permanent area is untouched when the owner no longer resolves."""

    from werkzeug.datastructures import FileStorage

    user_id = create_user(app, "quinn@example.com")
    upload = FileStorage(stream=BytesIO(_jpeg_bytes()), filename="me.jpg", content_type="image/jpeg")

    with app.test_request_context():
        monkeypatch.setattr(users, "find_by_id", lambda _user_id: None)
        pipeline = AvatarPipeline.from_config(app.config)
        with pytest.raises(UserNotFound):
            pipeline.run(user_id, upload)

    assert list(Path(app.config["AVATAR_DIR"]).iterdir()) == []
    assert list(Path(app.config["UPLOAD_DIR"]).iterdir()) == []


def _fail_link(user, avatar_url):
    raise InternalFailure()


def test_failed_link_restores_previous_avatar(app, client, account, monkeypatch):
    user_id, token = account
    assert _upload(client, token, _jpeg_bytes(color=(255, 0, 0))).status_code == 200
    stored = Path(app.config["AVATAR_DIR"]) / f"{user_id}.jpg"
    previous = stored.read_bytes()

    monkeypatch.setattr(users, "set_avatar_url", _fail_link)
    response = _upload(client, token, _jpeg_bytes(color=(0, 0, 255)))

    assert response.status_code == 500
    assert stored.read_bytes() == previous
    assert [f.name for f in Path(app.config["AVATAR_DIR"]).iterdir()] == [f"{user_id}.jpg"]
    assert list(Path(app.config["UPLOAD_DIR"]).iterdir()) == []
    assert get_user(app, user_id).avatar_url == f"/avatars/{user_id}.jpg"


def test_failed_first_link_leaves_no_unlinked_file(app, client, account, monkeypatch):
    user_id, token = account
    before = get_user(app, user_id).avatar_url

    monkeypatch.setattr(users, "set_avatar_url", _fail_link)
    response = _upload(client, token, _jpeg_bytes())

    assert response.status_code == 500
    assert list(Path(app.config["AVATAR_DIR"]).iterdir()) == []
    assert get_user(app, user_id).avatar_url == before

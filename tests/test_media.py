import httpx
import pytest

from sportadmin.config_loader import AppConfig
from sportadmin.errors import UpstreamError
from sportadmin.media import HttpMediaUploader, LocalMediaUploader, uploader_from_config


@pytest.fixture
def image(tmp_path):
    path = tmp_path / "logo.png"
    path.write_bytes(b"\x89PNG fake image")
    return path


def test_http_uploader_returns_secure_url(image):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = request.read()
        return httpx.Response(200, json={"secure_url": "https://cdn.test/teams/logo.png", "url": "http://cdn.test/x"})

    uploader = HttpMediaUploader(
        "https://media.test/upload",
        upload_preset="admin",
        transport=httpx.MockTransport(handler),
    )

    assert uploader.upload(image, "teams") == "https://cdn.test/teams/logo.png"
    assert seen["url"] == "https://media.test/upload"
    assert b"admin" in seen["body"]
    assert b"fake image" in seen["body"]


def test_http_uploader_wraps_server_errors(image):
    uploader = HttpMediaUploader(
        "https://media.test/upload",
        transport=httpx.MockTransport(lambda request: httpx.Response(502, text="bad gateway")),
    )

    with pytest.raises(UpstreamError):
        uploader.upload(image, "sports")


def test_http_uploader_requires_url_in_answer(image):
    uploader = HttpMediaUploader(
        "https://media.test/upload",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"public_id": "x"})),
    )

    with pytest.raises(UpstreamError):
        uploader.upload(image, "leagues")


def test_http_uploader_wraps_transport_errors(image):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    uploader = HttpMediaUploader("https://media.test/upload", transport=httpx.MockTransport(handler))

    with pytest.raises(UpstreamError):
        uploader.upload(image, "tournaments")


def test_local_uploader_copies_into_folder(tmp_path, image):
    uploader = LocalMediaUploader(tmp_path / "media", base_url="/media/")

    url = uploader.upload(image, "sports")

    assert url.startswith("/media/sports/")
    assert url.endswith(".png")
    stored = tmp_path / "media" / "sports" / url.rsplit("/", 1)[1]
    assert stored.read_bytes() == image.read_bytes()


def test_unknown_folder_rejected(tmp_path, image):
    with pytest.raises(ValueError):
        LocalMediaUploader(tmp_path).upload(image, "players")


def test_uploader_from_config_picks_backend(tmp_path):
    local = uploader_from_config(AppConfig(media_root=str(tmp_path)))
    remote = uploader_from_config(AppConfig(media_upload_url="https://media.test/upload", media_timeout=5))

    assert isinstance(local, LocalMediaUploader)
    assert isinstance(remote, HttpMediaUploader)
    assert remote.timeout == 5

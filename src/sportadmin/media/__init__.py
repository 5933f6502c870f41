"""Image upload adapters.

Handlers write an uploaded image to a temporary file and hand its path to an
uploader together with a destination folder. The uploader answers with the
persistent URL that gets stored on the record.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Protocol
from uuid import uuid4

import httpx

from sportadmin.config_loader import AppConfig
from sportadmin.errors import UpstreamError


logger = logging.getLogger(__name__)

MEDIA_FOLDERS = frozenset({"sports", "teams", "tournaments", "leagues"})


class MediaUploader(Protocol):
    def upload(self, path: Path, folder: str) -> str:
        ...


def _check_folder(folder: str) -> None:
    if folder not in MEDIA_FOLDERS:
        raise ValueError(f"Unknown media folder: {folder}")


class HttpMediaUploader:
    """Unsigned upload against a Cloudinary-compatible HTTP endpoint."""

    def __init__(
        self,
        upload_url: str,
        *,
        upload_preset: str | None = None,
        api_key: str | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.upload_url = upload_url
        self.upload_preset = upload_preset
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def upload(self, path: Path, folder: str) -> str:
        _check_folder(folder)
        data = {"folder": folder}
        if self.upload_preset:
            data["upload_preset"] = self.upload_preset
        if self.api_key:
            data["api_key"] = self.api_key
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                with path.open("rb") as handle:
                    resp = client.post(
                        self.upload_url,
                        data=data,
                        files={"file": (path.name, handle, "application/octet-stream")},
                    )
                resp.raise_for_status()
                payload = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Media upload to %s failed: %s", folder, exc)
            raise UpstreamError() from exc

        url = None
        if isinstance(payload, dict):
            url = payload.get("secure_url") or payload.get("url")
        if not url:
            logger.error("Media host answered without a URL for folder %s: %s", folder, payload)
            raise UpstreamError()
        logger.info("Uploaded %s to %s", path.name, url)
        return str(url)


class LocalMediaUploader:
    """Copies images under a local media root served by the API."""

    def __init__(self, root: Path | str, *, base_url: str = "/media"):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def upload(self, path: Path, folder: str) -> str:
        _check_folder(folder)
        target_dir = self.root / folder
        filename = f"{uuid4().hex}{path.suffix.lower()}"
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(path, target_dir / filename)
        except OSError as exc:
            logger.error("Could not store %s under %s: %s", path, target_dir, exc)
            raise UpstreamError() from exc
        return f"{self.base_url}/{folder}/{filename}"


def uploader_from_config(config: AppConfig) -> HttpMediaUploader | LocalMediaUploader:
    if config.uses_remote_media:
        return HttpMediaUploader(
            config.media_upload_url or "",
            upload_preset=config.media_upload_preset,
            api_key=config.media_api_key,
            timeout=config.media_timeout,
        )
    return LocalMediaUploader(config.media_root, base_url=config.media_base_url)

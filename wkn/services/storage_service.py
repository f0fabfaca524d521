from __future__ import annotations

import mimetypes
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from wkn.core import settings
from wkn.core.errors import ValidationError


@dataclass(frozen=True)
class StoredObject:
    """
    key: relative path under UPLOAD_DIR (e.g. "2026/02/02/<uuid>.png")
    url: public URL path (e.g. "/uploads/2026/02/02/<uuid>.png")
    mime: MIME type string
    """
    key: str
    url: str
    mime: str


class StorageService:
    """
    Local filesystem blob store for uploaded images.

    Guarantees:
    - Generates the file key itself (client filenames never reach the path)
    - Writes atomically (tmp file + replace)
    - Produces a URL the client can GET directly (served under /uploads)
    """

    def __init__(
        self,
        storage_dir: str | Path | None = None,
        base_url: str | None = None,
    ):
        self.storage_dir = Path(storage_dir or settings.UPLOAD_DIR)
        self.base_url = (base_url or settings.UPLOAD_BASE_URL).rstrip("/")
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    # ---------- public API ----------

    async def save_upload(self, upload: UploadFile, *, accept: Optional[str] = None) -> StoredObject:
        """
        Save an uploaded file. Returns storage key + public URL.

        accept: optional MIME prefix ("image/"). Uploads of any other type
                are rejected with ValidationError before anything is written.
        """
        mime = self._resolve_mime(upload.filename, upload.content_type)
        if accept and not mime.startswith(accept):
            raise ValidationError(f"unsupported upload type: {mime}")
        suffix = self._resolve_suffix(upload.filename, mime)
        key = self._make_key(suffix=suffix)
        abs_path = self.storage_dir / key
        abs_path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path = abs_path.with_suffix(abs_path.suffix + ".tmp")
        await upload.seek(0)
        await self._write_upload_to_path(upload, tmp_path)
        os.replace(tmp_path, abs_path)

        return StoredObject(
            key=key,
            url=self.public_url(key),
            mime=mime,
        )

    def public_url(self, key: str) -> str:
        key_norm = key.replace("\\", "/").lstrip("/")
        return f"{self.base_url}/{key_norm}"

    # ---------- internals ----------

    def _make_key(self, *, suffix: str) -> str:
        # shard by date to avoid huge directories
        now = datetime.now(timezone.utc)
        date_prefix = now.strftime("%Y/%m/%d")
        safe_suffix = suffix if suffix.startswith(".") else f".{suffix}"
        return f"{date_prefix}/{uuid.uuid4().hex}{safe_suffix}"

    def _resolve_mime(self, filename: Optional[str], content_type: Optional[str]) -> str:
        if content_type and content_type != "application/octet-stream":
            return content_type
        if filename:
            guess, _ = mimetypes.guess_type(filename)
            if guess:
                return guess
        return "application/octet-stream"

    def _resolve_suffix(self, filename: Optional[str], mime: str) -> str:
        if filename:
            suf = Path(filename).suffix
            if suf and len(suf) <= 10:
                return suf.lower()
        if mime == "application/octet-stream":
            return ".bin"
        return mimetypes.guess_extension(mime) or ".bin"

    async def _write_upload_to_path(self, upload: UploadFile, path: Path) -> None:
        chunk_size = 1024 * 1024  # 1MB
        with path.open("wb") as f:
            while True:
                chunk = await upload.read(chunk_size)
                if not chunk:
                    break
                f.write(chunk)

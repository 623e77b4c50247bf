import logging
import secrets
import time
from pathlib import Path

from fastapi import UploadFile

from ceresense.config import settings
from ceresense.utils.exceptions import InvalidFileException

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {
    "image/jpeg":    ".jpg",
    "image/png":     ".png",
    "image/gif":     ".gif",
    "image/webp":    ".webp",
    "image/svg+xml": ".svg",
}

UPLOAD_KINDS = ("gallery", "blog")


class FileStorage:
    """Local-disk store for uploaded images, served back under /uploads."""

    def __init__(self, base_dir: str = settings.UPLOAD_DIR, max_size: int = settings.MAX_UPLOAD_SIZE):
        self.base_dir = Path(base_dir).resolve()
        self.max_size = max_size
        for kind in UPLOAD_KINDS:
            (self.base_dir / kind).mkdir(parents=True, exist_ok=True)

    def save(self, upload: UploadFile, kind: str = "gallery") -> str:
        """Validate and write ``upload``; returns its public URL."""
        if kind not in UPLOAD_KINDS:
            raise ValueError(f"Unknown upload kind: {kind}")
        if upload.content_type not in ALLOWED_IMAGE_TYPES:
            raise InvalidFileException(
                "Invalid file type. Only JPEG, PNG, GIF, WebP, and SVG are allowed."
            )

        content = upload.file.read(self.max_size + 1)
        if len(content) > self.max_size:
            raise InvalidFileException(
                f"File too large. Maximum size is {self.max_size // (1024 * 1024)}MB."
            )

        # extension follows the checked MIME type, never the client file name
        ext = ALLOWED_IMAGE_TYPES[upload.content_type]
        filename = f"{kind}-{int(time.time() * 1000)}-{secrets.randbelow(10 ** 9)}{ext}"
        (self.base_dir / kind / filename).write_bytes(content)
        logger.info(f"Stored upload {upload.filename!r} as {kind}/{filename} ({len(content)} bytes)")
        return self.get_file_url(filename, kind)

    @staticmethod
    def get_file_url(filename: str, kind: str = "gallery") -> str:
        return f"/uploads/{kind}/{filename}"

    def delete(self, file_url: str) -> bool:
        """Remove the file behind a URL produced by ``save``. Missing files are ignored."""
        relative = file_url.removeprefix("/uploads/")
        path = (self.base_dir / relative).resolve()
        if self.base_dir not in path.parents:
            logger.warning(f"Refusing to delete file outside upload dir: {file_url}")
            return False
        if not path.is_file():
            return False
        path.unlink()
        return True

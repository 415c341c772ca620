# ehr_api/uploads.py
import logging
import time
from pathlib import Path
from typing import Callable, Optional

from fastapi import UploadFile

from .errors import PayloadTooLarge

logger = logging.getLogger(__name__)

MAX_PHOTO_BYTES = 10 * 1024 * 1024


class PhotoStore:
    """Writes uploaded photos to a directory as ``<field>_<epoch-millis><ext>``."""

    def __init__(self, directory: str, clock: Callable[[], float] = time.time):
        self.directory = Path(directory)
        self._clock = clock

    def save(self, upload: Optional[UploadFile], field: str = "photo") -> Optional[str]:
        if upload is None or not upload.filename:
            return None

        data = upload.file.read(MAX_PHOTO_BYTES + 1)
        if len(data) > MAX_PHOTO_BYTES:
            raise PayloadTooLarge("Photo too large (max 10MB).")

        self.directory.mkdir(parents=True, exist_ok=True)
        suffix = Path(upload.filename).suffix.lower()
        stamp = int(self._clock() * 1000)
        while (self.directory / f"{field}_{stamp}{suffix}").exists():
            stamp += 1
        name = f"{field}_{stamp}{suffix}"
        (self.directory / name).write_bytes(data)
        logger.info("Stored photo %s (%d bytes)", name, len(data))
        return name

    def delete(self, name: Optional[str]) -> None:
        if not name:
            return
        try:
            (self.directory / name).unlink()
        except FileNotFoundError:
            logger.warning("Photo %s already gone", name)

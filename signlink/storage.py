# File: signlink/storage.py
# DESCRIPTION: Local filesystem storage for uploaded originals and signed outputs.

import os
import uuid
from datetime import datetime
from pathlib import Path

from signlink.core.errors import StorageError
from signlink.core.tokens import sanitize_filename
from signlink.log_utils.logging_config import configure_logging

logger = configure_logging("signlink.storage", "signlink.log")


class DocumentStorage:
    """
    Stores bytes under `root` and hands back references relative to it,
    e.g. "pdfs/<id>.pdf" or "signed/20240101/signed-<id>-<hhmmss>-<rand>.pdf".
    """

    def __init__(self, root: str):
        self.root = Path(root).resolve()

    def _resolve(self, ref: str) -> Path:
        path = (self.root / ref).resolve()
        if os.path.commonpath([str(self.root), str(path)]) != str(self.root):
            raise StorageError("resolve", f"reference escapes storage root: {ref}")
        return path

    def save(self, folder: str, filename: str, data: bytes) -> str:
        ref = f"{folder}/{sanitize_filename(filename)}"
        path = self._resolve(ref)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Refuse to overwrite: every stored object is immutable
            with open(path, "xb") as f_out:
                f_out.write(data)
        except OSError as e:
            logger.error(f"Failed to write {ref}: {e}")
            raise StorageError("write", str(e)) from e
        logger.info(f"Stored {len(data)} bytes at {ref}")
        return ref

    def save_original(self, document_id, data: bytes) -> str:
        return self.save("pdfs", f"{document_id}.pdf", data)

    def save_signed(self, document_id, data: bytes, now: datetime) -> str:
        folder = f"signed/{now.strftime('%Y%m%d')}"
        filename = f"signed-{document_id}-{now.strftime('%H%M%S')}-{uuid.uuid4().hex[:8]}.pdf"
        return self.save(folder, filename, data)

    def read(self, ref: str) -> bytes:
        path = self._resolve(ref)
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            logger.error(f"Failed to read {ref}: {e}")
            raise StorageError("read", str(e)) from e

    def delete(self, ref: str) -> None:
        path = self._resolve(ref)
        try:
            path.unlink()
            logger.info(f"Deleted {ref}")
        except FileNotFoundError:
            logger.warning(f"Nothing to delete at {ref}")
        except OSError as e:
            raise StorageError("delete", str(e)) from e

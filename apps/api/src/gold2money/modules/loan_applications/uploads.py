"""
Loan Document Uploads

Stores at most one uploaded document per submission in the upload
directory. Stored names combine the form field, a millisecond timestamp and
a random token, and files are created exclusively so a name collision can
never overwrite an earlier upload.
"""

import asyncio
import logging
import re
import secrets
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from fastapi import UploadFile

from gold2money.core.errors import StorageError

logger = logging.getLogger(__name__)

UPLOAD_FIELD = "loanDocument"
RANDOM_TOKEN_BYTES = 8
_SAFE_EXTENSION = re.compile(r"^\.[A-Za-z0-9]{1,16}$")


@dataclass(frozen=True)
class UploadedFile:
    """A document stored for one submission."""

    original_name: str
    stored_path: Path
    field_name: str = UPLOAD_FIELD


class UploadStorage:
    """Writes uploaded documents into a single directory."""

    def __init__(self, upload_dir: Path):
        self.upload_dir = Path(upload_dir)

    def ensure_directory(self) -> None:
        """Create the upload directory if it does not exist yet."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def generate_filename(field_name: str, original_name: str) -> str:
        """
        Build a stored filename such as ``loanDocument-1718000000000-9f2c...pdf``.

        The original extension is kept when it is a plain alphanumeric
        suffix and dropped otherwise.
        """
        extension = Path(original_name).suffix
        if not _SAFE_EXTENSION.match(extension):
            extension = ""
        timestamp = int(time.time() * 1000)
        token = secrets.token_hex(RANDOM_TOKEN_BYTES)
        return f"{field_name}-{timestamp}-{token}{extension}"

    def _write(self, source: BinaryIO, destination: Path) -> None:
        self.ensure_directory()
        source.seek(0)
        try:
            with open(destination, "xb") as target:
                shutil.copyfileobj(source, target)
        except FileExistsError:
            # Someone else's file; leave it alone
            raise
        except OSError:
            destination.unlink(missing_ok=True)
            raise

    async def save(
        self,
        upload: UploadFile | None,
        field_name: str = UPLOAD_FIELD,
    ) -> UploadedFile | None:
        """
        Store an uploaded document.

        Args:
            upload: The multipart file, or None when the form carried none
            field_name: Form field the file arrived under

        Returns:
            The stored file, or None when nothing was uploaded

        Raises:
            StorageError: If the file could not be written
        """
        if upload is None or not upload.filename:
            return None

        original_name = Path(upload.filename).name
        stored_path = self.upload_dir / self.generate_filename(field_name, original_name)

        try:
            await asyncio.to_thread(self._write, upload.file, stored_path)
        except OSError as e:
            logger.error(f"Failed to store uploaded file in {self.upload_dir}: {e}")
            raise StorageError() from e

        logger.info(f"Stored uploaded file: {stored_path}")
        return UploadedFile(
            original_name=original_name,
            stored_path=stored_path,
            field_name=field_name,
        )

    def discard(self, uploaded: UploadedFile) -> bool:
        """
        Delete a stored document. Failures are logged, never raised.

        Returns:
            True if the file is gone afterwards
        """
        try:
            uploaded.stored_path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Error deleting uploaded file {uploaded.stored_path}: {e}")
            return False

        logger.info(f"Uploaded file deleted successfully: {uploaded.stored_path}")
        return True

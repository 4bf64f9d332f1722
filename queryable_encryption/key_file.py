"""
Local customer master key file.

The "local" KMS provider uses a 96-byte master key kept on disk. The file is
generated once and never rewritten. Creation publishes a fully written
temporary file with os.link, which fails if the target already exists, so
concurrent first-time initializers cannot overwrite each other and readers
never observe a partially written key.

WARNING: Do not use a local key file in a production application.
"""

from __future__ import annotations

import logging
import os
import secrets
import tempfile
from pathlib import Path
from typing import Union

from .config import DEFAULT_KEY_FILE_PATH
from .errors import KeyFileIOError, KeyValidationError

logger = logging.getLogger(__name__)

LOCAL_MASTER_KEY_SIZE: int = 96


class LocalKeyFileStore:
    """Creates, validates and reads the local master key file."""

    def __init__(self, path: Union[str, Path] = DEFAULT_KEY_FILE_PATH) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Location of the key file."""
        return self._path

    def ensure_key_file(self) -> bool:
        """
        Create the key file with fresh random bytes if it does not exist.

        Returns:
            True if this call created the file, False if it already existed
            (including when a concurrent initializer created it first)

        Raises:
            KeyFileIOError: If the filesystem refuses the write
        """
        if self._path.exists():
            return False

        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=".customer-master-key-", dir=self._path.parent
            )
        except OSError as e:
            raise KeyFileIOError(
                f"Unable to write Customer Master Key to file due to the following error: {e}"
            ) from e

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(secrets.token_bytes(LOCAL_MASTER_KEY_SIZE))
                f.flush()
                os.fsync(f.fileno())
            try:
                os.link(tmp_name, self._path)
            except FileExistsError:
                logger.info("Customer master key file created concurrently: %s", self._path)
                return False
        except OSError as e:
            raise KeyFileIOError(
                f"Unable to write Customer Master Key to file due to the following error: {e}"
            ) from e
        finally:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass

        logger.info("Generated customer master key file: %s", self._path)
        return True

    def read_key(self) -> bytes:
        """
        Read and validate the key file.

        Returns:
            The raw 96 key bytes

        Raises:
            KeyFileIOError: If the file cannot be read
            KeyValidationError: If the file is not exactly 96 bytes
        """
        try:
            key = self._path.read_bytes()
        except OSError as e:
            raise KeyFileIOError(
                f"Unable to read the Customer Master Key due to the following error: {e}"
            ) from e

        if len(key) != LOCAL_MASTER_KEY_SIZE:
            raise KeyValidationError(
                f"Expected the customer master key file to be {LOCAL_MASTER_KEY_SIZE} "
                f"bytes, got {len(key)}"
            )
        return key

    def load_or_create(self) -> bytes:
        """Ensure the key file exists, then read it."""
        self.ensure_key_file()
        return self.read_key()

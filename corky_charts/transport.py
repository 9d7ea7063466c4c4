"""
Chart output transport.
Writes rendered chart images into the configured output directory.
"""

import os
import tempfile
import logging
from pathlib import Path
from typing import Union

from .errors import EncodingError

logger = logging.getLogger(__name__)


class OutputWriter:
    """Local filesystem writer for rendered charts."""

    def __init__(self, base_dir: Union[str, Path]):
        self.base_dir = Path(base_dir)

    def _get_path(self, key: str) -> Path:
        """Convert key to filesystem path."""
        # Ticker names like BTC/USDT must not create subdirectories or escape base_dir
        clean_key = key.replace('/', '-').replace('\\', '-').replace('..', '.')
        return self.base_dir / clean_key

    def path_for(self, key: str) -> Path:
        return self._get_path(key)

    def save_bytes(self, key: str, data: bytes) -> Path:
        """
        Atomically write bytes to key, creating the output directory if absent.

        Concurrent writers of the same key race with last-writer-wins semantics;
        readers never see a partially written file.

        Raises:
            EncodingError: if the directory or file cannot be written, including
                keys the filesystem rejects such as ones with NUL bytes
        """
        file_path = self._get_path(key)
        tmp_path = None
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)

            # Temp file in the same directory keeps the rename atomic
            with tempfile.NamedTemporaryFile(
                mode='wb',
                dir=file_path.parent,
                prefix=f'.{file_path.stem}.',
                suffix='.tmp',
                delete=False
            ) as tmp_file:
                tmp_path = Path(tmp_file.name)
                tmp_file.write(data)

            os.replace(tmp_path, file_path)
            logger.debug(f"Saved {len(data)} bytes to {file_path}")
            return file_path
        except (OSError, ValueError) as e:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise EncodingError(f"Could not write {file_path}: {e}") from e

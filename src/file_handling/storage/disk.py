"""Local disk file manager."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ..constants import KEY_SEPARATOR
from ..paths import FileId, build_key
from ..storage_models import FileAddress
from .base import BaseFileManager

logger = logging.getLogger(__name__)


class DiskFileManager(BaseFileManager):
    """
    Stores files below a root folder on the local filesystem.

    Files are stored with sharding: root/<container>/ab/cd/<id>_<name>.
    Keys are truncated to the Azure limits as well, so a later migration
    to blob storage keeps every path.
    """

    def __init__(self, root_folder: Union[str, Path]):
        """
        Initialize disk file manager.

        Args:
            root_folder: Directory below which all containers are stored
        """
        if root_folder is None:
            raise ValueError("root_folder is required for DiskFileManager")
        self.root_folder = Path(root_folder)

    def get_file_path(
        self,
        container: str,
        file_name: Optional[str],
        *,
        file_id: Optional[FileId] = None,
        file_date: Optional[datetime] = None,
    ) -> Path:
        """
        Absolute path a file is stored at.

        Raises:
            ContainerNameError: If the container name is invalid
        """
        return self._key_path(build_key(container, file_name, file_id, file_date))

    def _key_path(self, key: str) -> Path:
        """
        Map the POSIX key onto a native path below the root folder.

        Raises:
            ValueError: If the key would resolve outside the root folder
        """
        segments = key.split(KEY_SEPARATOR)
        # Check both separators, a backslash traverses on Windows
        if ".." in segments or ".." in key.split("\\"):
            raise ValueError(f"Unsafe file path: {key}")

        path = self.root_folder.joinpath(*segments)
        try:
            path.resolve().relative_to(self.root_folder.resolve())
        except ValueError:
            raise ValueError(f"File path escapes root folder: {key}")
        return path

    def _read(self, key: str) -> bytes:
        path = self._key_path(key)
        if not path.is_file():
            raise FileNotFoundError(f"The file does not exist: {key}")
        return path.read_bytes()

    def _write(self, key: str, data: bytes, address: FileAddress) -> None:
        path = self._key_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.debug("Wrote %d bytes to %s", len(data), path)

    def _delete(self, key: str) -> None:
        path = self._key_path(key)
        if not path.is_file():
            raise FileNotFoundError(f"The file does not exist: {key}")
        path.unlink()

    def _exists(self, key: str) -> bool:
        return self._key_path(key).is_file()

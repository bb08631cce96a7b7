"""Base protocols and shared plumbing for file managers."""

import logging
from datetime import datetime
from typing import BinaryIO, Callable, Optional, Protocol, TypeVar, Union, runtime_checkable

from ..paths import FileId
from ..results import RepositoryResult, StorageFailure
from ..storage_models import FileAddress, SasDownloadLink, SasUploadLink

logger = logging.getLogger(__name__)

T = TypeVar("T")

Content = Union[bytes, bytearray, memoryview, BinaryIO]


@runtime_checkable
class FileManager(Protocol):
    """
    Protocol for file storage backends.

    Every operation addresses a file by container and name plus an optional
    file_id (id sharded layout) or file_date (timestamp layout). Failures,
    including invalid container names, are returned as failed results.
    """

    def get_file(
        self,
        container: str,
        file_name: Optional[str],
        *,
        file_id: Optional[FileId] = None,
        file_date: Optional[datetime] = None,
    ) -> RepositoryResult[bytes]:
        """
        Read a file.

        Returns:
            Result with the file bytes, or a NOT_FOUND failure
        """
        ...

    def save_file(
        self,
        container: str,
        file_name: Optional[str],
        content: Content,
        *,
        file_id: Optional[FileId] = None,
        file_date: Optional[datetime] = None,
    ) -> RepositoryResult[str]:
        """
        Store a file, overwriting any file with the same key.

        Returns:
            Result with the storage key
        """
        ...

    def delete_file(
        self,
        container: str,
        file_name: Optional[str],
        *,
        file_id: Optional[FileId] = None,
        file_date: Optional[datetime] = None,
    ) -> RepositoryResult[None]:
        """Delete a file."""
        ...

    def file_exists(
        self,
        container: str,
        file_name: Optional[str],
        *,
        file_id: Optional[FileId] = None,
        file_date: Optional[datetime] = None,
    ) -> RepositoryResult[bool]:
        """Check whether a file exists."""
        ...


@runtime_checkable
class LinkingFileManager(FileManager, Protocol):
    """File manager that can also issue time limited signed links."""

    def ensure_container_created(self, container: str) -> RepositoryResult[None]:
        ...

    def get_sas_upload_link(
        self,
        container: str,
        file_name: Optional[str],
        *,
        file_id: Optional[FileId] = None,
        file_date: Optional[datetime] = None,
        valid_for_minutes: int = 5,
    ) -> RepositoryResult[SasUploadLink]:
        ...

    def get_sas_download_link(
        self,
        container: str,
        file_name: Optional[str],
        *,
        file_id: Optional[FileId] = None,
        file_date: Optional[datetime] = None,
        valid_for_minutes: int = 5,
        friendly_file_name: Optional[str] = None,
    ) -> RepositoryResult[SasDownloadLink]:
        ...


def read_content(content: Content) -> bytes:
    """Copy bytes or the remainder of a binary stream into a bytes object."""
    if isinstance(content, (bytes, bytearray, memoryview)):
        return bytes(content)
    if hasattr(content, "read"):
        return content.read()
    raise TypeError(f"Expected bytes or a binary file object, got {type(content).__name__}")


class BaseFileManager:
    """
    Shared implementation of the FileManager protocol.

    Subclasses only deal with storage keys; address resolution, key
    derivation and the conversion of exceptions into failed results happen
    here, before any backend call is made.
    """

    def _read(self, key: str) -> bytes:
        """Return the bytes stored under key or raise FileNotFoundError."""
        raise NotImplementedError

    def _write(self, key: str, data: bytes, address: FileAddress) -> None:
        raise NotImplementedError

    def _delete(self, key: str) -> None:
        raise NotImplementedError

    def _exists(self, key: str) -> bool:
        raise NotImplementedError

    def _run(
        self,
        operation: str,
        address_args: tuple,
        action: Callable[[str, FileAddress], T],
    ) -> RepositoryResult[T]:
        """Resolve the storage key and run action, returning a result."""
        key = None
        try:
            address = FileAddress.of(*address_args)
            key = address.key()
            logger.debug("%s %s via %s", operation, key, type(self).__name__)
            return RepositoryResult.success(action(key, address))
        except Exception as e:
            failure = StorageFailure.from_exception(e, key=key)
            logger.warning("%s failed for %s: %s", operation, key or address_args[0], failure.message)
            return RepositoryResult.fail(failure)

    def get_file(self, container, file_name, *, file_id=None, file_date=None) -> RepositoryResult[bytes]:
        return self._run(
            "get", (container, file_name, file_id, file_date),
            lambda key, _: self._read(key),
        )

    def save_file(self, container, file_name, content: Content, *, file_id=None, file_date=None) -> RepositoryResult[str]:
        def save(key: str, address: FileAddress) -> str:
            self._write(key, read_content(content), address)
            return key

        return self._run("save", (container, file_name, file_id, file_date), save)

    def delete_file(self, container, file_name, *, file_id=None, file_date=None) -> RepositoryResult[None]:
        return self._run(
            "delete", (container, file_name, file_id, file_date),
            lambda key, _: self._delete(key),
        )

    def file_exists(self, container, file_name, *, file_id=None, file_date=None) -> RepositoryResult[bool]:
        return self._run(
            "exists", (container, file_name, file_id, file_date),
            lambda key, _: self._exists(key),
        )

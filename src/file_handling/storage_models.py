"""Data models shared by the file managers.

Contains the in-memory file record, the addressing mode of a single call
and the signed link payloads issued by the Azure backend.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .paths import FileId, build_key, validate_container_name


class FileAddress(BaseModel):
    """
    Logical identity of one file: container, name and addressing qualifier.

    At most one of file_id / file_date may be set when deriving the key;
    none selects the plain layout.
    """
    model_config = ConfigDict(frozen=True)

    container: Optional[str] = None
    file_name: Optional[str] = None
    file_id: Optional[uuid.UUID] = None
    file_date: Optional[datetime] = None

    @classmethod
    def of(
        cls,
        container: Optional[str],
        file_name: Optional[str],
        file_id: Optional[FileId] = None,
        file_date: Optional[datetime] = None,
    ) -> "FileAddress":
        """Build an address, parsing string file ids once the container is valid."""
        validate_container_name(container)
        if file_id is not None and not isinstance(file_id, uuid.UUID):
            file_id = uuid.UUID(str(file_id))
        return cls(container=container, file_name=file_name, file_id=file_id, file_date=file_date)

    @property
    def mode(self) -> str:
        """'id', 'timestamp' or 'plain'."""
        if self.file_id is not None:
            return "id"
        if self.file_date is not None:
            return "timestamp"
        return "plain"

    def key(self) -> str:
        """Container-qualified storage key (validates the container first)."""
        validate_container_name(self.container)
        if self.mode == "plain" and not (self.file_name and self.file_name.strip()):
            raise ValueError("A file name is required when no file_id or file_date is given")
        return build_key(self.container, self.file_name, self.file_id, self.file_date)


class SavedFile(BaseModel):
    """A file held by an in-memory store."""
    container: str
    file_name: Optional[str] = None
    file_id: Optional[uuid.UUID] = None
    file_date: Optional[datetime] = None
    key: str                               # derived storage key, used for lookups
    content: bytes


class SasUploadLink(BaseModel):
    """Pre-signed URL allowing a direct upload (create + write)."""
    upload_link: str
    valid_until: datetime


class SasDownloadLink(BaseModel):
    """Pre-signed URL allowing a direct download (read)."""
    download_link: str
    valid_until: datetime

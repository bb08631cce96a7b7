"""Azure blob storage file manager."""

import logging
import posixpath
import re
import urllib.parse
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from azure.core.exceptions import ResourceNotFoundError
from azure.storage.blob import (
    BlobProperties,
    BlobSasPermissions,
    BlobServiceClient,
    generate_blob_sas,
)

from ..constants import DEFAULT_LINK_VALIDITY_MINUTES
from ..paths import split_container, validate_container_name
from ..results import RepositoryResult, StorageFailure
from ..storage_models import FileAddress, SasDownloadLink, SasUploadLink
from .base import BaseFileManager

logger = logging.getLogger(__name__)


def parse_account_key(connection_string: str) -> Optional[str]:
    """Extract the AccountKey value from a storage connection string."""
    for part in connection_string.split(";"):
        name, sep, value = part.partition("=")
        if sep and name.strip().lower() == "accountkey":
            return value.strip()
    return None


# RFC 2616 token characters, usable as a bare filename parameter
_TOKEN_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


def content_disposition(file_name: str) -> str:
    """
    Attachment disposition header value for a download file name.

    Token names are used bare, other printable ASCII names are quoted and
    anything else is percent-encoded as ``filename*=UTF-8''...``.
    """
    if _TOKEN_RE.fullmatch(file_name):
        return f"attachment; filename={file_name}"
    if file_name.isascii() and file_name.isprintable():
        escaped = file_name.replace("\\", "\\\\").replace('"', '\\"')
        return f'attachment; filename="{escaped}"'
    return f"attachment; filename*=UTF-8''{urllib.parse.quote(file_name, safe='')}"


class AzureBlobFileManager(BaseFileManager):
    """
    Azure Blob Storage implementation.

    The first key segment is the blob container; the rest of the key is
    the blob name, e.g. container ``test-files`` and blob ``c3/b8/<id>_file.bin``.
    """

    def __init__(self, connection_string: str, service_client: Optional[BlobServiceClient] = None):
        """
        Initialize Azure blob file manager.

        Args:
            connection_string: Azure Storage connection string
            service_client: Optional preconfigured client (built from the
                connection string when omitted)
        """
        if not connection_string:
            raise ValueError("connection_string is required for AzureBlobFileManager")
        self.client = service_client or BlobServiceClient.from_connection_string(connection_string)
        self._account_key = parse_account_key(connection_string)

    def _blob_client(self, key: str):
        container, blob_name = split_container(key)
        return self.client.get_blob_client(container=container, blob=blob_name)

    def _read(self, key: str) -> bytes:
        try:
            return self._blob_client(key).download_blob().readall()
        except ResourceNotFoundError as e:
            raise FileNotFoundError(f"Blob not found: {key}") from e

    def _write(self, key: str, data: bytes, address: FileAddress) -> None:
        self._blob_client(key).upload_blob(data, overwrite=True)

    def _delete(self, key: str) -> None:
        try:
            self._blob_client(key).delete_blob()
        except ResourceNotFoundError as e:
            raise FileNotFoundError(f"Blob not found: {key}") from e

    def _exists(self, key: str) -> bool:
        return self._blob_client(key).exists()

    def ensure_container_created(self, container: str) -> RepositoryResult[None]:
        """Create the blob container unless it already exists."""
        try:
            validate_container_name(container)
            container_client = self.client.get_container_client(container)
            if not container_client.exists():
                container_client.create_container()
                logger.info("Created blob container %s", container)
            return RepositoryResult.success()
        except Exception as e:
            return RepositoryResult.fail(StorageFailure.from_exception(e))

    def get_blob_properties(
        self, container, file_name, *, file_id=None, file_date=None
    ) -> RepositoryResult[BlobProperties]:
        """Blob properties (size, etag, content settings) of a stored file."""
        def properties(key: str, _) -> BlobProperties:
            try:
                return self._blob_client(key).get_blob_properties()
            except ResourceNotFoundError as e:
                raise FileNotFoundError(f"Blob not found: {key}") from e

        return self._run("properties", (container, file_name, file_id, file_date), properties)

    def get_sas_upload_link(
        self,
        container,
        file_name,
        *,
        file_id=None,
        file_date=None,
        valid_for_minutes: int = DEFAULT_LINK_VALIDITY_MINUTES,
    ) -> RepositoryResult[SasUploadLink]:
        """
        Issue a pre-signed URL that allows creating/writing the blob.

        Args:
            valid_for_minutes: Lifetime of the link, must be positive

        Returns:
            Result with the upload link and its expiry
        """
        def upload_link(key: str, _) -> SasUploadLink:
            link, valid_until = self._sas_link(
                key, valid_for_minutes, BlobSasPermissions(create=True, write=True), None
            )
            return SasUploadLink(upload_link=link, valid_until=valid_until)

        return self._run("upload link", (container, file_name, file_id, file_date), upload_link)

    def get_sas_download_link(
        self,
        container,
        file_name,
        *,
        file_id=None,
        file_date=None,
        valid_for_minutes: int = DEFAULT_LINK_VALIDITY_MINUTES,
        friendly_file_name: Optional[str] = None,
    ) -> RepositoryResult[SasDownloadLink]:
        """
        Issue a pre-signed URL that allows reading the blob.

        Args:
            valid_for_minutes: Lifetime of the link, must be positive
            friendly_file_name: File name offered to browsers; defaults to
                the last segment of the blob name

        Returns:
            Result with the download link and its expiry
        """
        def download_link(key: str, _) -> SasDownloadLink:
            link, valid_until = self._sas_link(
                key, valid_for_minutes, BlobSasPermissions(read=True), friendly_file_name
            )
            return SasDownloadLink(download_link=link, valid_until=valid_until)

        return self._run("download link", (container, file_name, file_id, file_date), download_link)

    def _sas_link(
        self,
        key: str,
        valid_for_minutes: int,
        permission: BlobSasPermissions,
        friendly_file_name: Optional[str],
    ) -> Tuple[str, datetime]:
        if valid_for_minutes <= 0:
            raise ValueError("The validity in minutes must be greater than zero")
        if not self._account_key:
            raise ValueError("The connection string has no AccountKey to sign links with")

        container, blob_name = split_container(key)
        starts_on = datetime.now(timezone.utc)
        valid_until = starts_on + timedelta(minutes=valid_for_minutes)

        if friendly_file_name and friendly_file_name.strip():
            download_name = friendly_file_name
        else:
            download_name = posixpath.basename(blob_name)

        sas_token = generate_blob_sas(
            account_name=self.client.account_name,
            container_name=container,
            blob_name=blob_name,
            account_key=self._account_key,
            permission=permission,
            start=starts_on,
            expiry=valid_until,
            content_disposition=content_disposition(download_name),
        )
        blob_client = self.client.get_blob_client(container=container, blob=blob_name)
        return f"{blob_client.url}?{sas_token}", valid_until

"""Deterministic storage key derivation shared by all file managers.

A storage key is a pure function of the container name, the addressing
qualifier (file id or timestamp) and the file name. Keys must stay
byte-for-byte stable: previously stored files are located by recomputing
them. Three layouts exist:

- plain:      ``<container>/<file_name>``
- id sharded: ``<container>/c3/b8/c3b836ef-..._<file_name>``
- timestamp:  ``2018/07/19/15/2018-07-19-15-05-20_<file_name>``
"""

from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime
from typing import Optional, Tuple, Union

from .constants import (
    CONTAINER_NAME_MAX_LENGTH,
    CONTAINER_NAME_MIN_LENGTH,
    CONTAINER_NAME_PATTERN,
    FILE_PATH_MAX_LENGTH,
    KEY_SEPARATOR,
)
from .errors import InvalidContainerFormatError, MissingContainerError

logger = logging.getLogger(__name__)

_CONTAINER_NAME = re.compile(CONTAINER_NAME_PATTERN)

FileId = Union[uuid.UUID, str]


def with_max_length(value: Optional[str], max_length: int) -> Optional[str]:
    """Return ``value`` cut to at most ``max_length`` characters.

    ``None`` stays ``None``. No ellipsis is added and file extensions are
    not preserved.
    """
    if value is None or len(value) <= max_length:
        return value
    return value[:max_length]


def is_valid_container_name(container: Optional[str]) -> bool:
    """Check a container name without raising."""
    if container is None or not container.strip():
        return False
    return (
        _CONTAINER_NAME.fullmatch(container) is not None
        and CONTAINER_NAME_MIN_LENGTH <= len(container) <= CONTAINER_NAME_MAX_LENGTH
    )


def validate_container_name(container: Optional[str]) -> None:
    """
    Validate a physical container name.

    The rules follow Azure blob containers (the most restrictive backend)
    but are enforced for every backend so that containers stay portable:
    lowercase ASCII letters and '-' only, 3 to 63 characters inclusive.

    Args:
        container: Container name to check

    Raises:
        MissingContainerError: If the name is None, empty or whitespace
        InvalidContainerFormatError: If the name has invalid characters or length
    """
    if container is None or not container.strip():
        raise MissingContainerError(container)

    if not is_valid_container_name(container):
        raise InvalidContainerFormatError(
            container, CONTAINER_NAME_MIN_LENGTH, CONTAINER_NAME_MAX_LENGTH
        )


def format_file_id(file_id: FileId) -> str:
    """Render a file id in its canonical lowercase hyphenated form."""
    if not isinstance(file_id, uuid.UUID):
        file_id = uuid.UUID(str(file_id))
    return str(file_id).lower()


def build_plain_key(container: str, file_name: Optional[str]) -> str:
    """
    Build an unsharded key directly below the container.

    Args:
        container: Container name
        file_name: File name, truncated to the max path length

    Returns:
        Storage key ``<container>/<file_name>``
    """
    validate_container_name(container)
    save_name = with_max_length(file_name, FILE_PATH_MAX_LENGTH) or ""
    return KEY_SEPARATOR.join([container, save_name])


def build_id_sharded_key(container: str, file_id: FileId, file_name: Optional[str]) -> str:
    """
    Build a key sharded by the first four characters of the file id.

    Two-level sharding (``ab/cd``) keeps the number of entries per directory
    or blob prefix bounded without any side index.

    Args:
        container: Container name
        file_id: UUID (or its string form) of the file
        file_name: Optional file name appended after the id

    Returns:
        Storage key ``<container>/<id[0:2]>/<id[2:4]>/<id>_<file_name>``

    Raises:
        ContainerNameError: If the container name is invalid
    """
    validate_container_name(container)

    id_text = format_file_id(file_id)
    if file_name is None or not file_name.strip():
        save_name = id_text
    else:
        save_name = f"{id_text}_{file_name}"
    save_name = with_max_length(save_name, FILE_PATH_MAX_LENGTH)

    key = KEY_SEPARATOR.join([container, id_text[:2], id_text[2:4], save_name])
    logger.debug("Derived id sharded key: %s", key)
    return key


def build_timestamp_sharded_key(file_date: datetime, file_name: Optional[str]) -> str:
    """
    Build a date hierarchical key, e.g. ``2018/07/19/14/2018-07-19-14-33-32_file.ext``.

    An absent file name leaves a trailing underscore; existing stored keys
    depend on this layout.

    Args:
        file_date: Timestamp of the file (second granularity)
        file_name: Optional file name

    Returns:
        Storage key relative to the container
    """
    # strftime does not zero pad years below 1000 on every platform
    year = f"{file_date.year:04d}"
    month = f"{file_date.month:02d}"
    day = f"{file_date.day:02d}"
    hour = f"{file_date.hour:02d}"
    timestamp = (
        f"{year}-{month}-{day}-{hour}-{file_date.minute:02d}-{file_date.second:02d}"
    )

    save_name = with_max_length(f"{timestamp}_{file_name or ''}", FILE_PATH_MAX_LENGTH)
    return KEY_SEPARATOR.join([year, month, day, hour, save_name])


def build_container_timestamp_key(
    container: str, file_date: datetime, file_name: Optional[str]
) -> str:
    """Timestamp sharded key prefixed with its (validated) container."""
    validate_container_name(container)
    return KEY_SEPARATOR.join([container, build_timestamp_sharded_key(file_date, file_name)])


def build_key(
    container: str,
    file_name: Optional[str],
    file_id: Optional[FileId] = None,
    file_date: Optional[datetime] = None,
) -> str:
    """
    Build the container-qualified key for whichever addressing mode is given.

    Args:
        container: Container name
        file_name: File name
        file_id: Selects id sharded mode
        file_date: Selects timestamp sharded mode

    Returns:
        Storage key starting with the container segment

    Raises:
        ContainerNameError: If the container name is invalid
        ValueError: If both file_id and file_date are given
    """
    validate_container_name(container)
    if file_id is not None and file_date is not None:
        raise ValueError("Pass either file_id or file_date, not both")
    if file_id is not None:
        return build_id_sharded_key(container, file_id, file_name)
    if file_date is not None:
        return build_container_timestamp_key(container, file_date, file_name)
    return build_plain_key(container, file_name)


def split_container(key: str) -> Tuple[str, str]:
    """
    Split a storage key into its container and the remaining blob name.

    Args:
        key: Container-qualified storage key

    Returns:
        Tuple of (container, blob_name)

    Raises:
        ValueError: If the key has no container segment
    """
    container, sep, blob_name = key.partition(KEY_SEPARATOR)
    if not sep or not container:
        raise ValueError(f"Storage key has no container segment: {key}")
    return container, blob_name


__all__ = [
    "build_container_timestamp_key",
    "build_id_sharded_key",
    "build_key",
    "build_plain_key",
    "build_timestamp_sharded_key",
    "format_file_id",
    "is_valid_container_name",
    "split_container",
    "validate_container_name",
    "with_max_length",
]

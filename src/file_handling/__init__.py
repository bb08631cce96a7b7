"""file-handling: uniform file storage over disk, memory and Azure blob storage."""

from .errors import (
    ConfigError,
    ContainerNameError,
    FileHandlingError,
    InvalidContainerFormatError,
    MissingContainerError,
    StorageError,
)
from .paths import (
    build_id_sharded_key,
    build_plain_key,
    build_timestamp_sharded_key,
    validate_container_name,
    with_max_length,
)
from .results import FailureKind, RepositoryResult, StorageFailure

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "ContainerNameError",
    "FailureKind",
    "FileHandlingError",
    "InvalidContainerFormatError",
    "MissingContainerError",
    "RepositoryResult",
    "StorageError",
    "StorageFailure",
    "build_id_sharded_key",
    "build_plain_key",
    "build_timestamp_sharded_key",
    "validate_container_name",
    "with_max_length",
]

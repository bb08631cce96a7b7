"""Shared test fixtures and utilities."""

import uuid
from datetime import datetime

import pytest

from file_handling.storage import InMemoryFileManager

FILE_ID = uuid.UUID("c3b836ef-ec43-4ac2-bba1-f477db3f480d")
CONTAINER = "test-files"
FILE_NAME = "file.bin"
FILE_DATE = datetime(2018, 7, 19, 15, 5, 20)

# Connection string with a syntactically valid (base64) account key
AZURE_CONNECTION_STRING = (
    "DefaultEndpointsProtocol=https;AccountName=testaccount;"
    "AccountKey=dGVzdGtleQ==;EndpointSuffix=core.windows.net"
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep developer config out of the tests."""
    for var in (
        "FILE_HANDLING_CONFIG",
        "FILE_HANDLING_PROVIDER",
        "FILE_HANDLING_ROOT",
        "AZURE_STORAGE_CONNECTION_STRING",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def clear_shared_memory_store():
    """The shared in-memory store lives for the whole process."""
    InMemoryFileManager.clear_files()
    yield
    InMemoryFileManager.clear_files()


@pytest.fixture
def write_config(tmp_path):
    """Factory fixture to write a YAML config file."""
    def _write(content: str, name: str = "config.yaml"):
        path = tmp_path / name
        path.write_text(content)
        return path
    return _write

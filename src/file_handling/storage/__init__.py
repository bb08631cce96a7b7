"""Storage package with the file manager backends."""

from .base import BaseFileManager, FileManager, LinkingFileManager
from .disk import DiskFileManager
from .factory import make_file_manager
from .memory import InMemoryFileManager, InMemoryFileStore, InstanceInMemoryFileManager

__all__ = [
    "BaseFileManager",
    "DiskFileManager",
    "FileManager",
    "InMemoryFileManager",
    "InMemoryFileStore",
    "InstanceInMemoryFileManager",
    "LinkingFileManager",
    "make_file_manager",
]

"""Factory for creating file manager instances."""

from ..config import FileHandlingSettings
from ..errors import ConfigError
from .base import FileManager
from .disk import DiskFileManager
from .memory import InMemoryFileManager


def validate_azure_config(settings: FileHandlingSettings) -> None:
    """
    Early validation of Azure configuration.

    Raises:
        ConfigError: If no connection string is configured
    """
    if not settings.connection_string:
        raise ConfigError(
            "Set AZURE_STORAGE_CONNECTION_STRING or connection_string "
            "for Azure blob storage"
        )


def make_file_manager(settings: FileHandlingSettings) -> FileManager:
    """
    Create file manager instance based on settings.

    Args:
        settings: File handling configuration

    Returns:
        FileManager for the configured provider

    Raises:
        ConfigError: If configuration is incomplete
        NotImplementedError: If provider is not supported
    """
    if settings.provider == "disk":
        if not settings.root_folder:
            raise ConfigError("root_folder (or FILE_HANDLING_ROOT) required for disk storage")
        return DiskFileManager(settings.root_folder)

    elif settings.provider == "memory":
        return InMemoryFileManager()

    elif settings.provider == "azure":
        validate_azure_config(settings)
        from .azure import AzureBlobFileManager
        return AzureBlobFileManager(settings.connection_string)

    else:
        raise NotImplementedError(f"Provider {settings.provider} not supported")

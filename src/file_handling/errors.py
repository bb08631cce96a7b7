"""Custom exceptions for file-handling.

Key derivation raises these directly; the file managers convert them into
failed results at their I/O boundary.
"""


class FileHandlingError(RuntimeError):
    """Base class for all file-handling errors."""
    pass


# Container Errors
class ContainerNameError(FileHandlingError, ValueError):
    """Base class for container name validation errors."""

    def __init__(self, container, message: str):
        self.container = container
        super().__init__(message)


class MissingContainerError(ContainerNameError):
    """Container name is None, empty or whitespace only."""

    def __init__(self, container=None):
        super().__init__(container, "A container name is required.")


class InvalidContainerFormatError(ContainerNameError):
    """Container name violates the character set or length rules."""

    def __init__(self, container: str, min_length: int, max_length: int):
        super().__init__(
            container,
            f"Invalid container name '{container}'. "
            f"Container names may only contain lowercase letters and the dash '-' "
            f"character and must be {min_length} to {max_length} characters long.",
        )


# Storage Errors
class StorageError(FileHandlingError):
    """Raised when a failed storage result is unwrapped."""

    def __init__(self, failure):
        self.failure = failure
        super().__init__(f"{failure.kind.value}: {failure.message}")


# Configuration Errors
class ConfigError(FileHandlingError):
    """Invalid or incomplete configuration."""
    pass

"""Constants for file-handling."""

# Container naming rules (most restrictive backend: Azure blob containers)
CONTAINER_NAME_MIN_LENGTH = 3
CONTAINER_NAME_MAX_LENGTH = 63
CONTAINER_NAME_PATTERN = r"^[a-z-]+$"

# Max length of the file save name (Azure blob name limit)
FILE_PATH_MAX_LENGTH = 1024

# Storage keys always use POSIX separators
KEY_SEPARATOR = "/"

# Configuration
CONFIG_FILE = ".file-handling.yaml"
CONFIG_ENV_VAR = "FILE_HANDLING_CONFIG"

# Signed links
DEFAULT_LINK_VALIDITY_MINUTES = 5

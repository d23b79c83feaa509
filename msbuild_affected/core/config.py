import os
from typing import List
from dotenv import load_dotenv, find_dotenv

# Load environment variables
load_dotenv(find_dotenv(usecwd=True))


def _split_list(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


# Changed files ending with one of these names never trigger prediction matching.
# Central package version pins are detected by a separate mechanism.
EXCLUDED_FILES = _split_list(os.getenv("AFFECTED_EXCLUDED_FILES", "Directory.Packages.props"))

PROJECT_FILE_EXTENSION = os.getenv("AFFECTED_PROJECT_EXTENSION", ".csproj")
TRAVERSAL_FILE_EXTENSION = os.getenv("AFFECTED_TRAVERSAL_EXTENSION", ".proj")
DEFAULT_SEARCH_PATTERN = os.getenv("AFFECTED_DEFAULT_SEARCH_PATTERN", "*.csproj")

LOG_LEVEL = os.getenv("AFFECTED_LOG_LEVEL", "INFO")


def update_config(**kwargs) -> None:
    """Update configuration values."""
    global EXCLUDED_FILES, PROJECT_FILE_EXTENSION, TRAVERSAL_FILE_EXTENSION
    global DEFAULT_SEARCH_PATTERN, LOG_LEVEL

    for key, value in kwargs.items():
        if value is None:
            continue
        if key == "excluded_files":
            EXCLUDED_FILES = _split_list(value) if isinstance(value, str) else list(value)
        elif key == "project_extension":
            PROJECT_FILE_EXTENSION = value
        elif key == "traversal_extension":
            TRAVERSAL_FILE_EXTENSION = value
        elif key == "default_search_pattern":
            DEFAULT_SEARCH_PATTERN = value
        elif key == "log_level":
            LOG_LEVEL = value
        else:
            raise ValueError(f"Unknown configuration key: {key}")

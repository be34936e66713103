"""Custom exceptions for the font finder."""

from typing import Any


class FontFinderError(Exception):
    """Base exception for all font finder errors."""

    def __init__(self, message: str, details: Any | None = None):
        super().__init__(message)
        self.details = details


class ConfigurationError(FontFinderError):
    """Exception raised for configuration errors."""


class StorageError(FontFinderError):
    """Exception raised when the index or a cache directory cannot be written."""


class FontParseError(FontFinderError):
    """Exception raised when a font file cannot be parsed."""


class PreviewError(FontFinderError):
    """Exception raised inside preview generation."""


class ThumbnailerError(PreviewError):
    """Exception raised when the external thumbnailer fails."""


# Specific exception classes for TRY003 compliance
class ConfigFileNotFoundError(ConfigurationError):
    """Exception raised when configuration file is not found."""

    def __init__(self, config_path: str):
        super().__init__(f"Configuration file not found: {config_path}")


class EmptyConfigFileError(ConfigurationError):
    """Exception raised when configuration file is empty."""

    def __init__(self, config_path: str):
        super().__init__(f"Empty configuration file: {config_path}")


class InvalidYamlError(ConfigurationError):
    """Exception raised for invalid YAML content."""

    def __init__(self, config_path: str, error: str):
        super().__init__(f"Invalid YAML in {config_path}: {error}")


class ConfigLoadError(ConfigurationError):
    """Exception raised when configuration loading fails."""

    def __init__(self, error: str):
        super().__init__(f"Failed to load configuration: {error}")


class IndexWriteError(StorageError):
    """Exception raised when the font index cannot be persisted."""

    def __init__(self, path: str, error: str):
        super().__init__(f"Failed to write font index {path}: {error}")


class CacheDirectoryError(StorageError):
    """Exception raised when a cache directory cannot be created."""

    def __init__(self, path: str, error: str):
        super().__init__(f"Cannot create cache directory {path}: {error}")


class UnsupportedFontError(FontParseError):
    """Exception raised when a file holds no readable fonts."""

    def __init__(self, path: str, error: str | None = None):
        message = f"Unsupported or corrupt font file: {path}"
        if error:
            message = f"{message} ({error})"
        super().__init__(message)


class SelectorRequiredError(FontParseError):
    """Exception raised when a collection is opened without a PostScript name."""

    def __init__(self, path: str):
        super().__init__(f"A PostScript name is required to open a face in {path}")


class FaceNotFoundError(FontParseError):
    """Exception raised when no collection member matches the PostScript name."""

    def __init__(self, path: str, postscript_name: str):
        super().__init__(f"No face named {postscript_name!r} in {path}")


class ThumbnailerTimeoutError(ThumbnailerError):
    """Exception raised when the thumbnailer exceeds its time budget."""

    def __init__(self, timeout_seconds: float, file_path: str):
        super().__init__(f"Thumbnailer timed out after {timeout_seconds}s for {file_path}")
        self.timeout_seconds = timeout_seconds
        self.file_path = file_path


class ThumbnailerExitError(ThumbnailerError):
    """Exception raised when the thumbnailer exits with a non-zero status."""

    def __init__(self, returncode: int, stderr: str = ""):
        super().__init__(f"Thumbnailer exited with status {returncode}: {stderr.strip()}")
        self.returncode = returncode

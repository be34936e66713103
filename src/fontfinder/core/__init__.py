"""Core components for the font finder."""

from .config import FontFinderConfig, IndexConfig, PreviewConfig
from .exceptions import (
    ConfigurationError,
    FontFinderError,
    FontParseError,
    PreviewError,
    StorageError,
)
from .models import (
    FONT_INDEX_VERSION,
    BuildResult,
    BuildStats,
    FontFace,
    FontFamily,
    FontIndex,
    FontRoot,
)

__all__ = [
    "FONT_INDEX_VERSION",
    "BuildResult",
    "BuildStats",
    "ConfigurationError",
    "FontFace",
    "FontFamily",
    "FontFinderConfig",
    "FontFinderError",
    "FontIndex",
    "FontParseError",
    "FontRoot",
    "IndexConfig",
    "PreviewConfig",
    "PreviewError",
    "StorageError",
]

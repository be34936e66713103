"""Font Finder
===========

Indexes the fonts installed on a machine, groups them into families and
produces small visual previews for each face.
"""

__version__ = "1.0.0"

from .core.config import FontFinderConfig, IndexConfig, PreviewConfig
from .core.exceptions import FontFinderError, PreviewError, StorageError
from .core.models import BuildResult, BuildStats, FontFace, FontFamily, FontIndex
from .fonts import FontIndexStore, group_into_families, visible_families
from .preview import PreviewQueue, PreviewResolver

__all__ = [
    "BuildResult",
    "BuildStats",
    "FontFace",
    "FontFamily",
    "FontFinderConfig",
    "FontFinderError",
    "FontIndex",
    "FontIndexStore",
    "IndexConfig",
    "PreviewConfig",
    "PreviewError",
    "PreviewQueue",
    "PreviewResolver",
    "StorageError",
    "group_into_families",
    "visible_families",
]

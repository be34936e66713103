"""Preview Module
==============

Vector (SVG) and raster (PNG) previews for indexed faces, with caching,
cancellation and a bounded background queue.
"""

from .cancellation import CancellationHandle, CancellationSource
from .queue import PreviewPriority, PreviewQueue
from .raster import RasterPreviewGenerator
from .resolver import PreviewCache, PreviewResolver
from .sample_text import pick_sample_text
from .vector import VectorPreviewGenerator, build_vector_preview_svg

__all__ = [
    "CancellationHandle",
    "CancellationSource",
    "PreviewCache",
    "PreviewPriority",
    "PreviewQueue",
    "PreviewResolver",
    "RasterPreviewGenerator",
    "VectorPreviewGenerator",
    "build_vector_preview_svg",
    "pick_sample_text",
]

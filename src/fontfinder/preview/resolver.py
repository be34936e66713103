"""
Preview Resolution
==================

Turns a face into a preview artifact path by trying the vector and raster
generators in format-dependent order, and remembers every result (including
"unavailable") for the lifetime of its ``PreviewCache``. Concurrent callers
asking for the same key share one in-flight computation.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..core.config import FontFinderConfig
from ..core.models import FontFace
from ..fonts.fingerprint import preview_request_key
from ..fonts.parser import is_collection_format
from .cancellation import CancellationHandle
from .raster import DEFAULT_THUMBNAIL_SIZE, RasterPreviewGenerator
from .vector import VectorPreviewGenerator

logger = logging.getLogger(__name__)


@dataclass
class PreviewCacheStats:
    """Statistics for preview cache usage."""

    hits: int = 0
    misses: int = 0
    shared: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses + self.shared
        return ((self.hits + self.shared) / total * 100.0) if total > 0 else 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "shared": self.shared,
            "hit_rate_percent": self.hit_rate,
        }


class PreviewCache:
    """In-memory map of preview keys to resolved paths and in-flight tasks."""

    def __init__(self):
        self._resolved: dict[str, Path | None] = {}
        self._inflight: dict[str, asyncio.Task] = {}
        self.stats = PreviewCacheStats()

    def __contains__(self, key: str) -> bool:
        return key in self._resolved

    def __len__(self) -> int:
        return len(self._resolved)

    def get(self, key: str) -> Path | None:
        return self._resolved.get(key)

    def is_pending(self, key: str) -> bool:
        return key in self._inflight

    async def get_or_compute(
        self, key: str, factory: Callable[[], Awaitable[Path | None]]
    ) -> Path | None:
        """Return the cached result for ``key``, computing it at most once."""
        if key in self._resolved:
            self.stats.hits += 1
            return self._resolved[key]

        task = self._inflight.get(key)
        if task is None:
            self.stats.misses += 1
            task = asyncio.get_running_loop().create_task(self._compute(key, factory))
            self._inflight[key] = task
        else:
            self.stats.shared += 1

        # One caller giving up must not cancel the computation for the others
        return await asyncio.shield(task)

    async def _compute(self, key: str, factory: Callable[[], Awaitable[Path | None]]) -> Path | None:
        try:
            result = await factory()
        except asyncio.CancelledError:
            self._inflight.pop(key, None)
            raise
        except Exception as e:
            logger.warning(f"Preview generation failed: {e}")
            result = None

        self._inflight.pop(key, None)
        self._resolved[key] = result
        return result

    def clear(self) -> None:
        self._resolved.clear()


class PreviewResolver:
    """
    Resolves preview artifacts for faces.

    Collection formats (``ttc``, ``otc``, ``dfont``) try the vector generator
    first, since one raster thumbnail per file cannot tell their faces apart.
    Other formats try the raster thumbnailer first and fall back to vector.
    """

    def __init__(
        self,
        vector: VectorPreviewGenerator,
        raster: RasterPreviewGenerator,
        cache: PreviewCache | None = None,
        size: int = DEFAULT_THUMBNAIL_SIZE,
    ):
        self.vector = vector
        self.raster = raster
        self.cache = cache if cache is not None else PreviewCache()
        self.size = size

    @classmethod
    def from_config(cls, config: FontFinderConfig, cache: PreviewCache | None = None):
        preview = config.preview
        vector = VectorPreviewGenerator(config.vector_cache_dir)
        raster = RasterPreviewGenerator(
            config.raster_cache_dir,
            config.scratch_dir,
            executable=preview.thumbnailer_path,
            args_template=preview.thumbnailer_args,
            timeout_seconds=preview.thumbnail_timeout_seconds,
        )
        return cls(vector, raster, cache=cache, size=preview.thumbnail_size)

    def request_key(self, face: FontFace) -> str:
        return preview_request_key(
            face.file_path,
            face.file_mtime_ms,
            face.postscript_name,
            face.family_name,
            self.size,
        )

    def is_resolved(self, face: FontFace) -> bool:
        return self.request_key(face) in self.cache

    async def _vector_preview(self, face: FontFace) -> Path | None:
        return await self.vector.get_preview(
            face.file_path, face.file_mtime_ms, face.postscript_name, face.family_name
        )

    async def _raster_preview(self, face: FontFace) -> Path | None:
        return await self.raster.get_preview(face.file_path, face.file_mtime_ms, self.size)

    async def _generate(self, face: FontFace) -> Path | None:
        if is_collection_format(face.file_path):
            generators = (self._vector_preview, self._raster_preview)
        else:
            generators = (self._raster_preview, self._vector_preview)

        for generate in generators:
            try:
                result = await generate(face)
            except Exception as e:
                logger.warning(f"{generate.__name__.strip('_')} failed for {face}: {e}")
                result = None
            if result is not None:
                return result

        logger.debug(f"No preview available for {face}")
        return None

    async def resolve_preview(self, face: FontFace) -> Path | None:
        """
        Preview artifact for ``face``.

        Returns:
            Path to an SVG or PNG file, or None when no preview can be made
        """
        return await self.cache.get_or_compute(self.request_key(face), lambda: self._generate(face))

    async def resolve_for_selection(
        self,
        face: FontFace,
        handle: CancellationHandle,
        publish: Callable[[FontFace, Path | None], None],
    ) -> bool:
        """
        Resolve and publish only if ``handle`` is still current.

        Returns:
            True if the result was published
        """
        result = await self.resolve_preview(face)
        if handle.cancelled:
            logger.debug(f"Dropping stale preview for {face}")
            return False
        publish(face, result)
        return True

"""
Raster Preview Generator
========================

Rasterizes a font file with an external thumbnailer (Quick Look's
``qlmanage`` by default) and keeps the PNG in a content-keyed cache.
"""

import asyncio
import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

from ..core.exceptions import (
    ThumbnailerError,
    ThumbnailerExitError,
    ThumbnailerTimeoutError,
)
from ..core.storage import atomic_copy, ensure_directory
from ..fonts.fingerprint import raster_cache_name

logger = logging.getLogger(__name__)

DEFAULT_THUMBNAILER = "/usr/bin/qlmanage"
DEFAULT_THUMBNAILER_ARGS = ("-t", "-s", "{size}", "-o", "{output_dir}", "{input}")
DEFAULT_THUMBNAIL_SIZE = 360
DEFAULT_TIMEOUT_SECONDS = 20.0
SCRATCH_PREFIX = "font-finder-"


class RasterPreviewGenerator:
    """PNG thumbnails produced by an external tool, cached by (path, mtime, size)."""

    def __init__(
        self,
        cache_dir: Path,
        scratch_root: Path,
        executable: str = DEFAULT_THUMBNAILER,
        args_template: Sequence[str] = DEFAULT_THUMBNAILER_ARGS,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """
        Initialize the raster generator.

        Args:
            cache_dir: Directory holding cached PNG thumbnails
            scratch_root: Parent of the per-request scratch directories
            executable: Thumbnailer executable
            args_template: Arguments with ``{input}``, ``{output_dir}`` and ``{size}`` placeholders
            timeout_seconds: Time allowed for one thumbnailer run
        """
        self.cache_dir = Path(cache_dir)
        self.scratch_root = Path(scratch_root)
        self.executable = executable
        self.args_template = list(args_template)
        self.timeout_seconds = timeout_seconds

    def cache_path(self, file_path: str, file_mtime_ms: float, size: int) -> Path:
        return self.cache_dir / raster_cache_name(file_path, file_mtime_ms, size)

    def build_command(self, file_path: str, size: int, output_dir: str) -> list[str]:
        values = {"input": file_path, "output_dir": output_dir, "size": str(size)}
        return [self.executable, *(arg.format(**values) for arg in self.args_template)]

    async def _run_thumbnailer(self, command: list[str], file_path: str) -> None:
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ThumbnailerError(f"Cannot start thumbnailer {command[0]}: {e}") from e

        try:
            _, stderr = await asyncio.wait_for(process.communicate(), self.timeout_seconds)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise ThumbnailerTimeoutError(self.timeout_seconds, file_path) from e

        if process.returncode != 0:
            raise ThumbnailerExitError(
                process.returncode, (stderr or b"").decode("utf-8", errors="replace")
            )

    async def generate_thumbnail(self, file_path: str, size: int, output_dir: str) -> Path | None:
        """Run the thumbnailer into ``output_dir`` and return the first PNG it produced."""
        await self._run_thumbnailer(self.build_command(file_path, size, output_dir), file_path)

        produced = sorted(name for name in os.listdir(output_dir) if name.lower().endswith(".png"))
        if not produced:
            return None
        return Path(output_dir) / produced[0]

    async def get_preview(
        self, file_path: str, file_mtime_ms: float, size: int = DEFAULT_THUMBNAIL_SIZE
    ) -> Path | None:
        """
        Path of the cached thumbnail, generating it on first request.

        Never raises: any failure yields None.
        """
        try:
            cached = self.cache_path(file_path, file_mtime_ms, size)
            ensure_directory(self.cache_dir)
            if cached.exists():
                return cached

            ensure_directory(self.scratch_root)
            with tempfile.TemporaryDirectory(
                dir=self.scratch_root, prefix=SCRATCH_PREFIX
            ) as scratch_dir:
                generated = await self.generate_thumbnail(file_path, size, scratch_dir)
                if generated is None:
                    logger.debug(f"Thumbnailer produced no image for {file_path}")
                    return None
                atomic_copy(generated, cached)

        except ThumbnailerError as e:
            logger.debug(f"Raster preview unavailable for {file_path}: {e}")
            return None
        except Exception as e:
            logger.warning(f"Raster preview failed for {file_path}: {e}")
            return None

        return cached

"""
Font Index Store
================

Builds, persists and reloads the versioned index of every installed face.

The index file is owned exclusively by this store. A cached index is served
immediately; when it is older than the configured time-to-live a background
refresh rebuilds it without blocking the caller. Rebuilds are serialized by a
lock held by the store, so a user-triggered rebuild and a background refresh
never scan concurrently.
"""

import asyncio
import json
import logging
import os
from collections.abc import Callable
from datetime import datetime, timezone

from pydantic import ValidationError

from ..core.config import FontFinderConfig
from ..core.exceptions import IndexWriteError, StorageError
from ..core.models import (
    FONT_INDEX_VERSION,
    BuildResult,
    BuildStats,
    FontFace,
    FontIndex,
    FontRoot,
)
from ..core.storage import atomic_write_text, ensure_directory
from .fingerprint import face_id
from .parser import FontContainer, ParsedFont, file_extension, open_font_container
from .paths import classify_source, mobile_asset_font_roots
from .walker import walk_files

logger = logging.getLogger(__name__)


def face_from_font(
    file_path: str, file_mtime_ms: float, font: ParsedFont, roots: list[FontRoot]
) -> FontFace:
    """Build the index record for one logical font of ``file_path``."""
    family_name = font.family_name
    style_name = font.style_name
    postscript_name = font.postscript_name

    return FontFace(
        id=face_id(file_path, postscript_name, style_name),
        family_name=family_name,
        style_name=style_name,
        display_name=f"{family_name} {style_name}".strip(),
        postscript_name=postscript_name,
        full_name=font.full_name,
        file_path=file_path,
        file_ext=file_extension(file_path),
        source=classify_source(file_path, roots),
        file_mtime_ms=file_mtime_ms,
    )


def utc_timestamp(moment: datetime | None = None) -> str:
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def parse_timestamp(value: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class FontIndexStore:
    """
    Persistent, schema-versioned index of font faces.

    Handles the full scan (walk -> parse -> dedupe), atomic persistence,
    validation on load and time-to-live based staleness.
    """

    def __init__(
        self,
        config: FontFinderConfig | None = None,
        opener: Callable[[str], FontContainer] = open_font_container,
    ):
        """
        Initialize the index store.

        Args:
            config: Application configuration (defaults from environment)
            opener: Function opening a font file into a ``FontContainer``
        """
        self.config = config or FontFinderConfig()
        self.index_path = self.config.index_path
        self._opener = opener
        self._build_lock = asyncio.Lock()
        self.refresh_task: asyncio.Task | None = None

        logger.debug(f"FontIndexStore using {self.index_path}")

    def discover_files(self, roots: list[FontRoot]) -> list[str]:
        """Candidate font files under all roots."""
        scan_roots = [root.path for root in roots]
        if self.config.index.include_mobile_assets:
            scan_roots.extend(mobile_asset_font_roots())
        return walk_files(scan_roots, self.config.index.font_extensions)

    async def build(self) -> BuildResult:
        """
        Scan every font root and persist a fresh index.

        Returns:
            The new index and scan statistics

        Raises:
            StorageError: if the index cannot be written
        """
        async with self._build_lock:
            return await self._build()

    async def _build(self) -> BuildResult:
        roots = self.config.resolved_font_roots()
        files = self.discover_files(roots)
        yield_every = self.config.index.scan_yield_every

        logger.info(f"Building font index from {len(files)} candidate files")

        faces_by_id: dict[str, FontFace] = {}
        stats = BuildStats(scanned_files=len(files))

        for i, file_path in enumerate(files):
            if i > 0 and i % yield_every == 0:
                await asyncio.sleep(0)

            try:
                file_mtime_ms = os.stat(file_path).st_mtime_ns / 1_000_000
            except OSError as e:
                logger.debug(f"Cannot stat {file_path}: {e}")
                stats.skipped_files += 1
                continue

            try:
                with self._opener(file_path) as container:
                    for font in container.fonts:
                        face = face_from_font(file_path, file_mtime_ms, font, roots)
                        if face.id in faces_by_id:
                            continue
                        faces_by_id[face.id] = face
                        stats.parsed_faces += 1
            except Exception as e:
                logger.debug(f"Skipping {file_path}: {e}")
                stats.skipped_files += 1
                continue

        index = FontIndex(
            version=FONT_INDEX_VERSION,
            built_at=utc_timestamp(),
            faces=list(faces_by_id.values()),
        )
        self.save(index)

        logger.info(f"Font index built: {stats}")
        return BuildResult(index=index, stats=stats)

    def save(self, index: FontIndex) -> None:
        """Persist ``index`` atomically."""
        try:
            ensure_directory(self.index_path.parent)
            atomic_write_text(self.index_path, json.dumps(index.to_json_dict(), indent=2))
        except StorageError:
            raise
        except OSError as e:
            raise IndexWriteError(str(self.index_path), str(e)) from e

    def load(self) -> FontIndex | None:
        """
        Read the persisted index.

        Returns None when the file is missing, unreadable, not valid JSON, has
        a different schema version or any record fails validation.
        """
        try:
            raw = self.index_path.read_text(encoding="utf-8")
        except OSError as e:
            logger.debug(f"No readable font index at {self.index_path}: {e}")
            return None

        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Discarding corrupt font index {self.index_path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Discarding malformed font index {self.index_path}")
            return None

        if data.get("version") != FONT_INDEX_VERSION:
            logger.info(f"Discarding font index with schema version {data.get('version')!r}")
            return None

        try:
            return FontIndex.model_validate(data)
        except ValidationError as e:
            logger.warning(
                f"Discarding invalid font index {self.index_path}: {e.error_count()} errors"
            )
            return None

    def load_cached(self) -> FontIndex | None:
        """Return the persisted index without scanning."""
        return self.load()

    def is_stale(self, index: FontIndex, now: datetime | None = None) -> bool:
        """True when the index is older than the TTL or its timestamp is unreadable."""
        built_at = parse_timestamp(index.built_at)
        if built_at is None:
            return True
        now = now or datetime.now(timezone.utc)
        age_seconds = (now - built_at).total_seconds()
        return age_seconds > self.config.index.ttl_seconds

    def refresh_in_background(
        self,
        on_complete: Callable[[BuildResult], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> asyncio.Task:
        """
        Start a rebuild as an independent task.

        The task can be awaited or cancelled; completion is reported through
        ``on_complete`` and failures through ``on_error``. A refresh already in
        progress is returned instead of starting another.
        """
        if self.refresh_task is not None and not self.refresh_task.done():
            return self.refresh_task

        async def _refresh() -> BuildResult | None:
            try:
                result = await self.build()
            except Exception as e:
                logger.warning(f"Background index refresh failed: {e}")
                if on_error is not None:
                    on_error(e)
                return None
            if on_complete is not None:
                on_complete(result)
            return result

        self.refresh_task = asyncio.get_running_loop().create_task(
            _refresh(), name="font-index-refresh"
        )
        return self.refresh_task

    async def ensure_index(
        self,
        on_refreshed: Callable[[BuildResult], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> FontIndex:
        """
        Serve the cached index when it has faces, refreshing it in the
        background if stale; otherwise build in the foreground.
        """
        cached = self.load_cached()
        if cached is not None and cached.faces:
            if self.is_stale(cached):
                logger.info("Font index is stale, refreshing in background")
                self.refresh_in_background(on_refreshed, on_error)
            return cached

        result = await self.build()
        return result.index

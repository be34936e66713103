"""
Vector Preview Generator
========================

Draws a short sample string with the face's own outlines into a flat SVG.

Output depends only on the font bytes, the PostScript selector and the
family name, so results are cached under a content-derived file name and
never regenerated.
"""

import asyncio
import logging
import math
from collections.abc import Callable
from pathlib import Path
from xml.sax.saxutils import escape

from ..core.storage import atomic_write_text, ensure_directory
from ..fonts.fingerprint import vector_cache_name
from ..fonts.parser import ParsedFont, TextRun, open_font
from .sample_text import pick_sample_text

logger = logging.getLogger(__name__)

VECTOR_PREVIEW_WIDTH = 720
VECTOR_PREVIEW_HEIGHT = 240
VECTOR_PREVIEW_PADDING = 28
VECTOR_PREVIEW_SCALE_RATIO = 0.78
GLYPH_FILL = "#111"
BACKGROUND_FILL = "#ffffff"
DEFAULT_TITLE = "Font Preview"


def _finite(value: object, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def _run_advances(run: TextRun) -> list[float]:
    """Shaped advances, or each glyph's own advance width when those sum to nothing."""
    shaped = [_finite(position.x_advance, 0.0) for position in run.positions]
    if sum(shaped) > 0:
        return shaped
    return [_finite(glyph.advance_width, 0.0) for glyph in run.glyphs]


def build_vector_preview_svg(font: ParsedFont, family_name: str | None = None) -> str | None:
    """
    Render the preview SVG for an opened face.

    Returns:
        SVG document text, or None when nothing drawable comes out
    """
    sample_text = pick_sample_text(font, family_name)

    try:
        run = font.layout(sample_text)
    except Exception as e:
        logger.debug(f"Layout failed for {family_name!r}: {e}")
        return None

    if not run.glyphs or len(run.glyphs) != len(run.positions):
        return None

    units_per_em = _finite(font.units_per_em, 0.0)
    if units_per_em <= 0:
        units_per_em = 1000.0
    ascent = _finite(font.ascent, units_per_em * 0.8)
    descent = _finite(font.descent, -units_per_em * 0.2)

    advances = _run_advances(run)
    run_width = sum(advances)
    run_height = ascent - descent
    if run_width <= 0 or run_height <= 0:
        return None

    available_width = VECTOR_PREVIEW_WIDTH - VECTOR_PREVIEW_PADDING * 2
    available_height = VECTOR_PREVIEW_HEIGHT - VECTOR_PREVIEW_PADDING * 2
    scale = (
        min(available_width / run_width, available_height / run_height)
        * VECTOR_PREVIEW_SCALE_RATIO
    )
    font_size = scale * units_per_em
    if not math.isfinite(font_size) or font_size <= 0:
        return None

    baseline_y = VECTOR_PREVIEW_PADDING + ascent * scale
    start_x = max(VECTOR_PREVIEW_PADDING, (VECTOR_PREVIEW_WIDTH - run_width * scale) / 2)

    pen_x = 0.0
    paths = []
    for glyph, position, advance in zip(run.glyphs, run.positions, advances):
        x = start_x + (pen_x + _finite(position.x_offset, 0.0)) * scale
        y = baseline_y - _finite(position.y_offset, 0.0) * scale
        pen_x += advance

        if glyph.id <= 0:
            continue

        try:
            d = font.outline(glyph.id, font_size)
        except Exception:
            d = None
        if not d:
            continue

        paths.append(
            f'<path d="{d}" transform="translate({x:.2f},{y:.2f}) scale(1,-1)" '
            f'fill="{GLYPH_FILL}" />'
        )

    if not paths:
        return None

    title = escape(family_name or DEFAULT_TITLE)
    return "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{VECTOR_PREVIEW_WIDTH}" '
            f'height="{VECTOR_PREVIEW_HEIGHT}" '
            f'viewBox="0 0 {VECTOR_PREVIEW_WIDTH} {VECTOR_PREVIEW_HEIGHT}">',
            f"<title>{title}</title>",
            f'<rect x="0" y="0" width="{VECTOR_PREVIEW_WIDTH}" '
            f'height="{VECTOR_PREVIEW_HEIGHT}" fill="{BACKGROUND_FILL}" />',
            *paths,
            "</svg>",
            "",
        ]
    )


class VectorPreviewGenerator:
    """Cached SVG previews keyed by file, modification time, selector and family."""

    def __init__(
        self,
        cache_dir: Path,
        opener: Callable[[str, str | None], ParsedFont] = open_font,
    ):
        self.cache_dir = Path(cache_dir)
        self._opener = opener

    def cache_path(
        self,
        file_path: str,
        file_mtime_ms: float,
        postscript_name: str | None = None,
        family_name: str | None = None,
    ) -> Path:
        return self.cache_dir / vector_cache_name(
            file_path, file_mtime_ms, postscript_name, family_name
        )

    def render_svg(
        self,
        file_path: str,
        postscript_name: str | None = None,
        family_name: str | None = None,
    ) -> str | None:
        """Open the face and render its SVG, or None when unavailable."""
        try:
            font = self._opener(file_path, postscript_name)
        except Exception as e:
            logger.debug(f"Cannot open {file_path} for vector preview: {e}")
            return None

        with font:
            return build_vector_preview_svg(font, family_name)

    async def get_preview(
        self,
        file_path: str,
        file_mtime_ms: float,
        postscript_name: str | None = None,
        family_name: str | None = None,
    ) -> Path | None:
        """
        Path of the cached SVG, generating it on first request.

        Opening and drawing the font run in a worker thread.

        Returns:
            Path to the SVG file, or None if the face cannot be drawn
        """
        preview_path = self.cache_path(file_path, file_mtime_ms, postscript_name, family_name)
        ensure_directory(self.cache_dir)

        if preview_path.exists():
            return preview_path

        svg = await asyncio.to_thread(self.render_svg, file_path, postscript_name, family_name)
        if svg is None:
            return None

        atomic_write_text(preview_path, svg)
        logger.debug(f"Wrote vector preview {preview_path.name} for {file_path}")
        return preview_path

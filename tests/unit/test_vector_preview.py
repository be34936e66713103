"""Tests for SVG preview generation."""

import asyncio
import threading
from unittest.mock import patch

import pytest

from fontfinder.fonts.parser import open_font
from fontfinder.preview.vector import (
    VECTOR_PREVIEW_HEIGHT,
    VECTOR_PREVIEW_WIDTH,
    VectorPreviewGenerator,
    build_vector_preview_svg,
)


@pytest.fixture
def regular_font(temp_dir, font_factory):
    return font_factory(temp_dir / "fonts" / "Regular.ttf", "Sample", "Regular")


class TestBuildVectorPreviewSvg:
    """Test the SVG document builder."""

    def test_document_structure(self, regular_font):
        with open_font(str(regular_font)) as font:
            svg = build_vector_preview_svg(font, "Sample")

        assert svg.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert f'width="{VECTOR_PREVIEW_WIDTH}"' in svg
        assert f'height="{VECTOR_PREVIEW_HEIGHT}"' in svg
        assert "<title>Sample</title>" in svg
        assert svg.count("<path ") == 2
        assert "scale(1,-1)" in svg

    def test_deterministic(self, regular_font):
        with open_font(str(regular_font)) as font:
            first = build_vector_preview_svg(font, "Sample")
        with open_font(str(regular_font)) as font:
            second = build_vector_preview_svg(font, "Sample")

        assert first == second

    def test_title_is_escaped(self, regular_font):
        with open_font(str(regular_font)) as font:
            svg = build_vector_preview_svg(font, "A & <B>")
        assert "<title>A &amp; &lt;B&gt;</title>" in svg

    def test_default_title(self, regular_font):
        with open_font(str(regular_font)) as font:
            svg = build_vector_preview_svg(font, None)
        assert "<title>Font Preview</title>" in svg

    def test_nothing_drawable(self, temp_dir, font_factory):
        path = font_factory(temp_dir / "Blank.ttf", "Blank", chars=" ")
        with open_font(str(path)) as font:
            assert build_vector_preview_svg(font, "Blank") is None


class TestVectorPreviewGenerator:
    """Test cached SVG generation."""

    def test_writes_and_reuses_cache(self, temp_dir, regular_font):
        generator = VectorPreviewGenerator(temp_dir / "cache")

        first = asyncio.run(generator.get_preview(str(regular_font), 1000.0, None, "Sample"))
        assert first is not None
        assert first.suffix == ".svg"
        assert first.parent == temp_dir / "cache"
        assert "<svg" in first.read_text()

        with patch.object(generator, "render_svg") as mock_render:
            second = asyncio.run(
                generator.get_preview(str(regular_font), 1000.0, None, "Sample")
            )

        assert second == first
        mock_render.assert_not_called()

    def test_new_mtime_new_file(self, temp_dir, regular_font):
        generator = VectorPreviewGenerator(temp_dir / "cache")

        first = asyncio.run(generator.get_preview(str(regular_font), 1000.0, None, "Sample"))
        second = asyncio.run(generator.get_preview(str(regular_font), 2000.0, None, "Sample"))

        assert first != second

    def test_unreadable_font(self, temp_dir):
        broken = temp_dir / "broken.ttf"
        broken.write_bytes(b"garbage")
        generator = VectorPreviewGenerator(temp_dir / "cache")

        assert asyncio.run(generator.get_preview(str(broken), 1.0, None, "Broken")) is None
        assert list((temp_dir / "cache").iterdir()) == []

    def test_collection_needs_selector(self, temp_dir, font_factory, collection_factory):
        a = font_factory(temp_dir / "a.ttf", "Pair", "Regular")
        b = font_factory(temp_dir / "b.ttf", "Pair", "Bold")
        ttc = collection_factory(temp_dir / "Pair.ttc", [a, b])
        generator = VectorPreviewGenerator(temp_dir / "cache")

        assert asyncio.run(generator.get_preview(str(ttc), 1.0, None, "Pair")) is None
        assert asyncio.run(generator.get_preview(str(ttc), 1.0, "Pair-Bold", "Pair")) is not None

    def test_rendering_runs_off_the_event_loop(self, temp_dir, regular_font):
        generator = VectorPreviewGenerator(temp_dir / "cache")
        render_svg = generator.render_svg
        render_threads = []

        def record_thread(*args):
            render_threads.append(threading.get_ident())
            return render_svg(*args)

        async def run():
            with patch.object(generator, "render_svg", side_effect=record_thread):
                path = await generator.get_preview(str(regular_font), 1.0, None, "Sample")
            return path, threading.get_ident()

        path, loop_thread = asyncio.run(run())

        assert path is not None
        assert len(render_threads) == 1
        assert render_threads[0] != loop_thread

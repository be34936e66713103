"""
Pytest configuration and fixtures for font finder tests.

Real font files are synthesized with fontTools' FontBuilder so parsing and
preview code run against genuine sfnt data.
"""

import os
import tempfile
from pathlib import Path

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen
from fontTools.ttLib import TTCollection, TTFont, newTable
from fontTools.ttLib.tables._k_e_r_n import KernTable_format_0

from fontfinder.core.config import FontFinderConfig, IndexConfig, PreviewConfig
from fontfinder.core.models import FONT_INDEX_VERSION, FontFace, FontIndex, FontRoot
from fontfinder.fonts.fingerprint import face_id

UNITS_PER_EM = 1000
ASCENT = 800
DESCENT = -200


def _box_glyph(width: int):
    pen = TTGlyphPen(None)
    pen.moveTo((50, 0))
    pen.lineTo((50, 700))
    pen.lineTo((width - 50, 700))
    pen.lineTo((width - 50, 0))
    pen.closePath()
    return pen.glyph()


def _glyph_name(char: str) -> str:
    return "space" if char == " " else f"uni{ord(char):04X}"


def _kern_table(kerning: dict[str, int]):
    subtable = KernTable_format_0()
    subtable.coverage = 1
    subtable.kernTable = {
        (_glyph_name(pair[0]), _glyph_name(pair[1])): value for pair, value in kerning.items()
    }
    kern = newTable("kern")
    kern.version = 0
    kern.kernTables = [subtable]
    return kern


def build_test_font(
    path: Path,
    family: str,
    style: str = "Regular",
    chars: str = "Aa",
    advance: int = 600,
    postscript_name: str | None = None,
    typographic_family: str | None = None,
    kerning: dict[str, int] | None = None,
) -> Path:
    """
    Write a minimal TrueType font covering ``chars`` to ``path``.

    ``kerning`` maps two-character strings such as ``"Aa"`` to a legacy
    ``kern`` format 0 pair adjustment in font units.
    """
    glyph_order = [".notdef", "space"]
    glyphs = {".notdef": _box_glyph(500), "space": TTGlyphPen(None).glyph()}
    metrics = {".notdef": (500, 0), "space": (250, 0)}
    cmap = {0x20: "space"}

    for char in dict.fromkeys(chars):
        code_point = ord(char)
        if code_point == 0x20:
            continue
        name = _glyph_name(char)
        glyph_order.append(name)
        glyphs[name] = _box_glyph(advance)
        metrics[name] = (advance, 0)
        cmap[code_point] = name

    names = {
        "familyName": family,
        "styleName": style,
        "uniqueFontIdentifier": f"{family}-{style}",
        "fullName": f"{family} {style}",
        "psName": postscript_name or f"{family.replace(' ', '')}-{style.replace(' ', '')}",
        "version": "Version 1.000",
    }
    if typographic_family:
        names["typographicFamily"] = typographic_family

    fb = FontBuilder(UNITS_PER_EM, isTTF=True)
    fb.setupGlyphOrder(glyph_order)
    fb.setupCharacterMap(cmap)
    fb.setupGlyf(glyphs)
    fb.setupHorizontalMetrics(metrics)
    fb.setupHorizontalHeader(ascent=ASCENT, descent=DESCENT)
    fb.setupOS2(
        sTypoAscender=ASCENT,
        sTypoDescender=DESCENT,
        usWinAscent=ASCENT,
        usWinDescent=-DESCENT,
    )
    fb.setupNameTable(names)
    fb.setupPost()
    if kerning:
        fb.font["kern"] = _kern_table(kerning)

    path.parent.mkdir(parents=True, exist_ok=True)
    fb.save(str(path))
    return path


def build_test_collection(path: Path, members: list[Path]) -> Path:
    """Bundle existing font files into a TrueType collection."""
    collection = TTCollection()
    collection.fonts = [TTFont(str(member)) for member in members]
    collection.save(str(path))
    return path


def make_face(
    family: str = "Sample",
    style: str = "Regular",
    file_path: str = "/fonts/Sample-Regular.ttf",
    postscript_name: str | None = None,
    file_mtime_ms: float = 1_700_000_000_000.0,
) -> FontFace:
    """Index record built without touching the filesystem."""
    postscript_name = postscript_name or f"{family.replace(' ', '')}-{style}"
    return FontFace(
        id=face_id(file_path, postscript_name, style),
        family_name=family,
        style_name=style,
        display_name=f"{family} {style}",
        postscript_name=postscript_name,
        full_name=f"{family} {style}",
        file_path=file_path,
        file_ext=os.path.splitext(file_path)[1].lstrip(".").lower(),
        source="user",
        file_mtime_ms=file_mtime_ms,
    )


@pytest.fixture
def temp_dir():
    """Create temporary directory."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def font_factory():
    """Builder for synthesized TrueType fonts."""
    return build_test_font


@pytest.fixture
def collection_factory():
    """Builder for TrueType collections."""
    return build_test_collection


@pytest.fixture
def face_factory():
    """Builder for in-memory index records."""
    return make_face


@pytest.fixture
def fonts_dir(temp_dir):
    """Font root holding the Sample family (two files) and Sample Mono."""
    root = temp_dir / "fonts"
    build_test_font(root / "Regular.ttf", "Sample", "Regular")
    build_test_font(root / "Bold.ttf", "Sample", "Bold", advance=650)
    build_test_font(root / "nested" / "Mono.otf", "Sample Mono", "Regular", advance=500)
    return root


@pytest.fixture
def test_config(temp_dir, fonts_dir):
    """Configuration scanning only the temporary font root."""
    return FontFinderConfig(
        _env_file=None,
        support_dir=temp_dir / "support",
        font_roots=[FontRoot(path=str(fonts_dir), source="user")],
        index=IndexConfig(_env_file=None, include_mobile_assets=False),
        preview=PreviewConfig(
            _env_file=None,
            thumbnailer_path=str(temp_dir / "missing-thumbnailer"),
            thumbnail_timeout_seconds=5.0,
        ),
    )


@pytest.fixture
def sample_faces():
    """Arial Regular/Bold and Helvetica Regular."""
    return [
        make_face("Arial", "Regular", "/fonts/Arial.ttf"),
        make_face("Arial", "Bold", "/fonts/Arial Bold.ttf"),
        make_face("Helvetica", "Regular", "/fonts/Helvetica.ttf"),
    ]


@pytest.fixture
def sample_index(sample_faces):
    return FontIndex(
        version=FONT_INDEX_VERSION,
        built_at="2024-01-01T00:00:00.000Z",
        faces=sample_faces,
    )

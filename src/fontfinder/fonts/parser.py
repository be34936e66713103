"""
Font Parser
===========

Opens font files with fontTools and exposes each logical font through the
narrow ``ParsedFont`` interface, so the index and preview code never touch
fontTools objects directly.

Supported containers:
- single sfnt files (TrueType / OpenType CFF), one font
- TrueType / OpenType collections (``ttcf`` header), every member
- Mac ``.dfont`` suitcases, every ``sfnt`` resource
"""

import logging
import math
import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from fontTools.pens.svgPathPen import SVGPathPen
from fontTools.pens.transformPen import TransformPen
from fontTools.ttLib import TTCollection, TTFont
from fontTools.ttLib.macUtils import getSFNTResIndices

from ..core.config import COLLECTION_EXTENSIONS
from ..core.exceptions import (
    FaceNotFoundError,
    SelectorRequiredError,
    UnsupportedFontError,
)

logger = logging.getLogger(__name__)

# Name table IDs
FAMILY_NAME_ID = 1
SUBFAMILY_NAME_ID = 2
FULL_NAME_ID = 4
POSTSCRIPT_NAME_ID = 6

ENGLISH_LANG_IDS = {(3, 0x409), (1, 0)}

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_name(value: object) -> str | None:
    """Collapse whitespace runs and trim; empty strings become None."""
    if not isinstance(value, str):
        return None
    collapsed = _WHITESPACE_RE.sub(" ", value).strip()
    return collapsed or None


def file_base_name(file_path: str) -> str:
    base = os.path.basename(file_path)
    stem, _ = os.path.splitext(base)
    return stem or base


def file_extension(file_path: str) -> str:
    """Lowercase extension without the dot."""
    return os.path.splitext(file_path)[1].lstrip(".").lower()


def is_collection_format(file_path: str) -> bool:
    """Collection containers need a PostScript name to pick a face."""
    return file_extension(file_path) in COLLECTION_EXTENSIONS


def _format_number(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


@dataclass(frozen=True)
class Glyph:
    """A glyph reference with its natural advance in font units."""

    id: int
    name: str
    advance_width: float = 0.0


@dataclass(frozen=True)
class GlyphPosition:
    """Shaped placement of one glyph, in font units."""

    x_advance: float = 0.0
    y_advance: float = 0.0
    x_offset: float = 0.0
    y_offset: float = 0.0


@dataclass
class TextRun:
    """Result of laying out a string: parallel glyph and position lists."""

    glyphs: list[Glyph] = field(default_factory=list)
    positions: list[GlyphPosition] = field(default_factory=list)


class ParsedFont(ABC):
    """Capabilities the rest of the system needs from one logical font."""

    @property
    @abstractmethod
    def family_name(self) -> str: ...

    @property
    @abstractmethod
    def style_name(self) -> str: ...

    @property
    @abstractmethod
    def postscript_name(self) -> str | None: ...

    @property
    @abstractmethod
    def full_name(self) -> str | None: ...

    @property
    @abstractmethod
    def units_per_em(self) -> int: ...

    @property
    @abstractmethod
    def ascent(self) -> float: ...

    @property
    @abstractmethod
    def descent(self) -> float: ...

    @property
    @abstractmethod
    def character_set(self) -> frozenset[int]: ...

    @abstractmethod
    def glyph_for_code_point(self, code_point: int) -> Glyph | None: ...

    @abstractmethod
    def layout(self, text: str) -> TextRun: ...

    @abstractmethod
    def outline(self, glyph_id: int, size: float) -> str | None:
        """SVG path data for the glyph scaled to ``size`` px per em, y axis up."""

    def close(self) -> None:  # noqa: B027
        """Release file handles held by this font."""

    def __enter__(self) -> "ParsedFont":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class TTFontFace(ParsedFont):
    """``ParsedFont`` backed by a fontTools ``TTFont``."""

    def __init__(self, font: TTFont, file_path: str, owner=None):
        self._font = font
        self._file_path = file_path
        self._owner = owner
        self._names: dict[int, str | None] = {}
        self._character_set: frozenset[int] | None = None
        self._cmap: dict[int, str] | None = None
        self._kerning: dict[tuple[str, str], float] | None = None

    def _get_font_name(self, name_id: int) -> str | None:
        """Extract a name record, preferring English."""
        if name_id in self._names:
            return self._names[name_id]

        value = None
        if "name" in self._font:
            records = [r for r in self._font["name"].names if r.nameID == name_id]
            records.sort(key=lambda r: (r.platformID, r.langID) not in ENGLISH_LANG_IDS)
            for record in records:
                try:
                    value = normalize_name(record.toUnicode(errors="replace"))
                except Exception:
                    continue
                if value:
                    break

        self._names[name_id] = value
        return value

    @property
    def family_name(self) -> str:
        return self._get_font_name(FAMILY_NAME_ID) or file_base_name(self._file_path)

    @property
    def style_name(self) -> str:
        return self._get_font_name(SUBFAMILY_NAME_ID) or "Regular"

    @property
    def postscript_name(self) -> str | None:
        return self._get_font_name(POSTSCRIPT_NAME_ID)

    @property
    def full_name(self) -> str | None:
        return self._get_font_name(FULL_NAME_ID)

    @property
    def units_per_em(self) -> int:
        try:
            units = int(self._font["head"].unitsPerEm)
        except Exception:
            return 1000
        return units if units > 0 else 1000

    def _hhea_value(self, attribute: str) -> float:
        try:
            return float(getattr(self._font["hhea"], attribute))
        except Exception:
            return math.nan

    @property
    def ascent(self) -> float:
        return self._hhea_value("ascent")

    @property
    def descent(self) -> float:
        return self._hhea_value("descent")

    def _best_cmap(self) -> dict[int, str]:
        if self._cmap is None:
            try:
                self._cmap = self._font.getBestCmap() or {}
            except Exception as e:
                logger.debug(f"Unreadable cmap in {self._file_path}: {e}")
                self._cmap = {}
        return self._cmap

    @property
    def character_set(self) -> frozenset[int]:
        if self._character_set is None:
            self._character_set = frozenset(
                cp for cp in self._best_cmap() if isinstance(cp, int) and cp >= 0
            )
        return self._character_set

    def _advance_width(self, glyph_name: str) -> float:
        try:
            return float(self._font["hmtx"][glyph_name][0])
        except Exception:
            return 0.0

    def _glyph(self, glyph_name: str) -> Glyph:
        try:
            glyph_id = self._font.getGlyphID(glyph_name)
        except Exception:
            glyph_id = 0
        return Glyph(id=glyph_id, name=glyph_name, advance_width=self._advance_width(glyph_name))

    def glyph_for_code_point(self, code_point: int) -> Glyph | None:
        glyph_name = self._best_cmap().get(code_point)
        if glyph_name is None:
            return None
        return self._glyph(glyph_name)

    def _kerning_pairs(self) -> dict[tuple[str, str], float]:
        """Pair adjustments from the legacy ``kern`` table (format 0 subtables)."""
        if self._kerning is None:
            pairs: dict[tuple[str, str], float] = {}
            try:
                if "kern" in self._font:
                    for table in self._font["kern"].kernTables:
                        if getattr(table, "format", None) == 0:
                            for pair, value in table.kernTable.items():
                                pairs.setdefault(pair, float(value))
            except Exception as e:
                logger.debug(f"Ignoring unreadable kern table in {self._file_path}: {e}")
                pairs = {}
            self._kerning = pairs
        return self._kerning

    def layout(self, text: str) -> TextRun:
        glyph_order = self._font.getGlyphOrder()
        notdef = glyph_order[0] if glyph_order else ".notdef"

        glyphs = []
        for char in text:
            glyph = self.glyph_for_code_point(ord(char))
            glyphs.append(glyph if glyph is not None else self._glyph(notdef))

        kerning = self._kerning_pairs()
        positions = []
        for i, glyph in enumerate(glyphs):
            advance = glyph.advance_width
            if i + 1 < len(glyphs):
                advance += kerning.get((glyph.name, glyphs[i + 1].name), 0.0)
            positions.append(GlyphPosition(x_advance=advance))

        return TextRun(glyphs=glyphs, positions=positions)

    def outline(self, glyph_id: int, size: float) -> str | None:
        try:
            glyph_set = self._font.getGlyphSet()
            glyph = glyph_set[self._font.getGlyphName(glyph_id)]
            pen = SVGPathPen(glyph_set, ntos=_format_number)
            scale = size / self.units_per_em
            glyph.draw(TransformPen(pen, (scale, 0, 0, scale, 0, 0)))
            commands = pen.getCommands()
        except Exception as e:
            logger.debug(f"No outline for glyph {glyph_id} in {self._file_path}: {e}")
            return None
        return commands or None

    def close(self) -> None:
        owner = self._owner if self._owner is not None else self._font
        try:
            owner.close()
        except Exception as e:
            logger.debug(f"Error closing {self._file_path}: {e}")


class FontContainer:
    """All logical fonts found in one file."""

    def __init__(self, file_path: str, fonts: list[ParsedFont], closer=None, is_collection=False):
        self.file_path = file_path
        self.fonts = fonts
        self.is_collection = is_collection
        self._closer = closer

    def close(self) -> None:
        if self._closer is not None:
            try:
                self._closer()
            except Exception as e:
                logger.debug(f"Error closing {self.file_path}: {e}")
        else:
            for font in self.fonts:
                font.close()

    def __enter__(self) -> "FontContainer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self.fonts)


def _read_tag(file_path: str) -> bytes:
    with Path(file_path).open("rb") as f:
        return f.read(4)


def open_font_container(file_path: str) -> FontContainer:
    """
    Open every logical font in ``file_path``.

    Raises:
        UnsupportedFontError: the file is corrupt, unsupported or holds no fonts
        OSError: the file cannot be read
    """
    path = str(file_path)
    tag = _read_tag(path)

    try:
        if tag == b"ttcf":
            collection = TTCollection(path, lazy=True)
            fonts = [TTFontFace(font, path, owner=collection) for font in collection.fonts]
            container = FontContainer(path, fonts, closer=collection.close, is_collection=True)
        elif file_extension(path) == "dfont":
            indices = getSFNTResIndices(path)
            fonts = [TTFontFace(TTFont(path, lazy=True, res_name_or_index=i), path) for i in indices]
            container = FontContainer(path, fonts, is_collection=True)
        else:
            font = TTFont(path, lazy=True)
            container = FontContainer(path, [TTFontFace(font, path)])
    except OSError:
        raise
    except Exception as e:
        raise UnsupportedFontError(path, str(e)) from e

    if not container.fonts:
        container.close()
        raise UnsupportedFontError(path, "no fonts found")

    return container


def open_font(file_path: str, postscript_name: str | None = None) -> ParsedFont:
    """
    Open a single face.

    Collection formats require ``postscript_name`` to pick a member; for other
    formats the selector is ignored. The returned font owns the open file and
    should be closed (it is a context manager).
    """
    path = str(file_path)
    selector = postscript_name if is_collection_format(path) else None
    if is_collection_format(path) and not selector:
        raise SelectorRequiredError(path)

    container = open_font_container(path)
    if selector is None:
        if len(container.fonts) != 1:
            container.close()
            raise SelectorRequiredError(path)
        return _DetachedFont(container.fonts[0], container)

    for font in container.fonts:
        if font.postscript_name == selector:
            return _DetachedFont(font, container)

    container.close()
    raise FaceNotFoundError(path, selector)


class _DetachedFont(ParsedFont):
    """One member of a container that closes the whole container when done."""

    def __init__(self, font: ParsedFont, container: FontContainer):
        self._inner = font
        self._container = container

    family_name = property(lambda self: self._inner.family_name)
    style_name = property(lambda self: self._inner.style_name)
    postscript_name = property(lambda self: self._inner.postscript_name)
    full_name = property(lambda self: self._inner.full_name)
    units_per_em = property(lambda self: self._inner.units_per_em)
    ascent = property(lambda self: self._inner.ascent)
    descent = property(lambda self: self._inner.descent)
    character_set = property(lambda self: self._inner.character_set)

    def glyph_for_code_point(self, code_point: int) -> Glyph | None:
        return self._inner.glyph_for_code_point(code_point)

    def layout(self, text: str) -> TextRun:
        return self._inner.layout(text)

    def outline(self, glyph_id: int, size: float) -> str | None:
        return self._inner.outline(glyph_id, size)

    def close(self) -> None:
        self._container.close()

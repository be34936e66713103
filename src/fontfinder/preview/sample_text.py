"""Choice of the short sample string drawn in a vector preview."""

import re
import unicodedata

from ..fonts.parser import ParsedFont

SAMPLE_TEXT_CANDIDATES = (
    "Aa",  # Latin
    "Яя",  # Cyrillic
    "Αα",  # Greek
    "אב",  # Hebrew
    "هو",  # Arabic
    "अआ",  # Devanagari
    "กข",  # Thai
    "あア",  # Hiragana + Katakana
    "アイ",  # Katakana
    "한글",  # Hangul
    "汉字",  # Simplified Han
    "漢字",  # Traditional Han
)

DEFAULT_SAMPLE_TEXT = "Aa"
SIMPLIFIED_HAN_SAMPLE = "汉字"
TRADITIONAL_HAN_SAMPLE = "漢字"
FALLBACK_SAMPLE_LENGTH = 2

PRIVATE_USE_RANGE = range(0xE000, 0xF900)
MAX_CODE_POINT = 0x10FFFF

_PINGFANG_RE = re.compile(r"^PingFang\b")
_TRADITIONAL_REGION_RE = re.compile(r"\b(HK|MO|TC)\b")


def has_glyph_for_code_point(
    font: ParsedFont, code_point: int, character_set: frozenset[int] | None
) -> bool:
    if character_set and code_point not in character_set:
        return False
    try:
        glyph = font.glyph_for_code_point(code_point)
    except Exception:
        return False
    return glyph is not None and glyph.id > 0


def can_render_text(font: ParsedFont, text: str, character_set: frozenset[int] | None) -> bool:
    """Every code point of ``text`` maps to a real glyph."""
    if not text:
        return False
    return all(has_glyph_for_code_point(font, ord(char), character_set) for char in text)


def _is_sample_character(code_point: int) -> bool:
    if code_point < 0x20 or code_point > MAX_CODE_POINT:
        return False
    if code_point in PRIVATE_USE_RANGE:
        return False
    char = chr(code_point)
    if char.isspace():
        return False
    # Letters (L*) and numbers (N*) only
    return unicodedata.category(char)[0] in ("L", "N")


def pick_fallback_sample(
    character_set: frozenset[int] | None, font: ParsedFont | None = None
) -> str | None:
    """Up to two letters or digits from the coverage set, in code point order."""
    if not character_set:
        return None

    picked = []
    for code_point in sorted(character_set):
        if not _is_sample_character(code_point):
            continue
        if font is not None and not has_glyph_for_code_point(font, code_point, character_set):
            continue
        picked.append(chr(code_point))
        if len(picked) >= FALLBACK_SAMPLE_LENGTH:
            break

    return "".join(picked) or None


def _safe_character_set(font: ParsedFont) -> frozenset[int] | None:
    try:
        character_set = font.character_set
    except Exception:
        return None
    return character_set or None


def pick_sample_text(font: ParsedFont, family_name: str | None = None) -> str:
    """
    Pick the first candidate sample the face fully covers.

    PingFang families prefer Han text matching their region (traditional for
    HK, MO and TC). When no candidate fits, letters from the face's own
    coverage are used, and ``"Aa"`` as a last resort.
    """
    name = (family_name or "").strip()
    character_set = _safe_character_set(font)

    if _PINGFANG_RE.search(name):
        if _TRADITIONAL_REGION_RE.search(name):
            preferred, secondary = TRADITIONAL_HAN_SAMPLE, SIMPLIFIED_HAN_SAMPLE
        else:
            preferred, secondary = SIMPLIFIED_HAN_SAMPLE, TRADITIONAL_HAN_SAMPLE
        for sample in (preferred, secondary):
            if can_render_text(font, sample, character_set):
                return sample

    for sample in SAMPLE_TEXT_CANDIDATES:
        if can_render_text(font, sample, character_set):
            return sample

    return pick_fallback_sample(character_set, font) or DEFAULT_SAMPLE_TEXT

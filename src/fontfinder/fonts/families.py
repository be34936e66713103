"""
Family Grouping
===============

Groups indexed faces into display families and picks the face that stands
in for each family in summary views.
"""

import re
import unicodedata
from collections.abc import Iterable

from ..core.models import FontFace, FontFamily
from .fingerprint import family_id

_SEPARATORS_RE = re.compile(r"[\s_-]+")


def collation_key(value: str) -> tuple[str, str]:
    """Locale-aware style ordering: accents and case are secondary to the base letters."""
    decomposed = unicodedata.normalize("NFKD", value)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), value)


def pick_representative_face(faces: list[FontFace]) -> FontFace:
    """The face named Regular, otherwise the first face."""
    for face in faces:
        if face.style_name.strip().casefold() == "regular":
            return face
    return faces[0]


def group_into_families(faces: Iterable[FontFace]) -> list[FontFamily]:
    """
    Partition faces by exact family name.

    Faces within a family are sorted by style name and families by family
    name, both with ``collation_key``.
    """
    by_family: dict[str, list[FontFace]] = {}
    for face in faces:
        by_family.setdefault(face.family_name, []).append(face)

    families = []
    for family_name, family_faces in by_family.items():
        faces_sorted = sorted(family_faces, key=lambda f: collation_key(f.style_name))
        representative = pick_representative_face(faces_sorted)
        families.append(
            FontFamily(
                id=family_id(family_name),
                family_name=family_name,
                faces=faces_sorted,
                representative_face_id=representative.id,
            )
        )

    families.sort(key=lambda family: collation_key(family.family_name))
    return families


def is_hidden_family(family_name: str) -> bool:
    """System-private families (``.SF NS``, ``.Aqua Kana``...) start with a dot."""
    return family_name.strip().startswith(".")


def visible_families(families: list[FontFamily], include_hidden: bool = False) -> list[FontFamily]:
    if include_hidden:
        return list(families)
    return [family for family in families if not is_hidden_family(family.family_name)]


def keyword_variants(value: str) -> list[str]:
    """Lowercased keyword plus a condensed form without spaces, dashes and underscores."""
    lower = value.strip().lower()
    if not lower:
        return []
    condensed = _SEPARATORS_RE.sub("", lower)
    return [lower] if condensed == lower else [lower, condensed]


def unique_keywords(values: Iterable[str | None], max_keywords: int = 200) -> list[str]:
    """Search keywords for a family, deduplicated in first-seen order."""
    seen: set[str] = set()
    out: list[str] = []
    for value in values:
        if not value:
            continue
        for variant in keyword_variants(value):
            if variant in seen:
                continue
            seen.add(variant)
            out.append(variant)
            if len(out) >= max_keywords:
                return out
    return out


def family_keywords(family: FontFamily) -> list[str]:
    values: list[str | None] = [family.family_name]
    for face in family.faces:
        values.extend([face.style_name, face.display_name, face.postscript_name, face.full_name])
    return unique_keywords(values)

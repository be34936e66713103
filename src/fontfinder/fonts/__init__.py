"""Font Indexing Module
====================

Discovery, parsing and indexing of installed fonts, and grouping of the
indexed faces into families.
"""

from .families import (
    group_into_families,
    is_hidden_family,
    pick_representative_face,
    visible_families,
)
from .index import FontIndexStore, face_from_font
from .parser import FontContainer, ParsedFont, open_font, open_font_container
from .paths import classify_source, default_font_roots
from .walker import walk_files

__all__ = [
    "FontContainer",
    "FontIndexStore",
    "ParsedFont",
    "classify_source",
    "default_font_roots",
    "face_from_font",
    "group_into_families",
    "is_hidden_family",
    "open_font",
    "open_font_container",
    "pick_representative_face",
    "visible_families",
    "walk_files",
]

"""
Font Roots
==========

Standard font directories per operating system and classification of font
files into the source they were installed from.
"""

import logging
import os
import platform
from pathlib import Path

from ..core.models import FontRoot, FontSource

logger = logging.getLogger(__name__)

MOBILE_ASSET_ROOT = Path("/System/Library/AssetsV2")
MOBILE_ASSET_FONT_PREFIX = "com_apple_MobileAsset_Font"


def default_font_roots(system: str | None = None) -> list[FontRoot]:
    """Get font directories based on operating system."""
    system = (system or platform.system()).lower()

    if system == "darwin":  # macOS
        return [
            FontRoot(path="/System/Library/Fonts", source="system"),
            FontRoot(path="/Library/Fonts", source="library"),
            FontRoot(path=str(Path.home() / "Library" / "Fonts"), source="user"),
        ]

    if system == "windows":
        windir = os.environ.get("WINDIR", "C:\\Windows")
        roots = [FontRoot(path=str(Path(windir) / "Fonts"), source="system")]
        local_app_data = os.environ.get("LOCALAPPDATA")
        if local_app_data:
            roots.append(
                FontRoot(
                    path=str(Path(local_app_data) / "Microsoft" / "Windows" / "Fonts"),
                    source="user",
                )
            )
        return roots

    # Linux and other Unix-like systems
    return [
        FontRoot(path="/usr/share/fonts", source="system"),
        FontRoot(path="/usr/local/share/fonts", source="library"),
        FontRoot(path=str(Path.home() / ".local" / "share" / "fonts"), source="user"),
        FontRoot(path=str(Path.home() / ".fonts"), source="user"),
    ]


def mobile_asset_font_roots(asset_root: Path = MOBILE_ASSET_ROOT) -> list[str]:
    """Downloadable macOS system fonts live in versioned MobileAsset directories."""
    try:
        entries = list(os.scandir(asset_root))
    except OSError:
        return []

    roots = []
    for entry in entries:
        try:
            if entry.is_dir(follow_symlinks=False) and entry.name.startswith(
                MOBILE_ASSET_FONT_PREFIX
            ):
                roots.append(entry.path)
        except OSError:
            continue
    return roots


def _is_within(path: str, root: str) -> bool:
    root = os.path.normpath(root)
    return path == root or path.startswith(root.rstrip(os.sep) + os.sep)


def classify_source(file_path: str, roots: list[FontRoot]) -> FontSource:
    """Classify a font file by the most specific root that contains it."""
    normalized = os.path.normpath(file_path)

    if _is_within(normalized, str(MOBILE_ASSET_ROOT)):
        name = Path(normalized).relative_to(MOBILE_ASSET_ROOT).parts[:1]
        if name and name[0].startswith(MOBILE_ASSET_FONT_PREFIX):
            return "system"

    best: FontRoot | None = None
    best_length = -1
    for root in roots:
        root_path = os.path.normpath(os.path.expanduser(root.path))
        if _is_within(normalized, root_path) and len(root_path) > best_length:
            best = root
            best_length = len(root_path)
    return best.source if best else "other"

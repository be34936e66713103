"""
Fingerprints
============

Deterministic sha1 keys used both as identities (faces, families) and as
content-addressed cache keys (previews).
"""

import hashlib

VECTOR_PREVIEW_CACHE_VERSION = 4


def sha1(value: str) -> str:
    return hashlib.sha1(value.encode("utf-8")).hexdigest()  # noqa: S324


def format_mtime(file_mtime_ms: float) -> str:
    """Render a modification time without a trailing ``.0`` for whole values."""
    value = float(file_mtime_ms)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def face_id(file_path: str, postscript_name: str | None, style_name: str) -> str:
    return sha1(f"{file_path}|{postscript_name or ''}|{style_name}")


def family_id(family_name: str) -> str:
    return sha1(family_name)


def raster_cache_name(file_path: str, file_mtime_ms: float, size: int) -> str:
    """File name of a cached raster thumbnail."""
    key = sha1(f"{file_path}:{format_mtime(file_mtime_ms)}:{size}")
    return f"{key}@{size}.png"


def vector_cache_name(
    file_path: str,
    file_mtime_ms: float,
    postscript_name: str | None,
    family_name: str | None,
) -> str:
    """File name of a cached vector preview."""
    key = sha1(
        f"vector:v{VECTOR_PREVIEW_CACHE_VERSION}:{file_path}:{format_mtime(file_mtime_ms)}"
        f":{postscript_name or ''}:{family_name or ''}"
    )
    return f"{key}.svg"


def preview_request_key(
    file_path: str,
    file_mtime_ms: float,
    postscript_name: str | None,
    family_name: str | None,
    size: int,
) -> str:
    """Key of a preview resolution held in the in-memory preview cache."""
    return sha1(
        f"preview:{file_path}:{format_mtime(file_mtime_ms)}:{postscript_name or ''}"
        f":{family_name or ''}:{size}"
    )

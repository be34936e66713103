"""Pydantic models for the font index and its derived views."""

from pathlib import PurePath
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

FONT_INDEX_VERSION = 2

FontSource = Literal["system", "library", "user", "other"]


class _CamelModel(BaseModel):
    """Base model serialized with camelCase keys, as stored on disk."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        strict=True,
        extra="ignore",
    )

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class FontRoot(BaseModel):
    """A directory scanned for fonts and the source its files are classified as."""

    path: str
    source: Literal["system", "library", "user"]


class FontFace(_CamelModel):
    """One renderable face inside a font file."""

    id: str = Field(..., min_length=1)
    family_name: str
    style_name: str
    display_name: str
    postscript_name: str | None = None
    full_name: str | None = None
    file_path: str
    file_ext: str
    source: FontSource
    file_mtime_ms: float

    @property
    def file_name(self) -> str:
        return PurePath(self.file_path).name

    def __str__(self) -> str:
        return f"{self.display_name} ({self.file_name})"


class FontIndex(_CamelModel):
    """Persisted snapshot of every parsed face."""

    version: int
    built_at: str
    faces: list[FontFace] = Field(default_factory=list)


class FontFamily(_CamelModel):
    """Display grouping of faces sharing a family name. Never persisted."""

    id: str
    family_name: str
    faces: list[FontFace]
    representative_face_id: str

    @property
    def representative(self) -> FontFace:
        for face in self.faces:
            if face.id == self.representative_face_id:
                return face
        return self.faces[0]


class BuildStats(_CamelModel):
    """Counters reported after an index build."""

    scanned_files: int = 0
    parsed_faces: int = 0
    skipped_files: int = 0

    def __str__(self) -> str:
        return (
            f"{self.parsed_faces} faces indexed from {self.scanned_files} files "
            f"({self.skipped_files} skipped)"
        )


class BuildResult(BaseModel):
    """Fresh index plus the statistics of the scan that produced it."""

    index: FontIndex
    stats: BuildStats

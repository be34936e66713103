"""Configuration management for the font finder."""

import os
import platform
from pathlib import Path

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import (
    ConfigFileNotFoundError,
    ConfigLoadError,
    ConfigurationError,
    EmptyConfigFileError,
    InvalidYamlError,
)
from .models import FONT_INDEX_VERSION, FontRoot

APP_NAME = "font-finder"

DEFAULT_FONT_EXTENSIONS = [".otf", ".ttf", ".ttc", ".dfont"]
COLLECTION_EXTENSIONS = frozenset({"ttc", "otc", "dfont"})


def _default_support_dir() -> Path:
    """Per-user support directory holding the index and preview caches."""
    system = platform.system().lower()
    if system == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME
    if system == "windows":
        base = os.environ.get("LOCALAPPDATA") or str(Path.home() / "AppData" / "Local")
        return Path(base) / APP_NAME
    base = os.environ.get("XDG_CACHE_HOME") or str(Path.home() / ".cache")
    return Path(base) / APP_NAME


class IndexConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="INDEX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    """Font index build and cache configuration."""

    ttl_seconds: float = Field(7 * 24 * 60 * 60, gt=0, description="Index time-to-live")
    font_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FONT_EXTENSIONS),
        description="File extensions treated as fonts",
    )
    scan_yield_every: int = Field(25, ge=1, description="Files parsed between event loop yields")
    include_mobile_assets: bool = Field(
        True, description="Also scan macOS MobileAsset font directories"
    )

    @field_validator("font_extensions")
    @classmethod
    def normalize_extensions(cls, v):
        normalized = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                continue
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        if not normalized:
            raise ValueError("font_extensions must not be empty")
        return normalized


class PreviewConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PREVIEW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    """Preview generation configuration."""

    concurrency: int = Field(2, ge=1, le=32, description="Concurrent preview generations")
    thumbnail_size: int = Field(360, ge=16, le=4096, description="Raster thumbnail size in px")
    thumbnail_timeout_seconds: float = Field(20.0, gt=0.0, description="Thumbnailer timeout")
    thumbnailer_path: str = Field("/usr/bin/qlmanage", description="Thumbnailer executable")
    thumbnailer_args: list[str] = Field(
        default_factory=lambda: ["-t", "-s", "{size}", "-o", "{output_dir}", "{input}"],
        description="Thumbnailer argument template",
    )

    @field_validator("thumbnailer_args")
    @classmethod
    def validate_thumbnailer_args(cls, v):
        joined = " ".join(v)
        for placeholder in ("{input}", "{output_dir}"):
            if placeholder not in joined:
                raise ValueError(f"thumbnailer_args must contain {placeholder}")
        return v


class FontFinderConfig(BaseSettings):
    """Main application configuration that loads from multiple sources."""

    model_config = SettingsConfigDict(
        env_prefix="FONT_FINDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    support_dir: Path = Field(
        default_factory=_default_support_dir, description="Index and preview cache directory"
    )
    font_roots: list[FontRoot] | None = Field(
        None, description="Font directories to scan (platform defaults when unset)"
    )
    log_level: str = Field("INFO", description="Application log level")

    index: IndexConfig = Field(default_factory=IndexConfig)
    preview: PreviewConfig = Field(default_factory=PreviewConfig)

    @field_validator("support_dir")
    @classmethod
    def expand_support_dir(cls, v):
        return Path(v).expanduser()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def index_path(self) -> Path:
        return self.support_dir / f"font-index.v{FONT_INDEX_VERSION}.json"

    @property
    def raster_cache_dir(self) -> Path:
        return self.support_dir / "previews"

    @property
    def vector_cache_dir(self) -> Path:
        return self.support_dir / "vector-previews"

    @property
    def scratch_dir(self) -> Path:
        return self.support_dir / "tmp"

    def resolved_font_roots(self) -> list[FontRoot]:
        """Configured font roots, or the platform defaults when none are set."""
        if self.font_roots is not None:
            return [
                FontRoot(path=str(Path(root.path).expanduser()), source=root.source)
                for root in self.font_roots
            ]

        from ..fonts.paths import default_font_roots

        return default_font_roots()


def load_config_from_yaml(config_path: str | Path, config_class: type) -> BaseSettings:
    """Load configuration from YAML file."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigFileNotFoundError(str(config_path))

    try:
        with config_path.open() as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvalidYamlError(str(config_path), str(e)) from e

    if config_data is None:
        raise EmptyConfigFileError(str(config_path))

    try:
        # Don't load .env for YAML-based configs
        return config_class(_env_file=None, **config_data)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigLoadError(str(e)) from e


def _add_yaml_methods():
    """Add YAML loading methods to configuration classes."""

    @classmethod
    def from_yaml(cls, config_path: str | Path):
        """Load configuration from YAML file."""
        return load_config_from_yaml(config_path, cls)

    @classmethod
    def from_env_and_yaml(cls, yaml_path: str | Path | None = None, env_file: str = ".env"):
        """Load configuration from environment variables and optionally override with YAML."""
        if yaml_path and Path(yaml_path).exists():
            return cls.from_yaml(yaml_path)
        return cls(_env_file=env_file if Path(env_file).exists() else None)

    for config_class in [IndexConfig, PreviewConfig, FontFinderConfig]:
        config_class.from_yaml = from_yaml
        config_class.from_env_and_yaml = from_env_and_yaml


_add_yaml_methods()

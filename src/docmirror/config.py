"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (DOCMIRROR__CACHE__REFRESH_INTERVAL_SECONDS=300)
  2. docmirror.yaml         (searched in cwd, then the platform config dir)
  3. Hardcoded defaults

The config file is optional; all fields have sensible defaults.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_DATA_DIR = platformdirs.user_cache_dir("docmirror")
_DEFAULT_ARCHIVE_DIR = str(Path(_DEFAULT_DATA_DIR) / "archives")


def _find_config_file() -> str | None:
    """Return the path of the first docmirror.yaml found, or None."""
    candidates = [
        Path("docmirror.yaml"),
        Path(platformdirs.user_config_dir("docmirror")) / "docmirror.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class SourceSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    revision_url: str = (
        "https://gitlab.com/api/v4/projects/18902673/repository/commits?per_page=1"
    )
    archive_url: str = "https://gitlab.com/api-farm/docs/-/archive/master/docs-master.zip"


class CacheSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    root_dir: str = _DEFAULT_ARCHIVE_DIR
    refresh_interval_seconds: float = Field(default=60.0, gt=0)
    auto_refresh: bool = True


class FetcherSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    request_timeout_seconds: float = Field(default=10.0, gt=0)
    download_timeout_seconds: float = Field(default=120.0, gt=0)
    extract_timeout_seconds: float = Field(default=60.0, gt=0)


class ClassifierSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    source_extension: str = ".md"
    render_timeout_seconds: float = Field(default=5.0, gt=0)
    markdown_extensions: list[str] = ["fenced_code", "tables"]
    # Patterns run against the archive-relative path with "/" separators.
    endpoint_pattern: str = r"(^|/)(GET|POST|PUT|PATCH|DELETE)/"
    function_pattern: str = r"(^|/)ws/\d+/"
    info_pattern: str = ""

    @field_validator("source_extension")
    @classmethod
    def validate_source_extension(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("source_extension must not be empty")
        return v if v.startswith(".") else f".{v}"

    @field_validator("endpoint_pattern", "function_pattern", "info_pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as exc:
            raise ValueError(f"Invalid pattern {v!r}: {exc}") from exc
        return v


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: DOCMIRROR__CACHE__ROOT_DIR=/srv/docs
        env_prefix="DOCMIRROR__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    source: SourceSettings = SourceSettings()
    cache: CacheSettings = CacheSettings()
    fetcher: FetcherSettings = FetcherSettings()
    classifier: ClassifierSettings = ClassifierSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )

"""Configuration models and loading logic."""

from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_SETTINGS_FILE = Path("configs/settings.yaml")
SETTINGS_FILE_ENV = "REF_EMBED_SETTINGS_FILE"


class ProjectConfig(BaseModel):
    """Project metadata settings."""

    name: str = "ref_embed"
    env: str = "dev"


class PathsConfig(BaseModel):
    """Filesystem paths for logs and pass reports."""

    logs_root: Path = Path("./logs")
    reports_root: Path = Path("./reports")

    def resolved(self, project_root: Path) -> "PathsConfig":
        """Return a copy with project-relative paths resolved to absolute paths."""

        updates: dict[str, Path] = {}
        for field_name in type(self).model_fields:
            value = getattr(self, field_name)
            updates[field_name] = value if value.is_absolute() else (project_root / value).resolve()
        return self.model_copy(update=updates)


class EmbedConfig(BaseModel):
    """Directive recognition, naming and compression settings."""

    directive_namespace: str = Field(default="ref_embed", min_length=1)
    support_reference: str = Field(default="ref_embed", min_length=1)
    default_prefix: str = "ReferenceEmbed"
    candidate_patterns: list[str] = Field(default_factory=lambda: ["*.dll", "*.exe"], min_length=1)
    compression_level: int = Field(default=9, ge=0, le=9)

    @field_validator("candidate_patterns")
    @classmethod
    def validate_candidate_patterns(cls, value: list[str]) -> list[str]:
        for pattern in value:
            if not pattern.startswith("*."):
                raise ValueError(f"candidate pattern must look like '*.ext', got {pattern!r}")
        return value

    @property
    def candidate_extensions(self) -> tuple[str, ...]:
        """File extensions (with leading dot) matched by the candidate patterns."""

        return tuple(pattern[1:].lower() for pattern in self.candidate_patterns)


class ReportsConfig(BaseModel):
    """Which per-pass report artifacts to persist."""

    write_summary: bool = True
    write_decisions: bool = True


class AppSettings(BaseSettings):
    """Top-level application settings."""

    _yaml_file_override: ClassVar[Path | None] = None

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    embed: EmbedConfig = Field(default_factory=EmbedConfig)
    reports: ReportsConfig = Field(default_factory=ReportsConfig)

    model_config = SettingsConfigDict(
        env_prefix="REF_EMBED_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Use YAML defaults while allowing env vars to override values."""

        yaml_file = resolve_settings_file(cls._yaml_file_override)
        yaml_settings = YamlConfigSettingsSource(settings_cls, yaml_file=yaml_file)
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            yaml_settings,
            file_secret_settings,
        )

    def as_dict(self) -> dict[str, object]:
        """Return settings as a standard nested dictionary."""

        return self.model_dump(mode="json")


def find_project_root(start: Path | None = None) -> Path:
    """Locate the project root by traversing upward for config markers."""

    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / "configs/settings.yaml").exists():
            return candidate
    return current


def resolve_settings_file(override: Path | None = None) -> Path:
    """Resolve settings file from explicit override, env var, or default."""

    chosen = override
    if chosen is None:
        env_value = os.getenv(SETTINGS_FILE_ENV)
        if env_value:
            chosen = Path(env_value)
    if chosen is None:
        chosen = DEFAULT_SETTINGS_FILE

    if not chosen.is_absolute():
        chosen = (find_project_root() / chosen).resolve()
    return chosen


def load_settings(config_file: Path | None = None) -> AppSettings:
    """Load settings with YAML defaults and environment variable overrides."""

    settings_file = resolve_settings_file(config_file)
    project_root = settings_file.parent.parent.resolve()
    AppSettings._yaml_file_override = settings_file
    try:
        settings = AppSettings()
    finally:
        AppSettings._yaml_file_override = None
    resolved_paths = settings.paths.resolved(project_root=project_root)
    return settings.model_copy(update={"paths": resolved_paths})

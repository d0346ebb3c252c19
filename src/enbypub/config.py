"""Run settings: defaults < ``.enbypub.toml`` < environment < command line."""

from __future__ import annotations

import re
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from enbypub.core.feed import CollisionPolicy
from enbypub.exceptions import ConfigError

CONFIG_FILENAME = ".enbypub.toml"


def _deep_merge(destination: dict[str, Any], source: dict[str, Any]) -> dict[str, Any]:
    """Merge source into destination, with source values overwriting."""
    for key, value in source.items():
        if isinstance(value, Mapping) and key in destination and isinstance(destination[key], Mapping):
            destination[key] = _deep_merge(dict(destination[key]), dict(value))
        else:
            destination[key] = value
    return destination


class PublishSettings(BaseSettings):
    """Settings for one publish run.

    Directory settings are relative to ``root`` unless absolute. Every field
    can be set from the environment as ``ENBYPUB_<FIELD>``.
    """

    root: Path = Field(default_factory=Path.cwd, description="Site root directory")
    public_dir: Path = Field(default=Path("public"), description="Output directory")
    content_dir: Path = Field(default=Path("content"), description="Source documents directory")
    templates_dir: Path = Field(default=Path("templates"), description="Site templates directory")
    static_dir: Path = Field(default=Path("static"), description="Files copied verbatim into the output")
    text_file_pattern: str = Field(default=r"\.md$", description="Regex selecting source documents")
    feeds_file: Path = Field(default=Path("_feeds.yaml"), description="Feed configuration file")
    base_url: str | None = Field(default=None, description="Public URL of the site")
    default_template: str = Field(default="text.html", description="Template for documents without one")
    on_collision: CollisionPolicy = Field(default="error", description="What to do when two documents share a path")
    content_types: dict[str, str] = Field(default_factory=dict, description="Extension to content type overrides")

    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix="ENBYPUB_",
        env_nested_delimiter="__",
    )

    @field_validator("text_file_pattern")
    @classmethod
    def _valid_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            msg = f"invalid text_file_pattern {value!r}: {e}"
            raise ValueError(msg) from e
        return value

    @field_validator("content_types")
    @classmethod
    def _normalise_extensions(cls, value: dict[str, str]) -> dict[str, str]:
        return {key.lstrip(".").lower(): content_type for key, content_type in value.items()}

    def _resolve(self, path: Path) -> Path:
        if path.is_absolute():
            return path
        return self.root / path

    @property
    def abs_public_dir(self) -> Path:
        return self._resolve(self.public_dir)

    @property
    def abs_content_dir(self) -> Path:
        return self._resolve(self.content_dir)

    @property
    def abs_templates_dir(self) -> Path:
        return self._resolve(self.templates_dir)

    @property
    def abs_static_dir(self) -> Path:
        return self._resolve(self.static_dir)

    @property
    def abs_feeds_file(self) -> Path:
        return self._resolve(self.feeds_file)

    @classmethod
    def load(cls, root: Path | None = None, **overrides: Any) -> PublishSettings:
        """Load settings for the site at ``root``.

        Priority (highest to lowest):
        1. ``overrides`` that are not None (command line flags)
        2. Environment variables (ENBYPUB_FIELD)
        3. Config file (.enbypub.toml in ``root``)
        4. Defaults
        """
        root_path = Path(root) if root is not None else Path.cwd()
        config_file = root_path / CONFIG_FILENAME

        file_settings: dict[str, Any] = {}
        if config_file.is_file():
            try:
                with config_file.open("rb") as f:
                    file_settings = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as e:
                msg = f"Cannot read {config_file}: {e}"
                raise ConfigError(msg) from e

        try:
            env_settings = cls().model_dump(exclude_unset=True)
            merged = _deep_merge(file_settings, env_settings)
            merged = _deep_merge(merged, {key: value for key, value in overrides.items() if value is not None})
            merged["root"] = root_path
            return cls.model_validate(merged)
        except ValidationError as e:
            msg = f"Invalid settings: {e}"
            raise ConfigError(msg) from e

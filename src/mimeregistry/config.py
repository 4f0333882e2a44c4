"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Constructor arguments
  2. Environment variables  (MIMEREGISTRY__CACHE__ENABLED=true)
  3. mimeregistry.yaml      (searched in cwd, then ~/.config/mimeregistry/)
  4. Hardcoded defaults

The config file is optional; all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_CACHE_DIR = platformdirs.user_cache_dir("mimeregistry")
_DEFAULT_CACHE_PATH = str(Path(_DEFAULT_CACHE_DIR) / "types.cache")


def _find_config_file() -> str | None:
    """Return the path of the first mimeregistry.yaml found, or None."""
    candidates = [
        Path("mimeregistry.yaml"),
        Path.home() / ".config" / "mimeregistry" / "mimeregistry.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class CacheSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    enabled: bool = False
    path: str = _DEFAULT_CACHE_PATH


class DataSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # None reads the data file bundled with the package
    path: str | None = None
    format: Literal["json", "yaml"] | None = None


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: MIMEREGISTRY__CACHE__PATH=/tmp/types.cache
        env_prefix="MIMEREGISTRY__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
        extra="forbid",
    )

    lazy_load: bool = False
    cache: CacheSettings = CacheSettings()
    data: DataSettings = DataSettings()
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

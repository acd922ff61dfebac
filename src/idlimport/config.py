"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (IDLIMPORT__CACHE__URL_CACHE_DIR=.urlcache)
  2. idlimport.yaml         (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional — all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_CACHE_DIR = platformdirs.user_cache_dir("idlimport")
_DEFAULT_URL_CACHE_DIR = str(Path(_DEFAULT_CACHE_DIR) / "urlcache")
_DEFAULT_IDL_CACHE_DIR = str(Path(_DEFAULT_CACHE_DIR) / "idlcache")


def _find_config_file() -> str | None:
    """Return the path of the first idlimport.yaml found, or None."""
    candidates = [
        Path("idlimport.yaml"),
        Path(platformdirs.user_config_dir("idlimport")) / "idlimport.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class CacheSettings(BaseModel):
    url_cache_dir: str = _DEFAULT_URL_CACHE_DIR
    idl_cache_dir: str = _DEFAULT_IDL_CACHE_DIR


class FetcherSettings(BaseModel):
    timeout_seconds: float = 30.0
    max_redirects: int = 5
    max_connections: int = 10
    user_agent: str = "idlimport/1.0"


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "text"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: IDLIMPORT__FETCHER__TIMEOUT_SECONDS=10
        env_prefix="IDLIMPORT__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    cache: CacheSettings = CacheSettings()
    fetcher: FetcherSettings = FetcherSettings()
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

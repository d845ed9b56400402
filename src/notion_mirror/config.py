"""Configuration helpers for the Notion mirror."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigError


DEFAULT_NOTION_VERSION = "2022-06-28"
DEFAULT_OUTPUT_DIR = Path("notion-backup")
DEFAULT_API_DELAY_MS = 350


class NotionCredentials(BaseModel):
    """Connection information for the Notion REST API."""

    token: str = Field(..., min_length=1, description="Internal integration token")
    notion_version: str = Field(DEFAULT_NOTION_VERSION, description="Value of the Notion-Version header")


class MirrorConfig(BaseModel):
    """Aggregate configuration for a backup run."""

    credentials: NotionCredentials
    root_page_id: str = Field(..., min_length=1, description="Page whose subtree is mirrored")
    output_dir: Path = Field(DEFAULT_OUTPUT_DIR, description="Root of the local mirror")
    parallel_processing: bool = Field(True, description="Process sibling pages concurrently")
    api_delay_ms: int = Field(DEFAULT_API_DELAY_MS, ge=0, description="Pause before every API call")
    clean_output: bool = Field(False, description="Wipe the output directory before running")
    max_concurrency: Optional[int] = Field(
        None, ge=1, description="Upper bound on simultaneous API requests; unbounded when unset"
    )


ENV_KEYS = {
    "NOTION_TOKEN": ("credentials", "token"),
    "NOTION_VERSION": ("credentials", "notion_version"),
    "NOTION_ROOT_PAGE_ID": (None, "root_page_id"),
    "OUTPUT_DIR": (None, "output_dir"),
    "PARALLEL_PROCESSING": (None, "parallel_processing"),
    "API_DELAY": (None, "api_delay_ms"),
    "CLEAN_OUTPUT": (None, "clean_output"),
    "MAX_CONCURRENCY": (None, "max_concurrency"),
}
DEFAULT_CONFIG_PATHS = (
    Path.cwd() / "notion-mirror.toml",
    Path.home() / ".config" / "notion-mirror" / "config.toml",
)


@dataclasses.dataclass
class ConfigSource:
    """Raw configuration data and where it came from."""

    data: dict
    path: Optional[Path]


def _load_from_env() -> dict:
    """Return a nested dictionary built from the environment variables in ``ENV_KEYS``."""

    data: dict = {}
    for name, (section, key) in ENV_KEYS.items():
        value = os.getenv(name)
        if not value:
            continue
        target = data.setdefault(section, {}) if section else data
        target[key] = value
    return data


def _load_toml(path: Path) -> Optional[dict]:
    if not path.exists():
        return None

    try:  # Python 3.11+
        import tomllib  # type: ignore
    except ModuleNotFoundError:  # pragma: no cover - Python <3.11 fallback
        import tomli as tomllib  # type: ignore

    with path.open("rb") as handle:
        return tomllib.load(handle)


def _merge(base: dict, overrides: dict) -> dict:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def resolve_config(explicit_path: Optional[Path] = None) -> ConfigSource:
    """Discover raw configuration data.

    A TOML file is used when one is found (the explicit path first, then the
    default locations). Environment variables are layered on top of the file
    so secrets such as ``NOTION_TOKEN`` can stay out of it.
    """

    if explicit_path is not None and not explicit_path.exists():
        raise ConfigError(f"Configuration file {explicit_path} does not exist")

    candidates = (explicit_path,) if explicit_path else DEFAULT_CONFIG_PATHS
    for path in candidates:
        try:
            data = _load_toml(path)
        except (OSError, ValueError) as exc:
            raise ConfigError(f"Unable to read configuration file {path}: {exc}") from exc
        if data is not None:
            return ConfigSource(data=_merge(data, _load_from_env()), path=path)

    return ConfigSource(data=_load_from_env(), path=None)


def ensure_config(
    *,
    token: Optional[str] = None,
    root_page_id: Optional[str] = None,
    output_dir: Optional[Path] = None,
    parallel_processing: Optional[bool] = None,
    api_delay_ms: Optional[int] = None,
    clean_output: Optional[bool] = None,
    max_concurrency: Optional[int] = None,
    config_path: Optional[Path] = None,
) -> MirrorConfig:
    """Resolve configuration from files and environment, then apply explicit options."""

    source = resolve_config(config_path)
    data = source.data

    overrides: dict = {
        "root_page_id": root_page_id,
        "output_dir": output_dir,
        "parallel_processing": parallel_processing,
        "api_delay_ms": api_delay_ms,
        "clean_output": clean_output,
        "max_concurrency": max_concurrency,
    }
    data = _merge(data, {key: value for key, value in overrides.items() if value is not None})
    if token:
        data = _merge(data, {"credentials": {"token": token}})

    if not data.get("credentials", {}).get("token"):
        raise ConfigError("NOTION_TOKEN environment variable not set!")
    if not data.get("root_page_id"):
        raise ConfigError("NOTION_ROOT_PAGE_ID environment variable not set!")

    try:
        return MirrorConfig.model_validate(data)
    except ValidationError as exc:
        origin = f" (from {source.path})" if source.path else ""
        raise ConfigError(f"Invalid configuration{origin}: {exc}") from exc

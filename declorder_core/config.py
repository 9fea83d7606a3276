"""Layered settings for wiring source and class path providers."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from platformdirs import user_config_dir

from .errors import ConfigurationError
from .events import EventBus
from .recovery import (
    ArchiveBinaryProvider,
    BinaryProvider,
    ChainedBinaryProvider,
    DirectoryBinaryProvider,
    DirectorySourceProvider,
    OrderRecovery,
)

__all__ = [
    "DEFAULT_APP_NAME",
    "PROJECT_CONFIG_NAME",
    "USER_CONFIG_NAME",
    "RecoverySettings",
    "SettingsResolver",
    "default_config_path",
]

DEFAULT_APP_NAME = "declorder"
PROJECT_CONFIG_NAME = "declorder.toml"
USER_CONFIG_NAME = "config.toml"

_PATH_KEYS = frozenset({"source_path", "class_path"})
_DEFAULTS: dict[str, Any] = {
    "source_path": [],
    "class_path": [],
    "encoding": "utf-8",
    "log_level": "WARNING",
}
_ENV_KEY_MAP: dict[str, str] = {
    "source_path": "DECLORDER_SOURCE_PATH",
    "class_path": "DECLORDER_CLASS_PATH",
    "encoding": "DECLORDER_ENCODING",
    "log_level": "DECLORDER_LOG_LEVEL",
}
_ARCHIVE_SUFFIXES = (".jar", ".zip")


def default_config_path() -> Path:
    """Return the platform-specific user config file."""

    base_dir = Path(user_config_dir(DEFAULT_APP_NAME, appauthor=False))
    return base_dir / USER_CONFIG_NAME


def _load_config_from_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"{path}: {exc}") from exc
    except OSError as exc:
        raise ConfigurationError(f"{path}: cannot read ({exc})") from exc
    unknown = sorted(set(data) - set(_DEFAULTS))
    if unknown:
        raise ConfigurationError(f"{path}: unknown settings {', '.join(unknown)}")
    return data


def _as_paths(value: Any, base_dir: Path | None) -> tuple[Path, ...]:
    if isinstance(value, str):
        items = [item for item in value.split(os.pathsep) if item]
    elif isinstance(value, (list, tuple)):
        items = [str(item) for item in value]
    else:
        raise ConfigurationError(f"expected a path list, got {value!r}")
    paths = []
    for item in items:
        path = Path(item).expanduser()
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        paths.append(path)
    return tuple(paths)


@dataclass(frozen=True)
class RecoverySettings:
    """Resolved settings plus the factories that turn them into providers."""

    source_path: tuple[Path, ...] = ()
    class_path: tuple[Path, ...] = ()
    encoding: str = "utf-8"
    log_level: str = "WARNING"

    def source_provider(self) -> DirectorySourceProvider:
        return DirectorySourceProvider(self.source_path, encoding=self.encoding)

    def binary_provider(self) -> BinaryProvider:
        providers: list[BinaryProvider] = []
        for entry in self.class_path:
            if entry.suffix.lower() in _ARCHIVE_SUFFIXES:
                providers.append(ArchiveBinaryProvider(entry))
            else:
                providers.append(DirectoryBinaryProvider([entry]))
        return ChainedBinaryProvider(providers)

    def build_recovery(self, events: EventBus | None = None) -> OrderRecovery:
        return OrderRecovery(self.source_provider(), self.binary_provider(), events=events)


@dataclass
class SettingsResolver:
    """Resolve settings from CLI overrides, env, project file, user file, defaults."""

    config_filename: str = PROJECT_CONFIG_NAME
    user_config_path: Path | None = None
    cli_overrides: Mapping[str, Any] | None = None
    env: Mapping[str, str] | None = None
    defaults: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        self.user_config_path = self.user_config_path or default_config_path()
        self.cli_overrides = {
            key: value for key, value in dict(self.cli_overrides or {}).items() if value
        }
        self.env = self.env if self.env is not None else os.environ
        base_defaults = dict(_DEFAULTS)
        if self.defaults:
            base_defaults.update(self.defaults)
        self.defaults = base_defaults

    # ---------- Public API ----------

    def find_project_config(self, start_dir: Path | None = None) -> Path | None:
        """Look for the project config file by walking parent directories."""
        start = (Path(start_dir) if start_dir else Path.cwd()).resolve()
        for current in (start, *start.parents):
            candidate = current / self.config_filename
            if candidate.is_file():
                return candidate
        return None

    def resolve_setting(self, key: str, start_dir: Path | None = None) -> Any:
        """Return the value for `key` using CLI, env, project, user, defaults order."""
        value, _ = self._lookup(key, start_dir)
        return value

    def resolve(self, start_dir: Path | None = None) -> RecoverySettings:
        values: dict[str, Any] = {}
        for key in _DEFAULTS:
            value, base_dir = self._lookup(key, start_dir)
            values[key] = _as_paths(value, base_dir) if key in _PATH_KEYS else str(value)
        return RecoverySettings(**values)

    # ---------- Internal helpers ----------

    def _lookup(self, key: str, start_dir: Path | None) -> tuple[Any, Path | None]:
        if (value := self.cli_overrides.get(key)) is not None:
            return value, None
        if (value := self._env_value(key)) is not None:
            return value, None
        project_config = self.find_project_config(start_dir)
        if project_config is not None:
            layer = _load_config_from_file(project_config)
            if key in layer:
                return layer[key], project_config.parent
        user_layer = _load_config_from_file(self.user_config_path)
        if key in user_layer:
            return user_layer[key], self.user_config_path.parent
        return self.defaults.get(key), None

    def _env_value(self, key: str) -> str | None:
        alias = _ENV_KEY_MAP.get(key)
        if alias:
            return self.env.get(alias) or None
        return None

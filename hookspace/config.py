"""Loading of ``.pre-commit-config.yaml`` and ``.pre-commit-hooks.yaml`` files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import TypeAdapter, ValidationError

from hookspace.models.config import MANIFEST_FILE, Config, ManifestHook

_MANIFEST_ADAPTER = TypeAdapter(list[ManifestHook])


class ConfigError(Exception):
    """A configuration file could not be loaded."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(message)
        self.path = path


class ConfigNotFoundError(ConfigError):
    """The configuration file does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(path, f"Config file not found: `{path}`")


class ConfigParseError(ConfigError):
    """The configuration file is not valid YAML or fails validation."""

    def __init__(self, path: Path, detail: str) -> None:
        super().__init__(path, f"Failed to parse `{path}`: {detail}")


class ManifestError(Exception):
    """A fetched repository has a missing or invalid hook manifest."""

    def __init__(self, path: Path, detail: str) -> None:
        super().__init__(f"Invalid hook manifest `{path}`: {detail}")
        self.path = path


def read_config(path: Path) -> Config:
    """Read and validate a ``.pre-commit-config.yaml``.

    Raises ``ConfigNotFoundError`` when the file is missing and
    ``ConfigParseError`` for any YAML or schema problem.
    """
    data = _load_yaml(path)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigParseError(path, "expected a mapping at the top level")

    unknown = sorted(set(data) - set(Config.model_fields))
    if unknown:
        logger.warning("Ignoring unexpected keys in `{}`: {}", path, ", ".join(unknown))

    try:
        return Config.model_validate(data)
    except ValidationError as exc:
        raise ConfigParseError(path, str(exc)) from exc


def read_manifest(path: Path) -> list[ManifestHook]:
    """Read the hook manifest of a fetched repository checkout."""
    try:
        data = _load_yaml(path)
    except ConfigError as exc:
        raise ManifestError(path, str(exc)) from exc
    try:
        return _MANIFEST_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise ManifestError(path, str(exc)) from exc


def manifest_file_in(directory: Path) -> Path:
    return directory / MANIFEST_FILE


def _load_yaml(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigNotFoundError(path) from None
    except OSError as exc:
        raise ConfigParseError(path, str(exc)) from exc

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigParseError(path, str(exc)) from exc

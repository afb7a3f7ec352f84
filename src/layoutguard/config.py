"""Project configuration: optional ``.layoutguard.yml`` overriding the layout conventions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import yaml

from layoutguard.rules import (
    ALLOWED_EXTENSIONS,
    DEFAULT_CATEGORIES,
    DEFAULT_CONTENT_UNITS,
    Rule,
    build_rules,
)

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".layoutguard.yml"
SUPPORTED_CONFIG_VERSIONS: frozenset[int] = frozenset({1})


class ConfigError(Exception):
    """Raised when the configuration file is present but invalid."""


@dataclass(frozen=True)
class LayoutConfig:
    """Effective layout conventions for a content repository."""

    allowed_extensions: frozenset[str] = ALLOWED_EXTENSIONS
    content_units: tuple[str, ...] = DEFAULT_CONTENT_UNITS
    categories: tuple[str, ...] = DEFAULT_CATEGORIES
    source: Path | None = field(default=None, compare=False)

    def rules(self) -> list[Rule]:
        return build_rules(self.content_units, self.categories)


def _string_list(data: dict[str, Any], key: str) -> list[str] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) and v for v in value):
        msg = f"{CONFIG_FILENAME}: '{key}' must be a list of non-empty strings"
        raise ConfigError(msg)
    return value


def parse_config(data: object, *, source: Path | None = None) -> LayoutConfig:
    """Build a LayoutConfig from parsed YAML data.

    ``None`` (an empty file) yields the defaults.
    """
    if data is None:
        return LayoutConfig(source=source)
    if not isinstance(data, dict):
        msg = f"{CONFIG_FILENAME} must be a YAML mapping"
        raise ConfigError(msg)

    version = data.get("version", 1)
    if isinstance(version, bool) or version not in SUPPORTED_CONFIG_VERSIONS:
        expected = sorted(SUPPORTED_CONFIG_VERSIONS)
        msg = f"{CONFIG_FILENAME}: unsupported version {version}, expected one of {expected}"
        raise ConfigError(msg)

    defaults = LayoutConfig()

    extensions = _string_list(data, "allowed_extensions")
    if extensions is not None:
        bad = [ext for ext in extensions if not ext.startswith(".")]
        if bad:
            msg = f"{CONFIG_FILENAME}: extensions must start with '.': {', '.join(bad)}"
            raise ConfigError(msg)

    content_units = _string_list(data, "content_units")
    if content_units is not None:
        for unit in content_units:
            if unit.startswith("/") or unit.endswith("/") or "//" in unit:
                msg = f"{CONFIG_FILENAME}: invalid content unit root '{unit}'"
                raise ConfigError(msg)

    categories = _string_list(data, "categories")
    if categories is not None:
        nested = [name for name in categories if "/" in name]
        if nested:
            msg = f"{CONFIG_FILENAME}: categories must be top-level directories: {', '.join(nested)}"
            raise ConfigError(msg)

    return LayoutConfig(
        allowed_extensions=(
            frozenset(extensions) if extensions is not None else defaults.allowed_extensions
        ),
        content_units=tuple(content_units) if content_units is not None else defaults.content_units,
        categories=tuple(categories) if categories is not None else defaults.categories,
        source=source,
    )


def load_config(project_root: Path, config_path: Path | None = None) -> LayoutConfig:
    """Load the layout configuration for *project_root*.

    Uses *config_path* when given, otherwise ``<project_root>/.layoutguard.yml``.
    A missing default file means the built-in conventions apply.

    Raises
    ------
    ConfigError
        When the file cannot be read or does not match the schema.
    """
    path = config_path or project_root / CONFIG_FILENAME
    if config_path is None and not path.is_file():
        logger.debug("No %s in %s, using default layout", CONFIG_FILENAME, project_root)
        return LayoutConfig()

    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        msg = f"Cannot read {path}: {exc}"
        raise ConfigError(msg) from exc

    logger.debug("Loaded layout config from %s", path)
    return parse_config(data, source=path)

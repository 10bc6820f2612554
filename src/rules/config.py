"""
Options for the import-style rule and loading them from YAML/JSON files.

Option files use the same keys as the ESLint rule (`styles`,
`extendDefaultStyles`, `checkImport`, ...); snake_case spellings are accepted
as well. Since YAML is a superset of JSON, one loader covers both formats.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import yaml

from .styles import ImportStyle

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when an options file or mapping is malformed."""


_KEY_ALIASES = {
    "styles": "styles",
    "extendDefaultStyles": "extend_default_styles",
    "extend_default_styles": "extend_default_styles",
    "checkImport": "check_import",
    "check_import": "check_import",
    "checkDynamicImport": "check_dynamic_import",
    "check_dynamic_import": "check_dynamic_import",
    "checkExportFrom": "check_export_from",
    "check_export_from": "check_export_from",
    "checkRequire": "check_require",
    "check_require": "check_require",
}

_STYLE_NAMES = {style.value for style in ImportStyle}


@dataclass(frozen=True)
class ImportStyleOptions:
    """Rule options; every field mirrors one ESLint option."""

    styles: Mapping[str, Any] = field(default_factory=dict)
    extend_default_styles: bool = True
    check_import: bool = True
    check_dynamic_import: bool = True
    check_export_from: bool = False
    check_require: bool = True

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ImportStyleOptions":
        if not isinstance(raw, Mapping):
            raise ConfigError("Options must be a mapping.")

        values: Dict[str, Any] = {}
        for key, value in raw.items():
            attribute = _KEY_ALIASES.get(key)
            if attribute is None:
                raise ConfigError(f"Unknown option: {key!r}")
            if attribute == "styles":
                value = _validate_styles(value)
            elif not isinstance(value, bool):
                raise ConfigError(f"Option {key!r} must be a boolean, got {value!r}")
            values[attribute] = value
        return cls(**values)


def _validate_styles(value: Any) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError("`styles` must map module names to style tables.")

    styles: Dict[str, Any] = {}
    for module_name, table in value.items():
        if table is False:
            styles[str(module_name)] = False
            continue
        if not isinstance(table, Mapping):
            raise ConfigError(
                f"Styles for module {module_name!r} must be false or a mapping of booleans."
            )
        for style, allowed in table.items():
            if not isinstance(allowed, bool):
                raise ConfigError(
                    f"Style {style!r} for module {module_name!r} must be a boolean."
                )
            if style not in _STYLE_NAMES:
                logger.warning(
                    "Unknown style %r for module %r is ignored by the checker",
                    style,
                    module_name,
                )
        styles[str(module_name)] = dict(table)
    return styles


def load_options(path: Union[str, Path]) -> ImportStyleOptions:
    """
    Read rule options from a YAML or JSON file.

    An empty file yields the defaults.

    Raises:
        ConfigError: If the file cannot be read or does not describe valid options.
    """
    config_path = Path(path)
    try:
        with open(config_path, "r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle)
    except OSError as exc:
        raise ConfigError(f"Failed to read {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {config_path}: {exc}") from exc

    if raw is None:
        logger.warning("Options file %s is empty; using defaults", config_path)
        return ImportStyleOptions()
    return ImportStyleOptions.from_mapping(raw)


__all__ = ["ConfigError", "ImportStyleOptions", "load_options"]

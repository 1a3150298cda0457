"""
Configuration loading utilities.

Configs are YAML mappings. A string value of the form "!include <file>" is
replaced by the contents of that file, resolved relative to the file that
holds the directive, so each camera section can live in its own file:

    camera: "!include cameras/pinhole.yaml"

Command-line overrides use dotted keys ('synthetic.pixel_noise=0.5') and
the value is parsed as YAML.
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

import yaml

CONFIG_DIR_ENV = "LENSCALIB_CONFIG_DIR"
INCLUDE_PREFIX = "!include "


class ConfigLoader:
    """Resolve config paths and read YAML with include expansion."""

    def __init__(self, config_dir: Optional[str] = None):
        """
        Args:
            config_dir: Directory searched for bare config names. Falls back
                        to $LENSCALIB_CONFIG_DIR, then 'configs'.
        """
        self.config_dir = Path(config_dir or os.environ.get(CONFIG_DIR_ENV, "configs"))

    def resolve(self, config_path: Union[str, Path]) -> Path:
        """Resolve a config path, trying the config directory for bare names."""
        config_path = Path(config_path)

        if config_path.is_absolute() or config_path.exists():
            return config_path
        if config_path.parts[:1] == self.config_dir.parts[:1]:
            return config_path
        return self.config_dir / config_path

    def load(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Read a config file and expand its includes.

        An empty file gives an empty config.

        Args:
            config_path: Path to config file, or a name inside config_dir.

        Returns:
            Configuration dictionary.

        Raises:
            FileNotFoundError: If the file or one of its includes is missing.
            ValueError: If the top level is not a mapping.
        """
        path = self.resolve(config_path)
        config = _read_yaml(path)

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ValueError(
                f"Config {path} must contain a mapping, got {type(config).__name__}"
            )

        return self._expand(config, path.parent)

    def _expand(self, node: Any, base_dir: Path) -> Any:
        # Includes are expanded in mapping values only, recursively.
        if isinstance(node, dict):
            return {key: self._expand(value, base_dir) for key, value in node.items()}

        if isinstance(node, str) and node.startswith(INCLUDE_PREFIX):
            include_path = base_dir / node[len(INCLUDE_PREFIX):].strip()
            return self._expand(_read_yaml(include_path), include_path.parent)

        return node


def _read_yaml(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r") as f:
        return yaml.safe_load(f)


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load a config with a default ConfigLoader."""
    return ConfigLoader().load(config_path)


def merge_configs(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Deep merge ``override`` into a copy of ``base``.

    Nested mappings are merged key by key; any other value in ``override``
    replaces the one in ``base``. Neither input is modified.

    Example:
        >>> merge_configs({"intrinsics": {"fx": 460, "fy": 460}},
        ...               {"intrinsics": {"fx": 470}})
        {'intrinsics': {'fx': 470, 'fy': 460}}
    """
    result = copy.deepcopy(dict(base))

    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, Mapping):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = copy.deepcopy(value)

    return result


def get_nested(config: Mapping[str, Any], key: str, default: Any = None) -> Any:
    """
    Look up a dot-separated key such as 'cameras.fisheye.intrinsics'.

    Returns ``default`` as soon as a level is missing or not a mapping.
    """
    node = config
    for part in key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return default
        node = node[part]
    return node


def set_nested(config: Dict[str, Any], key: str, value: Any) -> None:
    """Set a dot-separated key in place, replacing non-mapping levels."""
    *parents, leaf = key.split(".")
    node = config
    for part in parents:
        if not isinstance(node.get(part), dict):
            node[part] = {}
        node = node[part]
    node[leaf] = value


def parse_override(expression: str) -> Tuple[str, Any]:
    """
    Parse a 'dotted.key=value' command-line override.

    The value is parsed as YAML, so numbers, booleans and lists keep their
    types ('camera.intrinsics.fx=460' gives 460, not '460').

    Raises:
        ValueError: If the expression has no '=' or an empty key.
    """
    key, sep, raw = expression.partition("=")
    key = key.strip()
    if not sep or not key:
        raise ValueError(f"Override must look like 'key=value', got {expression!r}")
    return key, yaml.safe_load(raw)


def apply_overrides(config: Dict[str, Any], expressions: Iterable[str]) -> Dict[str, Any]:
    """Apply 'key=value' overrides to a copy of ``config``."""
    result = copy.deepcopy(config)
    for expression in expressions:
        key, value = parse_override(expression)
        set_nested(result, key, value)
    return result

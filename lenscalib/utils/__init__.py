"""Utility modules."""

from .config_loader import (
    ConfigLoader,
    apply_overrides,
    get_nested,
    load_config,
    merge_configs,
    set_nested,
)
from .logger import LoggerMixin, get_logger, setup_logger

__all__ = [
    "ConfigLoader",
    "load_config",
    "merge_configs",
    "get_nested",
    "set_nested",
    "apply_overrides",
    "setup_logger",
    "get_logger",
    "LoggerMixin",
]

"""Configuration package."""

from .engine_config import ConfigError, EngineConfig, load_engine_config, normalize_content
from .settings import (
    get_app_name,
    get_app_version,
    get_debounce_seconds,
    get_engine_timeout,
    get_node_bin,
    get_scan_workers,
    get_tailwind_bin,
)

__all__ = [
    'ConfigError',
    'EngineConfig',
    'load_engine_config',
    'normalize_content',
    'get_app_name',
    'get_app_version',
    'get_debounce_seconds',
    'get_engine_timeout',
    'get_node_bin',
    'get_scan_workers',
    'get_tailwind_bin',
]

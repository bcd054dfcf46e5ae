"""Configuration model and YAML loader."""

from __future__ import annotations

from .loader import (
    DEFAULT_CONFIG_PATH,
    config_from_data,
    config_to_data,
    dump_config,
    load_config,
    load_default_config,
)
from .model import (
    CollectorSpec,
    ColorsSpec,
    ColumnSpec,
    Config,
    GridSpec,
    Indicator,
    InfoContent,
    InfoSpec,
    StyleRule,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "config_from_data",
    "config_to_data",
    "dump_config",
    "load_config",
    "load_default_config",
    "CollectorSpec",
    "ColorsSpec",
    "ColumnSpec",
    "Config",
    "GridSpec",
    "Indicator",
    "InfoContent",
    "InfoSpec",
    "StyleRule",
]

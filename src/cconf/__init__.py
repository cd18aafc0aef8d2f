"""cconf - Runtime configuration store with typed population."""

from __future__ import annotations

# Store
from cconf.config import DEFAULT_SEPARATOR, Config

# Tree
from cconf.merge import merge, merge_all
from cconf.tree import MISSING, get_path, set_path

# Loaders
from cconf.loaders import LoadFunc, default_loaders, load_json, load_yaml

# Population
from cconf.populate import TYPE_KEY, Populator
from cconf.registry import TypeRegistry

# Errors
from cconf.errors import (
    ConfError,
    ConfigKeyError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigTargetError,
    ConfigValueError,
    ErrorCodes,
    PathError,
    ProviderError,
    UnsupportedFormatError,
)

__version__ = "0.1.0"

__all__ = [
    # Store
    "Config",
    "DEFAULT_SEPARATOR",
    # Tree
    "MISSING",
    "get_path",
    "set_path",
    "merge",
    "merge_all",
    # Loaders
    "LoadFunc",
    "default_loaders",
    "load_json",
    "load_yaml",
    # Population
    "Populator",
    "TypeRegistry",
    "TYPE_KEY",
    # Errors
    "ErrorCodes",
    "ConfError",
    "PathError",
    "ConfigKeyError",
    "ConfigValueError",
    "ConfigTargetError",
    "ProviderError",
    "UnsupportedFormatError",
    "ConfigNotFoundError",
    "ConfigParseError",
]

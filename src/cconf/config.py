"""Configuration store with dotted-path access, merging loads, and population."""

from __future__ import annotations

import copy
import glob
import logging
from pathlib import Path
from typing import Any, TypeVar

from cconf.convert import ConversionError, convert
from cconf.errors import ConfigKeyError, PathError, UnsupportedFormatError
from cconf.loaders import LoadFunc, default_loaders
from cconf.merge import merge, merge_all
from cconf.populate import Populator, check_target
from cconf.registry import Provider, TypeRegistry
from cconf.tree import MISSING, get_path, paths_overlap, set_path

logger = logging.getLogger(__name__)

__all__ = ["Config", "DEFAULT_SEPARATOR"]

DEFAULT_SEPARATOR = "."

T = TypeVar("T")


class Config:
    """Configuration accessor with dot-path key support.

    Holds one merged configuration tree. Reads are memoized per key; the
    memo is reset whenever the tree is loaded or replaced, and the affected
    keys are dropped on :meth:`set`.

    Not safe for concurrent mutation: callers sharing an instance across
    threads must serialize ``load``, ``set`` and ``replace_store``.
    """

    def __init__(
        self,
        data: Any = None,
        *,
        separator: str = DEFAULT_SEPARATOR,
        loaders: dict[str, LoadFunc] | None = None,
        registry: TypeRegistry | None = None,
    ) -> None:
        """Initialize the Config.

        Args:
            data: Optional initial configuration tree (deep-copied).
            separator: Path separator used by every dotted key.
            loaders: Format name to load function table. Defaults to JSON
                and YAML loaders.
            registry: Type registry for polymorphic population.
        """
        if not separator:
            raise ValueError("separator must be a non-empty string")
        self.separator = separator
        self.loaders: dict[str, LoadFunc] = dict(loaders) if loaders is not None else default_loaders()
        self._registry = registry if registry is not None else TypeRegistry()
        self._populator = Populator(self._registry)
        self._store: Any = None
        self._cache: dict[str, Any] = {}
        if data is not None:
            self.replace_store(data)

    # ----- Loading -----

    def register_loader(self, fmt: str, fn: LoadFunc) -> None:
        """Register a load function for files with the extension ``fmt``."""
        self.loaders[fmt] = fn

    def load(self, *files: str | Path, fmt: str | None = None) -> None:
        """Load and merge configuration from one or more files.

        Later files override earlier ones. Loading stops at the first failure;
        files merged before it are kept.

        Args:
            files: Paths of the files to load.
            fmt: Loader name to use for every file instead of its extension.

        Raises:
            UnsupportedFormatError: If no loader matches a file.
            ConfigNotFoundError: If a file does not exist.
            ConfigParseError: If a file cannot be decoded.
        """
        try:
            for file in files:
                name = str(file)
                typ = fmt if fmt is not None else Path(name).suffix.lstrip(".")
                fn = self.loaders.get(typ)
                if fn is None:
                    raise UnsupportedFormatError(fmt=typ, file_path=name)
                data = fn(name)
                if data is None:
                    logger.debug("Configuration file '%s' is empty, skipping", name)
                    continue
                self._store = merge(self._store, data)
                logger.debug("Loaded configuration from '%s'", name)
        finally:
            self.clear_cache()

    def load_pattern(self, pattern: str) -> None:
        """Load every file matching the glob ``pattern``, in sorted order."""
        files = sorted(glob.glob(pattern))
        if not files:
            logger.warning("No configuration files match '%s'", pattern)
        self.load(*files)

    # ----- Store -----

    @property
    def store(self) -> Any:
        """The complete configuration tree, or None if nothing was loaded.

        The tree is returned live; mutate it through :meth:`set` so the read
        memo stays coherent.
        """
        return self._store

    def replace_store(self, *data: Any) -> None:
        """Replace the configuration tree with the merge of ``data``.

        Trees are deep-copied, then merged left to right: dicts merge
        recursively, anything else is replaced by the later value.
        """
        self._store = merge_all(*(copy.deepcopy(d) for d in data))
        self.clear_cache()

    def clear_cache(self) -> None:
        """Drop every memoized read."""
        self._cache.clear()
        logger.debug("Configuration cache cleared")

    # ----- Access -----

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-path key.

        If ``default`` is not None the value is converted to its type; an
        inconvertible or missing value yields ``default``.
        """
        if key in self._cache:
            value = self._cache[key]
        else:
            value = get_path(self._store, key, self.separator)
            self._cache[key] = value

        if value is MISSING:
            return default
        if default is None:
            return value
        try:
            return convert(value, type(default))
        except ConversionError:
            return default

    def _get_typed(self, key: str, default: T) -> T:
        value = self.get(key, default)
        if not isinstance(value, type(default)):
            raise TypeError(f"Config.get({key!r}) returned {type(value).__name__}, expected {type(default).__name__}")
        return value

    def get_str(self, key: str, default: str = "") -> str:
        """Get a string value."""
        return self._get_typed(key, default)

    def get_int(self, key: str, default: int = 0) -> int:
        """Get an integer value. Floats are truncated."""
        return self._get_typed(key, default)

    def get_float(self, key: str, default: float = 0.0) -> float:
        """Get a float value."""
        return self._get_typed(key, float(default))

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Get a boolean value."""
        return self._get_typed(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set the configuration value at a dot-path key.

        Missing intermediate dicts are created; lists are never grown. A
        failed set leaves the store unchanged.

        Raises:
            ConfigKeyError: If the key crosses a scalar, or uses an invalid or
                out-of-range list index.
        """
        tree = self._store if self._store is not None else {}
        try:
            set_path(tree, key, value, self.separator)
        except PathError as exc:
            raise ConfigKeyError(key=exc.path, message=exc.reason, cause=exc) from exc
        if self._store is None:
            self._store = tree
            self._cache.clear()
        self._invalidate(key)

    def _invalidate(self, key: str) -> None:
        stale = [k for k in self._cache if paths_overlap(k, key, self.separator)]
        for k in stale:
            del self._cache[k]

    # ----- Population -----

    def register(self, name: str, provider: Provider) -> None:
        """Register a provider for polymorphic population under ``name``.

        Raises:
            ProviderError: If the provider is not callable without arguments.
        """
        self._registry.register(name, provider)

    @property
    def registry(self) -> TypeRegistry:
        return self._registry

    def populate(self, target: Any, key: str | None = None) -> None:
        """Populate ``target`` in place from the store or the sub-tree at ``key``.

        Raises:
            ConfigTargetError: If ``target`` cannot be configured.
            ConfigKeyError: If ``key`` does not resolve to a value.
            ConfigValueError: If the configuration does not fit ``target``.
        """
        check_target(target)
        source = self._store
        if key is not None:
            source = self.get(key)
            if source is None:
                raise ConfigKeyError(key=key, message="no configuration value was found")
        self._populator.populate(target, source, key or "")

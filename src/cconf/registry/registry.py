"""Type registry mapping discriminator names to instance providers."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator

from cconf.errors import ProviderError
from cconf.registry.validation import validate_provider

logger = logging.getLogger(__name__)

__all__ = ["TypeRegistry", "Provider"]

Provider = Callable[[], Any]


class TypeRegistry:
    """Associates type names with providers that create instances of the type.

    The population engine consults the registry when it meets a mapping with
    a ``"type"`` entry destined for an abstract or protocol-typed attribute.
    """

    def __init__(self) -> None:
        self._providers: dict[str, Provider] = {}

    def register(self, name: str, provider: Provider) -> None:
        """Register ``provider`` under the discriminator ``name``.

        Args:
            name: Value of the ``"type"`` key that selects this provider.
            provider: Class or callable invoked with no arguments to build
                a new instance.

        Raises:
            ProviderError: If the provider cannot be called without
                arguments or is declared to return None.
        """
        errors = validate_provider(provider)
        if errors:
            raise ProviderError(name=name, reason="; ".join(errors))
        if name in self._providers:
            logger.warning("Type '%s' is already registered, replacing its provider", name)
        self._providers[name] = provider
        logger.debug("Registered provider for type '%s'", name)

    def unregister(self, name: str) -> bool:
        """Remove a provider. Returns False if ``name`` was not registered."""
        return self._providers.pop(name, None) is not None

    def resolve(self, name: str) -> Provider | None:
        """Look up the provider for ``name``. Returns None if not found."""
        return self._providers.get(name)

    def has(self, name: str) -> bool:
        """Check whether a provider is registered under ``name``."""
        return name in self._providers

    def names(self) -> list[str]:
        """Sorted list of registered type names."""
        return sorted(self._providers)

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._providers)

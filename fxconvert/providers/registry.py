"""Registry and factory for FX rate providers."""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Mapping

from .base import BaseRateProvider, ProviderError

ProviderFactory = Callable[[Mapping[str, Any]], BaseRateProvider]

_PROVIDER_FACTORIES: Dict[str, ProviderFactory] = {}


def _default_factories() -> Iterable[tuple[str, ProviderFactory]]:
    from .mock import MockRateProvider
    from .openexchangerates import OpenExchangeRatesProvider

    def mock_factory(config: Mapping[str, Any]) -> MockRateProvider:
        return MockRateProvider(base_currency=str(config.get("RATES_BASE_CURRENCY", "USD")))

    return [
        (MockRateProvider.name, mock_factory),
        (OpenExchangeRatesProvider.name, OpenExchangeRatesProvider.from_config),
    ]


def register_provider(name: str, factory: ProviderFactory) -> None:
    """Register a provider factory under the given name."""

    if not name:
        raise ValueError("Provider name cannot be empty.")
    normalized = name.lower()
    _PROVIDER_FACTORIES[normalized] = factory


def unregister_provider(name: str) -> None:
    """Remove a provider factory; primarily for testing."""

    _PROVIDER_FACTORIES.pop(name.lower(), None)


def list_providers() -> List[str]:
    """Return the list of registered provider identifiers."""

    return sorted(_PROVIDER_FACTORIES.keys())


def get_provider(name: str, config: Mapping[str, Any] | None = None) -> BaseRateProvider:
    """Instantiate a provider by name using the supplied configuration mapping."""

    provider_name = (name or "").lower()
    try:
        factory = _PROVIDER_FACTORIES[provider_name]
    except KeyError as exc:
        available = ", ".join(list_providers()) or "none registered"
        raise ProviderError(
            f"Unknown provider '{provider_name}'. Available providers: {available}"
        ) from exc
    return factory(config or {})


def init_provider(app) -> BaseRateProvider:
    """Attach the configured provider to the Flask app."""

    provider = get_provider(app.config.get("FX_RATE_PROVIDER"), app.config)
    app.extensions["rate_provider"] = provider
    return provider


def reset_registry(default_factories: Iterable[tuple[str, ProviderFactory]] | None = None) -> None:
    """Reset provider registry; useful for tests."""

    _PROVIDER_FACTORIES.clear()

    factories = default_factories or _default_factories()
    for name, factory in factories:
        register_provider(name, factory)


reset_registry()

"""Provider interfaces and data structures for FX rate sources."""

from .base import BaseRateProvider, FetchFailed, ProviderError
from .http_client import HTTPClient, HTTPClientConfig, HTTPClientError
from .openexchangerates import OpenExchangeRatesConfig, OpenExchangeRatesProvider
from .schemas import RateSnapshot

__all__ = [
    "BaseRateProvider",
    "FetchFailed",
    "HTTPClient",
    "HTTPClientConfig",
    "HTTPClientError",
    "OpenExchangeRatesConfig",
    "OpenExchangeRatesProvider",
    "ProviderError",
    "RateSnapshot",
]

"""Abstract interface for FX rate providers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .schemas import RateSnapshot


class ProviderError(Exception):
    """Raised when a rate provider cannot be configured or used."""


class FetchFailed(ProviderError):
    """Raised when fetching the latest rates fails for any reason.

    Network errors, non-success responses and malformed bodies all surface as
    this single condition; the message carries the cause.
    """


class BaseRateProvider(ABC):
    """Defines the interface all FX rate providers must implement."""

    name: str

    @abstractmethod
    def get_latest(self) -> RateSnapshot:
        """Retrieve the most recent rates for the configured base currency.

        The returned snapshot's timestamp is whatever the provider reported;
        callers stamp their own fetch time.

        Raises:
            FetchFailed: If the rates could not be retrieved or parsed.
        """

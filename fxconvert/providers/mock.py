"""Mock provider implementation for testing and local development."""

from __future__ import annotations

from .base import BaseRateProvider
from .schemas import RateSnapshot, normalize_code

MOCK_USD_RATES: dict[str, float] = {
    "USD": 1.0,
    "EUR": 0.90,
    "GBP": 0.78,
    "JPY": 150.12,
    "CHF": 0.88,
}


class MockRateProvider(BaseRateProvider):
    """Deterministic provider returning synthetic FX data."""

    name = "mock"

    def __init__(self, base_currency: str = "USD") -> None:
        self._base = normalize_code(base_currency)

    def get_latest(self) -> RateSnapshot:
        pivot = MOCK_USD_RATES.get(self._base, 1.0)
        rates = {code: value / pivot for code, value in MOCK_USD_RATES.items()}
        rates[self._base] = 1.0
        return RateSnapshot(base=self._base, rates=rates)

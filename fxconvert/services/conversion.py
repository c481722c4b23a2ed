"""Currency conversion over the rate cache's current snapshot."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from fxconvert.providers.schemas import RateSnapshot, normalize_code

if TYPE_CHECKING:
    from .rate_cache import RateCache


class ConversionError(ValueError):
    """Base class for errors returned by a conversion request."""

    kind = "conversion_error"


class RatesUnavailable(ConversionError):
    """Raised when no snapshot has been loaded or fetched yet."""

    kind = "rates_unavailable"

    def __init__(self, message: str = "Exchange rates are not available yet.") -> None:
        super().__init__(message)


class UnknownCurrency(ConversionError):
    """Raised when a currency code is absent from the snapshot."""

    kind = "unknown_currency"

    def __init__(self, codes: Iterable[str]) -> None:
        self.codes = tuple(codes)
        super().__init__(f"Unknown currency code(s): {', '.join(self.codes)}")


class InvalidRate(ConversionError):
    """Raised when a rate is zero or not finite."""

    kind = "invalid_rate"

    def __init__(self, code: str, rate: float) -> None:
        self.code = code
        self.rate = rate
        super().__init__(f"Invalid rate {rate!r} for {code}")


def lookup_key(code: str) -> str | None:
    """Return the rates-map key for a caller supplied code.

    Codes that cannot be normalized (blank, non-ASCII) can never be in a
    snapshot, so they map to ``None`` and are reported as unknown.
    """

    try:
        return normalize_code(code)
    except ValueError:
        return None


@dataclass(frozen=True)
class Quote:
    amount: float
    from_code: str
    to_code: str
    result: float
    base: str
    timestamp: int


def convert_with_snapshot(
    snapshot: RateSnapshot | None,
    amount: float,
    from_code: str,
    to_code: str,
) -> float:
    """Convert ``amount`` from one currency to another using ``snapshot``.

    The result is ``amount * rates[to] / rates[from]``.
    """

    if snapshot is None:
        raise RatesUnavailable()

    amount = float(amount)
    if not math.isfinite(amount):
        raise ValueError(f"Amount must be a finite number, got {amount!r}")

    source = lookup_key(from_code)
    target = lookup_key(to_code)

    missing: list[str] = []
    for raw, key in ((from_code, source), (to_code, target)):
        label = key if key is not None else str(raw)
        if (key is None or key not in snapshot.rates) and label not in missing:
            missing.append(label)
    if missing:
        raise UnknownCurrency(missing)

    from_rate = snapshot.rates[source]
    to_rate = snapshot.rates[target]
    for code, rate in ((source, from_rate), (target, to_rate)):
        if rate == 0 or not math.isfinite(rate):
            raise InvalidRate(code, rate)

    if source == target:
        return amount
    return amount * to_rate / from_rate


class ConversionService:
    """Answer conversion requests from whatever snapshot the cache holds.

    The service never triggers a refresh; it reads the installed snapshot
    once per request so every conversion sees a single consistent set of
    rates.
    """

    def __init__(self, cache: RateCache) -> None:
        self._cache = cache

    def convert(self, amount: float, from_code: str, to_code: str) -> float:
        return self.quote(amount, from_code, to_code).result

    def quote(self, amount: float, from_code: str, to_code: str) -> Quote:
        """Convert and report which snapshot the answer came from."""

        snapshot = self._cache.snapshot()
        if snapshot is None:
            raise RatesUnavailable()
        result = convert_with_snapshot(snapshot, amount, from_code, to_code)
        return Quote(
            amount=float(amount),
            from_code=normalize_code(from_code),
            to_code=normalize_code(to_code),
            result=result,
            base=snapshot.base,
            timestamp=snapshot.timestamp,
        )

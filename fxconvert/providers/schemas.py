"""Dataclasses describing normalized FX provider payloads."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Mapping


def normalize_code(code: str) -> str:
    if not isinstance(code, str) or not code.strip():
        raise ValueError(f"Currency code cannot be blank: {code!r}")
    normalized = code.strip().upper()
    if not normalized.isascii():
        raise ValueError(f"Currency code must be ASCII: {code!r}")
    return normalized


def _normalize_rates(rates: Mapping[str, float | int]) -> Dict[str, float]:
    normalized: Dict[str, float] = {}
    for code, value in rates.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"Rate for {code!r} must be a number, got {type(value).__name__}")
        key = normalize_code(code)
        if key in normalized:
            raise ValueError(f"Duplicate rate for {key} in payload")
        normalized[key] = float(value)
    return normalized


@dataclass(frozen=True)
class RateSnapshot:
    """One complete set of exchange rates quoted against ``base``.

    Instances are immutable: ``rates`` is exposed as a read-only mapping, and
    a refresh replaces the whole snapshot rather than patching it.
    """

    base: str
    rates: Mapping[str, float] = field(default_factory=dict)
    timestamp: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "base", normalize_code(self.base))
        rates = _normalize_rates(self.rates)
        if not rates:
            raise ValueError("RateSnapshot requires at least one rate")
        object.__setattr__(self, "rates", MappingProxyType(rates))
        if isinstance(self.timestamp, bool) or not isinstance(self.timestamp, int):
            raise TypeError("timestamp must be an integer number of epoch seconds")

    def stamped(self, timestamp: int) -> RateSnapshot:
        """Return a copy carrying the given fetch time."""

        return replace(self, timestamp=int(timestamp))

    def age_seconds(self, now: int) -> int:
        return now - self.timestamp

    def is_fresh(self, now: int, max_age_seconds: int) -> bool:
        return self.age_seconds(now) <= max_age_seconds

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "base": self.base,
            "rates": dict(self.rates),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> RateSnapshot:
        """Build a snapshot from the ``{timestamp, base, rates}`` JSON shape.

        Raises:
            KeyError: If ``base`` or ``rates`` is missing.
            TypeError: If a field has the wrong type.
            ValueError: If a field has an invalid value.
        """

        if not isinstance(payload, Mapping):
            raise TypeError("Snapshot payload must be a JSON object")
        rates = payload["rates"]
        if not isinstance(rates, Mapping):
            raise TypeError("'rates' must be a JSON object")
        timestamp = payload.get("timestamp", 0)
        if isinstance(timestamp, float) and timestamp.is_integer():
            timestamp = int(timestamp)
        return cls(base=payload["base"], rates=rates, timestamp=timestamp)

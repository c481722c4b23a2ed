"""openexchangerates.org provider implementation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .base import BaseRateProvider, FetchFailed, ProviderError
from .http_client import HTTPClient, HTTPClientConfig, HTTPClientError
from .schemas import RateSnapshot, normalize_code

DEFAULT_BASE_URL = "https://openexchangerates.org/api"
LATEST_PATH = "/latest.json"


@dataclass(frozen=True)
class OpenExchangeRatesConfig:
    """Connection settings; the app id and base are fixed at startup."""

    app_id: str
    base_currency: str = "USD"
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 5.0
    max_retries: int = 1
    backoff_seconds: float = 0.5


class OpenExchangeRatesProvider(BaseRateProvider):
    """Fetch the latest rates for one base currency from openexchangerates.org."""

    name = "openexchangerates"

    def __init__(self, config: OpenExchangeRatesConfig, client: Optional[HTTPClient] = None) -> None:
        if not config.app_id or not config.app_id.strip():
            raise ProviderError("openexchangerates provider requires an app id (OXR_APP_ID).")
        self._config = config
        self._base = normalize_code(config.base_currency)
        self._client = client or HTTPClient(
            HTTPClientConfig(
                base_url=config.base_url,
                timeout=config.timeout,
                max_retries=config.max_retries,
                backoff_seconds=config.backoff_seconds,
                secret_params=("app_id",),
            )
        )

    @property
    def base_currency(self) -> str:
        return self._base

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> OpenExchangeRatesProvider:
        base_url = config.get("RATES_API_BASE_URL")
        if not isinstance(base_url, str) or not base_url.strip():
            base_url = DEFAULT_BASE_URL
        return cls(
            OpenExchangeRatesConfig(
                app_id=str(config.get("OXR_APP_ID") or "").strip(),
                base_currency=str(config.get("RATES_BASE_CURRENCY", "USD")),
                base_url=base_url,
                timeout=float(config.get("REQUEST_TIMEOUT_SECONDS", 5)),
                max_retries=int(config.get("RATES_API_MAX_RETRIES", 1)),
                backoff_seconds=float(config.get("RATES_API_BACKOFF_SECONDS", 0.5)),
            )
        )

    def get_latest(self) -> RateSnapshot:
        params = {"app_id": self._config.app_id.strip(), "base": self._base}
        try:
            payload = self._client.get(LATEST_PATH, params=params)
        except HTTPClientError as exc:
            raise FetchFailed(str(exc)) from exc

        if payload.get("error"):
            description = payload.get("description") or payload.get("message") or "unknown error"
            raise FetchFailed(f"openexchangerates error payload: {description}")

        try:
            snapshot = RateSnapshot.from_dict(
                {"base": payload.get("base"), "rates": payload.get("rates")}
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise FetchFailed(f"Unexpected response payload from openexchangerates: {exc}") from exc

        if snapshot.base != self._base:
            raise FetchFailed(
                f"openexchangerates returned base {snapshot.base}, expected {self._base}"
            )
        return snapshot

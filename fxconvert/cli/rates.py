"""CLI commands for refreshing rates and converting amounts."""

from __future__ import annotations

import click
from flask import current_app
from flask.cli import with_appcontext

from fxconvert.services import (
    CONVERSION_EXT_KEY,
    RATE_CACHE_EXT_KEY,
    RefreshOutcome,
)


@click.command("refresh-rates")
@with_appcontext
def refresh_rates() -> None:
    """Load or fetch rates if the cached snapshot is missing or stale."""

    cache = current_app.extensions[RATE_CACHE_EXT_KEY]
    outcome = cache.ensure_fresh()
    snapshot = cache.snapshot()
    if snapshot is None:
        raise click.ClickException(f"Refresh {outcome.value}; no rates available.")
    click.echo(
        f"Refresh {outcome.value}: {len(snapshot.rates)} rates for {snapshot.base} "
        f"(timestamp={snapshot.timestamp})."
    )
    if outcome is RefreshOutcome.FAILED:
        click.echo("Using previously cached rates.", err=True)


@click.command("convert")
@click.argument("amount", type=float)
@click.argument("from_code")
@click.argument("to_code")
@with_appcontext
def convert_amount(amount: float, from_code: str, to_code: str) -> None:
    """Convert AMOUNT from FROM_CODE to TO_CODE, refreshing rates if needed."""

    current_app.extensions[RATE_CACHE_EXT_KEY].ensure_fresh()
    service = current_app.extensions[CONVERSION_EXT_KEY]
    try:
        result = service.convert(amount, from_code, to_code)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"{result:.2f}")

"""Rates blueprint exposing the cached snapshot and manual refresh."""

from __future__ import annotations

from flask_smorest import Blueprint

blp = Blueprint("Rates", __name__, description="Cached exchange rates")

from . import routes  # noqa: E402,F401

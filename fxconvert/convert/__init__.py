"""Conversion blueprint exposing the currency conversion endpoint."""

from __future__ import annotations

from flask_smorest import Blueprint

blp = Blueprint("Convert", __name__, description="Currency conversion")

from . import routes  # noqa: E402,F401

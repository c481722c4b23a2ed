"""Application factory for the fxconvert currency conversion service."""

from __future__ import annotations

import atexit
from collections.abc import Mapping
from typing import Any

from flask import Flask
from flask_smorest import Api

from config import get_config, validate_provider

from .cli import register_cli
from .logging import init_request_logging, setup_logging

__version__ = "0.1.0"


def create_app(
    config_name: str | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Flask:
    """Application factory adhering to the Flask app factory pattern.

    Args:
        config_name: Config environment name; defaults to ``APP_ENV``.
        overrides: Extra config values applied after the config class, before
            any extension is initialised.
    """

    app = Flask(__name__)
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    if overrides:
        app.config.update(overrides)
    app.config["FX_RATE_PROVIDER"] = validate_provider(app.config.get("FX_RATE_PROVIDER"))

    setup_logging(app)
    init_request_logging(app)
    _configure_api(app)
    _register_extensions(app)
    api = Api(app)
    app.extensions["smorest_api"] = api
    _register_blueprints(app, api)
    _register_error_handlers(app)

    register_cli(app)
    return app


def _configure_api(app: Flask) -> None:
    app.config.setdefault("API_TITLE", "fxconvert API")
    app.config.setdefault("API_VERSION", "v1")
    app.config.setdefault("OPENAPI_VERSION", "3.0.3")
    app.config.setdefault("OPENAPI_URL_PREFIX", "/docs")
    app.config.setdefault("OPENAPI_SWAGGER_UI_PATH", "/")
    app.config.setdefault(
        "OPENAPI_SWAGGER_UI_URL",
        "https://cdn.jsdelivr.net/npm/swagger-ui-dist/",
    )


def _register_extensions(app: Flask) -> None:
    """Wire provider, rate cache, conversion service and refresh scheduler."""

    from .providers.registry import init_provider
    from .services import init_rate_cache, init_scheduler

    provider = init_provider(app)
    cache = init_rate_cache(app, provider)
    scheduler = init_scheduler(app, cache)
    if scheduler is not None:
        atexit.register(scheduler.stop)


def _register_blueprints(app: Flask, api: Api) -> None:
    """Register Flask blueprints."""

    from .convert import blp as convert_blp
    from .health import blp as health_blp
    from .rates import blp as rates_blp

    api.register_blueprint(convert_blp, url_prefix="/convert")
    api.register_blueprint(rates_blp, url_prefix="/rates")
    api.register_blueprint(health_blp, url_prefix="/health")


def _register_error_handlers(app: Flask) -> None:
    """Register global error handlers."""

    from .errors import register_error_handlers

    register_error_handlers(app)

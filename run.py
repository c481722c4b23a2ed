"""Entry point for running the fxconvert Flask app.

Usage: ``python run.py [APP_ID]``. When given, APP_ID overrides the
``OXR_APP_ID`` environment variable.
"""

from __future__ import annotations

import os
import sys

from dotenv import load_dotenv


def _prepare_environment(argv: list[str]) -> None:
    """Load `.env` from the repository root and apply the optional app id argument."""

    project_root = os.path.abspath(os.path.dirname(__file__))
    env_file = os.path.join(project_root, ".env")
    if os.path.exists(env_file):
        load_dotenv(env_file)

    if len(argv) > 1 and argv[1].strip():
        os.environ["OXR_APP_ID"] = argv[1].strip()


def main(argv: list[str] | None = None) -> None:
    """Create the Flask app and run the development server."""

    _prepare_environment(sys.argv if argv is None else argv)

    # config.py reads the environment on import, so import after .env is loaded.
    from fxconvert import create_app

    app = create_app(config_name=os.getenv("APP_ENV"))

    host = os.getenv("FLASK_RUN_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_RUN_PORT", "5000"))
    debug = app.config.get("DEBUG", False)

    # The reloader would start a second scheduler in the child process.
    app.run(host=host, port=port, debug=debug, use_reloader=False)


if __name__ == "__main__":
    main()

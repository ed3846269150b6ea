"""
admintab app entrypoint.

This module provides the CLI entrypoint to launch the Streamlit UI. It defers
all UI composition to the app.ui package and exists solely to start Streamlit
programmatically or render directly when already running under Streamlit.

Usage:
    - Python execution (hands process to Streamlit):
        python -m app.main --db admin.db --port 9033

    - Streamlit direct:
        streamlit run src/app/main.py -- --db admin.db --log-level DEBUG
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from admintab.io.config import LOG_LEVELS, AdminSettings
from admintab.io.errors import IoConfigError
from app.ui import streamlit_app

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    """Configure the root logger once; later calls only adjust the level."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger().setLevel(level.upper())


def _parser(add_help: bool = True) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="admintab Streamlit admin panel", add_help=add_help)
    parser.add_argument("--config", default=None, help="Settings TOML (admintab.toml or pyproject.toml)")
    parser.add_argument("--db", default=None, help="SQLite database file (overrides settings)")
    parser.add_argument("--port", type=int, default=None, help="HTTP port (default from settings)")
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=LOG_LEVELS,
        help="Root logging level (default from settings).",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Console entrypoint that launches Streamlit with the admin UI.

    If already executing within a Streamlit server (environment variable
    STREAMLIT_SERVER_PORT is set), this function renders the app directly.
    Otherwise, it execs "python -m streamlit run <this_module>" with the server
    port from --port or settings, passing the remaining options after "--".

    Args:
        argv (list[str] | None): Optional list of CLI arguments. If None,
            sys.argv[1:] is used.

    Examples:
        python -m app.main --db out/admin.db --port 9033
        streamlit run src/app/main.py -- --db out/admin.db
    """
    args = list(sys.argv[1:] if argv is None else argv)

    parser = _parser()
    ns = parser.parse_args(args)

    try:
        settings = AdminSettings.load(ns.config)
    except IoConfigError as e:
        parser.error(str(e))
    log_level = ns.log_level or settings.log_level
    configure_logging(log_level)

    # If invoked within Streamlit, just render
    if os.environ.get("STREAMLIT_SERVER_PORT"):
        streamlit_app(config_path=ns.config, db_path=ns.db)
        return

    # Otherwise, exec streamlit run on this module to take over the process
    app_path = Path(__file__).resolve()
    port = ns.port if ns.port is not None else settings.port
    cmd = [sys.executable, "-m", "streamlit", "run", str(app_path), "--server.port", str(port)]

    passthrough: list[str] = []
    if ns.config:
        passthrough += ["--config", ns.config]
    if ns.db:
        passthrough += ["--db", ns.db]
    passthrough += ["--log-level", log_level]
    cmd += ["--"] + passthrough

    logging.getLogger(__name__).info("starting streamlit on port %s", port)
    try:
        os.execv(sys.executable, cmd)
    except OSError:
        import subprocess

        subprocess.run(cmd, check=False)


if __name__ == "__main__":
    # Support: --config, --db, --log-level after '--' when using `streamlit run`
    ns, _ = _parser(add_help=False).parse_known_args(sys.argv[1:])
    configure_logging(ns.log_level or "INFO")
    streamlit_app(config_path=ns.config, db_path=ns.db)

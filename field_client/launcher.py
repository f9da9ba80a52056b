"""Command-line entry point: parses options, configures logging and opens the placer window."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional, Tuple

from PyQt6.QtWidgets import QApplication

from field_client.client_config import InitialClientSettings, load_initial_settings
from field_client.developer_helpers import DeveloperHelperController
from field_client.main_window import PlacerWindow
from field_client.services.transport import DocumentTransport
from version import DEV_MODE_ENV_VAR, __version__, is_dev_build

CLIENT_DIR = Path(__file__).resolve().parent
_ROOT_LOGGER = logging.getLogger("FieldPlacer")
_CLIENT_LOGGER = logging.getLogger("FieldPlacer.Client")


def resolve_settings_path(arg_value: Optional[str]) -> Path:
    if arg_value:
        return Path(arg_value).expanduser().resolve()
    return (CLIENT_DIR.parent / "field_settings.json").resolve()


def resolve_log_level(value: Any, *, dev_build: bool) -> Tuple[int, str]:
    """Return ``(level, source)`` from a CLI value such as ``"debug"`` or ``"10"``."""

    if value is not None:
        text = str(value).strip()
        numeric: Optional[int] = None
        try:
            numeric = int(text)
        except ValueError:
            attr = getattr(logging, text.upper(), None)
            if isinstance(attr, int):
                numeric = attr
        if numeric is not None:
            return numeric, "cli"
    if dev_build:
        return logging.DEBUG, "dev-mode"
    return logging.INFO, "default"


def apply_log_level(initial: InitialClientSettings, level: int, source: str) -> None:
    initial.log_level = level
    initial.log_level_source = source
    _ROOT_LOGGER.setLevel(level)
    _CLIENT_LOGGER.debug("Client logger level set to %s via %s", logging.getLevelName(level), source)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Place signature and form fields on a PDF page")
    parser.add_argument("pdf", nargs="?", help="PDF to open on start-up")
    parser.add_argument("--settings", help="Path to field_settings.json")
    parser.add_argument("--api-url", help="Base URL of the upload/signing service")
    parser.add_argument("--log-level", help="Logger level name or number (default INFO; DEBUG on dev builds)")
    args = parser.parse_args(argv)

    settings_path = resolve_settings_path(args.settings)
    initial_settings = load_initial_settings(settings_path)
    if args.api_url:
        initial_settings.api_url = args.api_url.strip().rstrip("/")

    _ROOT_LOGGER.propagate = False
    helper = DeveloperHelperController(_ROOT_LOGGER, CLIENT_DIR, initial_settings)
    level, source = resolve_log_level(args.log_level, dev_build=is_dev_build())
    apply_log_level(initial_settings, level, source)
    if source != "dev-mode" and not is_dev_build():
        _CLIENT_LOGGER.debug("Release build; export %s=1 to force DEBUG logging.", DEV_MODE_ENV_VAR)

    _CLIENT_LOGGER.info("Starting Field Placer %s (pid=%s)", __version__, os.getpid())
    _CLIENT_LOGGER.debug(
        "Loaded initial settings from %s: api_url=%s render_scale=%.2f retention=%d",
        settings_path,
        initial_settings.api_url,
        initial_settings.render_scale,
        initial_settings.client_log_retention,
    )

    app = QApplication(sys.argv)
    transport = DocumentTransport(initial_settings.api_url, timeout=initial_settings.request_timeout)
    window = PlacerWindow(initial_settings, transport)
    helper.apply_initial_window_state(window, initial_settings)
    window.show()
    if args.pdf:
        window.open_document(Path(args.pdf).expanduser())

    exit_code = app.exec()
    _CLIENT_LOGGER.info("Field Placer exiting with code %s", exit_code)
    helper.shutdown()
    return int(exit_code)


if __name__ == "__main__":
    raise SystemExit(main())

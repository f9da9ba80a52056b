"""Client logging setup and settings application for the Field Placer window."""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from field_client.client_config import InitialClientSettings
from field_client.logging_utils import build_rotating_file_handler, resolve_logs_dir

if TYPE_CHECKING:
    from field_client.main_window import PlacerWindow


_LOG_FILE_NAME = "field_placer.log"
_MAX_LOG_BYTES = 512 * 1024


class DeveloperHelperController:
    """Own the client log handler and push initial settings into the window."""

    def __init__(self, logger: logging.Logger, client_root: Path, initial: InitialClientSettings) -> None:
        self._logger = logger
        self._client_root = client_root
        self._log_handler: Optional[logging.Handler] = None
        self._log_path: Optional[Path] = None
        self._current_log_retention = max(1, initial.client_log_retention)
        self._configure_client_logging(self._current_log_retention)

    # Public API -----------------------------------------------------------

    @property
    def log_retention(self) -> int:
        return self._current_log_retention

    @property
    def log_path(self) -> Optional[Path]:
        return self._log_path

    def apply_initial_window_state(self, window: "PlacerWindow", initial: InitialClientSettings) -> None:
        window.set_show_coordinates(initial.show_coordinates)
        window.set_render_scale(initial.render_scale)

    def set_log_retention(self, retention: int) -> None:
        try:
            numeric = int(retention)
        except (TypeError, ValueError):
            numeric = self._current_log_retention
        numeric = max(1, numeric)
        if numeric == self._current_log_retention:
            return
        self._configure_client_logging(numeric)
        self._logger.debug("Client log retention updated to %d", numeric)

    def shutdown(self) -> None:
        if self._log_handler is None:
            return
        self._logger.removeHandler(self._log_handler)
        self._log_handler.close()
        self._log_handler = None

    # Internal helpers ----------------------------------------------------

    def _configure_client_logging(self, retention: int) -> None:
        retention = max(1, retention)
        logs_dir = resolve_logs_dir(self._client_root)
        formatter = logging.Formatter(
            "%(asctime)s.%(msecs)03d UTC - %(levelname)s - %(name)s - %(message)s",
            "%Y-%m-%d %H:%M:%S",
        )
        formatter.converter = time.gmtime
        try:
            handler = build_rotating_file_handler(
                logs_dir,
                _LOG_FILE_NAME,
                retention=retention,
                max_bytes=_MAX_LOG_BYTES,
                formatter=formatter,
            )
        except OSError as exc:
            stream_handler = logging.StreamHandler()
            stream_handler.setFormatter(formatter)
            self._replace_handler(stream_handler)
            self._logger.warning("Failed to initialise file logging in %s: %s", logs_dir, exc)
            self._log_path = None
            self._current_log_retention = retention
            return

        self._replace_handler(handler)
        self._log_path = logs_dir / _LOG_FILE_NAME
        self._current_log_retention = retention
        self._logger.debug(
            "Client logging initialised: path=%s retention=%d max_bytes=%d backup_count=%d",
            self._log_path,
            retention,
            _MAX_LOG_BYTES,
            max(0, retention - 1),
        )

    def _replace_handler(self, handler: logging.Handler) -> None:
        if self._log_handler is not None:
            self._logger.removeHandler(self._log_handler)
            self._log_handler.close()
        self._logger.addHandler(handler)
        self._log_handler = handler

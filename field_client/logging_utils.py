"""Log file location and rotating handler helpers for the client."""
from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOGS_DIR_ENV_VAR = "FIELD_PLACER_LOG_DIR"
_LOG_DIR_NAME = "FieldPlacer"


def resolve_logs_dir(client_root: Path, *, environ: Optional[dict] = None) -> Path:
    """Return the directory for client logs, creating it when possible.

    Preference order: explicit env override, the per-user data directory of
    the platform, then ``<client_root>/logs``.
    """

    env = os.environ if environ is None else environ
    override = env.get(LOGS_DIR_ENV_VAR)
    candidates = []
    if override:
        candidates.append(Path(override).expanduser())
    if sys.platform.startswith("win"):
        base = env.get("LOCALAPPDATA")
        if base:
            candidates.append(Path(base) / _LOG_DIR_NAME / "logs")
    else:
        state_home = env.get("XDG_STATE_HOME")
        if state_home:
            candidates.append(Path(state_home) / _LOG_DIR_NAME)
        home = env.get("HOME")
        if home:
            candidates.append(Path(home) / ".local" / "state" / _LOG_DIR_NAME)
    candidates.append(client_root / "logs")

    for candidate in candidates:
        try:
            candidate.mkdir(parents=True, exist_ok=True)
        except OSError:
            continue
        return candidate
    return client_root


def build_rotating_file_handler(
    logs_dir: Path,
    file_name: str,
    *,
    retention: int,
    max_bytes: int,
    formatter: Optional[logging.Formatter] = None,
) -> RotatingFileHandler:
    """Create a size-rotated handler keeping ``retention`` files in total."""

    logs_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        logs_dir / file_name,
        maxBytes=max(1, int(max_bytes)),
        backupCount=max(0, int(retention) - 1),
        encoding="utf-8",
    )
    if formatter is not None:
        handler.setFormatter(formatter)
    return handler

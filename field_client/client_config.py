"""Configuration helpers for the Field Placer PyQt client."""
from __future__ import annotations

import json
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from field_engine.geometry import Size
from field_engine.session import EngineLimits

DEFAULT_API_URL = "https://pdf-repo.onrender.com"
API_URL_ENV_VAR = "FIELD_PLACER_API_URL"


@dataclass
class InitialClientSettings:
    """Values used to bootstrap the client; read from field_settings.json."""

    api_url: str = DEFAULT_API_URL
    render_scale: float = 1.5
    default_field_width: float = 150.0
    default_field_height: float = 50.0
    min_field_width: float = 50.0
    min_field_height: float = 30.0
    handle_size: float = 12.0
    request_timeout: float = 30.0
    client_log_retention: int = 5
    show_coordinates: bool = True
    log_level: Optional[int] = None
    log_level_source: Optional[str] = None

    def engine_limits(self) -> EngineLimits:
        return EngineLimits(
            default_size=Size(self.default_field_width, self.default_field_height),
            minimum_size=Size(self.min_field_width, self.min_field_height),
            handle_size=self.handle_size,
        )


def _float(data: Dict[str, Any], key: str, fallback: float, low: float, high: float) -> float:
    try:
        value = float(data.get(key, fallback))
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(value):
        return fallback
    return max(low, min(value, high))


def _bool(data: Dict[str, Any], key: str, fallback: bool) -> bool:
    value = data.get(key, fallback)
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        token = value.strip().lower()
        if token in {"1", "true", "yes", "on"}:
            return True
        if token in {"0", "false", "no", "off"}:
            return False
    return fallback


def _clean_url(value: Any) -> Optional[str]:
    if value is None:
        return None
    try:
        text = str(value).strip()
    except Exception:
        return None
    if not text.lower().startswith(("http://", "https://")):
        return None
    return text.rstrip("/")


def load_initial_settings(settings_path: Path, *, environ: Optional[Dict[str, str]] = None) -> InitialClientSettings:
    """Read bootstrap defaults from field_settings.json if it exists."""

    env = os.environ if environ is None else environ
    defaults = InitialClientSettings()
    data: Dict[str, Any] = {}
    try:
        raw = settings_path.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        raw = None
    if raw is not None:
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, dict):
            data = parsed

    api_url = _clean_url(data.get("api_url")) or defaults.api_url
    env_url = _clean_url(env.get(API_URL_ENV_VAR))
    if env_url:
        api_url = env_url

    min_width = _float(data, "min_field_width", defaults.min_field_width, 1.0, 500.0)
    min_height = _float(data, "min_field_height", defaults.min_field_height, 1.0, 500.0)
    default_width = _float(data, "default_field_width", defaults.default_field_width, min_width, 2000.0)
    default_height = _float(data, "default_field_height", defaults.default_field_height, min_height, 2000.0)

    try:
        retention = int(data.get("client_log_retention", defaults.client_log_retention))
    except (TypeError, ValueError):
        retention = defaults.client_log_retention

    return InitialClientSettings(
        api_url=api_url,
        render_scale=_float(data, "render_scale", defaults.render_scale, 0.25, 6.0),
        default_field_width=default_width,
        default_field_height=default_height,
        min_field_width=min_width,
        min_field_height=min_height,
        handle_size=_float(data, "handle_size", defaults.handle_size, 4.0, 48.0),
        request_timeout=_float(data, "request_timeout", defaults.request_timeout, 1.0, 300.0),
        client_log_retention=max(1, retention),
        show_coordinates=_bool(data, "show_coordinates", defaults.show_coordinates),
    )

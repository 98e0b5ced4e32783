"""Client configuration for pyfiremap."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyfiremap._constants import (
    DEFAULT_CENTER,
    DEFAULT_MAP_TYPE,
    DEFAULT_REFRESH_INTERVAL,
    DEFAULT_ZOOM,
    HEAT_DISSIPATING,
    HEAT_OPACITY,
    HEAT_RADIUS,
)
from pyfiremap.exceptions import FireMapConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise FireMapConfigError(f"{env_key} must be numeric, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class HeatLayerOptions:
    """Fixed visual parameters of the heat overlay."""

    radius: int = HEAT_RADIUS
    opacity: float = HEAT_OPACITY
    dissipating: bool = HEAT_DISSIPATING


@dataclasses.dataclass(frozen=True)
class FireMapConfig:
    """Application configuration.

    Values are resolved once at load time; there is no runtime
    reconfiguration.

    Parameters
    ----------
    backend_url : str
        Base URL of the prediction backend (``/predictions`` and
        ``/predict`` are appended). Trailing slashes are stripped.
    maps_api_key : str or None
        Map provider API key. When unset, OpenStreetMap tiles are used.
    center : tuple of float
        Initial ``(lat, lng)`` of the map.
    zoom : int
        Initial zoom level.
    map_type : str
        Provider map type identifier.
    refresh_interval : float
        Seconds between two periodic fetches of all predictions.
    request_timeout : float or None
        Total per-request timeout in seconds. ``None`` keeps the
        aiohttp default.
    map_ready_timeout : float or None
        Seconds to wait for the map provider. ``None`` waits forever.
    discard_stale_responses : bool
        Drop a fetch result whose request was issued before the last
        applied store mutation. ``False`` gives plain last-write-wins.
    heat : HeatLayerOptions
        Heat overlay parameters.
    """

    backend_url: str
    maps_api_key: str | None = None
    center: tuple[float, float] = DEFAULT_CENTER
    zoom: int = DEFAULT_ZOOM
    map_type: str = DEFAULT_MAP_TYPE
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    request_timeout: float | None = None
    map_ready_timeout: float | None = None
    discard_stale_responses: bool = True
    heat: HeatLayerOptions = dataclasses.field(default_factory=HeatLayerOptions)

    def __post_init__(self) -> None:
        url = (self.backend_url or "").strip().rstrip("/")
        if not url:
            raise FireMapConfigError("backend_url is required")
        object.__setattr__(self, "backend_url", url)
        if self.refresh_interval <= 0:
            raise FireMapConfigError(f"refresh_interval must be positive, got {self.refresh_interval}")

    @classmethod
    def from_env(cls, **overrides: Any) -> FireMapConfig:
        """Create configuration from environment variables.

        Reads ``FIREMAP_BACKEND_URL`` and ``FIREMAP_MAPS_API_KEY``, falling
        back to the ``VITE_BACKEND_URL`` / ``VITE_GOOGLE_MAPS_API_KEY``
        names used by the browser build. Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        FireMapConfig
            Populated configuration.

        Raises
        ------
        FireMapConfigError
            If no backend URL is available or a numeric variable is invalid.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "backend_url": ("FIREMAP_BACKEND_URL", "VITE_BACKEND_URL"),
            "maps_api_key": ("FIREMAP_MAPS_API_KEY", "VITE_GOOGLE_MAPS_API_KEY"),
        }
        config_kwargs: dict[str, Any] = {}
        for field_name, env_keys in _ENV_CONFIG_MAP.items():
            for env_key in env_keys:
                val = env.get(env_key)
                if val:
                    config_kwargs[field_name] = val
                    break

        interval_env = env.get("FIREMAP_REFRESH_INTERVAL")
        if interval_env is not None and "refresh_interval" not in overrides:
            config_kwargs["refresh_interval"] = _env_float("FIREMAP_REFRESH_INTERVAL", interval_env)

        timeout_env = env.get("FIREMAP_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = _env_float("FIREMAP_REQUEST_TIMEOUT", timeout_env)

        if "discard_stale_responses" not in overrides:
            config_kwargs["discard_stale_responses"] = _env_bool(
                env.get("FIREMAP_DISCARD_STALE_RESPONSES"),
                True,
            )

        config_kwargs.update(overrides)
        if "backend_url" not in config_kwargs:
            raise FireMapConfigError("FIREMAP_BACKEND_URL is not set")

        return cls(**config_kwargs)

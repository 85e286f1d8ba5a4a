"""Client configuration for pygeotraser."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pygeotraser._constants import BASE_URL, USER_AGENT
from pygeotraser.exceptions import GeotraserConfigError


def _env_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise GeotraserConfigError(f"{name} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class GeotraserConfig:
    """Client configuration.

    Parameters
    ----------
    user_id : str
        Collector user identifier every submission is tagged with.
    base_url : str
        Collector base URL.
    group_id : str or None
        Activity group the user belongs to.  Selects the shared live map
        page (see :func:`pygeotraser.links.visualization_url`).
    acquire_timeout : float
        Default seconds a one-shot acquisition waits for a sample.
    permission_grace_seconds : float
        Upper bound on the wait for a permission prompt answer while a
        session is starting.  Best effort only; the prompt may still be
        open when it elapses.
    position_timeout : float
        HTTP timeout for the current-position, emergency and terminate
        writes.
    historic_timeout : float
        HTTP timeout for historic route writes.
    shutdown_drain_timeout : float
        Seconds the client waits for in-flight submissions on exit before
        cancelling them.
    user_agent : str
        ``User-Agent`` header sent to the collector.
    """

    user_id: str
    base_url: str = BASE_URL
    group_id: str | None = None
    acquire_timeout: float = 10.0
    permission_grace_seconds: float = 0.8
    position_timeout: float = 15.0
    historic_timeout: float = 20.0
    shutdown_drain_timeout: float = 5.0
    user_agent: str = USER_AGENT

    def __post_init__(self) -> None:
        if not self.user_id or not self.user_id.strip():
            raise GeotraserConfigError("user_id must be non-empty")
        for name in (
            "acquire_timeout",
            "position_timeout",
            "historic_timeout",
        ):
            if getattr(self, name) <= 0:
                raise GeotraserConfigError(f"{name} must be positive")
        if self.permission_grace_seconds < 0 or self.shutdown_drain_timeout < 0:
            raise GeotraserConfigError("grace and drain timeouts must not be negative")

    @classmethod
    def from_env(cls, **overrides: Any) -> GeotraserConfig:
        """Create configuration from environment variables.

        Reads ``GEOTRASER_USER_ID`` and optional ``GEOTRASER_*`` variables.
        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        GeotraserConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "GEOTRASER_USER_ID": "user_id",
            "GEOTRASER_BASE_URL": "base_url",
            "GEOTRASER_GROUP_ID": "group_id",
            "GEOTRASER_USER_AGENT": "user_agent",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        # Numeric settings are parsed separately so bad values fail loudly.
        _ENV_FLOAT_MAP = {
            "GEOTRASER_ACQUIRE_TIMEOUT": "acquire_timeout",
            "GEOTRASER_PERMISSION_GRACE": "permission_grace_seconds",
            "GEOTRASER_POSITION_TIMEOUT": "position_timeout",
            "GEOTRASER_HISTORIC_TIMEOUT": "historic_timeout",
            "GEOTRASER_SHUTDOWN_DRAIN_TIMEOUT": "shutdown_drain_timeout",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        config_kwargs.update(overrides)
        if "user_id" not in config_kwargs:
            raise GeotraserConfigError("GEOTRASER_USER_ID is not set")

        return cls(**config_kwargs)

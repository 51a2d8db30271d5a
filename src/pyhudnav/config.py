"""Client configuration for pyhudnav."""

from __future__ import annotations

import dataclasses
import enum
import os
from typing import Any

from pyhudnav._constants import DEFAULT_EVENT_BUFFER_SIZE, DEFAULT_MQTT_PORT, DEFAULT_MQTT_TOPIC
from pyhudnav.exceptions import NavigationConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


class RequestOverlapPolicy(enum.StrEnum):
    """What ``start_navigation`` does while another request is outstanding."""

    REJECT_NEW = "reject_new"
    SUPERSEDE = "supersede"


@dataclasses.dataclass(frozen=True)
class Credential:
    """Access key pair handed to the navigation engine.

    Parameters
    ----------
    access_key_id : str
        Engine access key id.
    access_key_secret : str
        Engine access key secret. Never logged.
    """

    access_key_id: str = ""
    access_key_secret: str = dataclasses.field(default="", repr=False)

    @property
    def is_complete(self) -> bool:
        """Whether both parts of the key pair are present."""
        return bool(self.access_key_id.strip()) and bool(self.access_key_secret.strip())


@dataclasses.dataclass(frozen=True)
class NavigationConfig:
    """Client configuration.

    Parameters
    ----------
    credential : Credential
        Default credential used by ``initialize()`` when none is passed.
    overlap_policy : RequestOverlapPolicy
        Handling of a ``start_navigation`` call while one is pending.
        ``reject_new`` fails the new call; ``supersede`` fails the old one.
    route_timeout : float or None
        Seconds to wait for the engine's route callback before failing
        with :class:`~pyhudnav.exceptions.RouteTimeoutError`. ``None``
        waits indefinitely.
    event_buffer_size : int
        Lane guidance events held between the engine thread and the
        event loop. Oldest events are dropped when full.
    mqtt_enabled : bool
        Republish lane guidance events to an MQTT broker.
    mqtt_host : str
        Broker host for the MQTT bridge.
    mqtt_port : int
        Broker port for the MQTT bridge.
    mqtt_topic : str
        Topic lane guidance events are published to.
    mqtt_keepalive : int
        MQTT keepalive in seconds.
    """

    credential: Credential = dataclasses.field(default_factory=Credential)
    overlap_policy: RequestOverlapPolicy = RequestOverlapPolicy.REJECT_NEW
    route_timeout: float | None = None
    event_buffer_size: int = DEFAULT_EVENT_BUFFER_SIZE
    mqtt_enabled: bool = False
    mqtt_host: str = "localhost"
    mqtt_port: int = DEFAULT_MQTT_PORT
    mqtt_topic: str = DEFAULT_MQTT_TOPIC
    mqtt_keepalive: int = 60

    def __post_init__(self) -> None:
        try:
            policy = RequestOverlapPolicy(self.overlap_policy)
        except ValueError as exc:
            raise NavigationConfigError(f"Unknown overlap policy: {self.overlap_policy!r}") from exc
        object.__setattr__(self, "overlap_policy", policy)

        if self.route_timeout is not None and self.route_timeout <= 0:
            raise NavigationConfigError(f"route_timeout must be positive, got {self.route_timeout}")
        if self.event_buffer_size < 1:
            raise NavigationConfigError(f"event_buffer_size must be at least 1, got {self.event_buffer_size}")

    @classmethod
    def from_env(cls, **overrides: Any) -> NavigationConfig:
        """Create configuration from environment variables.

        Reads ``HUDNAV_ACCESS_KEY_ID``, ``HUDNAV_ACCESS_KEY_SECRET`` and the
        optional ``HUDNAV_*`` variables. Explicit keyword arguments override
        environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        NavigationConfig
            Populated configuration.
        """
        env = os.environ

        credential_overrides = overrides.pop("credential", None)
        if isinstance(credential_overrides, Credential):
            credential = credential_overrides
        else:
            credential_kwargs = {
                "access_key_id": env.get("HUDNAV_ACCESS_KEY_ID", ""),
                "access_key_secret": env.get("HUDNAV_ACCESS_KEY_SECRET", ""),
            }
            if isinstance(credential_overrides, dict):
                credential_kwargs.update(credential_overrides)
            credential = Credential(**credential_kwargs)

        config_kwargs: dict[str, Any] = {"credential": credential}

        policy_env = env.get("HUDNAV_OVERLAP_POLICY")
        if policy_env is not None and "overlap_policy" not in overrides:
            config_kwargs["overlap_policy"] = policy_env.strip().lower()

        try:
            timeout_env = env.get("HUDNAV_ROUTE_TIMEOUT")
            if timeout_env is not None and "route_timeout" not in overrides:
                config_kwargs["route_timeout"] = float(timeout_env) if timeout_env.strip() else None

            buffer_env = env.get("HUDNAV_EVENT_BUFFER_SIZE")
            if buffer_env is not None and "event_buffer_size" not in overrides:
                config_kwargs["event_buffer_size"] = int(buffer_env)

            port_env = env.get("HUDNAV_MQTT_PORT")
            if port_env is not None and "mqtt_port" not in overrides:
                config_kwargs["mqtt_port"] = int(port_env)

            keepalive_env = env.get("HUDNAV_MQTT_KEEPALIVE")
            if keepalive_env is not None and "mqtt_keepalive" not in overrides:
                config_kwargs["mqtt_keepalive"] = int(keepalive_env)
        except ValueError as exc:
            raise NavigationConfigError(f"Invalid numeric HUDNAV_* setting: {exc}") from exc

        if "mqtt_enabled" not in overrides:
            config_kwargs["mqtt_enabled"] = _env_bool(env.get("HUDNAV_MQTT_ENABLED"), False)

        _ENV_STR_MAP = {
            "HUDNAV_MQTT_HOST": "mqtt_host",
            "HUDNAV_MQTT_TOPIC": "mqtt_topic",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = val

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

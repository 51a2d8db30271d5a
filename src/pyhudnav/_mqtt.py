"""Internal MQTT bridge that republishes lane guidance to a HUD display."""

from __future__ import annotations

import json
import logging
import secrets
from typing import Any, cast

import paho.mqtt.client as mqtt

from pyhudnav.config import NavigationConfig
from pyhudnav.models.lane_guidance import LaneGuidanceEvent


def _build_client_id() -> str:
    return f"pyhudnav_{secrets.token_hex(6)}"


def encode_event(event: LaneGuidanceEvent) -> str:
    """JSON body published for one lane guidance event."""
    return json.dumps(event.to_payload(), separators=(",", ":"))


class HudMqttBridge:
    """Threaded paho-mqtt publisher fed from the lane guidance bus."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        topic: str,
        keepalive: int = 60,
        client_id: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._host = host
        self._port = port
        self._topic = topic
        self._keepalive = keepalive
        self._client_id = client_id or _build_client_id()
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._running = False

    @classmethod
    def from_config(cls, config: NavigationConfig, *, logger: logging.Logger | None = None) -> HudMqttBridge:
        return cls(
            host=config.mqtt_host,
            port=config.mqtt_port,
            topic=config.mqtt_topic,
            keepalive=config.mqtt_keepalive,
            logger=logger,
        )

    @property
    def is_running(self) -> bool:
        """Whether the MQTT network loop is running."""
        return self._running

    @property
    def topic(self) -> str:
        return self._topic

    def start(self) -> None:
        """Connect and start the network loop. Blocking; run it in an executor."""
        self.stop()
        self._logger.debug(
            "MQTT bridge start requested host=%s port=%s topic=%s client_id=%s",
            self._host,
            self._port,
            self._topic,
            self._client_id,
        )

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=self._client_id,
            protocol=mqtt.MQTTv5,
        )
        client.enable_logger(self._logger)

        def on_connect(
            _c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.value != 0:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            self._logger.debug("MQTT bridge connected reason=%s", reason_code)

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if self._running:
                self._logger.debug("MQTT bridge disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_disconnect = on_disconnect

        client.connect(self._host, self._port, keepalive=self._keepalive)
        client.loop_start()

        self._client = client
        self._running = True
        self._logger.debug("MQTT network loop started")

    def publish_event(self, event: LaneGuidanceEvent) -> None:
        """Publish *event*; a bridge that is not running drops it."""
        client = self._client
        if client is None or not self._running:
            return
        info = client.publish(self._topic, encode_event(event), qos=0)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            self._logger.debug(
                "MQTT publish of %s failed rc=%s topic=%s",
                event.event_name,
                info.rc,
                self._topic,
            )

    def stop(self) -> None:
        """Stop and disconnect current MQTT client if running."""
        client = self._client
        self._client = None
        was_running = self._running
        self._running = False

        if client is None:
            return
        try:
            if was_running:
                self._logger.debug("MQTT disconnect requested")
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")

from __future__ import annotations

import json
from typing import Any

import paho.mqtt.client as mqtt
import pytest
from conftest import FakeEngineFactory, settle

from pyhudnav._mqtt import HudMqttBridge, encode_event
from pyhudnav.client import NavigationClient
from pyhudnav.config import Credential, NavigationConfig
from pyhudnav.models.lane_guidance import LaneGuidanceEvent, LaneInfo


class _PublishInfo:
    def __init__(self, rc: int) -> None:
        self.rc = rc


class _FakeMqttClient:
    instances: list[_FakeMqttClient] = []

    def __init__(self, **kwargs: Any) -> None:
        self.kwargs = kwargs
        self.connected_to: tuple[str, int, int] | None = None
        self.loop_started = False
        self.loop_stopped = False
        self.disconnected = False
        self.published: list[tuple[str, str, int]] = []
        self.publish_rc = mqtt.MQTT_ERR_SUCCESS
        self.on_connect: Any = None
        self.on_disconnect: Any = None
        _FakeMqttClient.instances.append(self)

    def enable_logger(self, logger: Any) -> None:
        self.logger = logger

    def connect(self, host: str, port: int, keepalive: int = 60) -> None:
        self.connected_to = (host, port, keepalive)

    def loop_start(self) -> None:
        self.loop_started = True

    def loop_stop(self) -> None:
        self.loop_stopped = True

    def disconnect(self) -> None:
        self.disconnected = True

    def publish(self, topic: str, payload: str, qos: int = 0) -> _PublishInfo:
        self.published.append((topic, payload, qos))
        return _PublishInfo(self.publish_rc)


@pytest.fixture
def fake_mqtt(monkeypatch: pytest.MonkeyPatch) -> type[_FakeMqttClient]:
    _FakeMqttClient.instances = []
    monkeypatch.setattr(mqtt, "Client", _FakeMqttClient)
    return _FakeMqttClient


def _event() -> LaneGuidanceEvent:
    return LaneGuidanceEvent(
        lanes=(
            LaneInfo(directions=("left",), recommended=False),
            LaneInfo(directions=("straight", "right"), recommended=True),
        ),
        distance_to_maneuver_meters=120,
    )


def test_encode_event_is_compact_json() -> None:
    body = encode_event(_event())

    assert " " not in body
    assert json.loads(body) == {
        "lanes": [
            {"directions": ["left"], "recommended": False},
            {"directions": ["straight", "right"], "recommended": True},
        ],
        "distanceToManeuverMeters": 120,
    }


def test_publish_before_start_is_dropped(fake_mqtt: type[_FakeMqttClient]) -> None:
    bridge = HudMqttBridge(host="localhost", port=1883, topic="hud/lane-guidance")

    bridge.publish_event(_event())

    assert not bridge.is_running
    assert fake_mqtt.instances == []


def test_start_publish_stop(fake_mqtt: type[_FakeMqttClient]) -> None:
    bridge = HudMqttBridge(host="broker", port=1884, topic="car/hud", keepalive=15, client_id="hud-1")

    bridge.start()
    client = fake_mqtt.instances[-1]
    assert bridge.is_running
    assert client.kwargs["client_id"] == "hud-1"
    assert client.connected_to == ("broker", 1884, 15)
    assert client.loop_started

    bridge.publish_event(_event())
    assert client.published == [("car/hud", encode_event(_event()), 0)]

    bridge.stop()
    assert not bridge.is_running
    assert client.disconnected
    assert client.loop_stopped


def test_failed_publish_does_not_raise(fake_mqtt: type[_FakeMqttClient]) -> None:
    bridge = HudMqttBridge(host="broker", port=1883, topic="hud/lane-guidance")
    bridge.start()
    fake_mqtt.instances[-1].publish_rc = mqtt.MQTT_ERR_NO_CONN

    bridge.publish_event(_event())

    assert len(fake_mqtt.instances[-1].published) == 1


def test_from_config_uses_mqtt_settings() -> None:
    config = NavigationConfig(mqtt_host="hud.local", mqtt_port=8883, mqtt_topic="t", mqtt_keepalive=5)

    bridge = HudMqttBridge.from_config(config)

    assert bridge.topic == "t"
    assert not bridge.is_running


@pytest.mark.asyncio
async def test_client_republishes_lane_guidance(
    fake_mqtt: type[_FakeMqttClient],
    factory: FakeEngineFactory,
    credential: Credential,
) -> None:
    config = NavigationConfig(credential=credential, mqtt_enabled=True, mqtt_topic="hud/lanes")
    payload = {
        "lanesForNextManeuver": [{"directions": ["LEFT"], "recommendationState": "RECOMMENDED"}],
        "distanceToManeuverInMeters": 75,
    }

    async with NavigationClient(factory, config) as client:
        await client.initialize()
        factory.navigator.emit_from_thread(payload)
        await settle()
        published = list(fake_mqtt.instances[-1].published)

    assert len(published) == 1
    topic, body, _qos = published[0]
    assert topic == "hud/lanes"
    assert json.loads(body)["distanceToManeuverMeters"] == 75
    assert fake_mqtt.instances[-1].loop_stopped


@pytest.mark.asyncio
async def test_client_survives_broker_failure(
    monkeypatch: pytest.MonkeyPatch,
    factory: FakeEngineFactory,
    credential: Credential,
) -> None:
    def _refuse(self: HudMqttBridge) -> None:
        raise ConnectionRefusedError("broker down")

    monkeypatch.setattr(HudMqttBridge, "start", _refuse)
    config = NavigationConfig(credential=credential, mqtt_enabled=True)

    async with NavigationClient(factory, config) as client:
        ack = await client.initialize()

    assert ack.message == "Navigation engine initialized"

from __future__ import annotations

import asyncio
import threading

import pytest
from conftest import FakeEngineFactory, settle

from pyhudnav.client import NavigationClient
from pyhudnav.config import NavigationConfig
from pyhudnav.events import LaneGuidanceBus
from pyhudnav.models.lane_guidance import LaneGuidanceEvent, LaneInfo

LANE_PAYLOAD = {
    "lanesForNextManeuver": [
        {"directions": ["LEFT", "STRAIGHT"], "recommendationState": "RECOMMENDED"},
        {"directions": ["RIGHT"], "recommendationState": "NOT_RECOMMENDED"},
    ],
    "distanceToManeuverInMeters": 50,
}


def _event(distance: int = 100) -> LaneGuidanceEvent:
    return LaneGuidanceEvent(
        lanes=(LaneInfo(directions=("straight",), recommended=True),),
        distance_to_maneuver_meters=distance,
    )


def test_publish_without_loop_delivers_inline() -> None:
    bus = LaneGuidanceBus()
    received: list[LaneGuidanceEvent] = []
    bus.subscribe(received.append)

    bus.publish(_event())

    assert received == [_event()]


def test_subscription_remove_is_idempotent() -> None:
    bus = LaneGuidanceBus()
    received: list[LaneGuidanceEvent] = []
    subscription = bus.subscribe(received.append)
    assert subscription.active

    subscription.remove()
    subscription.remove()
    bus.publish(_event())

    assert not subscription.active
    assert received == []


def test_failing_listener_does_not_block_others() -> None:
    bus = LaneGuidanceBus()
    received: list[LaneGuidanceEvent] = []

    def _broken(event: LaneGuidanceEvent) -> None:
        raise RuntimeError("renderer crashed")

    bus.subscribe(_broken)
    bus.subscribe(received.append)

    bus.publish(_event())

    assert received == [_event()]


@pytest.mark.asyncio
async def test_publish_from_engine_thread_delivers_on_loop() -> None:
    bus = LaneGuidanceBus()
    loop = asyncio.get_running_loop()
    bus.attach(loop)
    delivered_on: list[threading.Thread] = []
    bus.subscribe(lambda _event: delivered_on.append(threading.current_thread()))

    thread = threading.Thread(target=bus.publish, args=(_event(),))
    thread.start()
    thread.join()
    assert delivered_on == []

    await settle()

    assert delivered_on == [threading.current_thread()]


@pytest.mark.asyncio
async def test_events_arrive_in_publish_order() -> None:
    bus = LaneGuidanceBus()
    bus.attach(asyncio.get_running_loop())
    received: list[int] = []
    bus.subscribe(lambda event: received.append(event.distance_to_maneuver_meters))

    def _burst() -> None:
        for distance in range(10):
            bus.publish(_event(distance))

    thread = threading.Thread(target=_burst)
    thread.start()
    thread.join()
    await settle()

    assert received == list(range(10))


@pytest.mark.asyncio
async def test_full_buffer_drops_oldest_and_counts() -> None:
    bus = LaneGuidanceBus(buffer_size=2)
    bus.attach(asyncio.get_running_loop())
    received: list[int] = []
    bus.subscribe(lambda event: received.append(event.distance_to_maneuver_meters))

    for distance in (1, 2, 3):
        bus.publish(_event(distance))
    await settle()

    assert received == [2, 3]
    assert bus.dropped == 1


@pytest.mark.asyncio
async def test_stream_yields_events_until_closed() -> None:
    bus = LaneGuidanceBus()
    received: list[int] = []

    async with bus.stream() as events:
        bus.publish(_event(10))
        bus.publish(_event(20))
        await settle()
        events.close()
        async for event in events:
            received.append(event.distance_to_maneuver_meters)

    assert received == [10, 20]
    assert events.closed


@pytest.mark.asyncio
async def test_slow_stream_drops_newest() -> None:
    bus = LaneGuidanceBus()
    stream = bus.stream(maxsize=1)

    bus.publish(_event(1))
    bus.publish(_event(2))
    await settle()

    assert await stream.__anext__() == _event(1)
    assert bus.dropped == 1
    stream.close()


@pytest.mark.asyncio
async def test_bus_close_ends_streams() -> None:
    bus = LaneGuidanceBus()
    stream = bus.stream()

    bus.close()

    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()


# ------------------------------------------------------------------
# Client wiring
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_engine_lane_assistance_reaches_listener(factory: FakeEngineFactory, config: NavigationConfig) -> None:
    received: list[LaneGuidanceEvent] = []
    client = NavigationClient(factory, config, on_lane_guidance=received.append)
    await client.initialize()

    factory.navigator.emit_from_thread(LANE_PAYLOAD)
    await settle()

    assert len(received) == 1
    assert received[0].to_payload() == {
        "lanes": [
            {"directions": ["left", "straight"], "recommended": True},
            {"directions": ["right"], "recommended": False},
        ],
        "distanceToManeuverMeters": 50,
    }


@pytest.mark.asyncio
async def test_absent_lane_assistance_emits_nothing(factory: FakeEngineFactory, config: NavigationConfig) -> None:
    client = NavigationClient(factory, config)
    received: list[LaneGuidanceEvent] = []
    client.on_lane_guidance(received.append)
    await client.initialize()

    factory.navigator.emit_from_thread(None)
    await settle()

    assert received == []


@pytest.mark.asyncio
async def test_malformed_lane_assistance_is_dropped(factory: FakeEngineFactory, config: NavigationConfig) -> None:
    client = NavigationClient(factory, config)
    received: list[LaneGuidanceEvent] = []
    client.on_lane_guidance(received.append)
    await client.initialize()

    factory.navigator.emit_from_thread({"lanesForNextManeuver": []})
    factory.navigator.emit_from_thread(LANE_PAYLOAD)
    await settle()

    assert [event.distance_to_maneuver_meters for event in received] == [50]


@pytest.mark.asyncio
async def test_lane_guidance_stream_from_client(factory: FakeEngineFactory, config: NavigationConfig) -> None:
    client = NavigationClient(factory, config)
    await client.initialize()
    stream = client.lane_guidance_stream()

    factory.navigator.emit_from_thread(LANE_PAYLOAD)
    event = await asyncio.wait_for(stream.__anext__(), 1.0)
    stream.close()

    assert event.distance_to_maneuver_meters == 50


@pytest.mark.asyncio
async def test_listener_survives_context_reentry(factory: FakeEngineFactory, config: NavigationConfig) -> None:
    received: list[LaneGuidanceEvent] = []
    client = NavigationClient(factory, config, on_lane_guidance=received.append)

    async with client:
        await client.initialize()
        stream = client.lane_guidance_stream()
    assert stream.closed

    async with client:
        factory.navigator.emit_from_thread(LANE_PAYLOAD)
        await settle()

    assert [event.distance_to_maneuver_meters for event in received] == [50]

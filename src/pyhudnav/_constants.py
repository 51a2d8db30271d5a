"""Internal constants shared across the library."""

#: Message carried by a routing failure when the engine gives no description.
UNKNOWN_ROUTING_ERROR = "Unknown error"

#: Host-facing name of the lane guidance event stream.
LANE_GUIDANCE_UPDATED = "onLaneGuidanceUpdated"

INITIALIZED_MESSAGE = "Navigation engine initialized"
NAVIGATION_STARTED_MESSAGE = "Navigation started"

# Error codes exposed to the host layer.
SDK_INIT_ERROR = "SDK_INIT_ERROR"
NOT_INITIALIZED = "NOT_INITIALIZED"
ROUTING_ERROR = "ROUTING_ERROR"

DEFAULT_EVENT_BUFFER_SIZE = 64
DEFAULT_MQTT_TOPIC = "hud/lane-guidance"
DEFAULT_MQTT_PORT = 1883

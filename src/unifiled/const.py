"""Constants for unifiled."""

# Port the controller's HTTPS API listens on
DEFAULT_PORT = 20443

# Controllers ship with a self-signed certificate
DEFAULT_VERIFY_SSL = False

# API Endpoints
LOGIN_ENDPOINT = "/v1/login"
DEVICES_ENDPOINT = "/v1/devices"
GROUPS_ENDPOINT = "/v1/groups"
DEVICE_ENDPOINT = "/v1/devices/{device_id}"
# Singular on the controller, unlike the list endpoint
GROUP_ENDPOINT = "/v1/group/{group_id}"

# HTTP status the controller answers with for a missing or expired token
HTTP_FORBIDDEN = 403

# Command names understood by the device/group PUT endpoints
COMMAND_OUTPUT = "config-output"
COMMAND_SYNC = "sync"

# Fields echoed back by the controller after a command
DEVICE_OUTPUT_FIELD = "DeviceStatus.output"
DEVICE_BRIGHTNESS_FIELD = "DeviceStatus.led"
GROUP_RESULT_FIELD = "result"
GROUP_RESULT_SUCCESS = "success"

MIN_BRIGHTNESS = 0
MAX_BRIGHTNESS = 100

# Environment variables read by UnifiLedClient.from_env()
ENV_HOST = "UNIFILED_HOST"
ENV_PORT = "UNIFILED_PORT"
ENV_USERNAME = "UNIFILED_USERNAME"
ENV_PASSWORD = "UNIFILED_PASSWORD"
ENV_VERIFY_SSL = "UNIFILED_VERIFY_SSL"


def build_base_url(host: str, port: int = DEFAULT_PORT) -> str:
    """Build the controller base URL from its address and port."""
    return f"https://{host}:{port}"

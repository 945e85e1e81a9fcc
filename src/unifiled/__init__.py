"""Python library for controlling UniFi LED lights through their controller."""

from .auth import AuthHandler
from .client import UnifiLedClient
from .const import DEFAULT_PORT
from .exceptions import ApiError, AuthError, UnifiLedException
from .models import Device, Group, Session

__version__ = "0.1.0"

# Define what gets imported with 'from unifiled import *'
__all__ = [
    "AuthHandler",
    "UnifiLedClient",
    "DEFAULT_PORT",
    "Device",
    "Group",
    "Session",
    "UnifiLedException",
    "AuthError",
    "ApiError",
    "__version__",
]

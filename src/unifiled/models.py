"""Data models for unifiled."""

from dataclasses import dataclass
from typing import Any, Dict

# Device and group records are passed through exactly as the controller
# returns them. Only "id", "status.output" and "devices" are ever read.
Device = Dict[str, Any]
Group = Dict[str, Any]


@dataclass
class Session:
    """Represents the authenticated session with one controller."""

    base_url: str
    username: str
    password: str
    # Empty until the first successful login
    access_token: str = ""
    authenticated: bool = False

    def __repr__(self) -> str:
        """Return a representation that does not leak credentials."""
        return (
            f"Session(base_url={self.base_url!r}, username={self.username!r}, "
            f"authenticated={self.authenticated})"
        )

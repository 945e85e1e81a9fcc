"""Async client for a UniFi LED controller."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

import aiohttp

from .auth import AuthHandler
from .const import (
    COMMAND_OUTPUT,
    COMMAND_SYNC,
    DEFAULT_PORT,
    DEFAULT_VERIFY_SSL,
    DEVICE_BRIGHTNESS_FIELD,
    DEVICE_ENDPOINT,
    DEVICE_OUTPUT_FIELD,
    DEVICES_ENDPOINT,
    ENV_HOST,
    ENV_PASSWORD,
    ENV_PORT,
    ENV_USERNAME,
    ENV_VERIFY_SSL,
    GROUP_ENDPOINT,
    GROUP_RESULT_FIELD,
    GROUP_RESULT_SUCCESS,
    GROUPS_ENDPOINT,
    HTTP_FORBIDDEN,
    MAX_BRIGHTNESS,
    MIN_BRIGHTNESS,
)
from .exceptions import ApiError
from .models import Device, Group, Session

_LOGGER = logging.getLogger(__name__)


def _describe_state(state: bool) -> str:
    return "on" if state else "off"


class UnifiLedClient:
    """Async client for one UniFi LED controller.

    Construction performs no network I/O. Call :meth:`connect` (or
    :meth:`authenticate`) before issuing commands; calls made earlier go out
    with an empty token and recover through the normal re-login path.

    Public operations never raise on controller or network failures. Reads
    resolve to ``None`` and commands to ``False`` when they did not complete.
    """

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        port: int = DEFAULT_PORT,
        verify_ssl: bool = DEFAULT_VERIFY_SSL,
        session: Optional[aiohttp.ClientSession] = None,
        request_timeout: Optional[float] = None,
    ) -> None:
        """Initialize the client with configuration only."""
        self.auth_handler: AuthHandler = AuthHandler(
            host,
            username,
            password,
            port=port,
            verify_ssl=verify_ssl,
            session=session,
            request_timeout=request_timeout,
        )

    @classmethod
    def from_env(
        cls, session: Optional[aiohttp.ClientSession] = None
    ) -> UnifiLedClient:
        """Create a client from UNIFILED_* environment variables."""
        host = os.getenv(ENV_HOST)
        username = os.getenv(ENV_USERNAME)
        password = os.getenv(ENV_PASSWORD)
        if not all([host, username, password]):
            err_msg = (
                f"Please set {ENV_HOST}, {ENV_USERNAME} and {ENV_PASSWORD} "
                "environment variables."
            )
            raise ValueError(err_msg)

        port = int(os.getenv(ENV_PORT, str(DEFAULT_PORT)))
        verify_ssl = os.getenv(ENV_VERIFY_SSL, "").strip().lower() in (
            "1",
            "true",
            "yes",
            "on",
        )
        return cls(
            host,
            username,
            password,
            port=port,
            verify_ssl=verify_ssl,
            session=session,
        )

    async def __aenter__(self) -> UnifiLedClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @property
    def authenticated(self) -> bool:
        """Return True once a login has succeeded."""
        return self.auth_handler.authenticated

    @property
    def session_info(self) -> Session:
        """Return the current session record."""
        return self.auth_handler.session_info

    async def connect(self) -> bool:
        """Perform the initial login. Returns False if the controller refused it."""
        return await self.authenticate()

    async def authenticate(self) -> bool:
        """Run a fresh credential exchange with the controller."""
        return await self.auth_handler.authenticate()

    async def close(self) -> None:
        """Release the HTTP session if this client created it."""
        await self.auth_handler.close_session()

    async def _async_api_request(
        self,
        method: str,
        endpoint: str,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Make one request with the token held at build time."""
        url = self.auth_handler.base_url + endpoint
        headers = self.auth_handler.headers()
        session = await self.auth_handler._get_session()

        _LOGGER.debug("Making ASYNC %s request to %s", method, url)
        _LOGGER.debug(
            "Headers: %s",
            {
                k: (v[:30] + "..." if k == "Authorization" else v)
                for k, v in headers.items()
            },
        )
        _LOGGER.debug("JSON Data: %s", json_data)

        try:
            async with session.request(
                method,
                url,
                headers=headers,
                json=json_data,
                **self.auth_handler.request_kwargs(),
            ) as response:
                _LOGGER.debug("Response status code: %s", response.status)

                if response.status >= 400:
                    error_text = await response.text()
                    raise ApiError(response.status, error_text)

                try:
                    return await response.json(content_type=None)
                except ValueError as parse_err:
                    raise ApiError(
                        response.status, f"Invalid JSON response: {parse_err}"
                    ) from parse_err

        except ApiError:
            raise
        except aiohttp.ClientError as req_err:
            raise ApiError(0, f"Request error: {req_err}") from req_err
        except TimeoutError as timeout_err:
            raise ApiError(408, "Request timed out") from timeout_err
        except Exception as e:
            _LOGGER.exception("Unexpected error during API request")
            raise ApiError(0, f"Unexpected error: {e}") from e

    async def _async_authorized_request(
        self,
        method: str,
        endpoint: str,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send a request, re-authenticating and replaying it once on 403.

        Returns the decoded response body, or None when the request did not
        complete. A 403 on the replay is final for this call only.
        """
        try:
            try:
                return await self._async_api_request(method, endpoint, json_data)
            except ApiError as err:
                if err.status_code != HTTP_FORBIDDEN:
                    raise
                _LOGGER.warning(
                    "403 Unauthorized access to %s %s. Trying to login.",
                    method,
                    endpoint,
                )
                if not await self.authenticate():
                    _LOGGER.error(
                        "Re-authentication failed, giving up on %s %s: %s",
                        method,
                        endpoint,
                        err.error_message,
                    )
                    return None
            return await self._async_api_request(method, endpoint, json_data)
        except ApiError as err:
            _LOGGER.error("Request %s %s failed: %s", method, endpoint, err)
            return None

    async def get_devices(self) -> Optional[List[Device]]:
        """Return the devices adopted by the controller, or None."""
        _LOGGER.debug("Attempting to get UniFi LED devices.")
        return await self._async_authorized_request("GET", DEVICES_ENDPOINT)

    async def get_groups(self) -> Optional[List[Group]]:
        """Return the groups configured on the controller, or None."""
        _LOGGER.debug("Attempting to get UniFi LED groups.")
        return await self._async_authorized_request("GET", GROUPS_ENDPOINT)

    async def set_device_output(self, device_id: str, state: bool) -> bool:
        """Turn a single device on or off.

        Args:
            device_id (str): Id as found in ``get_devices()[i]["id"]`` or
                ``get_groups()[i]["devices"][j]["id"]``.
            state (bool): True to turn the device on, False for off.

        Returns:
            bool: True if the controller echoed the requested output.

        """
        _LOGGER.debug(
            "Attempting to set UniFi LED device %s state to %s",
            device_id,
            _describe_state(state),
        )
        requested = 1 if state else 0
        result = await self._async_authorized_request(
            "PUT",
            DEVICE_ENDPOINT.format(device_id=device_id),
            {"command": COMMAND_OUTPUT, "value": requested},
        )
        if not isinstance(result, dict) or result.get(DEVICE_OUTPUT_FIELD) != requested:
            _LOGGER.error(
                "Could not set UniFi LED device %s state to %s",
                device_id,
                _describe_state(state),
            )
            return False
        return True

    async def set_group_output(self, group_id: str, state: bool) -> bool:
        """Turn every device of a group on or off with a single request."""
        _LOGGER.debug(
            "Attempting to set UniFi LED group %s state to %s",
            group_id,
            _describe_state(state),
        )
        result = await self._async_authorized_request(
            "PUT",
            GROUP_ENDPOINT.format(group_id=group_id),
            {"command": COMMAND_OUTPUT, "value": 1 if state else 0},
        )
        if (
            not isinstance(result, dict)
            or result.get(GROUP_RESULT_FIELD) != GROUP_RESULT_SUCCESS
        ):
            _LOGGER.error(
                "Could not set UniFi LED group %s state to %s",
                group_id,
                _describe_state(state),
            )
            return False
        return True

    async def set_device_brightness(self, device_id: str, brightness: int) -> bool:
        """Set the brightness of a device, in the range [0, 100]."""
        if not _is_valid_brightness(brightness):
            _LOGGER.error(
                "Brightness must be an integer in [%d, %d], got %r",
                MIN_BRIGHTNESS,
                MAX_BRIGHTNESS,
                brightness,
            )
            return False

        _LOGGER.debug(
            "Attempting to set UniFi LED device %s brightness to %s",
            device_id,
            brightness,
        )
        result = await self._async_authorized_request(
            "PUT",
            DEVICE_ENDPOINT.format(device_id=device_id),
            {"command": COMMAND_SYNC, "value": brightness},
        )
        if (
            not isinstance(result, dict)
            or result.get(DEVICE_BRIGHTNESS_FIELD) != brightness
        ):
            _LOGGER.error(
                "Could not set UniFi LED device %s brightness to %s",
                device_id,
                brightness,
            )
            return False
        return True

    async def set_group_brightness(self, group: Group, brightness: int) -> bool:
        """Set every device of a group to one brightness.

        The controller has no group brightness command, so each member is
        set in turn. All members are attempted even after a failure.

        Args:
            group (Group): A record as returned by :meth:`get_groups`.
            brightness (int): Brightness in the range [0, 100].

        Returns:
            bool: True only if every member reported the new brightness.
                An empty group yields True.

        """
        _LOGGER.debug(
            "Attempting to set UniFi LED group %s brightness to %s",
            group.get("name", group.get("id")),
            brightness,
        )
        group_ok = True
        for device in group.get("devices") or []:
            device_id = device.get("id")
            if device_id is None:
                _LOGGER.error(
                    "Skipping device without id in group %s", group.get("id")
                )
                group_ok = False
                continue
            if not await self.set_device_brightness(device_id, brightness):
                _LOGGER.debug(
                    "Device %s of group %s did not take brightness %s",
                    device_id,
                    group.get("id"),
                    brightness,
                )
                group_ok = False
        return group_ok


def _is_valid_brightness(brightness: Any) -> bool:
    # bool is an int subclass but never a valid level
    return (
        isinstance(brightness, int)
        and not isinstance(brightness, bool)
        and MIN_BRIGHTNESS <= brightness <= MAX_BRIGHTNESS
    )

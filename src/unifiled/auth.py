"""Async authentication handler for unifiled."""

import logging
from typing import Dict, Optional

import aiohttp

from .const import (
    DEFAULT_PORT,
    DEFAULT_VERIFY_SSL,
    LOGIN_ENDPOINT,
    build_base_url,
)
from .exceptions import ApiError, AuthError
from .models import Session

_LOGGER = logging.getLogger(__name__)


class AuthHandler:
    """Handles the controller login exchange and the current bearer token.

    The handler owns the aiohttp session used for every request to the
    controller. A session may be supplied by the caller, in which case it is
    never closed here.

    Attributes:
        _session_info (Session): Credentials, base URL and the current token.
        _verify_ssl (bool): Whether to validate the controller's certificate.
            Controllers use self-signed certificates, so this is off by default.
        _timeout (Optional[aiohttp.ClientTimeout]): Per-request timeout, or
            ``None`` to rely on the aiohttp session's own.

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
        """Initialize the authentication handler. No I/O happens here."""
        if not host:
            err_msg = "host must be a non-empty string"
            raise ValueError(err_msg)
        self._session_info = Session(
            base_url=build_base_url(host, port),
            username=username,
            password=password,
        )
        self._verify_ssl = verify_ssl
        self._timeout = (
            aiohttp.ClientTimeout(total=request_timeout)
            if request_timeout is not None
            else None
        )
        # Use provided session or create a new one
        self._session = session
        self._managed_session = (
            session is None
        )  # Flag to know if we should close the session

    @property
    def base_url(self) -> str:
        """Return the controller base URL."""
        return self._session_info.base_url

    @property
    def access_token(self) -> str:
        """Return the current bearer token (empty before the first login)."""
        return self._session_info.access_token

    @property
    def authenticated(self) -> bool:
        """Return True once a login exchange has succeeded."""
        return self._session_info.authenticated

    @property
    def session_info(self) -> Session:
        """Return the session record."""
        return self._session_info

    def request_kwargs(self) -> Dict:
        """Return the aiohttp keyword arguments shared by every request."""
        kwargs = {"ssl": self._verify_ssl}
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout
        return kwargs

    def headers(self) -> Dict[str, str]:
        """Build request headers from the token held right now."""
        return {
            "Content-Type": "application/json",
            "Accept": "*/*",
            "Authorization": f"Bearer {self._session_info.access_token}",
        }

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            _LOGGER.debug("Creating new aiohttp ClientSession for AuthHandler.")
            self._session = aiohttp.ClientSession()
            self._managed_session = True  # We created it, so we manage it
        return self._session

    async def close_session(self) -> None:
        """Close the aiohttp session if it's managed by this instance."""
        if self._session and not self._session.closed and self._managed_session:
            await self._session.close()
            self._session = None
            _LOGGER.debug("Managed aiohttp session closed by AuthHandler.")
        elif self._session and not self._managed_session:
            _LOGGER.debug("Session provided externally, not closing.")

    async def authenticate(self) -> bool:
        """Log in with the stored credentials and store the returned token.

        Every call performs a fresh exchange. On failure the previous token
        is kept, since a failed login may be transient.

        Returns:
            bool: True if a new token was obtained.

        """
        _LOGGER.debug(
            "Attempting to login to %s as %s",
            self._session_info.base_url,
            self._session_info.username,
        )
        try:
            token = await self._async_login()
        except (AuthError, ApiError) as err:
            _LOGGER.error(
                "Could not login to UniFi LED controller at %s. "
                "Check connection, username and password and retry: %s",
                self._session_info.base_url,
                err,
            )
            return False

        self._session_info.access_token = token
        self._session_info.authenticated = True
        _LOGGER.info("Authentication successful. Access token obtained.")
        return True

    async def _async_login(self) -> str:
        """Perform the credential exchange and return the access token."""
        url = self._session_info.base_url + LOGIN_ENDPOINT
        payload = {
            "username": self._session_info.username,
            "password": self._session_info.password,
        }
        headers = {"Content-Type": "application/json", "Accept": "*/*"}
        session = await self._get_session()

        try:
            _LOGGER.debug("Requesting token from %s", url)
            async with session.post(
                url,
                json=payload,
                headers=headers,
                **self.request_kwargs(),
            ) as response:
                if response.status >= 400:
                    error_text = await response.text()
                    _LOGGER.debug(
                        "HTTP error %s during authentication: %s",
                        response.status,
                        error_text,
                    )
                    raise ApiError(response.status, error_text)

                try:
                    token_data = await response.json(content_type=None)
                except ValueError as parse_err:
                    err_msg = "Authentication failed: Response is not JSON"
                    raise AuthError(err_msg) from parse_err

                if not isinstance(token_data, dict) or not token_data.get(
                    "access_token"
                ):
                    err_msg = "Authentication failed: Missing token in response"
                    raise AuthError(err_msg)

                return token_data["access_token"]

        except (ApiError, AuthError):
            raise
        except aiohttp.ClientError as req_err:
            err_msg = f"Authentication failed: Request error - {req_err}"
            raise AuthError(err_msg) from req_err
        except TimeoutError as timeout_err:
            err_msg = "Authentication failed: Request timed out"
            raise AuthError(err_msg) from timeout_err
        except Exception as e:
            _LOGGER.exception("Unexpected error during authentication")
            err_msg = f"Authentication failed: Unexpected error - {e}"
            raise AuthError(err_msg) from e

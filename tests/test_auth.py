"""Tests for the login exchange and token handling in AuthHandler."""

import asyncio

import aiohttp
import pytest

from conftest import HOST, PASSWORD, USERNAME, FakeResponse, login_ok
from unifiled import AuthHandler, DEFAULT_PORT


@pytest.fixture
def auth(fake_session):
    return AuthHandler(HOST, USERNAME, PASSWORD, session=fake_session)


class TestConstruction:
    """Construction performs no I/O and builds the base URL."""

    def test_default_port(self, auth, fake_session):
        assert auth.base_url == f"https://{HOST}:{DEFAULT_PORT}"
        assert DEFAULT_PORT == 20443
        assert fake_session.calls == []

    def test_custom_port(self, fake_session):
        handler = AuthHandler(HOST, USERNAME, PASSWORD, port=8443, session=fake_session)
        assert handler.base_url == f"https://{HOST}:8443"

    def test_empty_host_rejected(self):
        with pytest.raises(ValueError):
            AuthHandler("", USERNAME, PASSWORD)

    def test_initial_state_has_empty_token(self, auth):
        assert auth.access_token == ""
        assert auth.authenticated is False
        assert auth.headers()["Authorization"] == "Bearer "

    def test_session_repr_hides_password(self, auth):
        assert PASSWORD not in repr(auth.session_info)


class TestAuthenticate:
    """authenticate() returns a bool and never raises."""

    def test_success_stores_token(self, auth, fake_session):
        fake_session.add("POST", "/v1/login", login_ok("abc"))

        assert asyncio.run(auth.authenticate()) is True

        assert auth.access_token == "abc"
        assert auth.authenticated is True
        assert auth.headers()["Authorization"] == "Bearer abc"
        call = fake_session.calls_to("POST", "/v1/login")[0]
        assert call["json"] == {"username": USERNAME, "password": PASSWORD}
        assert "Authorization" not in call["headers"]

    def test_certificate_validation_disabled_by_default(self, auth, fake_session):
        fake_session.add("POST", "/v1/login", login_ok())
        asyncio.run(auth.authenticate())
        assert fake_session.calls[0]["ssl"] is False

    def test_certificate_validation_can_be_enabled(self, fake_session):
        handler = AuthHandler(
            HOST, USERNAME, PASSWORD, verify_ssl=True, session=fake_session
        )
        fake_session.add("POST", "/v1/login", login_ok())
        asyncio.run(handler.authenticate())
        assert fake_session.calls[0]["ssl"] is True

    def test_request_timeout_passed_through(self, fake_session):
        handler = AuthHandler(
            HOST, USERNAME, PASSWORD, session=fake_session, request_timeout=5
        )
        fake_session.add("POST", "/v1/login", login_ok())
        asyncio.run(handler.authenticate())
        assert fake_session.calls[0]["timeout"].total == 5

    @pytest.mark.parametrize(
        "response",
        [
            FakeResponse(401, text="Unauthorized"),
            FakeResponse(500, text="boom"),
            FakeResponse(200, {"something": "else"}),
            FakeResponse(200, {"access_token": ""}),
            FakeResponse(200, ["not", "a", "dict"]),
            FakeResponse(200, text="<html>"),
            aiohttp.ClientConnectionError("unreachable"),
            TimeoutError(),
        ],
    )
    def test_failure_returns_false(self, auth, fake_session, response):
        fake_session.add("POST", "/v1/login", response)
        assert asyncio.run(auth.authenticate()) is False
        assert auth.authenticated is False

    def test_failure_keeps_previous_token(self, auth, fake_session):
        fake_session.add(
            "POST", "/v1/login", login_ok("first"), FakeResponse(500, text="down")
        )

        assert asyncio.run(auth.authenticate()) is True
        assert asyncio.run(auth.authenticate()) is False

        assert auth.access_token == "first"
        assert auth.authenticated is True

    def test_every_call_performs_fresh_exchange(self, auth, fake_session):
        fake_session.add(
            "POST", "/v1/login", login_ok("one"), login_ok("two"), login_ok("three")
        )

        async def login_three_times():
            for _ in range(3):
                await auth.authenticate()

        asyncio.run(login_three_times())

        assert len(fake_session.calls_to("POST", "/v1/login")) == 3
        assert auth.access_token == "three"


class TestSessionManagement:
    """The handler only closes sessions it created."""

    def test_external_session_not_closed(self, auth, fake_session):
        asyncio.run(auth.close_session())
        assert fake_session.closed is False

    def test_managed_session_created_and_closed(self):
        handler = AuthHandler(HOST, USERNAME, PASSWORD)

        async def open_and_close():
            session = await handler._get_session()
            assert isinstance(session, aiohttp.ClientSession)
            await handler.close_session()
            return session

        session = asyncio.run(open_and_close())
        assert session.closed is True

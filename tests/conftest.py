"""Pytest configuration and fixtures for unifiled tests."""

from urllib.parse import urlsplit

import pytest

from unifiled import UnifiLedClient

HOST = "ctrl.local"
USERNAME = "admin"
PASSWORD = "secret"


class FakeResponse:
    """Stand-in for an aiohttp response used as an async context manager."""

    def __init__(self, status=200, payload=None, text=None):
        self.status = status
        self._payload = payload
        self._text = text

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def json(self, content_type="application/json"):
        if self._text is not None:
            raise ValueError("Expecting value")
        return self._payload

    async def text(self):
        if self._text is not None:
            return self._text
        return str(self._payload)


class FakeSession:
    """Scripted replacement for aiohttp.ClientSession.

    Responses are queued per (method, path). The last queued item is reused
    once a queue runs dry. Queued exceptions are raised when the request is
    sent.
    """

    def __init__(self):
        self.closed = False
        self.calls = []
        self._routes = {}

    def add(self, method, path, *responses):
        self._routes.setdefault((method, path), []).extend(responses)

    def calls_to(self, method, path):
        return [c for c in self.calls if c["method"] == method and c["path"] == path]

    def request(self, method, url, **kwargs):
        path = urlsplit(url).path
        self.calls.append({"method": method, "url": url, "path": path, **kwargs})
        queue = self._routes.get((method, path))
        if not queue:
            return FakeResponse(404, text="Not Found")
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, BaseException):
            raise item
        return item

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)

    async def close(self):
        self.closed = True


def login_ok(token="token-1"):
    return FakeResponse(200, {"access_token": token})


def forbidden():
    return FakeResponse(403, text="Forbidden")


@pytest.fixture
def fake_session():
    """Return an empty scripted session."""
    return FakeSession()


@pytest.fixture
def client(fake_session):
    """Return a client bound to the scripted session, not yet connected."""
    return UnifiLedClient(HOST, USERNAME, PASSWORD, session=fake_session)

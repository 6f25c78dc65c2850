import pytest
import requests

from notemap.core import http_client
from notemap.core.http_client import RetryableHTTPClient


class FakeResponse:
    def __init__(self, status_code, body=None, headers=None):
        self.status_code = status_code
        self._body = body or {}
        self.headers = headers or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._body


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        pass


@pytest.fixture
def no_sleep(monkeypatch):
    sleeps = []
    monkeypatch.setattr(http_client.time, "sleep", sleeps.append)
    return sleeps


def test_post_retries_on_server_error_and_honors_retry_after(no_sleep):
    session = FakeSession([FakeResponse(503, headers={"Retry-After": "3"}), FakeResponse(200, {"ok": True})])
    client = RetryableHTTPClient(rps=1000, max_retries=3, session=session)

    assert client.post_json_with_retry("https://example.test", {"q": 1}) == {"ok": True}
    assert len(session.calls) == 2
    assert session.calls[0][1]["json"] == {"q": 1}
    assert 3.0 in no_sleep


def test_post_raises_on_client_error(no_sleep):
    client = RetryableHTTPClient(rps=1000, session=FakeSession([FakeResponse(400)]))
    with pytest.raises(requests.HTTPError):
        client.post_json_with_retry("https://example.test", {})


def test_post_raises_after_exhausting_retries(no_sleep):
    session = FakeSession([FakeResponse(500), FakeResponse(500)])
    client = RetryableHTTPClient(rps=1000, max_retries=2, session=session)
    with pytest.raises(requests.HTTPError):
        client.post_json_with_retry("https://example.test", {})
    assert len(session.calls) == 2


def test_post_retries_network_errors(no_sleep):
    session = FakeSession([requests.ConnectionError("reset"), FakeResponse(200, {"n": 2})])
    with RetryableHTTPClient(rps=1000, max_retries=2, session=session) as client:
        assert client.post_json_with_retry("https://example.test", {}) == {"n": 2}

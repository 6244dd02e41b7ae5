import aiohttp
import pytest
from aioresponses import aioresponses

from tracklink.utils.http_client import HttpError, fetch_json

URL = "https://api.example.test/search"


@pytest.fixture
async def session():
    async with aiohttp.ClientSession() as s:
        yield s


def _request_count(mocked) -> int:
    return sum(len(calls) for calls in mocked.requests.values())


class TestFetchJson:
    async def test_returns_payload(self, session):
        with aioresponses() as mocked:
            mocked.get(URL, payload={"items": [1]})
            assert await fetch_json(session, URL, backoff=0) == {"items": [1]}

    async def test_retries_transient_status(self, session):
        with aioresponses() as mocked:
            mocked.get(URL, status=503)
            mocked.get(URL, payload={"ok": True})

            assert await fetch_json(session, URL, attempts=3, backoff=0) == {"ok": True}
            assert _request_count(mocked) == 2

    async def test_gives_up_after_last_attempt(self, session):
        with aioresponses() as mocked:
            mocked.get(URL, status=429, repeat=True)

            with pytest.raises(HttpError) as excinfo:
                await fetch_json(session, URL, attempts=2, backoff=0)

            assert excinfo.value.status == 429
            assert _request_count(mocked) == 2

    async def test_client_error_is_not_retried(self, session):
        with aioresponses() as mocked:
            mocked.get(URL, status=403, body="quotaExceeded", repeat=True)

            with pytest.raises(HttpError, match="quotaExceeded"):
                await fetch_json(session, URL, attempts=3, backoff=0)

            assert _request_count(mocked) == 1

    async def test_connection_error_retried_then_raised(self, session):
        with aioresponses() as mocked:
            mocked.get(URL, exception=aiohttp.ClientConnectionError("refused"), repeat=True)

            with pytest.raises(aiohttp.ClientConnectionError):
                await fetch_json(session, URL, attempts=2, backoff=0)

            assert _request_count(mocked) == 2

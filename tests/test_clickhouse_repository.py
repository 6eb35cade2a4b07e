"""
Tests for the ClickHouse repository's retry and fallback behaviour.
"""

import asyncio
import base64

import httpx
import pytest

from digitization_finder.errors import ParseFailureError, UpstreamChallengeError, UpstreamFailureError
from digitization_finder.repositories.clickhouse_repository import (
    ClickHouseAnalyticsRepository,
    is_gateway_challenge,
    parse_rows,
)

API_URL = "https://clickhouse.example.com/"
CHALLENGE_PAGE = "<html><title>Just a moment...</title>Cloudflare</html>"
FALLBACK_AUTH = "Basic " + base64.b64encode(b"svc:pw").decode()


class Upstream:
    """Scripted ClickHouse endpoint distinguishing the two credential paths."""

    def __init__(self, primary: list[httpx.Response | Exception], fallback: list[httpx.Response] | None = None):
        self.primary = list(primary)
        self.fallback = list(fallback or [])
        self.primary_calls = 0
        self.fallback_calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if "CF-Access-Client-Id" in request.headers:
            self.primary_calls += 1
            outcome = self.primary[min(self.primary_calls, len(self.primary)) - 1]
        else:
            assert request.headers["Authorization"] == FALLBACK_AUTH
            self.fallback_calls += 1
            outcome = self.fallback[min(self.fallback_calls, len(self.fallback)) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def sleeps() -> list[float]:
    return []


def make_repository(upstream: Upstream, sleeps: list[float], with_fallback: bool = True) -> ClickHouseAnalyticsRepository:
    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    repository = ClickHouseAnalyticsRepository(
        api_url=API_URL,
        auth_basic="dG9rZW4=",
        cf_client_id="cf-id",
        cf_client_secret="cf-secret",
        account_name="svc",
        account_password="pw",
        max_attempts=3,
        client=httpx.AsyncClient(transport=httpx.MockTransport(upstream)),
        sleep=fake_sleep,
    )
    if not with_fallback:
        repository._account_name = None
        repository._account_password = None
    return repository


def ok(rows) -> httpx.Response:
    return httpx.Response(200, json=rows)


def test_success_returns_data_rows(sleeps):
    """Rows come from the 'data' array of the JSON envelope."""
    upstream = Upstream([ok({"meta": [], "data": [{"one": 1}], "rows": 1})])
    repository = make_repository(upstream, sleeps)

    rows = asyncio.run(repository.execute("SELECT 1 AS one FORMAT JSON"))

    assert rows == [{"one": 1}]
    assert upstream.primary_calls == 1
    assert upstream.fallback_calls == 0
    assert sleeps == []


def test_challenge_resolved_by_fallback_without_sleeping(sleeps):
    """A gateway challenge is retried once with the account credentials."""
    upstream = Upstream(
        primary=[httpx.Response(403, text=CHALLENGE_PAGE)],
        fallback=[ok({"data": [{"id": "x"}]})],
    )
    repository = make_repository(upstream, sleeps)

    rows = asyncio.run(repository.execute("SELECT id FORMAT JSON"))

    assert rows == [{"id": "x"}]
    assert upstream.primary_calls == 1
    assert upstream.fallback_calls == 1
    assert sleeps == []


def test_non_challenge_failure_exhausts_three_attempts(sleeps):
    """Server errors back off 2s then 4s and never use the fallback."""
    upstream = Upstream([httpx.Response(500, text="Code: 241. Memory limit exceeded")])
    repository = make_repository(upstream, sleeps)

    with pytest.raises(UpstreamFailureError) as exc_info:
        asyncio.run(repository.execute("SELECT 1 FORMAT JSON"))

    assert exc_info.value.status_code == 500
    assert upstream.primary_calls == 3
    assert upstream.fallback_calls == 0
    assert sleeps == [2, 4]


def test_challenge_with_failing_fallback_retries_whole_attempt(sleeps):
    """Each attempt tries the primary path first, then the fallback."""
    upstream = Upstream(
        primary=[httpx.Response(403, text=CHALLENGE_PAGE)],
        fallback=[httpx.Response(401, text="Authentication failed")],
    )
    repository = make_repository(upstream, sleeps)

    with pytest.raises(UpstreamChallengeError):
        asyncio.run(repository.execute("SELECT 1 FORMAT JSON"))

    assert upstream.primary_calls == 3
    assert upstream.fallback_calls == 3
    assert sleeps == [2, 4]


def test_challenge_without_fallback_credentials(sleeps):
    """Without account credentials a challenge simply backs off."""
    upstream = Upstream(primary=[httpx.Response(403, text=CHALLENGE_PAGE)])
    repository = make_repository(upstream, sleeps, with_fallback=False)

    with pytest.raises(UpstreamChallengeError):
        asyncio.run(repository.execute("SELECT 1 FORMAT JSON"))

    assert upstream.primary_calls == 3
    assert upstream.fallback_calls == 0
    assert sleeps == [2, 4]


def test_transport_error_is_retried(sleeps):
    """Connection failures consume an attempt and back off."""
    upstream = Upstream([httpx.ConnectError("connection refused"), ok([{"one": 1}])])
    repository = make_repository(upstream, sleeps)

    rows = asyncio.run(repository.execute("SELECT 1 AS one FORMAT JSON"))

    assert rows == [{"one": 1}]
    assert upstream.primary_calls == 2
    assert sleeps == [2]


def test_parse_failure_is_not_retried(sleeps):
    """A 2xx body without rows fails immediately."""
    upstream = Upstream([ok({"exception": "unexpected"})])
    repository = make_repository(upstream, sleeps)

    with pytest.raises(ParseFailureError):
        asyncio.run(repository.execute("SELECT 1 FORMAT JSON"))

    assert upstream.primary_calls == 1
    assert sleeps == []


def test_primary_request_carries_gateway_headers(sleeps):
    """The first attempt authenticates through the access gateway."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return ok({"data": []})

    repository = make_repository(Upstream([]), sleeps)
    repository._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

    asyncio.run(repository.execute("SELECT 1 FORMAT JSON"))

    request = seen[0]
    assert request.method == "POST"
    assert request.headers["CF-Access-Client-Id"] == "cf-id"
    assert request.headers["CF-Access-Client-Secret"] == "cf-secret"
    assert request.headers["Authorization"] == "Basic dG9rZW4="
    assert request.content == b"SELECT 1 FORMAT JSON"


@pytest.mark.parametrize(
    "status, body, expected",
    [
        (403, CHALLENGE_PAGE, True),
        (403, "Just a moment...", True),
        (429, "Cloudflare rate limit", True),
        (403, "Not enough privileges", False),
        (503, CHALLENGE_PAGE, False),
    ],
)
def test_is_gateway_challenge(status, body, expected):
    assert is_gateway_challenge(httpx.Response(status, text=body)) is expected


def test_parse_rows_accepts_bare_array():
    assert parse_rows('[{"a": 1}]') == [{"a": 1}]


@pytest.mark.parametrize("body", ["not json", '{"data": "oops"}', "42", '[1, 2]'])
def test_parse_rows_rejects_other_shapes(body):
    with pytest.raises(ParseFailureError):
        parse_rows(body)

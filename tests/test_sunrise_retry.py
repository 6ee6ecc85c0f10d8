from __future__ import annotations

import threading
import time
from typing import List

import pytest

from sunrise_batch.domain.sunrise.errors import (
    BatchCancelledError,
    ExhaustedRetriesError,
    FatalApiError,
    NetworkError,
    TransientApiError,
)
from sunrise_batch.domain.sunrise.models import ApiResponse, ApiStatus, Coordinate, SunriseRecord
from sunrise_batch.extractors.sunrise_retry import RetryPolicy, RetryState, SunriseRetryClient


# ----------------------------
# Fakes (test doubles)
# ----------------------------

def _record(day_length: int = 43200, sunrise: str = "2024-01-01T06:00:00+00:00") -> SunriseRecord:
    return SunriseRecord(
        sunrise=sunrise,
        sunset="2024-01-01T18:00:00+00:00",
        solar_noon="2024-01-01T12:00:00+00:00",
        day_length=day_length,
        civil_twilight_begin="2024-01-01T05:30:00+00:00",
        civil_twilight_end="2024-01-01T18:30:00+00:00",
        nautical_twilight_begin="2024-01-01T05:00:00+00:00",
        nautical_twilight_end="2024-01-01T19:00:00+00:00",
        astronomical_twilight_begin="2024-01-01T04:30:00+00:00",
        astronomical_twilight_end="2024-01-01T19:30:00+00:00",
    )


OK = ApiResponse(ApiStatus.OK, _record())
OK_ZERO = ApiResponse(ApiStatus.OK, _record(day_length=0))
UNKNOWN = ApiResponse(ApiStatus.UNKNOWN_ERROR, None)
INVALID_REQUEST = ApiResponse(ApiStatus.INVALID_REQUEST, None)
INVALID_DATE = ApiResponse(ApiStatus.INVALID_DATE, _record(day_length=0))


class ScriptedFetcher:
    """
    Devolve as respostas na ordem; a última se repete quando o script acaba.
    Itens que são exceções são levantados.
    """

    def __init__(self, script):
        self.script = list(script)
        self.calls = 0

    def fetch_response(self, coord: Coordinate) -> ApiResponse:
        idx = min(self.calls, len(self.script) - 1)
        self.calls += 1
        item = self.script[idx]
        if isinstance(item, Exception):
            raise item
        return item


class RecordingSleep:
    def __init__(self):
        self.delays: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


COORD = Coordinate(latitude=10.0, longitude=20.0)


def _client(script, policy=None):
    fetcher = ScriptedFetcher(script)
    sleep = RecordingSleep()
    return SunriseRetryClient(fetcher, policy=policy, sleep=sleep), fetcher, sleep


# ----------------------------
# Policy (transições puras)
# ----------------------------

@pytest.mark.parametrize(
    "resp, retries, expected",
    [
        (OK, 0, RetryState.SUCCEEDED),
        (OK, 5, RetryState.SUCCEEDED),
        (OK_ZERO, 0, RetryState.RETRY_SCHEDULED),
        (OK_ZERO, 4, RetryState.RETRY_SCHEDULED),
        (OK_ZERO, 5, RetryState.EXHAUSTED_RETRIES),
        (UNKNOWN, 0, RetryState.RETRY_SCHEDULED),
        (UNKNOWN, 5, RetryState.EXHAUSTED_RETRIES),
        (ApiResponse(ApiStatus.OK, None), 0, RetryState.RETRY_SCHEDULED),
        (INVALID_REQUEST, 0, RetryState.FATALLY_FAILED),
        (INVALID_REQUEST, 5, RetryState.FATALLY_FAILED),
        (INVALID_DATE, 0, RetryState.FATALLY_FAILED),
    ],
)
def test_policy_decide(resp, retries, expected):
    assert RetryPolicy().decide(resp, retries) is expected


def test_policy_defaults_are_fixed():
    policy = RetryPolicy()

    assert policy.max_retries == 5
    assert policy.delay_sec == pytest.approx(0.010)


@pytest.mark.parametrize("kwargs", [{"max_retries": -1}, {"delay_sec": -0.1}])
def test_policy_rejects_negative_values(kwargs):
    with pytest.raises(ValueError):
        RetryPolicy(**kwargs)


# ----------------------------
# Client
# ----------------------------

def test_ok_returns_on_first_attempt_without_delay():
    client, fetcher, sleep = _client([OK])

    rec = client.fetch_with_retry(COORD)

    assert rec == OK.record
    assert fetcher.calls == 1
    assert sleep.delays == []


@pytest.mark.parametrize("k", [1, 2, 3, 4])
def test_zero_day_length_k_times_then_success(k):
    client, fetcher, sleep = _client([OK_ZERO] * k + [OK])

    outcome = client.run(COORD)

    assert outcome.state is RetryState.SUCCEEDED
    assert outcome.retries == k
    assert outcome.record == OK.record
    assert fetcher.calls == k + 1
    assert len(sleep.delays) == k
    assert sum(sleep.delays) >= k * 0.010 - 1e-9


def test_real_delay_elapses_between_attempts():
    fetcher = ScriptedFetcher([OK_ZERO, OK_ZERO, OK])
    client = SunriseRetryClient(fetcher)

    t0 = time.monotonic()
    client.fetch_with_retry(COORD)
    elapsed = time.monotonic() - t0

    assert elapsed >= 2 * 0.010


def test_zero_day_length_forever_exhausts_after_five_retries():
    client, fetcher, sleep = _client([OK_ZERO])

    with pytest.raises(ExhaustedRetriesError) as exc_info:
        client.fetch_with_retry(COORD)

    assert fetcher.calls == 6
    assert len(sleep.delays) == 5
    err = exc_info.value
    assert err.retries == 5
    assert err.status is ApiStatus.OK
    assert err.day_length == 0
    assert isinstance(err, TransientApiError)
    assert "day_length: 0" in str(err)


def test_unknown_error_is_retried_then_succeeds():
    client, fetcher, sleep = _client([UNKNOWN, UNKNOWN, OK])

    assert client.fetch_with_retry(COORD) == OK.record
    assert fetcher.calls == 3


def test_unknown_error_forever_exhausts():
    client, fetcher, _ = _client([UNKNOWN])

    with pytest.raises(ExhaustedRetriesError) as exc_info:
        client.fetch_with_retry(COORD)

    assert exc_info.value.status is ApiStatus.UNKNOWN_ERROR
    assert fetcher.calls == 6


@pytest.mark.parametrize("resp", [INVALID_REQUEST, INVALID_DATE])
def test_invalid_status_fails_immediately(resp):
    client, fetcher, sleep = _client([resp, OK])

    with pytest.raises(FatalApiError) as exc_info:
        client.fetch_with_retry(COORD)

    assert fetcher.calls == 1
    assert sleep.delays == []
    assert exc_info.value.retries == 0
    assert exc_info.value.status is resp.status
    assert exc_info.value.coordinate == COORD
    assert resp.status.value in str(exc_info.value)


def test_invalid_status_after_retries_is_still_fatal():
    client, fetcher, sleep = _client([OK_ZERO, OK_ZERO, INVALID_REQUEST])

    with pytest.raises(FatalApiError) as exc_info:
        client.fetch_with_retry(COORD)

    assert exc_info.value.retries == 2
    assert fetcher.calls == 3


def test_network_error_propagates_without_retry():
    client, fetcher, sleep = _client([NetworkError("statusCode=500"), OK])

    with pytest.raises(NetworkError):
        client.fetch_with_retry(COORD)

    assert fetcher.calls == 1


def test_custom_budget_is_respected():
    client, fetcher, _ = _client([OK_ZERO], policy=RetryPolicy(max_retries=2, delay_sec=0))

    with pytest.raises(ExhaustedRetriesError):
        client.fetch_with_retry(COORD)

    assert fetcher.calls == 3


def test_cancelled_before_first_attempt_makes_no_request():
    client, fetcher, _ = _client([OK])
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(BatchCancelledError):
        client.fetch_with_retry(COORD, cancel=cancel)

    assert fetcher.calls == 0


def test_cancel_between_attempts_stops_retrying():
    cancel = threading.Event()
    fetcher = ScriptedFetcher([OK_ZERO])
    client = SunriseRetryClient(fetcher, sleep=lambda s: cancel.set())

    with pytest.raises(BatchCancelledError):
        client.fetch_with_retry(COORD, cancel=cancel)

    assert fetcher.calls == 1

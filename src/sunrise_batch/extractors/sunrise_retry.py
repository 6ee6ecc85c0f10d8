from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, FrozenSet, Optional

from sunrise_batch.domain.sunrise.errors import (
    BatchCancelledError,
    ExhaustedRetriesError,
    FatalApiError,
)
from sunrise_batch.domain.sunrise.models import ApiResponse, ApiStatus, Coordinate, SunriseRecord
from sunrise_batch.extractors.sunrise_fetcher import BoundedJsonFetcher

logger = logging.getLogger(__name__)


class RetryState(str, Enum):
    IDLE = "idle"
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    RETRY_SCHEDULED = "retry_scheduled"
    FATALLY_FAILED = "fatally_failed"
    EXHAUSTED_RETRIES = "exhausted_retries"


TERMINAL_STATES = frozenset(
    {RetryState.SUCCEEDED, RetryState.FATALLY_FAILED, RetryState.EXHAUSTED_RETRIES}
)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Política fixa de retry.

    A API às vezes responde OK com day_length == 0 (resposta ruim, provavelmente
    de cache). Repetir na hora costuma trazer a mesma resposta, por isso há
    um intervalo constante entre tentativas. Sem backoff exponencial.
    """

    max_retries: int = 5
    delay_sec: float = 0.010
    retryable: FrozenSet[ApiStatus] = frozenset({ApiStatus.OK, ApiStatus.UNKNOWN_ERROR})

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries deve ser >= 0")
        if self.delay_sec < 0:
            raise ValueError("delay_sec deve ser >= 0")

    @staticmethod
    def is_success(resp: ApiResponse) -> bool:
        return resp.status is ApiStatus.OK and resp.record is not None and resp.record.day_length != 0

    def decide(self, resp: ApiResponse, retries: int) -> RetryState:
        """Transição após uma tentativa; `retries` = retries já feitos."""
        if self.is_success(resp):
            return RetryState.SUCCEEDED
        if resp.status not in self.retryable:
            return RetryState.FATALLY_FAILED
        if retries < self.max_retries:
            return RetryState.RETRY_SCHEDULED
        return RetryState.EXHAUSTED_RETRIES


@dataclass(frozen=True)
class RetryOutcome:
    coordinate: Coordinate
    state: RetryState
    retries: int
    response: ApiResponse

    @property
    def record(self) -> Optional[SunriseRecord]:
        return self.response.record if self.state is RetryState.SUCCEEDED else None


class SunriseRetryClient:
    def __init__(
        self,
        fetcher: BoundedJsonFetcher,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.fetcher = fetcher
        self.policy = policy or RetryPolicy()
        self.sleep = sleep

    def run(self, coord: Coordinate, cancel: Optional[threading.Event] = None) -> RetryOutcome:
        """
        Executa tentativas sequenciais até um estado terminal.

        Não levanta para status da API (isso fica em fetch_with_retry);
        NetworkError e BatchCancelledError sobem direto.
        """
        retries = 0

        while True:
            if cancel is not None and cancel.is_set():
                raise BatchCancelledError(
                    f"cancelado antes da tentativa {retries + 1}: "
                    f"lat={coord.latitude} lng={coord.longitude}"
                )

            resp = self.fetcher.fetch_response(coord)
            state = self.policy.decide(resp, retries)

            if state in TERMINAL_STATES:
                return RetryOutcome(coordinate=coord, state=state, retries=retries, response=resp)

            retries += 1
            logger.warning(
                "retrying sunrise request",
                extra={
                    "lat": coord.latitude,
                    "lng": coord.longitude,
                    "status": resp.status.value,
                    "day_length": resp.day_length,
                    "retry": retries,
                },
            )
            self.sleep(self.policy.delay_sec)

    def fetch_with_retry(self, coord: Coordinate, cancel: Optional[threading.Event] = None) -> SunriseRecord:
        outcome = self.run(coord, cancel=cancel)
        resp = outcome.response

        if outcome.state is RetryState.SUCCEEDED:
            return resp.record  # type: ignore[return-value]

        if outcome.state is RetryState.FATALLY_FAILED:
            logger.error(
                "sunrise request rejected",
                extra={"lat": coord.latitude, "lng": coord.longitude, "status": resp.status.value},
            )
            raise FatalApiError(resp.status, resp.day_length, coordinate=coord, retries=outcome.retries)

        logger.error(
            "sunrise retries exhausted",
            extra={"lat": coord.latitude, "lng": coord.longitude, "status": resp.status.value, "retries": outcome.retries},
        )
        raise ExhaustedRetriesError(resp.status, resp.day_length, coordinate=coord, retries=outcome.retries)

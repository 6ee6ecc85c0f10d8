from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import List, Optional, Sequence

from sunrise_batch.domain.sunrise.errors import BatchCancelledError
from sunrise_batch.domain.sunrise.models import BatchResult, Coordinate, SunriseRecord
from sunrise_batch.extractors.sunrise_retry import SunriseRetryClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchConfig:
    """
    - size: quantidade de coordenadas geradas por execução
    - seed: semente do gerador (None => aleatório a cada execução)
    - max_workers: threads do executor. Não limita a rede; quem limita é o
      ConcurrencyLimiter do fetcher.
    """
    size: int = 100
    seed: Optional[int] = None
    max_workers: int = 32

    def __post_init__(self) -> None:
        if self.size <= 0:
            raise ValueError("size deve ser > 0")
        if self.max_workers <= 0:
            raise ValueError("max_workers deve ser > 0")


class SunriseBatchRunner:
    """
    Dispara um fetch_with_retry por coordenada e junta os resultados na ordem
    de entrada.

    A primeira falha derruba o batch inteiro. As demais tarefas recebem o
    sinal de cancelamento: as que ainda não começaram, ou estão entre
    tentativas, param com BatchCancelledError; uma requisição já em curso
    termina normalmente e o resultado é descartado.
    """

    def __init__(self, client: SunriseRetryClient, cfg: Optional[BatchConfig] = None):
        self.client = client
        self.cfg = cfg or BatchConfig()

    def _task(self, coord: Coordinate, cancel: threading.Event) -> SunriseRecord:
        return self.client.fetch_with_retry(coord, cancel=cancel)

    def run_batch(self, coordinates: Sequence[Coordinate]) -> BatchResult:
        coords = tuple(coordinates)
        if not coords:
            return BatchResult(coordinates=(), records=())

        logger.info("starting sunrise batch", extra={"coordinates": len(coords)})
        t0 = time.monotonic()

        cancel = threading.Event()
        records: List[Optional[SunriseRecord]] = [None] * len(coords)
        first_error: Optional[BaseException] = None

        executor = ThreadPoolExecutor(
            max_workers=min(self.cfg.max_workers, len(coords)),
            thread_name_prefix="sunrise",
        )
        try:
            futures = {executor.submit(self._task, c, cancel): i for i, c in enumerate(coords)}
            for fut in as_completed(futures):
                exc = fut.exception()
                if exc is None:
                    records[futures[fut]] = fut.result()
                    continue
                if isinstance(exc, BatchCancelledError):
                    continue
                first_error = exc
                cancel.set()
                break
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

        elapsed = time.monotonic() - t0
        if first_error is not None:
            logger.error(
                "sunrise batch failed",
                extra={"coordinates": len(coords), "elapsed_sec": elapsed, "error": str(first_error)},
            )
            raise first_error

        logger.info("sunrise batch finished", extra={"coordinates": len(coords), "elapsed_sec": elapsed})
        return BatchResult(coordinates=coords, records=tuple(records))  # type: ignore[arg-type]

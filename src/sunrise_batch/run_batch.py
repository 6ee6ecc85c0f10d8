from __future__ import annotations

import logging
import sys
from typing import List, Optional, TextIO

from sunrise_batch.domain.sunrise.coordinates import random_coordinates
from sunrise_batch.domain.sunrise.errors import SunriseError
from sunrise_batch.domain.sunrise.models import SunriseRecord
from sunrise_batch.domain.sunrise.reduce import earliest
from sunrise_batch.domain.sunrise.service import BatchConfig, SunriseBatchRunner
from sunrise_batch.extractors.sunrise_fetcher import BoundedJsonFetcher
from sunrise_batch.extractors.sunrise_retry import RetryPolicy, SunriseRetryClient
from sunrise_batch.extractors.sunrise_specs import SUNRISE_SUNSET, SunriseApiSpec
from sunrise_batch.utils.io.http import ConcurrencyLimiter, HTTPConfig, HttpTransport, RequestsTransport
from sunrise_batch.utils.log import build_logger


def build_runner(
    transport: Optional[HttpTransport] = None,
    http_cfg: Optional[HTTPConfig] = None,
    policy: Optional[RetryPolicy] = None,
    batch_cfg: Optional[BatchConfig] = None,
    spec: SunriseApiSpec = SUNRISE_SUNSET,
    limiter: Optional[ConcurrencyLimiter] = None,
) -> SunriseBatchRunner:
    """Sem `transport`, cria um RequestsTransport que fica aberto; quem chama é dono do fechamento."""
    http_cfg = http_cfg or HTTPConfig()
    transport = transport or RequestsTransport(http_cfg)
    limiter = limiter or ConcurrencyLimiter(http_cfg.pool_size)

    fetcher = BoundedJsonFetcher(transport, limiter, spec)
    client = SunriseRetryClient(fetcher, policy)
    return SunriseBatchRunner(client, batch_cfg)


def format_record(record: SunriseRecord) -> List[str]:
    return [f"{name}: {value}" for name, value in record.to_dict().items()]


def main(
    runner: Optional[SunriseBatchRunner] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> int:
    out = out or sys.stdout
    err = err or sys.stderr
    # "sunrise_batch" é o logger pai dos módulos do pacote: todos herdam o handler JSON
    log = build_logger("sunrise_batch", level=logging.INFO, stream=err)

    # só fecha o transporte que ele mesmo criou
    transport: Optional[RequestsTransport] = None
    if runner is None:
        http_cfg = HTTPConfig()
        transport = RequestsTransport(http_cfg)
        runner = build_runner(transport=transport, http_cfg=http_cfg)

    try:
        cfg = runner.cfg
        coords = list(random_coordinates(cfg.size, seed=cfg.seed))
        result = runner.run_batch(coords)
        best = earliest(result.records)
    except SunriseError as exc:
        log.error("batch failed", extra={"error_type": type(exc).__name__})
        print(f"{type(exc).__name__}: {exc}", file=err)
        return 1
    finally:
        if transport is not None:
            transport.close()

    for line in format_record(best):
        print(line, file=out)
    print(best.day_length, file=out)
    return 0


if __name__ == "__main__":
    sys.exit(main())

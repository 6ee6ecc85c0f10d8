from __future__ import annotations

from typing import Any, Dict, List, Mapping

import pandas as pd

from sunrise_batch.domain.sunrise.coordinates import random_coordinates
from sunrise_batch.domain.sunrise.models import Coordinate, SunriseRecord
from sunrise_batch.domain.sunrise.reduce import earliest
from sunrise_batch.domain.sunrise.service import BatchConfig
from sunrise_batch.extractors.sunrise_retry import RetryPolicy
from sunrise_batch.extractors.sunrise_specs import SunriseApiSpec
from sunrise_batch.run_batch import build_runner
from sunrise_batch.utils.io.http import HTTPConfig, RequestsTransport


def _batch_config(params: Mapping[str, Any]) -> BatchConfig:
    return BatchConfig(
        size=int(params.get("size", 100)),
        seed=params.get("seed"),
        max_workers=int(params.get("max_workers", 32)),
    )


def generate_coordinates(params: Mapping[str, Any]) -> List[Coordinate]:
    cfg = _batch_config(params)
    return list(random_coordinates(cfg.size, seed=cfg.seed))


def fetch_sunrise_batch(coordinates: List[Coordinate], params: Mapping[str, Any]) -> List[SunriseRecord]:
    http = params.get("http", {})
    retry = params.get("retry", {})

    http_cfg = HTTPConfig(
        timeout_sec=int(http.get("timeout_sec", 30)),
        pool_size=int(http.get("max_concurrent", 5)),
    )
    with RequestsTransport(http_cfg) as transport:
        runner = build_runner(
            transport=transport,
            http_cfg=http_cfg,
            policy=RetryPolicy(
                max_retries=int(retry.get("max_retries", 5)),
                delay_sec=float(retry.get("delay_sec", 0.010)),
            ),
            batch_cfg=_batch_config(params),
            spec=SunriseApiSpec(base_url=params.get("base_url", SunriseApiSpec.base_url)),
        )
        return list(runner.run_batch(coordinates).records)


def sunrise_results_table(coordinates: List[Coordinate], records: List[SunriseRecord]) -> pd.DataFrame:
    rows = [
        {"latitude": c.latitude, "longitude": c.longitude, **r.to_dict()}
        for c, r in zip(coordinates, records)
    ]
    df = pd.DataFrame(rows, columns=["latitude", "longitude", *SunriseRecord.field_names()])
    if not df.empty:
        df["day_length"] = df["day_length"].astype("int64")
    return df


def find_earliest_sunrise(records: List[SunriseRecord]) -> Dict[str, Any]:
    return earliest(records).to_dict()

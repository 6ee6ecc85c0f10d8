from __future__ import annotations

import random
from typing import Iterator, Optional, Tuple

from sunrise_batch.domain.sunrise.models import Coordinate

LAT_RANGE: Tuple[float, float] = (-90.0, 90.0)
LON_RANGE: Tuple[float, float] = (-180.0, 180.0)


def _check_range(name: str, r: Tuple[float, float]) -> None:
    lo, hi = r
    if hi < lo:
        raise ValueError(f"{name}: limite superior deve ser >= inferior ({lo}, {hi})")


def _generate(
    count: int,
    rng: random.Random,
    lat_range: Tuple[float, float],
    lon_range: Tuple[float, float],
) -> Iterator[Coordinate]:
    for _ in range(count):
        yield Coordinate(
            latitude=rng.uniform(*lat_range),
            longitude=rng.uniform(*lon_range),
        )


def random_coordinates(
    count: int,
    seed: Optional[int] = None,
    lat_range: Tuple[float, float] = LAT_RANGE,
    lon_range: Tuple[float, float] = LON_RANGE,
) -> Iterator[Coordinate]:
    """
    Gera `count` pontos uniformes; com `seed` a sequência é reprodutível.

    Os argumentos são validados na chamada, antes de consumir o iterador.
    """
    if count <= 0:
        raise ValueError("count deve ser > 0")
    _check_range("lat_range", lat_range)
    _check_range("lon_range", lon_range)

    return _generate(count, random.Random(seed), lat_range, lon_range)

from __future__ import annotations

from typing import Iterable

from sunrise_batch.domain.sunrise.errors import EmptyInputError
from sunrise_batch.domain.sunrise.models import SunriseRecord


def earliest(records: Iterable[SunriseRecord]) -> SunriseRecord:
    """
    Record com o nascer do sol mais cedo.

    Compara instantes parseados (não as strings). Em empate vence o que
    aparece primeiro.
    """
    best = None
    for rec in records:
        if best is None or rec.sunrise_at < best.sunrise_at:
            best = rec
    if best is None:
        raise EmptyInputError("earliest() precisa de pelo menos um record")
    return best

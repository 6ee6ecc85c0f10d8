from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from dateutil.parser import isoparse


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


class ApiStatus(str, Enum):
    """Status documentados pela API sunrise-sunset.org."""

    OK = "OK"
    INVALID_REQUEST = "INVALID_REQUEST"  # lat/lng ausentes ou inválidos
    INVALID_DATE = "INVALID_DATE"        # parâmetro date ausente ou inválido
    UNKNOWN_ERROR = "UNKNOWN_ERROR"      # erro no servidor; pode funcionar numa nova tentativa


@dataclass(frozen=True)
class SunriseRecord:
    """
    Resultado de uma coordenada, como veio da API (formatted=0).

    Os timestamps ficam como strings ISO 8601 em UTC; `sunrise_at` e
    `instant()` devolvem o instante já parseado, que é o que deve ser
    comparado.
    """

    sunrise: str
    sunset: str
    solar_noon: str
    day_length: int
    civil_twilight_begin: str
    civil_twilight_end: str
    nautical_twilight_begin: str
    nautical_twilight_end: str
    astronomical_twilight_begin: str
    astronomical_twilight_end: str

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def instant(self, name: str) -> datetime:
        value = getattr(self, name)
        if name == "day_length" or not isinstance(value, str):
            raise ValueError(f"campo não é timestamp: {name}")
        dt = isoparse(value)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @property
    def sunrise_at(self) -> datetime:
        return self.instant("sunrise")

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.field_names()}


@dataclass(frozen=True)
class ApiResponse:
    status: ApiStatus
    record: Optional[SunriseRecord] = None

    @property
    def day_length(self) -> Optional[int]:
        return self.record.day_length if self.record is not None else None


@dataclass(frozen=True)
class BatchResult:
    """Um SunriseRecord por coordenada, na ordem de entrada."""

    coordinates: Tuple[Coordinate, ...]
    records: Tuple[SunriseRecord, ...]

    def __post_init__(self) -> None:
        if len(self.coordinates) != len(self.records):
            raise ValueError("coordinates e records devem ter o mesmo tamanho")

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def pairs(self):
        return zip(self.coordinates, self.records)

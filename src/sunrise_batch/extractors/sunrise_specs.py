from __future__ import annotations

from dataclasses import dataclass
from typing import Dict
from urllib.parse import urlencode

from sunrise_batch.domain.sunrise.models import Coordinate


@dataclass(frozen=True)
class SunriseApiSpec:
    """
    Spec do endpoint /json da sunrise-sunset.org.

    Responsabilidade:
      - montar os query params de uma coordenada
      - fixar formatted=0 (timestamps ISO 8601 em UTC, não localizados)
    """

    base_url: str = "https://api.sunrise-sunset.org/json"
    # 7 casas decimais é o máximo que a API aceita
    decimals: int = 7
    formatted: str = "0"

    def _fmt(self, value: float) -> str:
        return f"{value:.{self.decimals}f}"

    def build_params(self, coord: Coordinate) -> Dict[str, str]:
        return {
            "lat": self._fmt(coord.latitude),
            "lng": self._fmt(coord.longitude),
            "formatted": self.formatted,
        }

    def build_query_string(self, coord: Coordinate) -> str:
        return urlencode(self.build_params(coord))

    def build_url(self, coord: Coordinate) -> str:
        return f"{self.base_url}?{self.build_query_string(coord)}"


SUNRISE_SUNSET = SunriseApiSpec()

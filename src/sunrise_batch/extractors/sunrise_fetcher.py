from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from sunrise_batch.domain.sunrise.errors import NetworkError
from sunrise_batch.domain.sunrise.models import ApiResponse, Coordinate
from sunrise_batch.domain.sunrise.parsing import parse_api_response
from sunrise_batch.extractors.sunrise_specs import SUNRISE_SUNSET, SunriseApiSpec
from sunrise_batch.utils.io.http import ConcurrencyLimiter, HttpTransport

logger = logging.getLogger(__name__)


class BoundedJsonFetcher:
    """
    GET que devolve JSON, limitado pelo ConcurrencyLimiter recebido.

    Não repete nada e não interpreta o status da API: só transporte.
    """

    def __init__(
        self,
        transport: HttpTransport,
        limiter: ConcurrencyLimiter,
        spec: SunriseApiSpec = SUNRISE_SUNSET,
    ):
        self.transport = transport
        self.limiter = limiter
        self.spec = spec

    def fetch(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        with self.limiter.slot():
            try:
                r = self.transport.get(url, params=params)
            except requests.RequestException as exc:
                raise NetworkError(f"Falha de transporte: url={url} params={params}") from exc

            if not 200 <= r.status_code < 300:
                raise NetworkError(f"statusCode={r.status_code} url={url} params={params}")

            try:
                return r.json()
            except ValueError as exc:
                raise NetworkError(f"JSON inválido: url={url} params={params}") from exc

    def fetch_response(self, coord: Coordinate) -> ApiResponse:
        payload = self.fetch(self.spec.base_url, params=self.spec.build_params(coord))
        resp = parse_api_response(payload)
        logger.debug(
            "sunrise response",
            extra={"lat": coord.latitude, "lng": coord.longitude, "status": resp.status.value},
        )
        return resp

from __future__ import annotations

from typing import Any, Mapping, Optional

from dateutil.parser import isoparse

from sunrise_batch.domain.sunrise.errors import NetworkError
from sunrise_batch.domain.sunrise.models import ApiResponse, ApiStatus, SunriseRecord


def parse_status(raw: Any) -> ApiStatus:
    try:
        return ApiStatus(raw)
    except ValueError as exc:
        raise NetworkError(f"Status desconhecido na resposta da API: {raw!r}") from exc


def parse_record(results: Any) -> Optional[SunriseRecord]:
    """
    Converte o bloco `results` em SunriseRecord.

    Com INVALID_REQUEST a API devolve `results: ""`; nesse caso não há record.
    """
    if not isinstance(results, Mapping):
        return None

    missing = [name for name in SunriseRecord.field_names() if name not in results]
    if missing:
        raise NetworkError(f"Campos ausentes em results: {missing}")

    values = {name: results[name] for name in SunriseRecord.field_names()}
    try:
        values["day_length"] = int(values["day_length"])
    except (TypeError, ValueError) as exc:
        raise NetworkError(f"day_length inválido: {values['day_length']!r}") from exc

    for name, value in values.items():
        if name == "day_length":
            continue
        if not isinstance(value, str):
            raise NetworkError(f"Campo {name} deveria ser string ISO 8601: {value!r}")
        try:
            isoparse(value)
        except ValueError as exc:
            raise NetworkError(f"Campo {name} não é timestamp ISO 8601: {value!r}") from exc

    return SunriseRecord(**values)


def parse_api_response(payload: Any) -> ApiResponse:
    if not isinstance(payload, Mapping):
        raise NetworkError(f"Resposta da API não é um objeto JSON: {type(payload).__name__}")
    if "status" not in payload:
        raise NetworkError("Resposta da API sem campo 'status'")

    status = parse_status(payload["status"])
    return ApiResponse(status=status, record=parse_record(payload.get("results")))

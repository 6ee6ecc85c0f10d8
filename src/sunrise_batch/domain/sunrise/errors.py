from __future__ import annotations

from typing import Optional

from sunrise_batch.domain.sunrise.models import ApiStatus, Coordinate


class SunriseError(RuntimeError):
    pass


class NetworkError(SunriseError):
    """Falha de transporte, HTTP fora de 2xx ou corpo que não é o JSON esperado."""


class ApiStatusError(SunriseError):
    def __init__(
        self,
        status: ApiStatus,
        day_length: Optional[int],
        coordinate: Optional[Coordinate] = None,
        retries: int = 0,
    ):
        self.status = status
        self.day_length = day_length
        self.coordinate = coordinate
        self.retries = retries
        super().__init__(self._message())

    def _message(self) -> str:
        msg = f"Sunrise API status: {self.status.value} day_length: {self.day_length}"
        if self.coordinate is not None:
            msg += f" lat={self.coordinate.latitude} lng={self.coordinate.longitude}"
        if self.retries:
            msg += f" retries={self.retries}"
        return msg


class TransientApiError(ApiStatusError):
    """OK com day_length zero, ou UNKNOWN_ERROR: vale tentar de novo."""


class ExhaustedRetriesError(TransientApiError):
    pass


class FatalApiError(ApiStatusError):
    """INVALID_REQUEST / INVALID_DATE: repetir a mesma requisição não resolve."""


class EmptyInputError(SunriseError, ValueError):
    pass


class BatchCancelledError(SunriseError):
    """Tarefa interrompida porque outra tarefa do mesmo batch falhou."""

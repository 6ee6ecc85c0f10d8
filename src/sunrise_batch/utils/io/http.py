from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional, Dict, Any, Iterator, Protocol

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


class HttpTransport(Protocol):
    def get(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response: ...


@dataclass(frozen=True)
class HTTPConfig:
    """
    Config do transporte HTTP.

    - pool_size: conexões keep-alive por host; com pool_block=True uma
      requisição além do limite espera uma conexão livre.
    - max_retries: retries de transporte (urllib3). O padrão é 0: a decisão
      de repetir fica com quem interpreta o status da API.
    """
    timeout_sec: int = 30
    max_retries: int = 0
    backoff_sec: float = 0.0
    pool_size: int = 5
    pool_block: bool = True
    headers: Optional[Dict[str, str]] = None


class RequestsTransport:
    def __init__(self, cfg: HTTPConfig):
        self.cfg = cfg
        session = requests.Session()
        retries = Retry(
            total=cfg.max_retries,
            backoff_factor=cfg.backoff_sec,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=("GET",),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(
            max_retries=retries,
            pool_connections=1,
            pool_maxsize=cfg.pool_size,
            pool_block=cfg.pool_block,
        )
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        self.session = session

    def get(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        h = headers or self.cfg.headers
        return self.session.get(url, params=params, headers=h, timeout=self.cfg.timeout_sec)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "RequestsTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class ConcurrencyLimiter:
    """
    Limite explícito de requisições simultâneas.

    Construído uma vez e passado para cada fetcher que deve compartilhar o
    mesmo teto. Mantém contadores de in-flight e pico para inspeção.
    """

    def __init__(self, max_concurrent: int = 5):
        if max_concurrent <= 0:
            raise ValueError("max_concurrent deve ser > 0")
        self.max_concurrent = max_concurrent
        self._slots = threading.BoundedSemaphore(max_concurrent)
        self._lock = threading.Lock()
        self._in_flight = 0
        self._peak = 0

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    @property
    def peak(self) -> int:
        with self._lock:
            return self._peak

    @contextmanager
    def slot(self) -> Iterator[None]:
        self._slots.acquire()
        with self._lock:
            self._in_flight += 1
            self._peak = max(self._peak, self._in_flight)
        try:
            yield
        finally:
            with self._lock:
                self._in_flight -= 1
            self._slots.release()

from __future__ import annotations

import logging
import time
from typing import Any, Dict

import pandas as pd
from kedro.framework.hooks import hook_impl

from sunrise_batch.domain.sunrise.errors import ApiStatusError

log = logging.getLogger(__name__)


class DataObservabilityHooks:
    """Loga duração dos nodes, tamanho dos batches e o motivo de falhas da API."""

    def __init__(self):
        self._started: Dict[str, float] = {}

    @hook_impl
    def before_node_run(self, node, inputs: Dict[str, Any], **kwargs):
        self._started[node.name] = time.monotonic()
        coords = inputs.get("sunrise_coordinates")
        if isinstance(coords, list):
            log.info("Starting node %s: %d coordinates", node.name, len(coords))
        else:
            log.info("Starting node: %s", node.name)

    @hook_impl
    def after_node_run(self, node, outputs: Dict[str, Any], **kwargs):
        elapsed = time.monotonic() - self._started.pop(node.name, time.monotonic())
        log.info("Finished node %s in %.2fs", node.name, elapsed)

        for name, out in outputs.items():
            if isinstance(out, pd.DataFrame):
                log.info("Output %s: shape=%s", name, out.shape)
                if out.empty:
                    log.warning("Output %s is EMPTY (node=%s)", name, node.name)
            elif isinstance(out, list):
                log.info("Output %s: %d items", name, len(out))
            elif isinstance(out, dict) and "sunrise" in out:
                log.info(
                    "Output %s: sunrise=%s day_length=%s",
                    name, out["sunrise"], out.get("day_length"),
                )

    @hook_impl
    def on_node_error(self, error: Exception, node, **kwargs):
        self._started.pop(node.name, None)
        if isinstance(error, ApiStatusError):
            log.error(
                "Node %s failed: %s status=%s day_length=%s retries=%d coordinate=%s",
                node.name, type(error).__name__, error.status.value,
                error.day_length, error.retries, error.coordinate,
            )
        else:
            log.error("Node %s failed: %s: %s", node.name, type(error).__name__, error)

# src/sunrise_batch/pipeline_registry.py
from __future__ import annotations

from kedro.pipeline import Pipeline

from sunrise_batch.pipelines.sunrise.pipeline import create_pipeline as sunrise_pipeline


def register_pipelines() -> dict[str, Pipeline]:
    sunrise = sunrise_pipeline()

    pipelines = {
        "sunrise": sunrise,
    }
    pipelines["__default__"] = pipelines["sunrise"]

    return pipelines

from __future__ import annotations

from kedro.pipeline import Pipeline, node

from sunrise_batch.pipelines.sunrise.nodes import (
    generate_coordinates,
    fetch_sunrise_batch,
    sunrise_results_table,
    find_earliest_sunrise,
)


def create_pipeline(**kwargs) -> Pipeline:
    return Pipeline(
        [
            node(
                func=generate_coordinates,
                inputs="params:sunrise",
                outputs="sunrise_coordinates",
                name="sunrise_generate_coordinates",
            ),
            node(
                func=fetch_sunrise_batch,
                inputs=["sunrise_coordinates", "params:sunrise"],
                outputs="sunrise_records",
                name="sunrise_fetch_batch",
            ),
            node(
                func=sunrise_results_table,
                inputs=["sunrise_coordinates", "sunrise_records"],
                outputs="sunrise_results",
                name="sunrise_results_table",
            ),
            node(
                func=find_earliest_sunrise,
                inputs="sunrise_records",
                outputs="earliest_sunrise",
                name="sunrise_find_earliest",
            ),
        ]
    )

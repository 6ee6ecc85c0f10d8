from sunrise_batch.hooks import DataObservabilityHooks

HOOKS = (DataObservabilityHooks(),)

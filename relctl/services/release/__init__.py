"""Release orchestration: normalize, preflight, mutate, publish, watch, finalize."""

from prometheus_client import Counter, Histogram

# Token usage metrics
llm_token_usage_counter = Counter(
    "llm_token_usage_total",
    "Total tokens consumed by LLM calls",
    ["model", "token_type"],  # token_type: prompt|completion
)

llm_request_counter = Counter(
    "llm_request_total",
    "Total number of LLM API requests",
    ["model", "endpoint", "status"],  # endpoint: chat|validator|suggestions|surprise, status: success|error
)

llm_cost_counter = Counter(
    "llm_cost_usd_total",
    "Estimated total cost in USD for LLM usage",
    ["model"],
)

llm_request_duration_histogram = Histogram(
    "llm_request_duration_seconds",
    "Duration of LLM API requests in seconds",
    ["model", "endpoint"],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
)

# Exchange-rate cache
fx_cache_lookup_counter = Counter(
    "fx_cache_lookup_total",
    "Exchange-rate table lookups by outcome",
    ["outcome"],  # hit|refresh|stale|error
)

# Conversion pipeline
currency_detection_counter = Counter(
    "currency_detection_total",
    "Conversion requests classified as currency or not",
    ["detected"],  # true|false
)

validator_outcome_counter = Counter(
    "validator_outcome_total",
    "Outcomes of the corrective validator pass",
    ["outcome"],  # corrected|kept|failed|skipped
)


# Initialize counters with zero values so they appear in metrics immediately
def _initialize_metrics():
    """Initialize pipeline metrics with default labels to make them visible"""
    for outcome in ("hit", "refresh", "stale", "error"):
        fx_cache_lookup_counter.labels(outcome=outcome)
    for detected in ("true", "false"):
        currency_detection_counter.labels(detected=detected)
    for outcome in ("corrected", "kept", "failed", "skipped"):
        validator_outcome_counter.labels(outcome=outcome)

_initialize_metrics()

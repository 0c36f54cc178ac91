"""Semantic event constants for structured logging.

Log events use these constants rather than magic strings so the JSON log
can be queried reliably.
"""

# Aggregator events
METRICS_COLLECTED = "metrics_collected"
METRICS_CACHE_HIT = "metrics_cache_hit"
METRICS_COLLECTION_FAILED = "metrics_collection_failed"
SAMPLE_DEGRADED = "sample_degraded"

# Sensor events
CONTAINER_DETECTED = "container_detected"
PLATFORM_PROBE_SELECTED = "platform_probe_selected"
LAG_PROBE_STARTED = "lag_probe_started"
LAG_PROBE_STOPPED = "lag_probe_stopped"

# Settings events
SETTINGS_UPDATED = "settings_updated"

# Service lifecycle events
SERVICE_STARTING = "service_starting"
SERVICE_READY = "service_ready"
SERVICE_STOPPED = "service_stopped"
REQUEST_FAILED = "request_failed"

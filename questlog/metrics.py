from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST
from flask import Response, request
import time

# API Metrics
api_request_duration_seconds = Histogram(
    "questlog_api_request_duration_seconds", "API request duration", ["endpoint", "method"]
)

api_requests_total = Counter("questlog_api_requests_total", "Total API requests", ["endpoint", "method", "status_code"])

# Upstream (IGDB / Twitch) Metrics
igdb_requests_total = Counter("questlog_igdb_requests_total", "Total upstream requests", ["kind", "status"])

igdb_request_duration_seconds = Histogram(
    "questlog_igdb_request_duration_seconds", "Upstream request duration", ["kind"]
)

# Catalog cache Metrics
catalog_cache_lookups_total = Counter(
    "questlog_catalog_cache_lookups_total", "Catalog cache lookups", ["result"]
)

catalog_cache_entries = Gauge("questlog_catalog_cache_entries", "Ranked result sets held in memory")

catalog_inflight_fetches = Gauge("questlog_catalog_inflight_fetches", "Catalog fetches currently running upstream")


def init_metrics(app):
    @app.route("/api/metrics")
    def metrics():
        cache = app.extensions.get("catalog_cache")
        if cache is not None:
            catalog_cache_entries.set(cache.stats()["entries"])
        return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)

    @app.before_request
    def before_request():
        request.start_time = time.time()

    @app.after_request
    def after_request(response):
        duration = time.time() - getattr(request, "start_time", time.time())
        api_request_duration_seconds.labels(endpoint=request.endpoint or "unknown", method=request.method).observe(
            duration
        )
        api_requests_total.labels(
            endpoint=request.endpoint or "unknown", method=request.method, status_code=response.status_code
        ).inc()
        return response

    app.logger.info("Prometheus metrics initialized at /api/metrics")


class UpstreamCallTracker:
    """Context manager timing one upstream call.

    Example:
        with UpstreamCallTracker("query") as call:
            response = session.post(...)
            call.status = response.status_code
    """

    def __init__(self, kind):
        self.kind = kind
        self.status = "error"
        self._started = None

    def __enter__(self):
        self._started = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        igdb_request_duration_seconds.labels(kind=self.kind).observe(time.time() - self._started)
        igdb_requests_total.labels(kind=self.kind, status=str(self.status)).inc()
        return False

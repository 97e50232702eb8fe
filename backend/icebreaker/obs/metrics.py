"""Central registry for Prometheus metrics used across the matching core."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, Summary

REQUEST_COUNTER = Counter(
	"icebreaker_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"icebreaker_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

POSITION_UPDATES = Counter(
	"icebreaker_position_updates_total",
	"Position broadcasts accepted",
)

POSITION_REJECTS = Counter(
	"icebreaker_position_rejects_total",
	"Position broadcasts rejected",
	["reason"],
)

ANSWERS_SUBMITTED = Counter(
	"icebreaker_answers_submitted_total",
	"Profile answers accepted",
	["category", "shared"],
)

EXPIRY_SWEEPER_TRIMS = Counter(
	"icebreaker_expiry_sweeper_trim_total",
	"Users hidden by the stale position sweeper",
)

EXPIRY_SWEEPER_PURGES = Counter(
	"icebreaker_expiry_sweeper_purge_total",
	"Long-expired users dropped from every store",
)

VISIBLE_USERS = Gauge(
	"icebreaker_visible_users",
	"Users currently discoverable on the radar",
)

RADAR_QUERIES = Counter(
	"icebreaker_radar_queries_total",
	"Radar match queries",
	["outcome"],
)

RADAR_RESULTS = Summary(
	"icebreaker_radar_results",
	"Radar query result sizes",
)

COMPATIBILITY_CACHE = Counter(
	"icebreaker_compatibility_cache_total",
	"Compatibility cache lookups",
	["result"],
)

COMPATIBILITY_LATENCY = Histogram(
	"icebreaker_compatibility_seconds",
	"Time spent computing one compatibility result",
	buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
)

BEST_MATCH_SET = Counter(
	"icebreaker_best_match_set_total",
	"Daily best matches locked in",
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_position_reject(reason: str) -> None:
	POSITION_REJECTS.labels(reason=reason).inc()


def inc_answer(category: str, shared: bool) -> None:
	ANSWERS_SUBMITTED.labels(category=category, shared=str(bool(shared)).lower()).inc()


def inc_radar_query(outcome: str) -> None:
	RADAR_QUERIES.labels(outcome=outcome).inc()


def inc_cache(result: str) -> None:
	COMPATIBILITY_CACHE.labels(result=result).inc()

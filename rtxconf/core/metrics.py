from __future__ import annotations

import re

from prometheus_client import Counter, Histogram

DECLARATIONS_TOTAL = Counter(
    "rtxconf_declarations_total",
    "Declarations processed during the declare phase",
    ["family", "outcome"],
)

LINKS_TOTAL = Counter(
    "rtxconf_links_total",
    "Pending link references processed during the link phase",
    ["kind", "outcome"],
)

BINDINGS_TOTAL = Counter(
    "rtxconf_bindings_total",
    "Element bindings processed",
    ["outcome"],
)

LOAD_DURATION_SECONDS = Histogram(
    "rtxconf_load_duration_seconds",
    "Wall time of a full document load",
)


def inc_declaration(family: str, outcome: str) -> None:
    DECLARATIONS_TOTAL.labels(family=family, outcome=outcome).inc()


def inc_link(kind: str, outcome: str) -> None:
    LINKS_TOTAL.labels(kind=kind, outcome=outcome).inc()


def inc_binding(outcome: str) -> None:
    BINDINGS_TOTAL.labels(outcome=outcome).inc()


HTTP_REQUESTS_TOTAL = Counter(
    "rtxconf_http_requests_total",
    "Inspection API requests",
    ["method", "path", "status"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "rtxconf_http_request_duration_seconds",
    "Inspection API request duration in seconds",
    ["method", "path"],
)


def normalize_path(path: str) -> str:
    """Collapse per-name path segments so labels stay low-cardinality."""
    p = path or "/"
    p = re.sub(r"^(/api/v1/timeseries)/[^/]+$", r"\1/:name", p)
    p = re.sub(r"^(/api/v1/elements)/[^/]+$", r"\1/:model_id", p)
    return p

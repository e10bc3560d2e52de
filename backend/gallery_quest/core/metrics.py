from __future__ import annotations

from prometheus_client import Counter, Histogram

GALLERY_IMAGES_RESULTS: tuple[str, ...] = (
    "ok",
    "not_found",
    "bad_request",
    "error",
)

CACHE_EVENTS: tuple[str, ...] = (
    "hit",
    "miss",
    "error",
)

GALLERY_IMAGES_REQUESTS_TOTAL = Counter(
    "gallery_quest_images_requests_total",
    "Total gallery image listing requests by result.",
    ["result"],
)

GALLERY_IMAGES_LATENCY_SECONDS = Histogram(
    "gallery_quest_images_latency_seconds",
    "Latency for the gallery image listing endpoint (seconds).",
    buckets=(
        0.005,
        0.01,
        0.025,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
    ),
)

GALLERY_IMAGES_CACHE_TOTAL = Counter(
    "gallery_quest_images_cache_total",
    "Gallery image page cache lookups by outcome.",
    ["event"],
)

GALLERY_INVALIDATIONS_TOTAL = Counter(
    "gallery_quest_gallery_invalidations_total",
    "Total gallery version counter increments.",
)


def _init_labelsets() -> None:
    for result in GALLERY_IMAGES_RESULTS:
        GALLERY_IMAGES_REQUESTS_TOTAL.labels(result=result).inc(0)
    for event in CACHE_EVENTS:
        GALLERY_IMAGES_CACHE_TOTAL.labels(event=event).inc(0)
    GALLERY_INVALIDATIONS_TOTAL.inc(0)


_init_labelsets()


def observe_gallery_images_result(*, result: str, duration_s: float | None) -> None:
    result = (result or "").strip()
    if result not in GALLERY_IMAGES_RESULTS:
        result = "error"
    GALLERY_IMAGES_REQUESTS_TOTAL.labels(result=result).inc()
    if duration_s is not None and duration_s >= 0:
        GALLERY_IMAGES_LATENCY_SECONDS.observe(duration_s)


def observe_cache_event(event: str) -> None:
    if event not in CACHE_EVENTS:
        return
    GALLERY_IMAGES_CACHE_TOTAL.labels(event=event).inc()

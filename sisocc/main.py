"""sisocc — occurrence lifecycle engine for the Recife fire brigade.

This is the application entry point.  It wires the stores, the lifecycle
engine, the notification publisher and the HTTP/WebSocket endpoints
together.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from sisocc.api.errors import install_error_handlers
from sisocc.api.occurrences import create_occurrence_router
from sisocc.api.ws_occurrences import create_subscription_router
from sisocc.config import settings
from sisocc.core.geocoding import CoordinateResolver
from sisocc.core.history import HistoryRecorder
from sisocc.core.lifecycle import LifecycleManager
from sisocc.core.stats import StatsAggregator
from sisocc.domain.occurrence import Coordinates
from sisocc.services.connection_manager import ConnectionManager
from sisocc.services.notifications import NotificationPublisher
from sisocc.store.actor_directory import InMemoryActorDirectory
from sisocc.store.append_only import InMemoryAuditLog, InMemoryHistoryStore
from sisocc.store.occurrence_store import InMemoryOccurrenceStore

# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

# ── State ────────────────────────────────────────────────────────────────────

occurrences = InMemoryOccurrenceStore()
history = HistoryRecorder(InMemoryHistoryStore())
audit_log = InMemoryAuditLog()
actors = InMemoryActorDirectory()
subscribers = ConnectionManager()
publisher = NotificationPublisher(subscribers)

# ── Engine ───────────────────────────────────────────────────────────────────

resolver = CoordinateResolver(
    api_key=settings.geocoding_api_key,
    region_suffix=settings.geocoding_region_suffix,
    base_url=settings.geocoding_url,
    timeout=settings.geocoding_timeout_seconds,
)

lifecycle = LifecycleManager(
    occurrences=occurrences,
    history=history,
    audit=audit_log,
    publisher=publisher,
    resolver=resolver,
    actors=actors,
    geocoding_policy=settings.geocoding_failure_policy,
    default_coordinates=Coordinates(
        latitude=settings.default_latitude,
        longitude=settings.default_longitude,
    ),
)

stats = StatsAggregator(occurrences)

# ── App ──────────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Let in-flight notifications finish before the loop goes away
    await publisher.drain()


app = FastAPI(
    title=settings.app_name,
    description="Occurrence lifecycle engine",
    version="1.0.0",
    lifespan=lifespan,
)
install_error_handlers(app)

# ── Routes ───────────────────────────────────────────────────────────────────

app.include_router(create_occurrence_router(
    lifecycle,
    stats,
    default_page_size=settings.default_page_size,
))
app.include_router(create_subscription_router(subscribers))


# ── Health ───────────────────────────────────────────────────────────────────

@app.get("/health")
async def health() -> dict:
    return {
        "status": "ok",
        "occurrences": await occurrences.count(),
        "subscribers": subscribers.active_count,
        "geocoding_configured": bool(settings.geocoding_api_key),
        "geocoding_failure_policy": lifecycle.geocoding_policy.value,
    }

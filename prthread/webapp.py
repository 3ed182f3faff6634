"""HTTP surface receiving Azure DevOps pull-request service hooks."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from prthread.config import PrthreadConfig
from prthread.connectors.base import ThreadSink
from prthread.models import PullRequestEvent, RouteOutcome
from prthread.router import EventRouter
from prthread.storage import InMemorySnapshotStore, SnapshotStore

logger = logging.getLogger(__name__)


async def _parse_event(request: Request, expected_event_type: str, route_label: str) -> PullRequestEvent:
    raw = await request.body()
    try:
        payload = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise HTTPException(status_code=400, detail="Failed to parse JSON") from exc
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Failed to parse JSON")

    try:
        event = PullRequestEvent.model_validate(payload)
    except ValidationError as exc:
        logger.info("Rejected malformed %s notification: %s", route_label, exc.error_count())
        raise HTTPException(status_code=400, detail="Failed to parse JSON") from exc

    if event.event_type != expected_event_type:
        raise HTTPException(
            status_code=400,
            detail=f"EventType is not matching. Event sent to {route_label} endpoint",
        )
    return event


def _accepted(outcome: RouteOutcome) -> dict[str, Any]:
    return {"status": "accepted", "outcome": outcome.value}


def create_app(
    config: PrthreadConfig,
    sink: ThreadSink,
    store: SnapshotStore | None = None,
) -> FastAPI:
    app = FastAPI(title="prthread")
    snapshot_store = store if store is not None else InMemorySnapshotStore()
    router = EventRouter(config=config, store=snapshot_store, sink=sink)
    app.state.router = router
    app.state.store = snapshot_store

    async def _dispatch(handler: Callable[[PullRequestEvent], RouteOutcome], event: PullRequestEvent) -> dict[str, Any]:
        # Slack calls block, so routing runs on the worker thread pool.
        outcome = await run_in_threadpool(handler, event)
        logger.info("PR %s %s -> %s", event.resource.pull_request_id, event.event_type, outcome.value)
        return _accepted(outcome)

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"status": "ok", "tracked": len(snapshot_store)}

    @app.post(config.server.create_path)
    async def pull_request_created(request: Request) -> dict[str, Any]:
        event = await _parse_event(request, config.events.created_event_type, "create")
        return await _dispatch(router.handle_created, event)

    @app.post(config.server.update_path)
    async def pull_request_updated(request: Request) -> dict[str, Any]:
        event = await _parse_event(request, config.events.updated_event_type, "update")
        return await _dispatch(router.handle_updated, event)

    return app

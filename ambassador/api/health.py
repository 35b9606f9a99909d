"""Liveness and Prometheus scrape endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ambassador.api.dependencies import ProgramDep
from ambassador.db.redis import redis_pool

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(program: ProgramDep) -> dict:
    """Always 200; ``status`` says whether a dependency is impaired."""
    checks: dict[str, str] = {}
    overall = "ok"

    if redis_pool is not None:
        try:
            await redis_pool.ping()  # type: ignore[misc]
            checks["redis"] = "ok"
        except Exception:
            checks["redis"] = "degraded"
            overall = "degraded"
    else:
        checks["redis"] = "not_configured"

    return {
        "status": overall,
        "checks": checks,
        "outbox_pending": len(program.outbox),
    }


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

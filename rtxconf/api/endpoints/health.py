"""Liveness, readiness and the Prometheus scrape endpoint."""
from __future__ import annotations

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import JSONResponse

router = APIRouter()


@router.get("/health/live")
async def live():
    return {"status": "ok"}


@router.get("/health/ready")
def ready(request: Request):
    # a failed reload keeps the previous graph, so readiness survives it
    loaded = request.app.state.loader.current
    if loaded is None:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "problems": ["no_document_loaded"]},
        )
    return {"status": "ready", "document": loaded.document_path.name}


@router.get("/metrics", include_in_schema=False)
def prometheus_metrics() -> Response:
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from rtxconf.core.loader import ConfigLoader, LoadedConfig

router = APIRouter(prefix="/api/v1", tags=["graph"])
log = logging.getLogger("rtxconf.api")


def get_loader(request: Request) -> ConfigLoader:
    return request.app.state.loader


def require_loaded(loader: ConfigLoader = Depends(get_loader)) -> LoadedConfig:
    loaded = loader.current
    if loaded is None:
        raise HTTPException(status_code=503, detail="no document loaded")
    return loaded


class ReloadRequest(BaseModel):
    # omitted: reload the document currently served
    document: Optional[str] = None


def _document_root(loader: ConfigLoader) -> Optional[Path]:
    """Directory a client-named document must live under."""
    if loader.current is not None:
        return loader.current.document_path.resolve().parent
    if loader.settings.document:
        return Path(loader.settings.document).resolve().parent
    return None


def _confined(loader: ConfigLoader, document: str) -> Path:
    root = _document_root(loader)
    if root is None:
        raise HTTPException(status_code=400, detail="no document directory configured")
    candidate = (root / document).resolve()
    if not candidate.is_relative_to(root):
        log.warning("Refused reload outside %s: %r", root, document)
        raise HTTPException(status_code=400, detail="document must be inside the configured document directory")
    return candidate


@router.get("/graph")
def graph(loaded: LoadedConfig = Depends(require_loaded)):
    return loaded.to_dict()


@router.get("/timeseries")
def list_timeseries(loaded: LoadedConfig = Depends(require_loaded)):
    return {"timeseries": sorted(loaded.timeseries)}


@router.get("/timeseries/{name}")
def get_timeseries(name: str, loaded: LoadedConfig = Depends(require_loaded)):
    node = loaded.timeseries.get(name)
    if node is None:
        raise HTTPException(status_code=404, detail=f"unknown time series: {name}")
    return node.to_dict()


@router.get("/records")
def records(loaded: LoadedConfig = Depends(require_loaded)):
    return {name: r.to_dict() for name, r in sorted(loaded.records.items())}


@router.get("/clocks")
def clocks(loaded: LoadedConfig = Depends(require_loaded)):
    return {name: {"period": c.period} for name, c in sorted(loaded.clocks.items())}


@router.get("/elements/{model_id}")
def elements(model_id: str, loaded: LoadedConfig = Depends(require_loaded)):
    if loaded.model is None:
        raise HTTPException(status_code=404, detail="no model loaded")
    found = loaded.model.elements_named(model_id)
    if not found:
        raise HTTPException(status_code=404, detail=f"unknown element: {model_id}")
    return {"model_id": model_id, "elements": [e.to_dict() for e in found]}


@router.get("/diagnostics")
def diagnostics(severity: Optional[str] = None, loaded: LoadedConfig = Depends(require_loaded)):
    items = [d.to_dict() for d in loaded.diagnostics if severity is None or d.severity == severity]
    return {"count": len(items), "diagnostics": items}


@router.post("/reload")
def reload(body: Optional[ReloadRequest] = None, loader: ConfigLoader = Depends(get_loader)):
    """Rebuild the graph; a DocumentError leaves the served graph in place."""
    target = None
    if body is not None and body.document is not None:
        target = _confined(loader, body.document)
    if target is None and loader.current is None and not loader.settings.document:
        raise HTTPException(status_code=409, detail="no document configured")
    loaded = loader.load(target)
    log.info("Reloaded %s (%d diagnostics)", loaded.document_path, len(loaded.diagnostics))
    return {
        "status": "reloaded",
        "document": loaded.document_path.name,
        "timeseries": len(loaded.timeseries),
        "diagnostics": len(loaded.diagnostics),
    }

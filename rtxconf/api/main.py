from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI

from rtxconf import __version__
from rtxconf.api.endpoints import graph, health
from rtxconf.api.middleware.error_shaping import SafeErrorMiddleware
from rtxconf.api.middleware.request_context import RequestContextMiddleware
from rtxconf.core.errors import DocumentError
from rtxconf.core.loader import ConfigLoader
from rtxconf.core.settings import LoaderSettings

log = logging.getLogger("rtxconf.api")


def create_app(loader: Optional[ConfigLoader] = None) -> FastAPI:
    """Inspection service over one ConfigLoader.

    Without an explicit loader, settings come from the environment and
    RTXCONF_DOCUMENT (when set) is loaded up front. A document that fails to
    load leaves the service up but not ready.
    """
    if loader is None:
        loader = ConfigLoader(LoaderSettings.from_env())
        if loader.settings.document:
            try:
                loader.load()
            except DocumentError as e:
                log.error("Initial load failed: %s", e)

    app = FastAPI(title="RTX Config Inspector", version=__version__)
    app.state.loader = loader

    # Starlette: last added = outermost
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(SafeErrorMiddleware)

    app.include_router(health.router)
    app.include_router(graph.router)
    return app

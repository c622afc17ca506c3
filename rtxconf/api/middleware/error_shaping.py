from __future__ import annotations

import logging
import traceback
from typing import Any, Callable, Dict

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from rtxconf.core.errors import DocumentError

log = logging.getLogger("rtxconf.errors")


def _request_id(request: Request):
    return getattr(request.state, "request_id", None) or request.headers.get("x-request-id")


class SafeErrorMiddleware(BaseHTTPMiddleware):
    """Shapes escaping exceptions into JSON.

    A DocumentError is the caller's document being unusable: 422 with the
    location. Anything else is a 500 whose traceback only goes to the log.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except DocumentError as e:
            log.warning("Rejected document %s rid=%s", e, _request_id(request))
            payload: Dict[str, Any] = {
                "detail": e.reason,
                "location": e.location,
                "line": e.line,
                "column": e.column,
            }
            return JSONResponse(status_code=422, content=payload)
        except Exception as e:
            rid = _request_id(request)
            log.error(
                "Unhandled error: %s rid=%s path=%s\n%s",
                str(e),
                rid,
                request.url.path,
                traceback.format_exc(),
            )
            payload = {"detail": "Internal Server Error"}
            if rid:
                payload["request_id"] = rid
            return JSONResponse(status_code=500, content=payload)

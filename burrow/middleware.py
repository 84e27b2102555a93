import time
import logging
from uuid import uuid4
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from .logging_config import request_id_ctx, session_id_ctx

logger = logging.getLogger(__name__)

SESSION_HEADER = "x-session-id"
ANONYMOUS_SESSION = "anonymous"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tags logs with the request id and the browsing session the request belongs to."""

    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get("x-request-id", str(uuid4()))
        sid = request.headers.get(SESSION_HEADER, ANONYMOUS_SESSION)
        rid_token = request_id_ctx.set(rid)
        sid_token = session_id_ctx.set(sid)
        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
            dur_ms = int((time.perf_counter() - start) * 1000)
            response.headers["X-Request-ID"] = rid
            logger.info("%s %s -> %s (%d ms)", request.method, request.url.path, response.status_code, dur_ms)
            return response
        except Exception:
            logger.exception("Unhandled exception")
            raise
        finally:
            session_id_ctx.reset(sid_token)
            request_id_ctx.reset(rid_token)

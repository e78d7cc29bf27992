"""
Backoffice API: Request Logging Middleware
===========================================

What:  Logs every HTTP exchange and traps unhandled errors.
How:   Logs the request on arrival, runs the rest of the pipeline, logs the
       response on completion. JSON response bodies are buffered, logged and
       re-emitted byte-for-byte.
Who:   Applied to every request via Starlette middleware.
When:  After RequestIDMiddleware (uses request ID for correlation).

Log lines (logger "backoffice.access"):
    REQUEST: POST /employees
    REQUEST BODY: {"name": "Ana", "role": "Dev", "salary": 5000}   (non-empty only)
    QUERY PARAMS: {"q": "x"}                                       (non-empty only)
    RESPONSE: 201 Created 12.3ms [a1b2c3d4]
    RESPONSE BODY: {"message":"Employee created","id":1}           (non-empty JSON only)

Timestamps come from the log formatter configured in main.setup_logging().

Failure safety net:
    Any exception escaping the routes is logged here with its stack trace and
    turned into a generic 500 JSON response. Failures while writing log lines
    are reported at WARNING and never interrupt the exchange.
"""

import logging
import time
from http import HTTPStatus

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("backoffice.access")

INTERNAL_ERROR_MESSAGE = "Internal server error"


def _reason(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs request/response details and converts unhandled exceptions to 500s.

    Log level follows the status class:
        5xx → ERROR, 4xx → WARNING, everything else → INFO
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Skip logging for health checks (polled continuously)
        if request.url.path == "/health":
            return await call_next(request)

        start_time = time.perf_counter()
        await self._log_request(request)

        try:
            response = await call_next(request)
        except Exception as exc:
            rid = request_id_var.get("")
            logger.error(
                "[%s] Unhandled error on %s %s: %s",
                rid,
                request.method,
                request.url.path,
                str(exc),
                exc_info=True,
            )
            response = JSONResponse(
                status_code=500,
                content={
                    "error": "internal_server_error",
                    "message": INTERNAL_ERROR_MESSAGE,
                    "request_id": rid,
                },
            )

        duration_ms = (time.perf_counter() - start_time) * 1000
        return await self._log_response(response, duration_ms)

    async def _log_request(self, request: Request) -> None:
        try:
            logger.info("REQUEST: %s %s", request.method, request.url.path)
            body = await request.body()
            if body.strip():
                logger.info("REQUEST BODY: %s", body.decode("utf-8", errors="replace"))
            if request.query_params:
                logger.info("QUERY PARAMS: %s", dict(request.query_params))
        except Exception:
            logger.warning("Could not log request details", exc_info=True)

    async def _log_response(self, response: Response, duration_ms: float) -> Response:
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        try:
            logger.log(
                log_level,
                "RESPONSE: %d %s %.1fms [%s]",
                status,
                _reason(status),
                duration_ms,
                request_id_var.get(""),
            )
        except Exception:
            logger.warning("Could not log response status", exc_info=True)

        content_type = response.headers.get("content-type", "")
        if not content_type.startswith("application/json"):
            return response

        body_iterator = getattr(response, "body_iterator", None)
        if body_iterator is None:
            body = response.body
        else:
            body = b"".join([chunk async for chunk in body_iterator])

        try:
            if body.strip():
                logger.info("RESPONSE BODY: %s", body.decode("utf-8", errors="replace"))
        except Exception:
            logger.warning("Could not log response body", exc_info=True)

        if body_iterator is None:
            return response
        return Response(
            content=body,
            status_code=status,
            headers=dict(response.headers),
            media_type=response.media_type,
            background=response.background,
        )

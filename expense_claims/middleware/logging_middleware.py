"""Middleware for logging HTTP requests and responses."""
import logging
import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from expense_claims.utils.logging_config import claim_id_context, get_logger, log_with_context, request_id_context

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Log every HTTP request and its outcome.

    A request ID is taken from the incoming X-Request-ID header when the
    client sends one, otherwise generated, and echoed on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request_id_context.set(request_id)
        claim_id_context.set("")
        request.state.request_id = request_id

        start_time = time.perf_counter()
        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"

        log_with_context(
            logger,
            logging.INFO,
            f"Incoming request: {method} {path}",
            method=method,
            path=path,
            query_params=dict(request.query_params),
            content_length=request.headers.get("content-length"),
            client_ip=client_ip,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Request failed: {method} {path} - {str(e)}",
                exc_info=True,
                extra={
                    "extra_fields": {
                        "method": method,
                        "path": path,
                        "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
                        "client_ip": client_ip,
                    }
                }
            )
            raise

        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
        status_code = response.status_code
        response.headers[REQUEST_ID_HEADER] = request_id

        if status_code >= 500:
            log_level = logging.ERROR
        elif status_code >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        completion_fields = {
            "method": method,
            "path": path,
            "status_code": status_code,
            "duration_ms": duration_ms,
            "client_ip": client_ip,
        }
        # Routing fills path_params on the shared scope
        claim_id = request.scope.get("path_params", {}).get("claim_id")
        if claim_id:
            completion_fields["claim_id"] = claim_id

        log_with_context(
            logger,
            log_level,
            f"Request completed: {method} {path} - {status_code}",
            **completion_fields,
        )

        return response

"""
HTTP request logging middleware.

One log line per request. The request id and the resolver query parameters
are bound into structlog's context so provider failures logged further down
carry them too.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.stdlib.get_logger("http")

# query parameter -> log key
CONTEXT_PARAMS = {
    "chainId": "chain_id",
    "contractAddress": "contract_address",
    "walletAddress": "wallet_address",
    "tokenAddress": "token_address",
}

# Polled by load balancers and clients; logged at debug only
QUIET_PATHS = frozenset({"/healthz", "/api/checkForUpdate"})


def _request_context(request: Request, request_id: str) -> dict:
    context = {"request_id": request_id}
    for param, key in CONTEXT_PARAMS.items():
        value = request.query_params.get(param)
        if value:
            context[key] = value
    return context


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log resolver requests with their parameters, status and timing."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:8]

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(**_request_context(request, request_id))

        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["x-request-id"] = request_id
            return response
        finally:
            if request.url.path in QUIET_PATHS and status_code < 400:
                log = logger.debug
            elif status_code >= 500:
                log = logger.error
            elif status_code >= 400:
                log = logger.warning
            else:
                log = logger.info

            log(
                "http_request",
                method=request.method,
                path=request.url.path,
                status=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000, 1),
            )

"""Middleware that assigns a request ID to every request and its log records."""

import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from menuhub.logging_config import request_id_var

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Generate or propagate a request ID for every HTTP request.

    An incoming ``X-Request-ID`` header is reused, otherwise a UUID-4 is
    generated. The ID is kept on ``request.state.request_id``, exposed to
    logging through :data:`request_id_var` for the duration of the request,
    and echoed back in the response header.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

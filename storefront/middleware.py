# storefront/middleware.py
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .logging_config import set_correlation_id


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Tags every request with a correlation ID for the JSON logs."""

    CORRELATION_ID_HEADER = "X-Correlation-ID"

    async def dispatch(self, request: Request, call_next):
        cid = request.headers.get(self.CORRELATION_ID_HEADER) or str(uuid.uuid4())
        set_correlation_id(cid)

        response = await call_next(request)
        response.headers[self.CORRELATION_ID_HEADER] = cid
        return response

"""Request ID middleware.

Every comparison request gets an ID that shows up on ``request.state``, in
the ``X-Request-ID`` response header, in error bodies and on every log line
emitted while the request runs. A caller-supplied ID is reused only when it
is a short token of safe characters; anything else is replaced so that
arbitrary header text never reaches the logs.
"""

from __future__ import annotations

import re
import uuid
from typing import TYPE_CHECKING, Final

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from promo_compare.observability.logging import bind_context, clear_context


if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.types import ASGIApp

REQUEST_ID_HEADER: Final[str] = "X-Request-ID"
MAX_REQUEST_ID_LENGTH: Final[int] = 128

_REQUEST_ID_PATTERN = re.compile(r"[A-Za-z0-9._:-]+")


def resolve_request_id(
    incoming: str | None, max_length: int = MAX_REQUEST_ID_LENGTH
) -> str:
    """Return ``incoming`` when it is a usable ID, else a fresh UUID4."""
    if (
        incoming
        and len(incoming) <= max_length
        and _REQUEST_ID_PATTERN.fullmatch(incoming)
    ):
        return incoming
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to every request and response."""

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER) -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        clear_context()

        request_id = resolve_request_id(request.headers.get(self.header_name))
        request.state.request_id = request_id
        bind_context(request_id=request_id)

        response = await call_next(request)
        response.headers[self.header_name] = request_id
        return response

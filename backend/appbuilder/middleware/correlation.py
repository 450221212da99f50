"""Request ids for tracing a generation request through the logs.

Each request gets an ``X-Request-ID``. A caller-supplied value is echoed back
unchanged; otherwise a UUID4 is minted. The id is exposed to CORS clients and
picked up by ``add_correlation_id`` in every log line.
"""

import uuid

from asgi_correlation_id import CorrelationIdMiddleware
from asgi_correlation_id.context import correlation_id
from fastapi import FastAPI

REQUEST_ID_HEADER = "X-Request-ID"


def setup_correlation_middleware(app: FastAPI) -> None:
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name=REQUEST_ID_HEADER,
        update_request_header=True,
        generator=lambda: uuid.uuid4().hex,
        validator=None,
        transformer=lambda value: value,
    )


def get_correlation_id() -> str | None:
    """Request id of the request being served, or None outside a request."""
    return correlation_id.get(None)


__all__ = ["REQUEST_ID_HEADER", "get_correlation_id", "setup_correlation_middleware"]

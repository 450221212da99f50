"""Request-scoped dependencies for API routes."""

from fastapi import Request

from appbuilder.services.generation_service import GenerationService

ANONYMOUS_CLIENT = "anonymous"


def get_generation_service(request: Request) -> GenerationService:
    """Return the GenerationService started by the application lifespan.

    Raises RuntimeError if the lifespan has not run.
    """
    service = getattr(request.app.state, "generation_service", None)
    if service is None:
        raise RuntimeError("GenerationService not initialized. Is the app lifespan running?")
    return service


def get_client_id(request: Request) -> str:
    """Identify the caller for rate limiting by peer address.

    Request headers are never consulted: a caller could rotate them to get a
    fresh window on every request.
    """
    if request.client is not None and request.client.host:
        return request.client.host
    return ANONYMOUS_CLIENT

"""
Transport Factory

Creates the GraphQL transport selected by configuration. The choice is made
once, at construction time; repository code never branches on it.
"""
from typing import Optional

import structlog

from pantrykit.common.config import Settings, get_settings
from pantrykit.transport.base import Transport
from pantrykit.transport.provider_http import HttpGraphQLTransport
from pantrykit.transport.provider_memory import InMemoryTransport

logger = structlog.get_logger()


def create_transport(settings: Optional[Settings] = None) -> Transport:
    """
    Build the transport named by TRANSPORT_BACKEND.

    - http: HttpGraphQLTransport against PANTRY_API_URL
    - memory: InMemoryTransport (no network, data lost on exit)

    Raises:
        ValueError: If the backend name is unknown
    """
    settings = settings or get_settings()
    backend = settings.transport_backend

    if backend == "http":
        logger.info("transport_created", backend=backend, endpoint=settings.graphql_url)
        return HttpGraphQLTransport(settings.graphql_url)

    if backend == "memory":
        logger.info("transport_created", backend=backend)
        return InMemoryTransport()

    raise ValueError(f"Unknown transport backend: {backend!r} (http / memory)")

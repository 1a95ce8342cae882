"""
Transport Module - GraphQL access to the remote inventory API

- Transport protocol with HTTP (httpx) and in-memory implementations
- Factory selects one from configuration at construction time
- RemoteClient adds the auth token, logging and metrics
"""

from pantrykit.transport.base import Transport
from pantrykit.transport.client import RemoteClient
from pantrykit.transport.factory import create_transport
from pantrykit.transport.provider_http import HttpGraphQLTransport
from pantrykit.transport.provider_memory import InMemoryTransport

__all__ = [
    'Transport',
    'RemoteClient',
    'create_transport',
    'HttpGraphQLTransport',
    'InMemoryTransport',
]

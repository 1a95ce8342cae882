"""
Transport Base Interface

Defines the contract for all GraphQL transports (HTTP, in-memory).
This allows swapping the remote backend via configuration without changing
repository code: the repository never knows whether it talks to the network.
"""
from typing import Any, Dict, Optional, Protocol

from pantrykit.common.result import RemoteResult


class Transport(Protocol):
    """
    Protocol for GraphQL transports.

    Transports never raise for expected failures: connection problems come back
    as ``Failure(NetworkError)`` and GraphQL error payloads as
    ``Failure(RemoteError)``.
    """

    async def execute(
        self,
        document: str,
        variables: Dict[str, Any],
        token: Optional[str],
    ) -> RemoteResult:
        """
        Execute one GraphQL operation.

        Args:
            document: GraphQL query or mutation text
            variables: Operation variables
            token: Bearer token, or None for unauthenticated calls

        Returns:
            Success with the ``data`` object, or Failure with the reason
        """
        ...

    async def aclose(self) -> None:
        """Release any held connections"""
        ...

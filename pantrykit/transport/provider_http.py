"""
HTTP GraphQL Transport

POSTs ``{"query", "variables", "operationName"}`` to ``<api_url>/graphql``
with a bearer token, and maps every outcome onto a tagged result.
No timeout/cancellation API is exposed; httpx's own defaults apply.
"""
from typing import Any, Dict, Optional

import httpx
import structlog

from pantrykit.common.errors import NetworkError, RemoteError
from pantrykit.common.result import Failure, RemoteResult, Success
from pantrykit.transport.operations import operation_name

logger = structlog.get_logger()


class HttpGraphQLTransport:
    """
    GraphQL over HTTP using httpx.AsyncClient.

    Usage:
        transport = HttpGraphQLTransport("http://localhost:4000/graphql")
        result = await transport.execute(GET_HOUSES, {}, token)
        if result.ok:
            houses = result.data["houses"]
        await transport.aclose()
    """

    def __init__(self, endpoint: str, client: Optional[httpx.AsyncClient] = None):
        """
        Args:
            endpoint: Full GraphQL URL
            client: Optional pre-built client (tests pass one with MockTransport)
        """
        self.endpoint = endpoint
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-create the HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def execute(
        self,
        document: str,
        variables: Dict[str, Any],
        token: Optional[str],
    ) -> RemoteResult:
        operation = operation_name(document)
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self.client.post(
                self.endpoint,
                json={
                    "query": document,
                    "variables": variables,
                    "operationName": operation,
                },
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.warning("graphql_transport_error",
                          operation=operation,
                          endpoint=self.endpoint,
                          error=str(e),
                          error_type=type(e).__name__)
            return Failure(NetworkError(f"Could not reach {self.endpoint}: {e}"))

        if response.status_code == 401:
            return Failure(RemoteError("Authentication rejected", code="UNAUTHENTICATED"))
        if response.status_code == 403:
            return Failure(RemoteError("Access forbidden", code="FORBIDDEN"))

        try:
            payload = response.json()
        except ValueError:
            logger.warning("graphql_invalid_json",
                          operation=operation,
                          status_code=response.status_code)
            return Failure(NetworkError(f"Invalid response from server (HTTP {response.status_code})"))

        errors = payload.get("errors") if isinstance(payload, dict) else None
        if errors:
            first = errors[0] if isinstance(errors[0], dict) else {}
            extensions = first.get("extensions") or {}
            return Failure(RemoteError(
                first.get("message") or "Remote error",
                code=extensions.get("code"),
            ))

        if response.status_code >= 400:
            return Failure(NetworkError(f"HTTP {response.status_code} from server"))

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            return Failure(RemoteError("Empty response from server", code="EMPTY_RESPONSE"))

        return Success(data)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

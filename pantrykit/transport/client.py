"""
Remote Client - authenticated GraphQL calls with logging and metrics

Reads the auth token from the local store for every call. A missing token
short-circuits before the transport is touched.
"""
import time
from typing import Any, Dict, Optional

import structlog

from pantrykit.common.errors import AuthenticationRequiredError
from pantrykit.common.local_store import KeyValueStore, StorageKeys
from pantrykit.common.metrics import record_remote_operation
from pantrykit.common.result import Failure, RemoteResult
from pantrykit.transport.base import Transport
from pantrykit.transport.operations import operation_name

logger = structlog.get_logger()


class RemoteClient:
    """
    Thin wrapper over a Transport that injects the bearer token.

    Usage:
        client = RemoteClient(create_transport(), store)
        result = await client.execute(GET_HOUSEHOLDS)
        if not result.ok:
            ...  # result.error is a PantryError
    """

    def __init__(self, transport: Transport, store: KeyValueStore):
        self.transport = transport
        self.store = store

    async def execute(
        self,
        document: str,
        variables: Optional[Dict[str, Any]] = None,
    ) -> RemoteResult:
        operation = operation_name(document)

        token = await self.store.get(StorageKeys.AUTH_TOKEN)
        if not token:
            logger.warning("remote_call_skipped_no_token", operation=operation)
            return Failure(AuthenticationRequiredError())

        started = time.perf_counter()
        result = await self.transport.execute(document, variables or {}, token)
        elapsed = time.perf_counter() - started

        outcome = "success" if result.ok else type(result.error).__name__
        record_remote_operation(operation, outcome, elapsed)

        if result.ok:
            logger.debug("remote_call_complete",
                        operation=operation,
                        duration_ms=round(elapsed * 1000, 1))
        else:
            logger.warning("remote_call_failed",
                          operation=operation,
                          error=result.error.message,
                          error_type=type(result.error).__name__,
                          duration_ms=round(elapsed * 1000, 1))

        return result

    async def aclose(self) -> None:
        await self.transport.aclose()

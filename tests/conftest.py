"""Shared fixtures: in-memory remote API, local store and wired components."""

import pytest

from pantrykit.common.config import Settings
from pantrykit.common.local_store import InMemoryKeyValueStore, StorageKeys
from pantrykit.domain.households.kitchen_resolver import KitchenResolver
from pantrykit.domain.inventory.inventory_repository import InventoryRepository
from pantrykit.transport.client import RemoteClient
from pantrykit.transport.provider_memory import InMemoryTransport

HOUSE_ID = "house_beach"
HOUSE_NAME = "Beach House"


@pytest.fixture
def settings():
    return Settings(
        environment="test",
        transport_backend="memory",
        classifier_ai_backend="none",
        metrics_enabled=False,
    )


@pytest.fixture
def transport():
    return InMemoryTransport()


@pytest.fixture
def store():
    """Signed-in device with a selected House."""
    return InMemoryKeyValueStore({
        StorageKeys.AUTH_TOKEN: "test-token",
        StorageKeys.SELECTED_HOUSE_ID: HOUSE_ID,
        StorageKeys.SELECTED_HOUSE_NAME: HOUSE_NAME,
    })


@pytest.fixture
def client(transport, store):
    return RemoteClient(transport, store)


@pytest.fixture
def resolver(client, store):
    return KitchenResolver(client, store)


@pytest.fixture
def repository(client, resolver, settings):
    return InventoryRepository(client, resolver, settings=settings)

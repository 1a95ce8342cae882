"""Tests for mutations that succeed over HTTP but carry a null or id-less payload."""

import json

import httpx
import pytest

from pantrykit.common.errors import RemoteError
from pantrykit.common.local_store import StorageKeys
from pantrykit.common.result import Success, created_record
from pantrykit.common.schemas.inventory import ItemInput
from pantrykit.domain.households.house_service import HouseService
from pantrykit.domain.households.kitchen_resolver import KitchenResolver
from pantrykit.domain.inventory.inventory_repository import InventoryRepository
from pantrykit.domain.voice.command_interpreter import CommandInterpreter, FeedbackKind
from pantrykit.transport.client import RemoteClient
from pantrykit.transport.provider_http import HttpGraphQLTransport

ENDPOINT = "http://pantry.test/graphql"
HOUSE_ID = "house_beach"
GENERIC_ERROR = "Something went wrong. Please try again."


class ScriptedServer:
    """Answers each GraphQL operation with a canned ``data`` object."""

    def __init__(self, responses):
        self.responses = responses
        self.operations = []

    def __call__(self, request):
        name = json.loads(request.content)["operationName"]
        self.operations.append(name)
        return httpx.Response(200, json={"data": self.responses[name]})


@pytest.fixture
def serve(store):
    def build(responses):
        server = ScriptedServer(responses)
        transport = HttpGraphQLTransport(
            ENDPOINT,
            client=httpx.AsyncClient(transport=httpx.MockTransport(server)),
        )
        return RemoteClient(transport, store), server
    return build


class TestCreatedRecord:
    def test_passes_record_through(self):
        result = created_record(Success({"createHouse": {"id": "h1", "name": "Home"}}), "createHouse")
        assert result.ok
        assert result.data == {"id": "h1", "name": "Home"}

    @pytest.mark.parametrize("data", [
        {"createHouse": None},
        {"createHouse": {"name": "Home"}},
        {"createHouse": {"id": ""}},
        {"createHouse": "h1"},
        {},
    ])
    def test_empty_payload_is_failure(self, data):
        result = created_record(Success(data), "createHouse")
        assert not result.ok
        assert isinstance(result.error, RemoteError)
        assert result.error.code == "EMPTY_RESPONSE"


class TestRepository:
    @pytest.mark.asyncio
    async def test_null_item_payload(self, serve, settings, store):
        client, server = serve({"CreateInventoryItem": {"createInventoryItem": None}})
        repo = InventoryRepository(client, KitchenResolver(client, store), settings=settings, kitchen_id="k1")

        result = await repo.add_item(ItemInput(name="Milk", category="dairy"))

        assert not result.success
        assert result.error == GENERIC_ERROR
        assert not repo.adding
        assert server.operations == ["CreateInventoryItem"]

    @pytest.mark.asyncio
    async def test_item_payload_without_id(self, serve, settings, store):
        client, server = serve({"CreateInventoryItem": {"createInventoryItem": {"name": "Milk"}}})
        repo = InventoryRepository(client, KitchenResolver(client, store), settings=settings, kitchen_id="k1")

        result = await repo.add_item(ItemInput(name="Milk", category="dairy"))

        assert not result.success
        assert server.operations == ["CreateInventoryItem"]

    @pytest.mark.asyncio
    async def test_null_batch_payload_deletes_item(self, serve, settings, store):
        client, server = serve({
            "CreateInventoryItem": {"createInventoryItem": {"id": "item_1", "name": "Milk"}},
            "CreateInventoryBatch": {"createInventoryBatch": None},
            "DeleteInventoryItem": {"deleteInventoryItem": True},
        })
        repo = InventoryRepository(client, KitchenResolver(client, store), settings=settings, kitchen_id="k1")

        result = await repo.add_item(ItemInput(name="Milk", category="dairy", quantity=2))

        assert not result.success
        assert server.operations == ["CreateInventoryItem", "CreateInventoryBatch", "DeleteInventoryItem"]

    @pytest.mark.asyncio
    async def test_add_batch_null_payload(self, serve, settings, store):
        client, server = serve({"CreateInventoryBatch": {"createInventoryBatch": None}})
        repo = InventoryRepository(client, KitchenResolver(client, store), settings=settings, kitchen_id="k1")

        result = await repo.add_batch("item_1", 1, "liters")

        assert not result.success
        assert server.operations == ["CreateInventoryBatch"]

    @pytest.mark.asyncio
    async def test_malformed_rows_are_skipped_on_refetch(self, serve, settings, store):
        client, _ = serve({"GetInventoryItems": {"inventoryItems": [
            None,
            {"name": "No id"},
            {"id": "item_1", "name": "Milk", "category": "DAIRY", "batches": [None]},
        ]}})
        repo = InventoryRepository(client, KitchenResolver(client, store), settings=settings, kitchen_id="k1")

        result = await repo.refetch()

        assert result.success
        assert [item.id for item in repo.all_items] == ["item_1"]
        assert repo.all_items[0].batches == []


class TestResolver:
    @pytest.mark.asyncio
    async def test_null_household_payload(self, serve, store):
        client, server = serve({
            "GetHouseholds": {"households": []},
            "CreateHousehold": {"createHousehold": None},
        })

        result = await KitchenResolver(client, store).get_or_create_container(HOUSE_ID, "Beach House")

        assert not result.ok
        assert result.error.code == "EMPTY_RESPONSE"
        assert server.operations == ["GetHouseholds", "CreateHousehold"]
        assert await store.get(StorageKeys.kitchen_for_house(HOUSE_ID)) is None

    @pytest.mark.asyncio
    async def test_null_kitchen_payload(self, serve, store):
        client, server = serve({
            "GetHouseholds": {"households": [{"id": "hh_1", "name": "Beach House", "kitchens": []}]},
            "CreateKitchen": {"createKitchen": None},
        })

        result = await KitchenResolver(client, store).get_or_create_container(HOUSE_ID, "Beach House")

        assert not result.ok
        assert server.operations == ["GetHouseholds", "CreateKitchen"]
        assert await store.get(StorageKeys.kitchen_for_house(HOUSE_ID)) is None

    @pytest.mark.asyncio
    async def test_null_households_are_skipped(self, serve, store):
        client, _ = serve({"GetHouseholds": {"households": [
            None,
            {"id": "hh_1", "name": "Beach House", "kitchens": [{"id": "k_1"}]},
        ]}})

        result = await KitchenResolver(client, store).get_or_create_container(HOUSE_ID, "Beach House")

        assert result.ok
        assert result.data == "k_1"


class TestHouseService:
    @pytest.mark.asyncio
    async def test_null_house_payload(self, serve, store):
        client, _ = serve({"CreateHouse": {"createHouse": None}})

        result = await HouseService(client, store).create_house("Cabin")

        assert not result.success
        assert result.error == GENERIC_ERROR

    @pytest.mark.asyncio
    async def test_list_skips_rows_without_id(self, serve, store):
        client, _ = serve({"GetHouses": {"houses": [None, {"name": "Ghost"}, {"id": "h1", "name": "Home"}]}})

        houses = await HouseService(client, store).list_houses()

        assert [h.id for h in houses] == ["h1"]


class TestInterpreter:
    @pytest.mark.asyncio
    async def test_confirm_with_null_item_payload(self, serve, settings, store):
        client, _ = serve({
            "ProcessVoiceCommand": {"processVoiceCommand": {
                "intent": "add_item",
                "item": {"raw_name": "milk", "normalized_name": "Milk", "category": "dairy"},
                "confidence": 0.9,
            }},
            "CreateInventoryItem": {"createInventoryItem": None},
        })
        repo = InventoryRepository(client, KitchenResolver(client, store), settings=settings, kitchen_id="k1")
        interpreter = CommandInterpreter(client, repo)

        await interpreter.submit("add milk")
        result = await interpreter.confirm()

        assert not result.success
        assert interpreter.feedback.kind == FeedbackKind.ERROR
        assert interpreter.pending_intent is not None

    @pytest.mark.asyncio
    async def test_non_object_voice_payload(self, serve, store):
        client, _ = serve({"ProcessVoiceCommand": {"processVoiceCommand": {"intent": "add_item", "item": "milk"}}})
        interpreter = CommandInterpreter(client, repository=None)

        assert await interpreter.submit("add milk") is None
        assert interpreter.feedback.kind == FeedbackKind.ERROR

"""
House Service - list, create and select Houses

The selected House is persisted in the local store (selectedHouseId /
selectedHouseName) and is what the inventory repository resolves a kitchen
for.
"""
from typing import List, Optional

import structlog

from pantrykit.common.errors import ValidationError
from pantrykit.common.local_store import KeyValueStore, StorageKeys
from pantrykit.common.result import OperationResult, created_record
from pantrykit.common.schemas.inventory import House
from pantrykit.transport.client import RemoteClient
from pantrykit.transport.operations import CREATE_HOUSE, GET_HOUSES

logger = structlog.get_logger()


class HouseService:
    """House listing and device-level selection"""

    def __init__(self, client: RemoteClient, store: KeyValueStore):
        self.client = client
        self.store = store

    async def list_houses(self) -> List[House]:
        """All Houses visible to the user; empty on failure"""
        result = await self.client.execute(GET_HOUSES)
        if not result.ok:
            logger.warning("house_list_failed", error=result.error.message)
            return []

        return [House.from_remote(h) for h in (result.data.get("houses") or []) if h and h.get("id")]

    async def create_house(self, name: str, description: Optional[str] = None) -> OperationResult:
        """
        Create a House.

        Returns:
            OperationResult with data {"house": House} on success
        """
        name = (name or "").strip()
        if not name:
            return OperationResult.from_error(ValidationError("House name is required", field="name"))

        payload = {"name": name}
        if description:
            payload["description"] = description

        result = created_record(await self.client.execute(CREATE_HOUSE, {"input": payload}), "createHouse")
        if not result.ok:
            logger.warning("house_create_failed", name=name, error=result.error.message)
            return OperationResult.from_error(result.error)

        house = House.from_remote(result.data)
        logger.info("house_created", house_id=house.id, name=house.name)
        return OperationResult.ok({"house": house})

    async def select_house(self, house: House) -> None:
        await self.store.set(StorageKeys.SELECTED_HOUSE_ID, house.id)
        await self.store.set(StorageKeys.SELECTED_HOUSE_NAME, house.name)
        logger.info("house_selected", house_id=house.id, name=house.name)

    async def selected_house(self) -> Optional[House]:
        house_id = await self.store.get(StorageKeys.SELECTED_HOUSE_ID)
        house_name = await self.store.get(StorageKeys.SELECTED_HOUSE_NAME)
        if not house_id or not house_name:
            return None
        return House(id=house_id, name=house_name)

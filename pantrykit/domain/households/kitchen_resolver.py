"""
Kitchen Resolver - House → kitchen (storage container) mapping

A House is what the user selects; items actually live in a kitchen owned by
a household. The remote schema has no link between the two, so the mapping
is made by name and cached on the device:

1. Cache hit (kitchen_<houseId>) → return it, no remote calls
2. List households, pick the one whose name equals the House name
3. Household with kitchens → reuse the first kitchen
4. No household → create one
5. Create "<House> Kitchen" in it
6. Cache and return

Any remote failure in 2-5 returns a Failure and writes nothing to the cache.
If 4 succeeds and 5 fails, the orphaned household is found by name on the
next attempt and only the kitchen is created.
"""
from typing import Optional

import structlog

from pantrykit.common.errors import ValidationError
from pantrykit.common.local_store import KeyValueStore, StorageKeys
from pantrykit.common.result import Failure, Success, created_record
from pantrykit.common.schemas.inventory import Household
from pantrykit.transport.client import RemoteClient
from pantrykit.transport.operations import CREATE_HOUSEHOLD, CREATE_KITCHEN, GET_HOUSEHOLDS

logger = structlog.get_logger()

NO_HOUSE_SELECTED = "No house selected"


class KitchenResolver:
    """
    Resolve-or-create the single kitchen backing each House.

    Usage:
        resolver = KitchenResolver(client, store)
        result = await resolver.get_or_create_container(house.id, house.name)
        if result.ok:
            kitchen_id = result.data
    """

    def __init__(self, client: RemoteClient, store: KeyValueStore):
        self.client = client
        self.store = store

    async def get_or_create_container(self, house_id: str, house_name: str):
        """
        Find or create the kitchen for a House.

        Args:
            house_id: Selected House id (cache key)
            house_name: Selected House name (matched against household names)

        Returns:
            Success(kitchen_id) or Failure(PantryError)
        """
        if not house_id or not house_name:
            return Failure(ValidationError(NO_HOUSE_SELECTED, field="house"))

        cache_key = StorageKeys.kitchen_for_house(house_id)
        cached = await self.store.get(cache_key)
        if cached:
            logger.debug("kitchen_cache_hit", house_id=house_id, kitchen_id=cached)
            return Success(cached)

        logger.info("kitchen_cache_miss", house_id=house_id, house_name=house_name)

        result = await self.client.execute(GET_HOUSEHOLDS)
        if not result.ok:
            return result

        households = [
            Household.from_remote(h)
            for h in (result.data.get("households") or [])
            if h and h.get("id")
        ]
        household = self._match_household(households, house_name)

        if household is not None and household.kitchens:
            kitchen_id = household.kitchens[0].id
            logger.info("kitchen_reused",
                       house_id=house_id,
                       household_id=household.id,
                       kitchen_id=kitchen_id)
            await self.store.set(cache_key, kitchen_id)
            return Success(kitchen_id)

        if household is None:
            result = created_record(await self.client.execute(CREATE_HOUSEHOLD, {
                "input": {
                    "name": house_name,
                    "description": f"Household for {house_name}",
                }
            }), "createHousehold")
            if not result.ok:
                logger.error("household_create_failed", house_id=house_id, error=result.error.message)
                return result

            household_id = str(result.data["id"])
            logger.info("household_created", house_id=house_id, household_id=household_id)
        else:
            household_id = household.id
            logger.info("household_reused_without_kitchen",
                       house_id=house_id,
                       household_id=household_id)

        result = created_record(await self.client.execute(CREATE_KITCHEN, {
            "input": {
                "householdId": household_id,
                "name": f"{house_name} Kitchen",
                "description": f"Main kitchen for {house_name}",
                "type": "HOME",
            }
        }), "createKitchen")
        if not result.ok:
            logger.error("kitchen_create_failed",
                        house_id=house_id,
                        household_id=household_id,
                        error=result.error.message)
            return result

        kitchen_id = str(result.data["id"])
        await self.store.set(cache_key, kitchen_id)

        logger.info("kitchen_created",
                   house_id=house_id,
                   household_id=household_id,
                   kitchen_id=kitchen_id)
        return Success(kitchen_id)

    async def resolve_selected_container(self):
        """Resolve the kitchen for the House currently selected on this device"""
        house_id = await self.store.get(StorageKeys.SELECTED_HOUSE_ID)
        house_name = await self.store.get(StorageKeys.SELECTED_HOUSE_NAME)
        return await self.get_or_create_container(house_id or "", house_name or "")

    async def forget(self, house_id: str) -> None:
        """Drop the cached mapping so the next call resolves again"""
        await self.store.delete(StorageKeys.kitchen_for_house(house_id))
        logger.info("kitchen_cache_cleared", house_id=house_id)

    @staticmethod
    def _match_household(households, house_name: str) -> Optional[Household]:
        for household in households:
            if household.name == house_name:
                return household
        return None

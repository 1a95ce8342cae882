"""
Inventory Repository - item CRUD against the House's kitchen

Every mutation is followed by a full refetch of the kitchen's item list; the
in-memory list is never patched optimistically, so derived fields
(total_quantity, status, next_expiry) always come from the server.

add_item flow:
1. Validate input (no remote calls on failure)
2. Resolve the kitchen for the selected House
3. createInventoryItem
4. createInventoryBatch with the initial quantity
   (on failure: deleteInventoryItem so no empty item is left behind)
5. Refetch

Public methods return OperationResult and do not raise for expected
failures (validation, auth, network, remote errors).
"""
import math
from datetime import datetime, timezone
from typing import Dict, List, Optional

import structlog

from pantrykit.common.config import Settings, get_settings
from pantrykit.common.errors import (
    AuthenticationRequiredError,
    PantryError,
    RemoteError,
    ValidationError,
)
from pantrykit.common.result import Failure, OperationResult, Success, created_record
from pantrykit.common.schemas.inventory import (
    Category,
    InventoryItem,
    ItemInput,
    ItemStatus,
    ItemUpdate,
    StorageLocation,
)
from pantrykit.domain.households.kitchen_resolver import KitchenResolver
from pantrykit.transport.client import RemoteClient
from pantrykit.transport.operations import (
    CREATE_INVENTORY_BATCH,
    CREATE_INVENTORY_ITEM,
    DELETE_INVENTORY_ITEM,
    GET_INVENTORY_ITEM,
    GET_INVENTORY_ITEMS,
    UPDATE_INVENTORY_ITEM,
)

logger = structlog.get_logger()

ALL_CATEGORIES = "all"
NO_KITCHEN_MESSAGE = "No kitchen available"
SORT_KEYS = ("name", "expiry", "quantity")


class InventoryRepository:
    """
    Item and batch operations for the currently selected House.

    Usage:
        repo = InventoryRepository(client, KitchenResolver(client, store))
        result = await repo.add_item(ItemInput(name="Milk", category="dairy",
                                               quantity=2, unit="liters"))
        if result.success:
            print(repo.all_items)

    Args:
        client: Authenticated remote client
        resolver: Kitchen resolver for the selected House
        settings: Defaults for unit / location / threshold
        kitchen_id: Pin the repository to one kitchen instead of resolving
    """

    def __init__(
        self,
        client: RemoteClient,
        resolver: KitchenResolver,
        settings: Optional[Settings] = None,
        kitchen_id: Optional[str] = None,
    ):
        self.client = client
        self.resolver = resolver
        self.settings = settings or get_settings()
        self.kitchen_id = kitchen_id

        self._items: List[InventoryItem] = []

        # Busy flags (always reset in finally)
        self.loading = False
        self.adding = False
        self.updating = False
        self.deleting = False

        # View state
        self.search_query = ""
        self.selected_category = ALL_CATEGORIES
        self.sort_by = "name"

    # ---- mutations --------------------------------------------------------

    async def add_item(self, data: ItemInput) -> OperationResult:
        """
        Create an item with its initial batch, then refetch.

        Returns:
            OperationResult with data {"item_id": ...} on success
        """
        try:
            category = self._validate_new_item(data)
        except ValidationError as e:
            logger.info("inventory_item_rejected", field=e.field, error=e.message)
            return OperationResult.from_error(e)

        self.adding = True
        try:
            kitchen = await self._resolve_kitchen()
            if not kitchen.ok:
                return self._kitchen_failure(kitchen.error)
            kitchen_id = kitchen.data

            item_input = {
                "kitchenId": kitchen_id,
                "name": data.name.strip(),
                "category": category.value.upper(),
                "defaultUnit": data.unit or self.settings.default_unit,
                "location": (
                    StorageLocation.coerce(data.location).value
                    if data.location and data.location.strip()
                    else self.settings.default_location
                ),
                "threshold": self.settings.default_threshold,
                "tags": [],
            }
            result = created_record(
                await self.client.execute(CREATE_INVENTORY_ITEM, {"input": item_input}),
                "createInventoryItem",
            )
            if not result.ok:
                logger.error("inventory_item_create_failed",
                            kitchen_id=kitchen_id,
                            name=item_input["name"],
                            error=result.error.message)
                return OperationResult.from_error(result.error)

            item_id = str(result.data["id"])
            logger.info("inventory_item_created",
                       item_id=item_id,
                       kitchen_id=kitchen_id,
                       category=category.value)

            batch = await self._create_batch(
                item_id,
                quantity=data.quantity if data.quantity is not None else 1,
                unit=item_input["defaultUnit"],
                expiry_date=data.expiry_date,
            )
            if not batch.ok:
                await self._compensate_item(item_id)
                return OperationResult.from_error(batch.error)

            await self._refetch_kitchen(kitchen_id)
            return OperationResult.ok({"item_id": item_id})
        finally:
            self.adding = False

    async def add_batch(
        self,
        item_id: str,
        quantity: float,
        unit: Optional[str] = None,
        expiry_date: Optional[str] = None,
    ) -> OperationResult:
        """Add a quantity lot to an existing item, then refetch"""
        if quantity is None or quantity <= 0:
            return OperationResult.from_error(
                ValidationError("Quantity must be greater than 0", field="quantity")
            )

        self.adding = True
        try:
            result = await self._create_batch(
                item_id,
                quantity=quantity,
                unit=unit or self.settings.default_unit,
                expiry_date=expiry_date,
            )
            if not result.ok:
                return OperationResult.from_error(result.error)

            await self.refetch()
            return OperationResult.ok({"batch_id": str(result.data["id"])})
        finally:
            self.adding = False

    async def update_item(self, item_id: str, data: ItemUpdate) -> OperationResult:
        """Send only the supplied fields, then refetch"""
        update = {}
        if data.name is not None:
            if not data.name.strip():
                return OperationResult.from_error(ValidationError("Item name is required", field="name"))
            update["name"] = data.name.strip()
        if data.category is not None:
            category = Category.parse(data.category)
            if category is None:
                return OperationResult.from_error(
                    ValidationError(f"Unknown category: {data.category}", field="category")
                )
            update["category"] = category.value.upper()
        if data.unit is not None:
            update["defaultUnit"] = data.unit
        if data.location is not None:
            update["location"] = StorageLocation.coerce(data.location).value

        if not update:
            return OperationResult.from_error(ValidationError("Nothing to update"))

        self.updating = True
        try:
            result = await self.client.execute(UPDATE_INVENTORY_ITEM, {"id": item_id, "input": update})
            if not result.ok:
                logger.error("inventory_item_update_failed", item_id=item_id, error=result.error.message)
                return OperationResult.from_error(result.error)

            logger.info("inventory_item_updated", item_id=item_id, fields=sorted(update))
            await self.refetch()
            return OperationResult.ok({"item_id": item_id})
        finally:
            self.updating = False

    async def delete_item(self, item_id: str) -> OperationResult:
        """Delete an item (and its batches), then refetch"""
        self.deleting = True
        try:
            result = await self.client.execute(DELETE_INVENTORY_ITEM, {"id": item_id})
            if not result.ok:
                logger.error("inventory_item_delete_failed", item_id=item_id, error=result.error.message)
                return OperationResult.from_error(result.error)

            if not result.data.get("deleteInventoryItem"):
                logger.warning("inventory_item_delete_rejected", item_id=item_id)
                return OperationResult.from_error(RemoteError("Item was not deleted", code="NOT_FOUND"))

            logger.info("inventory_item_deleted", item_id=item_id)
            await self.refetch()
            return OperationResult.ok({"item_id": item_id})
        finally:
            self.deleting = False

    # ---- reads ------------------------------------------------------------

    async def get_item(self, item_id: str) -> Optional[InventoryItem]:
        """Point lookup; None when not found or on any failure"""
        result = await self.client.execute(GET_INVENTORY_ITEM, {"id": item_id})
        if not result.ok:
            logger.warning("inventory_item_lookup_failed", item_id=item_id, error=result.error.message)
            return None

        raw = result.data.get("inventoryItem")
        if not raw or not raw.get("id"):
            return None
        return InventoryItem.from_remote(raw)

    async def refetch(self) -> OperationResult:
        """Re-read the kitchen's full item list"""
        kitchen = await self._resolve_kitchen()
        if not kitchen.ok:
            self._items = []
            return self._kitchen_failure(kitchen.error)
        return await self._refetch_kitchen(kitchen.data)

    async def _refetch_kitchen(self, kitchen_id: str) -> OperationResult:
        self.loading = True
        try:
            result = await self.client.execute(GET_INVENTORY_ITEMS, {"kitchenId": kitchen_id})
            if not result.ok:
                logger.error("inventory_fetch_failed", kitchen_id=kitchen_id, error=result.error.message)
                self._items = []
                return OperationResult.from_error(result.error)

            self._items = [
                InventoryItem.from_remote(raw, kitchen_id=kitchen_id)
                for raw in (result.data.get("inventoryItems") or [])
                if raw and raw.get("id")
            ]
            logger.debug("inventory_fetched", kitchen_id=kitchen_id, item_count=len(self._items))
            return OperationResult.ok({"count": len(self._items)})
        finally:
            self.loading = False

    # ---- views ------------------------------------------------------------

    @property
    def all_items(self) -> List[InventoryItem]:
        """Last fetched list, unfiltered"""
        return list(self._items)

    @property
    def items(self) -> List[InventoryItem]:
        """Last fetched list filtered by search/category and sorted by sort_by"""
        query = self.search_query.strip().lower()
        selected = (self.selected_category or ALL_CATEGORIES).lower()

        filtered = [
            item for item in self._items
            if query in item.name.lower()
            and (selected == ALL_CATEGORIES or item.category.value == selected)
        ]

        if self.sort_by == "expiry":
            # Items without an expiry go last
            far_future = datetime.max.replace(tzinfo=timezone.utc)
            return sorted(filtered, key=lambda i: i.next_expiry_at or far_future)
        if self.sort_by == "quantity":
            return sorted(filtered, key=lambda i: i.total_quantity, reverse=True)
        return sorted(filtered, key=lambda i: i.name.lower())

    def items_by_status(self) -> Dict[str, List[InventoryItem]]:
        return {
            status.value: [item for item in self._items if item.status == status]
            for status in ItemStatus
        }

    def expiring_items(self, days: int = 7, now: Optional[datetime] = None) -> List[InventoryItem]:
        """Items whose next expiry falls within the next ``days`` days"""
        now = now or datetime.now(timezone.utc)
        expiring = []
        for item in self._items:
            expiry = item.next_expiry_at
            if expiry is None:
                continue
            days_left = math.ceil((expiry - now).total_seconds() / 86400)
            if 0 <= days_left <= days:
                expiring.append(item)
        return expiring

    def low_stock_items(self, threshold: float = 2) -> List[InventoryItem]:
        return [item for item in self._items if item.total_quantity <= threshold]

    def categories(self) -> List[str]:
        """"all" followed by the distinct categories present, in first-seen order"""
        seen = []
        for item in self._items:
            if item.category.value not in seen:
                seen.append(item.category.value)
        return [ALL_CATEGORIES] + seen

    def set_sort(self, sort_by: str) -> None:
        if sort_by not in SORT_KEYS:
            raise ValueError(f"sort_by must be one of {SORT_KEYS}, got {sort_by!r}")
        self.sort_by = sort_by

    # ---- helpers ----------------------------------------------------------

    def _validate_new_item(self, data: ItemInput) -> Category:
        if not (data.name or "").strip():
            raise ValidationError("Item name is required", field="name")
        if not data.category:
            raise ValidationError("Category is required", field="category")
        category = Category.parse(data.category)
        if category is None:
            raise ValidationError(f"Unknown category: {data.category}", field="category")
        if data.quantity is not None and data.quantity <= 0:
            raise ValidationError("Quantity must be greater than 0", field="quantity")
        return category

    async def _resolve_kitchen(self):
        if self.kitchen_id:
            return Success(self.kitchen_id)
        return await self.resolver.resolve_selected_container()

    def _kitchen_failure(self, error: PantryError) -> OperationResult:
        if isinstance(error, AuthenticationRequiredError) or (
            isinstance(error, RemoteError) and error.is_authorization
        ):
            return OperationResult.from_error(error)

        logger.error("kitchen_resolution_failed", error=error.message, error_type=type(error).__name__)
        if isinstance(error, ValidationError):
            return OperationResult.from_error(error)
        return OperationResult.failed(NO_KITCHEN_MESSAGE)

    async def _create_batch(self, item_id: str, quantity: float, unit: str, expiry_date: Optional[str]):
        batch_input = {
            "itemId": item_id,
            "quantity": quantity,
            "unit": unit,
            "purchaseDate": datetime.now(timezone.utc).isoformat(),
        }
        if expiry_date:
            batch_input["expiryDate"] = expiry_date

        result = created_record(
            await self.client.execute(CREATE_INVENTORY_BATCH, {"input": batch_input}),
            "createInventoryBatch",
        )
        if result.ok:
            logger.info("inventory_batch_created",
                       item_id=item_id,
                       batch_id=result.data["id"],
                       quantity=quantity,
                       unit=unit)
        else:
            logger.error("inventory_batch_create_failed", item_id=item_id, error=result.error.message)
        return result

    async def _compensate_item(self, item_id: str) -> None:
        """Remove an item whose initial batch could not be created"""
        result = await self.client.execute(DELETE_INVENTORY_ITEM, {"id": item_id})
        if result.ok and result.data.get("deleteInventoryItem"):
            logger.info("inventory_item_compensated", item_id=item_id)
        else:
            error = result.error.message if isinstance(result, Failure) else "delete returned false"
            logger.error("inventory_item_compensation_failed", item_id=item_id, error=error)

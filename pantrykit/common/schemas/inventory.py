"""
Inventory schemas (Pydantic models)
Client-side view of the remote house / household / kitchen / item / batch graph
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Category(str, Enum):
    """Fixed 10-value product category taxonomy"""
    FRUITS = "fruits"
    VEGETABLES = "vegetables"
    DAIRY = "dairy"
    MEAT = "meat"
    GRAINS = "grains"
    BEVERAGES = "beverages"
    SNACKS = "snacks"
    CONDIMENTS = "condiments"
    FROZEN = "frozen"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Category"]:
        """Case-insensitive lookup; None when the value is not in the taxonomy"""
        if value is None:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None

    @classmethod
    def coerce(cls, value: Optional[str]) -> "Category":
        """Like parse(), but anything outside the taxonomy becomes OTHER"""
        return cls.parse(value) or cls.OTHER


class StorageLocation(str, Enum):
    """Where an item is kept; the remote schema accepts only these values"""
    PANTRY = "PANTRY"
    FRIDGE = "FRIDGE"
    FREEZER = "FREEZER"
    CONTAINER = "CONTAINER"
    CABINET = "CABINET"

    @classmethod
    def coerce(cls, value: Optional[str]) -> "StorageLocation":
        """
        Map a free-form location ("refrigerator", "kitchen cupboard") onto the set.

        Empty means PANTRY. Exact values pass through, then substring hints
        are tried in order; anything unrecognised lands in CONTAINER.
        """
        key = (value or "").strip().upper()
        if not key:
            return cls.PANTRY
        if key in cls.__members__:
            return cls[key]
        for hints, location in _LOCATION_HINTS:
            if any(hint in key for hint in hints):
                return location
        return cls.CONTAINER


_LOCATION_HINTS = [
    (("FRIDGE", "REFRIGERATOR"), StorageLocation.FRIDGE),
    (("FREEZER",), StorageLocation.FREEZER),
    (("CABINET", "CUPBOARD"), StorageLocation.CABINET),
    (("CONTAINER", "BOX"), StorageLocation.CONTAINER),
]


class ItemStatus(str, Enum):
    """Server-derived stock status"""
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


class House(BaseModel):
    """User-facing storage unit selected in the UI"""
    id: str
    name: str
    description: Optional[str] = None
    created_date: Optional[str] = None

    @classmethod
    def from_remote(cls, raw: Dict[str, Any]) -> "House":
        return cls(
            id=str(raw["id"]),
            name=raw.get("name") or "",
            description=raw.get("description"),
            created_date=raw.get("createdDate"),
        )


class Kitchen(BaseModel):
    """Backing container that actually holds a House's items"""
    id: str
    name: Optional[str] = None
    household_id: Optional[str] = None


class Household(BaseModel):
    """Owner group for kitchens; linked to a House only by name"""
    id: str
    name: str
    kitchens: List[Kitchen] = Field(default_factory=list)

    @classmethod
    def from_remote(cls, raw: Dict[str, Any]) -> "Household":
        household_id = str(raw["id"])
        return cls(
            id=household_id,
            name=raw.get("name") or "",
            kitchens=[
                Kitchen(id=str(k["id"]), name=k.get("name"), household_id=household_id)
                for k in (raw.get("kitchens") or [])
                if k and k.get("id")
            ],
        )


class InventoryBatch(BaseModel):
    """Quantity lot of an item"""
    id: str
    item_id: Optional[str] = None
    quantity: float = 0
    unit: Optional[str] = None
    purchase_date: Optional[str] = None
    expiry_date: Optional[str] = None
    status: Optional[str] = None


class InventoryItem(BaseModel):
    """
    A distinct product tracked in a kitchen.

    total_quantity, status and next_expiry are server-side projections over
    the item's batches; the client only reads them.
    """
    id: str
    kitchen_id: Optional[str] = None
    name: str
    category: Category = Category.OTHER
    default_unit: str = "pieces"
    location: Optional[str] = None
    total_quantity: float = 0
    status: ItemStatus = ItemStatus.GOOD
    next_expiry: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    batches: List[InventoryBatch] = Field(default_factory=list)

    @property
    def unit(self) -> str:
        return self.default_unit

    @property
    def next_expiry_at(self) -> Optional[datetime]:
        """next_expiry parsed as an aware datetime (UTC when unspecified)"""
        return parse_timestamp(self.next_expiry)

    @classmethod
    def from_remote(cls, raw: Dict[str, Any], kitchen_id: Optional[str] = None) -> "InventoryItem":
        """Map a GraphQL item payload onto the client model"""
        status = (raw.get("status") or "good").lower()
        location = raw.get("location")
        return cls(
            id=str(raw["id"]),
            kitchen_id=kitchen_id or raw.get("kitchenId"),
            name=raw.get("name") or "",
            category=Category.coerce(raw.get("category")),
            default_unit=raw.get("defaultUnit") or "pieces",
            location=location.lower() if location else None,
            total_quantity=raw.get("totalQuantity") or 0,
            status=ItemStatus(status) if status in ItemStatus._value2member_map_ else ItemStatus.GOOD,
            next_expiry=raw.get("nextExpiry"),
            created_at=raw.get("createdAt"),
            updated_at=raw.get("updatedAt"),
            batches=[
                InventoryBatch(
                    id=str(b["id"]),
                    item_id=str(raw["id"]),
                    quantity=b.get("quantity") or 0,
                    unit=b.get("unit"),
                    purchase_date=b.get("purchaseDate"),
                    expiry_date=b.get("expiryDate"),
                    status=b.get("status"),
                )
                for b in (raw.get("batches") or [])
                if b and b.get("id")
            ],
        )


class ItemInput(BaseModel):
    """Fields accepted by InventoryRepository.add_item"""
    name: str = ""
    category: Optional[str] = None
    quantity: Optional[float] = None
    unit: Optional[str] = None
    location: Optional[str] = None
    expiry_date: Optional[str] = None


class ItemUpdate(BaseModel):
    """Fields accepted by InventoryRepository.update_item; None means unchanged"""
    name: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    location: Optional[str] = None


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 date or datetime string; None when absent or invalid"""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed

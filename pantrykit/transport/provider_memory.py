"""
In-Memory GraphQL Transport

A process-local stand-in for the remote inventory API. Implements every
operation in ``pantrykit.transport.operations`` against plain dicts so the
repository, resolver and interpreter can run without a network (tests,
demos, TRANSPORT_BACKEND=memory).

Server-side behaviour it mirrors:
- totalQuantity is the sum of an item's batch quantities
- status: CRITICAL when out of stock or expired, WARNING at/below threshold
  or expiring within 3 days, else GOOD
- nextExpiry is the earliest batch expiry

Test hooks:
- ``calls`` records every operation name in order
- ``fail_on[operation] = error`` makes that operation return Failure(error)
"""
import itertools
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import structlog

from pantrykit.common.errors import NetworkError, PantryError, RemoteError
from pantrykit.common.result import Failure, RemoteResult, Success
from pantrykit.common.schemas.inventory import parse_timestamp
from pantrykit.transport.operations import operation_name

logger = structlog.get_logger()

EXPIRY_WARNING_DAYS = 3

_VOICE_RE = re.compile(
    r"^(?P<verb>\w+)\s+"
    r"(?:(?P<qty>\d+(?:\.\d+)?)\s+)?"
    r"(?:(?P<unit>[a-z]+)\s+of\s+)?"
    r"(?P<name>.+?)"
    r"(?:\s+(?:to|in|into|from)\s+(?:the\s+)?(?P<location>\w+))?$"
)

_VOICE_VERBS = {
    "add": "add_item", "put": "add_item", "buy": "add_item", "bought": "add_item",
    "remove": "remove_item", "delete": "remove_item", "use": "remove_item", "used": "remove_item",
    "update": "update_item", "set": "update_item", "change": "update_item",
    "find": "query_item", "search": "query_item", "check": "query_item", "where": "query_item",
}


class InMemoryTransport:
    """Fake remote inventory API backed by dicts."""

    def __init__(self, now: Optional[Callable[[], datetime]] = None):
        self._ids = itertools.count(1)
        self._now = now or (lambda: datetime.now(timezone.utc))

        self.houses: Dict[str, Dict[str, Any]] = {}
        self.households: Dict[str, Dict[str, Any]] = {}
        self.kitchens: Dict[str, Dict[str, Any]] = {}
        self.items: Dict[str, Dict[str, Any]] = {}
        self.batches: Dict[str, Dict[str, Any]] = {}

        self.calls: List[str] = []
        self.fail_on: Dict[str, PantryError] = {}
        self.voice_responses: Dict[str, Dict[str, Any]] = {}
        self.categorize_responses: Dict[str, Dict[str, Any]] = {}

        self._handlers = {
            "GetHouses": self._get_houses,
            "CreateHouse": self._create_house,
            "GetHouseholds": self._get_households,
            "CreateHousehold": self._create_household,
            "CreateKitchen": self._create_kitchen,
            "GetInventoryItems": self._get_inventory_items,
            "GetInventoryItem": self._get_inventory_item,
            "CreateInventoryItem": self._create_inventory_item,
            "CreateInventoryBatch": self._create_inventory_batch,
            "UpdateInventoryItem": self._update_inventory_item,
            "DeleteInventoryItem": self._delete_inventory_item,
            "ProcessVoiceCommand": self._process_voice_command,
            "CategorizeProduct": self._categorize_product,
        }

    def count(self, operation: str) -> int:
        """How many times an operation was executed"""
        return self.calls.count(operation)

    async def execute(
        self,
        document: str,
        variables: Dict[str, Any],
        token: Optional[str],
    ) -> RemoteResult:
        operation = operation_name(document)
        self.calls.append(operation)

        if operation in self.fail_on:
            return Failure(self.fail_on[operation])
        if not token:
            return Failure(RemoteError("Unauthorized", code="UNAUTHENTICATED"))

        handler = self._handlers.get(operation)
        if handler is None:
            return Failure(RemoteError(f"Unknown operation {operation}"))

        try:
            return Success(handler(variables or {}))
        except PantryError as e:
            return Failure(e)
        except KeyError as e:
            return Failure(RemoteError(f"Not found: {e}", code="NOT_FOUND"))
        except (TypeError, ValueError) as e:
            return Failure(RemoteError(str(e), code="BAD_USER_INPUT"))

    async def aclose(self) -> None:
        return None

    # ---- seeding helpers --------------------------------------------------

    def seed_household(self, name: str, kitchen_names: Optional[List[str]] = None) -> Dict[str, Any]:
        household = self._create_household({"input": {"name": name}})["createHousehold"]
        for kitchen_name in kitchen_names or []:
            self._create_kitchen({"input": {"householdId": household["id"], "name": kitchen_name}})
        return self.households[household["id"]]

    # ---- handlers ---------------------------------------------------------

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}_{next(self._ids)}"

    def _timestamp(self) -> str:
        return self._now().isoformat()

    def _get_houses(self, variables):
        return {"houses": [dict(h) for h in self.houses.values()]}

    def _create_house(self, variables):
        data = variables["input"]
        if not (data.get("name") or "").strip():
            raise ValueError("House name is required")
        house = {
            "id": self._next_id("house"),
            "name": data["name"],
            "description": data.get("description"),
            "createdDate": self._timestamp(),
        }
        self.houses[house["id"]] = house
        return {"createHouse": dict(house)}

    def _get_households(self, variables):
        return {"households": [
            {
                "id": h["id"],
                "name": h["name"],
                "kitchens": [
                    {"id": k["id"], "name": k["name"]}
                    for k in self.kitchens.values()
                    if k["householdId"] == h["id"]
                ],
            }
            for h in self.households.values()
        ]}

    def _create_household(self, variables):
        data = variables["input"]
        household = {
            "id": self._next_id("household"),
            "name": data["name"],
            "description": data.get("description"),
        }
        self.households[household["id"]] = household
        return {"createHousehold": {"id": household["id"], "name": household["name"]}}

    def _create_kitchen(self, variables):
        data = variables["input"]
        if data["householdId"] not in self.households:
            raise KeyError(data["householdId"])
        kitchen = {
            "id": self._next_id("kitchen"),
            "householdId": data["householdId"],
            "name": data["name"],
            "description": data.get("description"),
            "type": data.get("type", "HOME"),
        }
        self.kitchens[kitchen["id"]] = kitchen
        return {"createKitchen": {"id": kitchen["id"], "name": kitchen["name"]}}

    def _get_inventory_items(self, variables):
        kitchen_id = variables["kitchenId"]
        if kitchen_id not in self.kitchens:
            raise KeyError(kitchen_id)
        return {"inventoryItems": [
            self._project_item(item)
            for item in self.items.values()
            if item["kitchenId"] == kitchen_id
        ]}

    def _get_inventory_item(self, variables):
        item = self.items.get(variables["id"])
        return {"inventoryItem": self._project_item(item) if item else None}

    def _create_inventory_item(self, variables):
        data = variables["input"]
        if data["kitchenId"] not in self.kitchens:
            raise KeyError(data["kitchenId"])
        if not (data.get("name") or "").strip():
            raise ValueError("Item name is required")
        now = self._timestamp()
        item = {
            "id": self._next_id("item"),
            "kitchenId": data["kitchenId"],
            "name": data["name"],
            "category": data.get("category", "OTHER"),
            "defaultUnit": data.get("defaultUnit", "pieces"),
            "location": data.get("location", "PANTRY"),
            "threshold": data.get("threshold", 2),
            "tags": list(data.get("tags") or []),
            "createdAt": now,
            "updatedAt": now,
        }
        self.items[item["id"]] = item
        return {"createInventoryItem": {
            "id": item["id"],
            "name": item["name"],
            "category": item["category"],
            "defaultUnit": item["defaultUnit"],
            "createdAt": item["createdAt"],
        }}

    def _create_inventory_batch(self, variables):
        data = variables["input"]
        if data["itemId"] not in self.items:
            raise KeyError(data["itemId"])
        quantity = float(data["quantity"])
        if quantity <= 0:
            raise ValueError("Batch quantity must be positive")
        batch = {
            "id": self._next_id("batch"),
            "itemId": data["itemId"],
            "quantity": quantity,
            "unit": data.get("unit"),
            "purchaseDate": data.get("purchaseDate"),
            "expiryDate": data.get("expiryDate"),
        }
        self.batches[batch["id"]] = batch
        return {"createInventoryBatch": {
            "id": batch["id"],
            "quantity": batch["quantity"],
            "unit": batch["unit"],
        }}

    def _update_inventory_item(self, variables):
        item = self.items[variables["id"]]
        for field, value in (variables.get("input") or {}).items():
            if value is not None:
                item[field] = value
        item["updatedAt"] = self._timestamp()
        projected = self._project_item(item)
        return {"updateInventoryItem": {
            key: projected[key]
            for key in ("id", "name", "category", "defaultUnit", "totalQuantity", "updatedAt")
        }}

    def _delete_inventory_item(self, variables):
        item_id = variables["id"]
        if item_id not in self.items:
            return {"deleteInventoryItem": False}
        del self.items[item_id]
        for batch_id in [b["id"] for b in self.batches.values() if b["itemId"] == item_id]:
            del self.batches[batch_id]
        return {"deleteInventoryItem": True}

    def _process_voice_command(self, variables):
        transcript = variables["transcript"]
        if transcript in self.voice_responses:
            return {"processVoiceCommand": self.voice_responses[transcript]}

        text = transcript.strip().lower().rstrip(".!?")
        match = _VOICE_RE.match(text)
        if match is None:
            raise ValueError("Could not understand the command")

        intent = _VOICE_VERBS.get(match.group("verb"))
        name = match.group("name").strip()
        quantity = match.group("qty")
        return {"processVoiceCommand": {
            "intent": intent or "query_item",
            "item": {
                "raw_name": name,
                "normalized_name": name.title(),
                "category": None,
                "quantity": float(quantity) if quantity else None,
                "unit": match.group("unit"),
                "location": match.group("location"),
            },
            "confidence": 0.9 if intent else 0.3,
            "transcript": transcript,
        }}

    def _categorize_product(self, variables):
        product_name = variables["productName"]
        response = self.categorize_responses.get(product_name.strip().lower())
        if response is None:
            raise NetworkError("Categorization model unavailable")
        return {"categorizeProduct": response}

    # ---- projections ------------------------------------------------------

    def _project_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        batches = [b for b in self.batches.values() if b["itemId"] == item["id"]]
        total = sum(b["quantity"] for b in batches)
        expiries = [
            parsed for parsed in (parse_timestamp(b.get("expiryDate")) for b in batches)
            if parsed is not None
        ]
        next_expiry = min(expiries) if expiries else None

        return {
            "id": item["id"],
            "kitchenId": item["kitchenId"],
            "name": item["name"],
            "category": item["category"],
            "defaultUnit": item["defaultUnit"],
            "location": item["location"],
            "totalQuantity": total,
            "status": self._status(total, item.get("threshold", 2), next_expiry),
            "nextExpiry": next_expiry.isoformat() if next_expiry else None,
            "createdAt": item["createdAt"],
            "updatedAt": item["updatedAt"],
            "batches": [
                {
                    "id": b["id"],
                    "quantity": b["quantity"],
                    "unit": b["unit"],
                    "status": "ACTIVE",
                }
                for b in batches
            ],
        }

    def _status(self, total: float, threshold: float, next_expiry: Optional[datetime]) -> str:
        now = self._now()
        if total <= 0 or (next_expiry is not None and next_expiry < now):
            return "CRITICAL"
        if total <= threshold or (
            next_expiry is not None and next_expiry <= now + timedelta(days=EXPIRY_WARNING_DAYS)
        ):
            return "WARNING"
        return "GOOD"

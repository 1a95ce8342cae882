"""
Data schemas for voice / typed command interpretation
"""
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, validator

from pantrykit.common.schemas.inventory import Category


class IntentType(str, Enum):
    """Action an interpreted command asks for"""
    ADD_ITEM = "add_item"
    UPDATE_ITEM = "update_item"
    REMOVE_ITEM = "remove_item"
    QUERY_ITEM = "query_item"

    @classmethod
    def parse(cls, value: Any) -> "IntentType":
        """
        Accept the canonical names plus the short verbs the NLU sometimes
        returns ("ADD", "search", ...).

        Raises:
            ValueError: If the value names no known intent
        """
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        try:
            return cls(key)
        except ValueError:
            pass
        if key in INTENT_ALIASES:
            return INTENT_ALIASES[key]
        raise ValueError(f"Unknown intent: {value!r}")


INTENT_ALIASES: Dict[str, IntentType] = {
    "add": IntentType.ADD_ITEM,
    "update": IntentType.UPDATE_ITEM,
    "edit": IntentType.UPDATE_ITEM,
    "remove": IntentType.REMOVE_ITEM,
    "delete": IntentType.REMOVE_ITEM,
    "use": IntentType.REMOVE_ITEM,
    "query": IntentType.QUERY_ITEM,
    "search": IntentType.QUERY_ITEM,
    "find": IntentType.QUERY_ITEM,
}


class IntentItem(BaseModel):
    """Item fields extracted from a command; anything may be missing"""
    raw_name: str = ""
    normalized_name: Optional[str] = None
    category: Optional[Category] = None
    quantity: Optional[float] = None
    unit: Optional[str] = None
    location: Optional[str] = None

    @property
    def name(self) -> str:
        return (self.normalized_name or self.raw_name or "").strip()

    @validator("category", pre=True)
    def parse_category(cls, v):
        # Unknown categories are dropped so the classifier can fill them in
        if v is None or isinstance(v, Category):
            return v
        return Category.parse(v)

    @validator("quantity", pre=True)
    def parse_quantity(cls, v):
        if v is None or v == "":
            return None
        try:
            return float(v)
        except (TypeError, ValueError):
            return None


class VoiceIntent(BaseModel):
    """
    Structured interpretation of one transcript. Shown to the user as a
    confirmation card; nothing is committed until they confirm.
    """
    intent: IntentType
    item: IntentItem = Field(default_factory=IntentItem)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    transcript: str = ""

    @validator("intent", pre=True)
    def parse_intent(cls, v):
        return IntentType.parse(v)

    @validator("confidence", pre=True)
    def clamp_confidence(cls, v):
        try:
            value = float(v)
        except (TypeError, ValueError):
            return 0.0
        return min(max(value, 0.0), 1.0)

    @classmethod
    def from_remote(cls, raw: Dict[str, Any], transcript: str = "") -> "VoiceIntent":
        """Map a processVoiceCommand payload onto the model"""
        return cls(
            intent=raw.get("intent"),
            item=IntentItem(**(raw.get("item") or {})),
            confidence=raw.get("confidence") if raw.get("confidence") is not None else 0.0,
            transcript=raw.get("transcript") or transcript,
        )

    class Config:
        json_schema_extra = {
            "example": {
                "intent": "add_item",
                "item": {
                    "raw_name": "milk",
                    "normalized_name": "Milk",
                    "category": "dairy",
                    "quantity": 2,
                    "unit": "liters",
                    "location": "fridge",
                },
                "confidence": 0.92,
                "transcript": "add 2 liters of milk to the fridge",
            }
        }

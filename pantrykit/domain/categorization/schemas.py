"""
Data schemas for categorization module
"""
from enum import Enum

from pydantic import BaseModel, Field, validator

from pantrykit.common.schemas.inventory import Category


class ClassificationSource(str, Enum):
    """Source of categorization decision"""
    RULE = "rule"             # Keyword rule matched
    AI = "ai"                 # AI step (remote or Anthropic)
    CACHE = "cache"           # Earlier AI answer for the same name
    FALLBACK = "fallback"     # No rule matched and AI unavailable


class ClassificationResult(BaseModel):
    """
    Output of the category classifier. Computed on demand, never persisted.

    Confidence is clamped into [0, 1] and the category is always one of the
    ten taxonomy values; anything else (e.g. a free-form AI answer) becomes
    ``other``.
    """
    category: Category
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: str = ""
    source: ClassificationSource = ClassificationSource.RULE

    @validator("category", pre=True)
    def coerce_category(cls, v):
        if isinstance(v, Category):
            return v
        return Category.coerce(v)

    @validator("confidence", pre=True)
    def clamp_confidence(cls, v):
        try:
            value = float(v)
        except (TypeError, ValueError):
            return 0.0
        return min(max(value, 0.0), 1.0)

    class Config:
        json_schema_extra = {
            "example": {
                "category": "snacks",
                "confidence": 0.9,
                "reasoning": "matched snacks keyword 'chip'",
                "source": "rule",
            }
        }

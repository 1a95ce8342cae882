"""
Categorization Module - product name → fixed category taxonomy

Two-layer process:
1. Keyword rules: ordered, first hit wins (snacks before vegetables, ...)
2. AI step (remote categorizeProduct or Anthropic) only when rules are not
   confident; failures fall back to the rule result silently

Example flow:
- "potato chips" → rules → snacks (0.9)
- "dish soap" → household check → other (0.8) → AI may refine
- "kombucha" → no rule → other (0.3) → AI → beverages
"""

from pantrykit.common.schemas.inventory import Category
from pantrykit.domain.categorization.ai_categorizer import (
    AiCategorizer,
    AnthropicCategorizer,
    RemoteCategorizer,
    create_ai_categorizer,
)
from pantrykit.domain.categorization.category_rules import CategoryRules, category_rules
from pantrykit.domain.categorization.classification_service import (
    CategoryClassifier,
    create_classifier,
)
from pantrykit.domain.categorization.schemas import (
    ClassificationResult,
    ClassificationSource,
)

__all__ = [
    'Category',
    'CategoryRules',
    'category_rules',
    'CategoryClassifier',
    'create_classifier',
    'AiCategorizer',
    'AnthropicCategorizer',
    'RemoteCategorizer',
    'create_ai_categorizer',
    'ClassificationResult',
    'ClassificationSource',
]

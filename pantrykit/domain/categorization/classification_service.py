"""
Classification Service - rules first, AI for the long tail

Flow:
1. Keyword rules (free, instant, deterministic)
2. If rule confidence <= threshold (0.8) and an AI step is configured,
   ask the AI step and use its answer
3. If the AI step fails for any reason, return the rule result silently

Example:
- "banana" → rule hit (fruits, 0.9) → AI never called
- "tempeh" → no rule hit (other, 0.3) → AI → vegetables
- "tempeh" with AI down → other, 0.3

AI answers are memoised in-process per normalized name so typing the same
name again does not re-query. The memo holds at most ``max_cache_size``
names and drops the least recently used one first. Nothing is persisted.
"""
from collections import OrderedDict
from typing import Optional

import structlog

from pantrykit.common.config import Settings, get_settings
from pantrykit.common.errors import PantryError
from pantrykit.common.metrics import record_classification
from pantrykit.domain.categorization.ai_categorizer import AiCategorizer, create_ai_categorizer
from pantrykit.domain.categorization.category_rules import CategoryRules, category_rules
from pantrykit.domain.categorization.schemas import ClassificationResult, ClassificationSource
from pantrykit.transport.client import RemoteClient

logger = structlog.get_logger()

# Names this short are still being typed; not worth an AI call
MIN_AI_NAME_LENGTH = 3

DEFAULT_CACHE_SIZE = 512


class CategoryClassifier:
    """
    Layered product classifier: keyword rules, then optional AI fallback.

    Usage:
        classifier = CategoryClassifier(ai=RemoteCategorizer(client))
        result = await classifier.classify("potato chips")
        print(result.category, result.confidence)
    """

    def __init__(
        self,
        rules: Optional[CategoryRules] = None,
        ai: Optional[AiCategorizer] = None,
        escalation_threshold: float = 0.8,
        max_cache_size: int = DEFAULT_CACHE_SIZE,
    ):
        self.rules = rules or category_rules
        self.ai = ai
        self.escalation_threshold = escalation_threshold
        self.max_cache_size = max(1, max_cache_size)
        self._ai_cache: "OrderedDict[str, ClassificationResult]" = OrderedDict()

    def classify_rules(self, product_name: str) -> ClassificationResult:
        """Rule-only classification. Synchronous, never raises."""
        return self.rules.match(product_name)

    async def classify(self, product_name: str) -> ClassificationResult:
        """
        Classify a product name into the fixed taxonomy. Never raises.

        Args:
            product_name: Free-form product name

        Returns:
            ClassificationResult; worst case ``other`` with confidence 0.3
        """
        rule_result = self.rules.match(product_name)

        if rule_result.confidence > self.escalation_threshold:
            record_classification(rule_result.source.value)
            return rule_result

        normalized = (product_name or "").strip().lower()
        if self.ai is None or len(normalized) < MIN_AI_NAME_LENGTH:
            record_classification(rule_result.source.value)
            return rule_result

        cached = self._ai_cache.get(normalized)
        if cached is not None:
            self._ai_cache.move_to_end(normalized)
            logger.debug("ai_categorization_cache_hit", product_name=normalized)
            record_classification(ClassificationSource.CACHE.value)
            return cached.model_copy(update={"source": ClassificationSource.CACHE})

        try:
            ai_result = await self.ai.categorize(product_name.strip())
        except PantryError as e:
            logger.info("ai_categorization_unavailable",
                       product_name=normalized,
                       error=e.message,
                       error_type=type(e).__name__,
                       fallback_category=rule_result.category.value)
            record_classification(rule_result.source.value)
            return rule_result
        except Exception as e:
            # AI failures of any kind must never reach the calling screen
            logger.warning("ai_categorization_failed",
                          product_name=normalized,
                          error=str(e),
                          exc_info=True)
            record_classification(rule_result.source.value)
            return rule_result

        self._remember(normalized, ai_result)
        logger.info("ai_categorization_used",
                   product_name=normalized,
                   category=ai_result.category.value,
                   confidence=ai_result.confidence,
                   rule_confidence=rule_result.confidence)
        record_classification(ClassificationSource.AI.value)
        return ai_result

    def _remember(self, normalized: str, result: ClassificationResult) -> None:
        self._ai_cache[normalized] = result
        self._ai_cache.move_to_end(normalized)
        while len(self._ai_cache) > self.max_cache_size:
            evicted, _ = self._ai_cache.popitem(last=False)
            logger.debug("ai_categorization_cache_evicted", product_name=evicted)


def create_classifier(
    client: Optional[RemoteClient] = None,
    settings: Optional[Settings] = None,
) -> CategoryClassifier:
    """Build a classifier wired to the configured AI backend."""
    settings = settings or get_settings()
    return CategoryClassifier(
        ai=create_ai_categorizer(client=client, settings=settings),
        escalation_threshold=settings.classifier_ai_threshold,
        max_cache_size=settings.classifier_cache_size,
    )

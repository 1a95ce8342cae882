"""
AI Categorizer - long-tail product classification

Second pass of categorization, used only when the keyword rules are not
confident. Two backends share one contract (``async categorize(name)``):

- RemoteCategorizer: the API's ``categorizeProduct`` query (server holds the
  model credentials)
- AnthropicCategorizer: direct Claude call with a JSON-only prompt

Both raise ClassificationUnavailableError on any failure. The classifier
absorbs it; users never see AI errors.
"""
import json
from typing import Optional, Protocol

import anthropic
import structlog

from pantrykit.common.config import Settings, get_settings
from pantrykit.common.errors import ClassificationUnavailableError
from pantrykit.common.schemas.inventory import Category
from pantrykit.domain.categorization.schemas import ClassificationResult, ClassificationSource
from pantrykit.transport.client import RemoteClient
from pantrykit.transport.operations import CATEGORIZE_PRODUCT

logger = structlog.get_logger()


class AiCategorizer(Protocol):
    """Protocol for AI categorization backends."""

    async def categorize(self, product_name: str) -> ClassificationResult:
        """
        Classify a product name.

        Raises:
            ClassificationUnavailableError: If the backend cannot answer
        """
        ...


class RemoteCategorizer:
    """Categorize through the remote API's categorizeProduct query."""

    def __init__(self, client: RemoteClient):
        self.client = client

    async def categorize(self, product_name: str) -> ClassificationResult:
        result = await self.client.execute(CATEGORIZE_PRODUCT, {"productName": product_name})

        if not result.ok:
            raise ClassificationUnavailableError(
                f"categorizeProduct failed: {result.error.message}"
            )

        payload = result.data.get("categorizeProduct")
        if not payload:
            raise ClassificationUnavailableError("categorizeProduct returned no result")

        return ClassificationResult(
            category=payload.get("category"),
            confidence=payload.get("confidence", 0.5),
            reasoning=payload.get("reasoning") or "",
            source=ClassificationSource.AI,
        )


class AnthropicCategorizer:
    """
    Categorize with the Anthropic Messages API.

    Uses temperature 0 for consistent answers across repeated edits of the
    same product name.
    """

    def __init__(self, api_key: Optional[str] = None, model: str = "claude-sonnet-4-5"):
        """
        Initialize Anthropic categorizer.

        Args:
            api_key: Anthropic API key (missing key makes every call unavailable)
            model: Claude model name
        """
        self.api_key = api_key
        self.model = model
        if not self.api_key:
            logger.warning("anthropic_api_key_missing",
                          message="ANTHROPIC_API_KEY not set, AI categorization disabled")

        self.client = anthropic.AsyncAnthropic(api_key=self.api_key) if self.api_key else None

    async def categorize(self, product_name: str) -> ClassificationResult:
        if not self.client:
            raise ClassificationUnavailableError("Anthropic client not configured")

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=256,
                temperature=0.0,
                messages=[
                    {
                        "role": "user",
                        "content": self._build_prompt(product_name),
                    }
                ],
            )
        except anthropic.APIError as e:
            raise ClassificationUnavailableError(f"Anthropic request failed: {e}") from e

        logger.info("ai_categorization_complete",
                   product_name=product_name,
                   input_tokens=response.usage.input_tokens,
                   output_tokens=response.usage.output_tokens)

        return parse_ai_response(response.content[0].text)

    def _build_prompt(self, product_name: str) -> str:
        categories = ", ".join(category.value for category in Category)

        return f"""You classify household grocery and pantry products.

PRODUCT: {product_name}

Choose exactly ONE category from: {categories}
Use "other" for non-food household goods or when nothing fits.

Set confidence between 0 and 1:
- 0.9+: unambiguous product
- 0.6-0.9: probable, some ambiguity
- below 0.6: guess

RESPONSE FORMAT (return ONLY this JSON, no other text):
{{"category": "one_of_the_categories", "confidence": 0.9, "reasoning": "short explanation"}}
"""


def parse_ai_response(response_text: str) -> ClassificationResult:
    """
    Parse a JSON classification answer, with or without markdown fences.

    Raises:
        ClassificationUnavailableError: If the text is not the expected JSON
    """
    text = response_text.strip()
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0].strip()
    elif "```" in text:
        text = text.split("```")[1].split("```")[0].strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error("ai_response_parse_failed", response=response_text, error=str(e))
        raise ClassificationUnavailableError("AI response was not valid JSON") from e

    if not isinstance(data, dict) or "category" not in data:
        raise ClassificationUnavailableError("AI response missing category")

    return ClassificationResult(
        category=data.get("category"),
        confidence=data.get("confidence", 0.5),
        reasoning=data.get("reasoning") or "",
        source=ClassificationSource.AI,
    )


def create_ai_categorizer(
    client: Optional[RemoteClient] = None,
    settings: Optional[Settings] = None,
) -> Optional[AiCategorizer]:
    """
    Build the AI step named by CLASSIFIER_AI_BACKEND.

    Returns:
        The categorizer, or None when AI is disabled or cannot be built
        (classification then stays rule-only)
    """
    settings = settings or get_settings()
    backend = settings.classifier_ai_backend

    if backend == "remote":
        if client is None:
            logger.warning("ai_categorizer_unavailable",
                          backend=backend,
                          message="Remote backend needs a RemoteClient")
            return None
        return RemoteCategorizer(client)

    if backend == "anthropic":
        return AnthropicCategorizer(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
        )

    return None

"""Tests for the layered classifier and its AI backends (AI calls mocked)."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from pantrykit.common.config import Settings
from pantrykit.common.errors import ClassificationUnavailableError, NetworkError
from pantrykit.common.schemas.inventory import Category
from pantrykit.domain.categorization.ai_categorizer import (
    AnthropicCategorizer,
    RemoteCategorizer,
    create_ai_categorizer,
    parse_ai_response,
)
from pantrykit.domain.categorization.classification_service import (
    CategoryClassifier,
    create_classifier,
)
from pantrykit.domain.categorization.schemas import ClassificationResult, ClassificationSource


def make_ai(category="beverages", confidence=0.85):
    ai = MagicMock()
    ai.categorize = AsyncMock(return_value=ClassificationResult(
        category=category,
        confidence=confidence,
        reasoning="mocked",
        source=ClassificationSource.AI,
    ))
    return ai


class TestCategoryClassifier:
    @pytest.mark.asyncio
    async def test_confident_rule_skips_ai(self):
        ai = make_ai()
        classifier = CategoryClassifier(ai=ai)

        result = await classifier.classify("banana")

        assert result.category == Category.FRUITS
        assert result.confidence > 0.8
        ai.categorize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rule_precedence_survives_escalation(self):
        ai = make_ai()
        classifier = CategoryClassifier(ai=ai)

        result = await classifier.classify("potato chips")

        assert result.category == Category.SNACKS
        ai.categorize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_name_escalates_to_ai(self):
        ai = make_ai("beverages", 0.85)
        classifier = CategoryClassifier(ai=ai)

        result = await classifier.classify("tempeh")

        assert result.category == Category.BEVERAGES
        assert result.source == ClassificationSource.AI
        ai.categorize.assert_awaited_once_with("tempeh")

    @pytest.mark.asyncio
    async def test_threshold_is_inclusive(self):
        """Household hits score exactly 0.8, which still escalates."""
        ai = make_ai("other", 0.95)
        classifier = CategoryClassifier(ai=ai)

        await classifier.classify("dish soap")

        ai.categorize.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_short_name_skips_ai(self):
        ai = make_ai()
        classifier = CategoryClassifier(ai=ai)

        result = await classifier.classify("ko")

        assert result.category == Category.OTHER
        assert result.confidence == pytest.approx(0.3)
        ai.categorize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_name(self):
        ai = make_ai()
        classifier = CategoryClassifier(ai=ai)

        result = await classifier.classify("")

        assert result.category == Category.OTHER
        assert result.confidence == pytest.approx(0.3)
        ai.categorize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ai_unavailable_falls_back_to_rules(self):
        ai = MagicMock()
        ai.categorize = AsyncMock(side_effect=ClassificationUnavailableError("down"))
        classifier = CategoryClassifier(ai=ai)

        result = await classifier.classify("tempeh")

        assert result.category == Category.OTHER
        assert result.confidence == pytest.approx(0.3)
        assert result.source == ClassificationSource.FALLBACK

    @pytest.mark.asyncio
    async def test_unexpected_ai_error_is_absorbed(self):
        ai = MagicMock()
        ai.categorize = AsyncMock(side_effect=RuntimeError("boom"))
        classifier = CategoryClassifier(ai=ai)

        result = await classifier.classify("tempeh")

        assert result.category == Category.OTHER

    @pytest.mark.asyncio
    async def test_ai_answer_is_memoised(self):
        ai = make_ai("beverages", 0.85)
        classifier = CategoryClassifier(ai=ai)

        first = await classifier.classify("Tempeh")
        second = await classifier.classify("tempeh ")

        assert first.source == ClassificationSource.AI
        assert second.source == ClassificationSource.CACHE
        assert second.category == Category.BEVERAGES
        ai.categorize.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failures_are_not_memoised(self):
        ai = MagicMock()
        ai.categorize = AsyncMock(side_effect=ClassificationUnavailableError("down"))
        classifier = CategoryClassifier(ai=ai)

        await classifier.classify("tempeh")
        await classifier.classify("tempeh")

        assert ai.categorize.await_count == 2

    @pytest.mark.asyncio
    async def test_memo_is_bounded(self):
        ai = make_ai("other", 0.6)
        classifier = CategoryClassifier(ai=ai, max_cache_size=2)

        for name in ("tempeh", "seitan", "natto", "gochujang"):
            await classifier.classify(name)

        assert len(classifier._ai_cache) == 2
        assert list(classifier._ai_cache) == ["natto", "gochujang"]

    @pytest.mark.asyncio
    async def test_least_recently_used_name_is_evicted(self):
        ai = make_ai("other", 0.6)
        classifier = CategoryClassifier(ai=ai, max_cache_size=2)

        await classifier.classify("tempeh")
        await classifier.classify("seitan")
        await classifier.classify("tempeh")  # memo hit refreshes tempeh
        await classifier.classify("natto")  # evicts seitan
        assert ai.categorize.await_count == 3

        assert (await classifier.classify("tempeh")).source == ClassificationSource.CACHE
        assert (await classifier.classify("seitan")).source == ClassificationSource.AI
        assert ai.categorize.await_count == 4

    @pytest.mark.asyncio
    async def test_without_ai_step(self):
        classifier = CategoryClassifier()
        result = await classifier.classify("tempeh")
        assert result.category == Category.OTHER

    def test_classify_rules_is_synchronous(self):
        classifier = CategoryClassifier(ai=make_ai())
        assert classifier.classify_rules("cheddar cheese").category == Category.DAIRY


class TestParseAiResponse:
    def test_plain_json(self):
        result = parse_ai_response('{"category": "dairy", "confidence": 0.9, "reasoning": "cheese"}')
        assert result.category == Category.DAIRY
        assert result.source == ClassificationSource.AI

    def test_markdown_fences(self):
        text = '```json\n{"category": "beverages", "confidence": 0.8}\n```'
        assert parse_ai_response(text).category == Category.BEVERAGES

    def test_unknown_category_coerced(self):
        result = parse_ai_response('{"category": "bakery", "confidence": 0.7}')
        assert result.category == Category.OTHER

    def test_invalid_json(self):
        with pytest.raises(ClassificationUnavailableError):
            parse_ai_response("I think it's a drink")

    def test_missing_category(self):
        with pytest.raises(ClassificationUnavailableError):
            parse_ai_response('{"confidence": 0.7}')


class TestAnthropicCategorizer:
    @pytest.mark.asyncio
    async def test_requires_api_key(self):
        categorizer = AnthropicCategorizer(api_key=None)
        with pytest.raises(ClassificationUnavailableError):
            await categorizer.categorize("kombucha")

    @pytest.mark.asyncio
    async def test_categorize_mocked(self):
        mock_response = MagicMock()
        mock_response.content = [
            MagicMock(text=json.dumps({
                "category": "beverages",
                "confidence": 0.92,
                "reasoning": "fermented tea drink",
            }))
        ]
        mock_response.usage.input_tokens = 120
        mock_response.usage.output_tokens = 30

        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)

        categorizer = AnthropicCategorizer(api_key="test-key", model="test-model")
        categorizer.client = mock_client

        result = await categorizer.categorize("kombucha")

        assert result.category == Category.BEVERAGES
        assert result.confidence == pytest.approx(0.92)
        kwargs = mock_client.messages.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["temperature"] == 0.0
        assert "kombucha" in kwargs["messages"][0]["content"]


class TestRemoteCategorizer:
    @pytest.mark.asyncio
    async def test_categorize(self, client, transport):
        transport.categorize_responses["kombucha"] = {
            "category": "BEVERAGES",
            "confidence": 0.88,
            "reasoning": "drink",
        }

        result = await RemoteCategorizer(client).categorize("kombucha")

        assert result.category == Category.BEVERAGES
        assert result.source == ClassificationSource.AI
        assert transport.count("CategorizeProduct") == 1

    @pytest.mark.asyncio
    async def test_remote_failure_raises_unavailable(self, client, transport):
        transport.fail_on["CategorizeProduct"] = NetworkError("offline")

        with pytest.raises(ClassificationUnavailableError):
            await RemoteCategorizer(client).categorize("kombucha")

    @pytest.mark.asyncio
    async def test_classifier_with_remote_down(self, client, transport):
        transport.fail_on["CategorizeProduct"] = NetworkError("offline")
        classifier = CategoryClassifier(ai=RemoteCategorizer(client))

        result = await classifier.classify("tempeh")

        assert result.category == Category.OTHER
        assert result.confidence == pytest.approx(0.3)


class TestFactories:
    def test_none_backend(self):
        settings = Settings(classifier_ai_backend="none", environment="test")
        assert create_ai_categorizer(settings=settings) is None

    def test_remote_backend(self, client):
        settings = Settings(classifier_ai_backend="remote", environment="test")
        assert isinstance(create_ai_categorizer(client=client, settings=settings), RemoteCategorizer)

    def test_remote_backend_without_client(self):
        settings = Settings(classifier_ai_backend="remote", environment="test")
        assert create_ai_categorizer(settings=settings) is None

    def test_anthropic_backend(self):
        settings = Settings(
            classifier_ai_backend="anthropic",
            anthropic_api_key="test-key",
            environment="test",
        )
        categorizer = create_ai_categorizer(settings=settings)
        assert isinstance(categorizer, AnthropicCategorizer)
        assert categorizer.model == settings.anthropic_model

    def test_create_classifier_uses_threshold(self, client):
        settings = Settings(
            classifier_ai_backend="remote",
            classifier_ai_threshold=0.5,
            environment="test",
        )
        classifier = create_classifier(client=client, settings=settings)
        assert classifier.escalation_threshold == 0.5
        assert isinstance(classifier.ai, RemoteCategorizer)

    def test_create_classifier_uses_cache_size(self):
        settings = Settings(classifier_ai_backend="none", classifier_cache_size=16, environment="test")
        assert create_classifier(settings=settings).max_cache_size == 16

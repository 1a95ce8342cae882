"""Tests for keyword category rules and ClassificationResult coercion."""

import pytest

from pantrykit.common.schemas.inventory import Category
from pantrykit.domain.categorization.category_rules import CategoryRules
from pantrykit.domain.categorization.schemas import ClassificationResult, ClassificationSource


@pytest.fixture
def rules():
    return CategoryRules()


class TestCategoryRules:
    @pytest.mark.parametrize("name,expected", [
        ("banana", Category.FRUITS),
        ("Whole Milk", Category.DAIRY),
        ("chicken breast", Category.MEAT),
        ("basmati rice", Category.GRAINS),
        ("sparkling water", Category.BEVERAGES),
        ("soy sauce", Category.CONDIMENTS),
        ("frozen pizza", Category.FROZEN),
        ("carrots", Category.VEGETABLES),
    ])
    def test_keyword_hit(self, rules, name, expected):
        result = rules.match(name)
        assert result.category == expected
        assert result.confidence == pytest.approx(0.9)
        assert result.source == ClassificationSource.RULE

    def test_snacks_win_over_vegetables(self, rules):
        """'potato chips' holds a vegetable and a snack keyword; snacks come first."""
        assert rules.match("potato chips").category == Category.SNACKS
        assert rules.match("Sweet Potato Chips").category == Category.SNACKS

    def test_vegetables_win_over_dairy(self, rules):
        assert rules.match("butternut squash").category == Category.VEGETABLES

    def test_normalizes_case_and_whitespace(self, rules):
        assert rules.match("  BANANA  ").category == Category.FRUITS

    def test_household_item(self, rules):
        result = rules.match("dish soap")
        assert result.category == Category.OTHER
        assert result.confidence == pytest.approx(0.8)
        assert result.source == ClassificationSource.RULE

    def test_toilet_paper_is_household(self, rules):
        result = rules.match("toilet paper")
        assert result.category == Category.OTHER
        assert result.confidence == pytest.approx(0.8)

    @pytest.mark.parametrize("name,expected", [
        ("almonds", Category.SNACKS),
        ("roasted cashews", Category.SNACKS),
        ("pistachios", Category.SNACKS),
        ("blackberries", Category.FRUITS),
        ("pomegranate", Category.FRUITS),
        ("leeks", Category.VEGETABLES),
        ("feta", Category.DAIRY),
        ("smoked ham", Category.MEAT),
        ("duck breast", Category.MEAT),
        ("lobster tails", Category.MEAT),
        ("pita bread", Category.GRAINS),
        ("kombucha", Category.BEVERAGES),
        ("canola oil", Category.CONDIMENTS),
        ("hummus", Category.CONDIMENTS),
        ("sorbet", Category.FROZEN),
        ("gelato", Category.FROZEN),
    ])
    def test_extended_keywords(self, rules, name, expected):
        result = rules.match(name)
        assert result.category == expected
        assert result.confidence == pytest.approx(0.9)

    @pytest.mark.parametrize("name", ["phone charger", "car keys", "wallet", "ballpoint pens", "notebook"])
    def test_extended_household_items(self, rules, name):
        result = rules.match(name)
        assert result.category == Category.OTHER
        assert result.confidence == pytest.approx(0.8)


class TestKeywordBoundaries:
    @pytest.mark.parametrize("name,expected", [
        ("egg noodles", Category.GRAINS),
        ("ice cream", Category.FROZEN),
        ("vanilla ice cream", Category.FROZEN),
        ("frozen yogurt", Category.FROZEN),
        ("peanut butter", Category.CONDIMENTS),
        ("almond milk", Category.BEVERAGES),
        ("orange juice", Category.BEVERAGES),
        ("coconut oil", Category.CONDIMENTS),
    ])
    def test_phrase_beats_earlier_single_word(self, rules, name, expected):
        assert rules.match(name).category == expected

    def test_short_keywords_need_whole_words(self, rules):
        assert rules.match("legumes").category == Category.VEGETABLES
        assert rules.match("lemonade").category == Category.BEVERAGES
        assert rules.match("eggplant").category == Category.VEGETABLES
        assert rules.match("champagne").category != Category.MEAT

    def test_plural_forms(self, rules):
        assert rules.match("eggs").category == Category.DAIRY
        assert rules.match("cherries").category == Category.FRUITS
        assert rules.match("tomatoes").category == Category.VEGETABLES

    def test_phrase_does_not_override_unrelated_snack_word(self, rules):
        """A vegetable phrase elsewhere in the name leaves the snack hit standing."""
        assert rules.match("sweet potato chips").category == Category.SNACKS
        assert rules.match("bell pepper crisps").category == Category.SNACKS

    @pytest.mark.parametrize("name", ["", "   ", "xylophone"])
    def test_no_match(self, rules, name):
        result = rules.match(name)
        assert result.category == Category.OTHER
        assert result.confidence == pytest.approx(0.3)
        assert result.reasoning == "no match"
        assert result.source == ClassificationSource.FALLBACK

    def test_none_input(self, rules):
        assert rules.match(None).category == Category.OTHER


class TestClassificationResult:
    def test_confidence_clamped(self):
        assert ClassificationResult(category="dairy", confidence=1.7).confidence == 1.0
        assert ClassificationResult(category="dairy", confidence=-0.2).confidence == 0.0

    def test_non_numeric_confidence(self):
        assert ClassificationResult(category="dairy", confidence="high").confidence == 0.0

    def test_category_case_insensitive(self):
        assert ClassificationResult(category="SNACKS", confidence=0.5).category == Category.SNACKS

    def test_unknown_category_becomes_other(self):
        result = ClassificationResult(category="baked goods", confidence=0.5)
        assert result.category == Category.OTHER

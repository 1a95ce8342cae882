"""
Category Rules - keyword-based product classification

First pass of categorization: deterministic keyword rules, no AI calls.

Keywords match whole words (plural forms included), so "gum" does not hit
"legumes" and "oil" does not hit "toilet paper".

Order matters. Categories are checked top to bottom and the first hit wins,
so compound names resolve to the earlier category:
- "potato chips" hits snacks ("chip") before vegetables ("potato")
- "butternut squash" hits vegetables ("squash"); "butter" is not a word here

Multi-word keywords claim the words inside them. A single-word hit that
falls inside another category's phrase is skipped:
- "ice cream" is frozen, not dairy ("cream")
- "egg noodles" is grains, not dairy ("egg")
- "peanut butter" is condiments, not snacks ("peanut")

A rule hit scores 0.9; the household-item check scores 0.8 as ``other``;
no hit scores 0.3 as ``other``, which is the caller's cue to escalate.
"""
import re
from typing import List, Tuple

import structlog

from pantrykit.common.schemas.inventory import Category
from pantrykit.domain.categorization.schemas import ClassificationResult, ClassificationSource

logger = structlog.get_logger()

RULE_CONFIDENCE = 0.9
HOUSEHOLD_CONFIDENCE = 0.8
NO_MATCH_CONFIDENCE = 0.3


def keyword_pattern(keyword: str) -> re.Pattern:
    """Whole-word pattern for a keyword, also accepting its plural."""
    stem = re.escape(keyword)
    if keyword.endswith("y"):
        # berry -> berries
        stem = f"(?:{stem}|{re.escape(keyword[:-1])}ies)"
    return re.compile(rf"\b{stem}(?:s|es)?\b")


class CategoryRules:
    """Ordered keyword rules for the 10-value taxonomy."""

    CATEGORY_KEYWORDS: List[Tuple[Category, Tuple[str, ...]]] = [
        (Category.SNACKS, (
            "chip", "crisp", "cookie", "cracker", "candy", "chocolate", "popcorn",
            "pretzel", "snack", "nacho", "biscuit", "granola bar", "gummy",
            "chewing gum", "gum", "jelly bean", "nut", "almond", "peanut", "cashew",
            "walnut", "pistachio", "pecan", "hazelnut", "macadamia", "seed",
            "trail mix", "wafer", "potato chip", "tortilla chip",
        )),
        (Category.FRUITS, (
            "apple", "banana", "orange", "grape", "grapefruit", "strawberry",
            "blueberry", "raspberry", "blackberry", "cranberry", "berry", "mango",
            "pineapple", "watermelon", "melon", "peach", "pear", "plum", "cherry",
            "kiwi", "lemon", "lime", "coconut", "avocado", "papaya", "apricot",
            "pomegranate", "guava", "passion fruit", "dragon fruit", "lychee", "fig",
            "nectarine", "fruit",
        )),
        (Category.VEGETABLES, (
            "potato", "sweet potato", "tomato", "onion", "garlic", "carrot", "lettuce",
            "spinach", "broccoli", "cauliflower", "cabbage", "cucumber", "pepper",
            "bell pepper", "celery", "zucchini", "eggplant", "squash", "pumpkin",
            "kale", "mushroom", "ginger", "bean", "chickpea", "legume", "pea", "corn",
            "beet", "beetroot", "turnip", "radish", "asparagus", "okra", "artichoke",
            "leek", "scallion", "chili", "jalapeno", "vegetable", "veggie",
        )),
        (Category.DAIRY, (
            "milk", "cheese", "yogurt", "yoghurt", "butter", "cream", "sour cream",
            "cream cheese", "egg", "ghee", "paneer", "curd", "kefir", "mozzarella",
            "cheddar", "parmesan", "ricotta", "feta", "brie", "camembert",
            "half and half",
        )),
        (Category.MEAT, (
            "chicken", "beef", "pork", "lamb", "mutton", "turkey", "duck", "ham",
            "bacon", "sausage", "salami", "steak", "mince", "meat", "rib", "wing",
            "thigh", "breast", "fish", "seafood", "salmon", "tuna", "cod", "tilapia",
            "halibut", "trout", "sardine", "anchovy", "shrimp", "prawn", "crab",
            "lobster", "scallop", "mussel", "clam", "oyster",
        )),
        (Category.GRAINS, (
            "bread", "rice", "pasta", "spaghetti", "penne", "macaroni", "noodle",
            "egg noodle", "flour", "cereal", "oat", "oatmeal", "granola", "quinoa",
            "barley", "wheat", "rye", "bran", "bulgur", "millet", "buckwheat",
            "cornmeal", "polenta", "grits", "bagel", "pita", "tortilla", "couscous",
            "lentil", "grain",
        )),
        (Category.BEVERAGES, (
            "water", "juice", "soda", "cola", "coffee", "tea", "beer", "wine",
            "vodka", "whiskey", "lemonade", "smoothie", "kombucha", "tonic",
            "ginger ale", "energy drink", "drink", "beverage", "almond milk",
            "soy milk", "oat milk", "rice milk", "coconut milk", "coconut water",
            "orange juice", "apple juice", "coffee bean",
        )),
        (Category.CONDIMENTS, (
            "ketchup", "mustard", "mayo", "mayonnaise", "sauce", "soy sauce",
            "fish sauce", "oyster sauce", "chili sauce", "hot sauce", "vinegar",
            "apple cider vinegar", "oil", "coconut oil", "peanut oil", "salt",
            "spice", "herb", "black pepper", "honey", "jam", "jelly", "syrup",
            "dressing", "salsa", "relish", "seasoning", "sugar", "tahini", "hummus",
            "teriyaki", "barbecue", "bbq", "pesto", "peanut butter", "almond butter",
            "condiment",
        )),
        (Category.FROZEN, (
            "frozen", "ice cream", "frozen yogurt", "sorbet", "gelato", "popsicle",
            "ice pop", "ice", "pizza", "fries", "nugget",
        )),
    ]

    HOUSEHOLD_KEYWORDS: Tuple[str, ...] = (
        "soap", "detergent", "shampoo", "conditioner", "toothpaste", "toothbrush",
        "tissue", "toilet paper", "paper towel", "napkin", "bleach", "sponge",
        "trash bag", "garbage bag", "battery", "light bulb", "cleaner", "dish",
        "foil", "cling film", "diaper", "wallet", "key", "phone", "charger",
        "remote", "book", "magazine", "pen", "pencil", "paper", "notebook",
    )

    def __init__(self):
        self._category_patterns = [
            (category, [(keyword, keyword_pattern(keyword)) for keyword in keywords])
            for category, keywords in self.CATEGORY_KEYWORDS
        ]
        self._phrase_patterns = [
            (category, pattern)
            for category, patterns in self._category_patterns
            for keyword, pattern in patterns
            if " " in keyword
        ]
        self._household_patterns = [
            (keyword, keyword_pattern(keyword)) for keyword in self.HOUSEHOLD_KEYWORDS
        ]

    def match(self, product_name: str) -> ClassificationResult:
        """
        Classify a product name with keyword rules. Never raises.

        Args:
            product_name: Free-form product name (any case, may be empty)

        Returns:
            ClassificationResult with source RULE (hit) or FALLBACK (no hit)
        """
        normalized = (product_name or "").strip().lower()

        if not normalized:
            return ClassificationResult(
                category=Category.OTHER,
                confidence=NO_MATCH_CONFIDENCE,
                reasoning="no match",
                source=ClassificationSource.FALLBACK,
            )

        phrases = [
            (category, hit.span())
            for category, pattern in self._phrase_patterns
            for hit in pattern.finditer(normalized)
        ]

        for category, patterns in self._category_patterns:
            for keyword, pattern in patterns:
                for hit in pattern.finditer(normalized):
                    if self._claimed_elsewhere(hit.span(), category, phrases):
                        continue
                    return ClassificationResult(
                        category=category,
                        confidence=RULE_CONFIDENCE,
                        reasoning=f"matched {category.value} keyword '{keyword}'",
                        source=ClassificationSource.RULE,
                    )

        for keyword, pattern in self._household_patterns:
            if pattern.search(normalized):
                return ClassificationResult(
                    category=Category.OTHER,
                    confidence=HOUSEHOLD_CONFIDENCE,
                    reasoning=f"household item keyword '{keyword}'",
                    source=ClassificationSource.RULE,
                )

        logger.debug("category_rules_no_match", product_name=normalized)
        return ClassificationResult(
            category=Category.OTHER,
            confidence=NO_MATCH_CONFIDENCE,
            reasoning="no match",
            source=ClassificationSource.FALLBACK,
        )

    @staticmethod
    def _claimed_elsewhere(span, category, phrases) -> bool:
        """True when a hit sits inside a phrase that belongs to another category."""
        start, end = span
        return any(
            owner != category and phrase_start <= start and end <= phrase_end
            for owner, (phrase_start, phrase_end) in phrases
        )


# Singleton instance
category_rules = CategoryRules()

import pytest

from spend_categorizer.core.categories import Category
from spend_categorizer.core.rule_matcher import CategoryRule, RuleMatcher


@pytest.fixture
def matcher() -> RuleMatcher:
    """Matcher with the built-in rules"""
    return RuleMatcher()


class TestBuiltinRules:

    def test_netflix_is_entertainment(self, matcher):
        assert matcher.match("NETFLIX SUBSCRIPTION") is Category.ENTERTAINMENT

    def test_case_and_whitespace_insensitive(self, matcher):
        assert matcher.match("  Starbucks Grafton St ") is Category.COFFEE_AND_SNACKS

    @pytest.mark.parametrize("description", ["UNKNOWN MERCHANT A", "XYZ CORP 123", "", "   "])
    def test_no_match(self, matcher, description):
        assert matcher.match(description) is None

    def test_higher_priority_rule_wins(self, matcher):
        # 'uber' (Transportation, 10) outranks 'ubereats' (Food & Dining, 9)
        assert matcher.match("UBEREATS ORDER") is Category.TRANSPORTATION

    def test_is_deterministic(self, matcher):
        results = {matcher.match("TESCO STORES 3342") for _ in range(5)}
        assert results == {Category.FOOD_AND_DINING}


class TestRuleOrdering:

    def test_priority_beats_declaration_order(self):
        matcher = RuleMatcher([
            {"keywords": ["amazon"], "category": "Shopping", "priority": 1},
            {"keywords": ["prime"], "category": "Entertainment", "priority": 5},
        ])

        assert matcher.match("AMAZON PRIME") is Category.ENTERTAINMENT

    def test_equal_priority_keeps_declaration_order(self):
        matcher = RuleMatcher([
            {"keywords": ["store"], "category": "Shopping", "priority": 5},
            {"keywords": ["coffee"], "category": "Coffee & Snacks", "priority": 5},
        ])

        assert matcher.match("COFFEE STORE") is Category.SHOPPING

    def test_first_keyword_of_rule_wins(self):
        matcher = RuleMatcher([
            CategoryRule(keywords=("zz", "aa"), category=Category.TRAVEL, priority=1),
        ])

        assert matcher.match("aa zz") is Category.TRAVEL

    def test_missing_priority_defaults_to_zero(self):
        matcher = RuleMatcher([
            {"keywords": ["gym"], "category": "Personal Care"},
            {"keywords": ["gym"], "category": "Healthcare", "priority": 1},
        ])

        assert matcher.match("CITY GYM") is Category.HEALTHCARE

    def test_keywords_are_lowercased(self):
        matcher = RuleMatcher([{"keywords": ["NETFLIX"], "category": "Entertainment"}])

        assert matcher.match("netflix.com") is Category.ENTERTAINMENT

    def test_unknown_category_is_rejected(self):
        with pytest.raises(ValueError):
            RuleMatcher([{"keywords": ["x"], "category": "Not A Category"}])

    def test_empty_rule_set_matches_nothing(self):
        matcher = RuleMatcher([])

        assert len(matcher) == 0
        assert matcher.match("NETFLIX") is None

from datetime import date, datetime

import pytest

from spend_categorizer.core.categories import Category, all_category_names
from spend_categorizer.core.models import Transaction, normalize_key


class TestCategory:
    """Closed category set and coercion at the parsing boundary"""

    def test_names_are_ordered_and_end_with_other(self):
        names = all_category_names()

        assert names[0] == "Entertainment"
        assert names[-1] == "Other"
        assert len(names) == len(set(names)) == 16

    @pytest.mark.parametrize("raw, expected", [
        ("Shopping", Category.SHOPPING),
        ("  Food & Dining ", Category.FOOD_AND_DINING),
        ("coffee & snacks", Category.COFFEE_AND_SNACKS),
        ("Groceries", Category.OTHER),
        ("", Category.OTHER),
        (None, Category.OTHER),
        (42, Category.OTHER),
    ])
    def test_coerce(self, raw, expected):
        assert Category.coerce(raw) is expected

    def test_parse_is_strict_about_unknown_names(self):
        assert Category.parse("Travel") is Category.TRAVEL
        assert Category.parse("Space Travel") is None

    def test_other_is_not_informative(self):
        assert not Category.OTHER.is_informative
        assert Category.UTILITIES.is_informative


class TestTransaction:

    def test_normalize_key(self):
        assert normalize_key("  starbucks ") == "STARBUCKS"
        assert normalize_key("STARBUCKS") == normalize_key("starbucks ")

    def test_with_category_returns_a_copy(self, make_transaction):
        original = make_transaction("TESCO")

        updated = original.with_category(Category.FOOD_AND_DINING)

        assert original.category is None
        assert updated.category is Category.FOOD_AND_DINING
        assert updated.description == original.description

    def test_needs_category(self, make_transaction):
        assert make_transaction("A").needs_category
        assert make_transaction("A", Category.OTHER).needs_category
        assert not make_transaction("A", Category.TRAVEL).needs_category

    def test_from_dict(self):
        txn = Transaction.from_dict({
            "description": "UBER TRIP",
            "amount": "-12.50",
            "date": "2025-01-15T10:30:00",
            "currency": "GBP",
            "category": "transportation",
        })

        assert txn.amount == -12.5
        assert txn.date == datetime(2025, 1, 15, 10, 30)
        assert txn.category is Category.TRANSPORTATION

    def test_to_dict_round_trips_category_name(self, make_transaction):
        data = make_transaction("UBER", Category.TRANSPORTATION).to_dict()

        assert data["category"] == "Transportation"
        assert data["date"] == date(2025, 1, 15).isoformat()

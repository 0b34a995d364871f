"""
Category Registry

The closed set of spending categories every stage of the pipeline speaks.
`Other` doubles as the fallback and as the "still unresolved" marker.
"""
from enum import Enum
from typing import Dict, List, Optional


class Category(str, Enum):
    """Spending categories, in display order"""
    ENTERTAINMENT = 'Entertainment'
    FOOD_AND_DINING = 'Food & Dining'
    COFFEE_AND_SNACKS = 'Coffee & Snacks'
    SHOPPING = 'Shopping'
    TRANSPORTATION = 'Transportation'
    UTILITIES = 'Utilities'
    HEALTHCARE = 'Healthcare'
    EDUCATION = 'Education'
    TRAVEL = 'Travel'
    SUBSCRIPTIONS = 'Subscriptions'
    INSURANCE = 'Insurance'
    BANKING_AND_FINANCE = 'Banking & Finance'
    CHARITY_AND_DONATIONS = 'Charity & Donations'
    HOME_AND_GARDEN = 'Home & Garden'
    PERSONAL_CARE = 'Personal Care'
    OTHER = 'Other'

    @classmethod
    def coerce(cls, value) -> 'Category':
        """
        Map an arbitrary value onto a category

        Exact names win, then a case-insensitive match. Anything else
        (unknown names, None, non-strings) becomes Other.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.OTHER

        name = value.strip()
        try:
            return cls(name)
        except ValueError:
            return _BY_LOWER_NAME.get(name.lower(), cls.OTHER)

    @classmethod
    def parse(cls, value: str) -> Optional['Category']:
        """Strict lookup: the matching category, or None if unknown"""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        name = value.strip()
        try:
            return cls(name)
        except ValueError:
            return _BY_LOWER_NAME.get(name.lower())

    @property
    def is_informative(self) -> bool:
        return self is not Category.OTHER


_BY_LOWER_NAME: Dict[str, Category] = {c.value.lower(): c for c in Category}


def all_category_names() -> List[str]:
    """Ordered list of category names, as sent to the classifier"""
    return [c.value for c in Category]

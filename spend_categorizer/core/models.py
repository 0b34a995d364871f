"""
Transaction data structure shared by every stage of the pipeline
"""
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Dict, Optional, Union

from .categories import Category


def normalize_key(description: str) -> str:
    """Canonical cache key for a description: trimmed and uppercased"""
    return description.strip().upper()


@dataclass(frozen=True)
class Transaction:
    """A single bank transaction. Never mutated; see with_category()"""
    description: str
    amount: float
    date: Union[date, datetime]
    currency: str
    category: Optional[Category] = None

    @property
    def needs_category(self) -> bool:
        """True while the category is absent or still Other"""
        return self.category is None or self.category is Category.OTHER

    def with_category(self, category: Category) -> 'Transaction':
        return replace(self, category=category)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        """
        Build a transaction from a JSON-style mapping

        Expected keys: description, amount, date (ISO string), currency and
        optionally category. Unknown category names become Other.
        """
        raw_date = data.get('date')
        if isinstance(raw_date, str):
            parsed = datetime.fromisoformat(raw_date)
            # "2025-03-01" stays a plain date
            raw_date = parsed if len(raw_date) > 10 else parsed.date()

        raw_category = data.get('category')
        category = Category.coerce(raw_category) if raw_category else None

        return cls(
            description=data['description'],
            amount=float(data.get('amount', 0.0)),
            date=raw_date,
            currency=data.get('currency', 'EUR'),
            category=category,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'description': self.description,
            'amount': self.amount,
            'date': self.date.isoformat() if self.date is not None else None,
            'currency': self.currency,
            'category': self.category.value if self.category else None,
        }

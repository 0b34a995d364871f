"""
Rule Matcher Engine

Matches transaction descriptions against keyword rules:
- Case-insensitive substring matching on the trimmed description
- Priority-based rule selection (higher priority checked first)
- Equal priorities keep their declaration order
- First matching keyword of the first matching rule wins
"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .categories import Category
from .default_rules import DEFAULT_RULES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryRule:
    """Keyword-to-category mapping"""
    keywords: Tuple[str, ...]
    category: Category
    priority: int = 0

    @classmethod
    def from_dict(cls, rule: Dict) -> 'CategoryRule':
        """
        Build a rule from its dict form

        Expected dict structure:
        {
            'keywords': ['netflix', 'spotify'],
            'category': 'Entertainment',
            'priority': 10,   # optional, default 0
        }

        Raises:
            ValueError: if the category is not one of the known categories
        """
        category = Category.parse(rule['category'])
        if category is None:
            raise ValueError(f"Unknown category in rule: {rule['category']!r}")

        return cls(
            keywords=tuple(kw.lower() for kw in rule['keywords'] if kw),
            category=category,
            priority=int(rule.get('priority', 0)),
        )


RuleLike = Union[CategoryRule, Dict]


class RuleMatcher:
    """
    Matches descriptions against keyword rules
    """

    def __init__(self, rules: Optional[Iterable[RuleLike]] = None):
        """
        Args:
            rules: Rules as CategoryRule objects or dicts. Defaults to the
                built-in rule set when None.
        """
        self.rules: List[CategoryRule] = []
        self.load_rules(DEFAULT_RULES if rules is None else rules)

    def load_rules(self, rules: Iterable[RuleLike]):
        """
        Replace the active rule set

        Rules are sorted once here; sort() is stable, so rules that share a
        priority stay in the order given.
        """
        loaded = [r if isinstance(r, CategoryRule) else CategoryRule.from_dict(r) for r in rules]
        loaded.sort(key=lambda r: -r.priority)
        self.rules = loaded

        logger.debug("Loaded %d keyword rules", len(self.rules))

    def match(self, description: str) -> Optional[Category]:
        """
        Categorize a description using rules

        Args:
            description: Raw transaction description

        Returns:
            Category of the first matching rule, or None if nothing matched
        """
        if not description:
            return None

        normalized = description.strip().lower()
        if not normalized:
            return None

        for rule in self.rules:
            for keyword in rule.keywords:
                if keyword in normalized:
                    return rule.category

        return None

    def __len__(self) -> int:
        return len(self.rules)

    def __repr__(self) -> str:
        return f"RuleMatcher({len(self.rules)} rules)"

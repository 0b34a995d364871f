"""
Spend Categorizer

Resolves spending categories for bank transaction descriptions: keyword
rules first, then a shared category cache, then a batched LLM classifier
for whatever is left.
"""

__version__ = "1.0.0"

# Expose main classes for easy imports
from .core.categories import Category, all_category_names
from .core.models import Transaction, normalize_key
from .core.rule_matcher import RuleMatcher, CategoryRule
from .core.category_cache import CategoryCache
from .core.llm_categorizer import LLMCategorizer, AnthropicTransport, ClassifierTransport
from .core.categorization_orchestrator import CategorizationOrchestrator, create_orchestrator

__all__ = [
    'Category',
    'all_category_names',
    'Transaction',
    'normalize_key',
    'RuleMatcher',
    'CategoryRule',
    'CategoryCache',
    'LLMCategorizer',
    'AnthropicTransport',
    'ClassifierTransport',
    'CategorizationOrchestrator',
    'create_orchestrator',
]

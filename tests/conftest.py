import json
from datetime import date
from typing import Callable, List, Optional

import pytest

from spend_categorizer.core.categories import Category
from spend_categorizer.core.category_cache import CategoryCache
from spend_categorizer.core.llm_categorizer import ClassifierTransport, LLMCategorizer
from spend_categorizer.core.models import Transaction
from spend_categorizer.storage.local_cache import LocalCategoryCache


class FakeClock:
    """Controllable epoch-seconds clock"""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeTransport(ClassifierTransport):
    """
    Scripted classifier endpoint

    Each call pops the next entry from `responses`: a string is returned as
    the response text, an exception instance is raised. When the script runs
    out, `default` is used (a callable receiving the prompt).
    """

    def __init__(self, responses: Optional[list] = None, default: Optional[Callable[[str], str]] = None):
        self.responses = list(responses or [])
        self.default = default
        self.prompts: List[str] = []

    def complete(self, prompt: str, timeout: float) -> str:
        self.prompts.append(prompt)
        if self.responses:
            response = self.responses.pop(0)
        elif self.default is not None:
            response = self.default(prompt)
        else:
            raise AssertionError("FakeTransport called more times than scripted")

        if isinstance(response, BaseException):
            raise response
        return response

    @property
    def calls(self) -> int:
        return len(self.prompts)


def numbered_descriptions(prompt: str) -> List[str]:
    """Pull the numbered, quoted descriptions back out of a batch prompt"""
    descriptions = []
    for line in prompt.splitlines():
        head, sep, rest = line.partition('. "')
        if sep and head.isdigit() and rest.endswith('"'):
            descriptions.append(rest[:-1])
    return descriptions


def answer_all(category: str) -> Callable[[str], str]:
    """Transport default that answers `category` for every item in the batch"""
    def respond(prompt: str) -> str:
        count = len(numbered_descriptions(prompt))
        return json.dumps({str(i): category for i in range(1, count + 1)})
    return respond


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def local_cache(clock) -> LocalCategoryCache:
    """In-memory local tier on a fake clock"""
    return LocalCategoryCache(clock=clock)


@pytest.fixture
def category_cache(local_cache) -> CategoryCache:
    """Two-tier cache with no remote tier configured"""
    return CategoryCache(local=local_cache)


@pytest.fixture
def sleeps() -> List[float]:
    """Records every requested sleep instead of sleeping"""
    return []


@pytest.fixture
def make_categorizer(sleeps):
    def factory(transport, **kwargs) -> LLMCategorizer:
        kwargs.setdefault('max_batch_size', 20)
        kwargs.setdefault('timeout', 5.0)
        return LLMCategorizer(transport, sleep=sleeps.append, **kwargs)
    return factory


@pytest.fixture
def make_transaction():
    def factory(description: str, category: Optional[Category] = None, amount: float = 9.99) -> Transaction:
        return Transaction(
            description=description,
            amount=amount,
            date=date(2025, 1, 15),
            currency='EUR',
            category=category,
        )
    return factory

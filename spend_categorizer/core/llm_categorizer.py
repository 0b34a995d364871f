"""
LLM Categorizer

Uses Claude API to suggest categories for descriptions no rule or cache
entry could resolve.
Features:
- One request per batch, descriptions numbered 1..N
- Per-batch timeout
- Retry with exponential backoff (3 attempts total by default)
- JSON extraction that tolerates prose around the answer
- Degrades to Other instead of raising
"""
import json
import logging
import os
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

import anthropic

from .categories import Category, all_category_names
from .errors import ClassifierTimeoutError, ConfigurationError, ParseError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_BATCH_SIZE = 20
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 2
DEFAULT_RETRY_BASE_DELAY = 2.0


class ClassifierTransport(ABC):
    """Sends one prompt to the classification endpoint and returns its text"""

    @abstractmethod
    def complete(self, prompt: str, timeout: float) -> str:
        """
        Raises:
            TransportError: network failure or non-success status
            ClassifierTimeoutError: no answer within `timeout` seconds
        """


class AnthropicTransport(ClassifierTransport):
    """
    Claude messages API transport
    """

    def __init__(self,
                 api_key: Optional[str] = None,
                 model: str = DEFAULT_MODEL,
                 max_tokens: int = 4000,
                 temperature: float = 0.0,
                 client=None):
        """
        Args:
            api_key: Anthropic API key (or read from ANTHROPIC_API_KEY env var)
            model: Model id
            max_tokens: Response budget; a batch of 50 names fits well inside 4000
            temperature: 0.0 for deterministic answers
            client: Pre-built anthropic client (used by tests)

        Raises:
            ConfigurationError: if no API key is available and no client was given
        """
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

        if client is not None:
            self.client = client
            return

        api_key = api_key or os.environ.get('ANTHROPIC_API_KEY')
        if not api_key:
            raise ConfigurationError("No ANTHROPIC_API_KEY found")

        # Retries are handled by LLMCategorizer, not by the SDK
        self.client = anthropic.Anthropic(api_key=api_key, max_retries=0)

    def complete(self, prompt: str, timeout: float) -> str:
        try:
            message = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                messages=[{
                    "role": "user",
                    "content": prompt
                }],
                timeout=timeout,
            )
        except anthropic.APITimeoutError as e:
            raise ClassifierTimeoutError(f"Claude API timed out after {timeout}s") from e
        except anthropic.APIStatusError as e:
            raise TransportError(f"Claude API returned status {e.status_code}") from e
        except anthropic.APIConnectionError as e:
            raise TransportError(f"Could not reach Claude API: {e}") from e
        except anthropic.APIError as e:
            raise TransportError(f"Claude API error: {e}") from e

        return ''.join(
            block.text for block in message.content
            if getattr(block, 'type', None) == 'text'
        )

    def __repr__(self) -> str:
        return f"AnthropicTransport({self.model})"


def extract_json_object(text: str) -> str:
    """
    Return the first balanced {...} span in text

    Braces inside JSON strings are ignored.

    Raises:
        ParseError: if text has no balanced object
    """
    start = text.find('{')
    if start == -1:
        raise ParseError("No JSON object found in classifier response")

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == '\\':
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == '{':
            depth += 1
        elif ch == '}':
            depth -= 1
            if depth == 0:
                return text[start:i + 1]

    raise ParseError("Unbalanced JSON object in classifier response")


def parse_category_map(text: str) -> Dict[str, object]:
    """
    Extract and decode the index -> category object from a response

    Raises:
        ParseError: no object, invalid JSON, or JSON that is not an object
    """
    json_text = extract_json_object(text)
    try:
        result = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Classifier response is not valid JSON: {e}") from e

    if not isinstance(result, dict):
        raise ParseError(f"Expected a JSON object, got {type(result).__name__}")

    return result


@dataclass
class BatchResult:
    """Outcome of one classified batch"""
    categories: Dict[str, Category]
    attempts: int
    exhausted: bool = False


class LLMCategorizer:
    """
    Categorizes batches of descriptions with an external classifier
    """

    def __init__(self,
                 transport: Optional[ClassifierTransport],
                 max_batch_size: int = DEFAULT_BATCH_SIZE,
                 timeout: float = DEFAULT_TIMEOUT,
                 max_retries: int = DEFAULT_MAX_RETRIES,
                 retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY,
                 categories: Optional[Sequence[str]] = None,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            transport: Endpoint transport; None disables classification
            max_batch_size: Largest batch classify() accepts
            timeout: Per-attempt deadline in seconds
            max_retries: Additional attempts after the first failure
            retry_base_delay: Backoff before the first retry; doubles per retry
            categories: Permitted category names (default: all categories)
            sleep: Sleep function for backoff (injected by tests)
        """
        if max_batch_size < 1:
            raise ValueError("max_batch_size must be at least 1")

        self.transport = transport
        self.enabled = transport is not None
        self.max_batch_size = max_batch_size
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.categories = list(categories) if categories else all_category_names()
        self._sleep = sleep
        # Other is always a valid answer
        self._permitted = {Category.coerce(name) for name in self.categories} | {Category.OTHER}

    def build_prompt(self, batch: Sequence[str]) -> str:
        """Build the batch prompt"""
        categories_list = ', '.join(self.categories)
        descriptions_list = '\n'.join(f'{i}. "{desc}"' for i, desc in enumerate(batch, 1))

        return f"""You are a financial transaction categorizer. Categorize these {len(batch)} bank transaction descriptions.

CATEGORIES:
{categories_list}

TRANSACTIONS:
{descriptions_list}

Respond with ONLY a JSON object mapping each transaction number to its category (no markdown, no explanations):
{{"1": "CategoryName", "2": "CategoryName"}}

Rules:
- Choose ONLY from the categories above
- Include ALL {len(batch)} transactions
- Use "Other" only if you cannot tell what the merchant or service is"""

    def _backoff_delay(self, retries_remaining: int) -> float:
        """2s, then 4s, ... as the retry budget is used up"""
        retries_used = self.max_retries - retries_remaining
        return self.retry_base_delay * (2 ** retries_used)

    def _call_with_deadline(self, prompt: str) -> str:
        # Each attempt gets its own worker: a call still hanging past its
        # deadline never holds up the next attempt or batch
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix='llm-categorizer')
        try:
            future = pool.submit(self.transport.complete, prompt, self.timeout)
            return future.result(timeout=self.timeout)
        except FutureTimeoutError as e:
            raise ClassifierTimeoutError(f"Classifier call exceeded {self.timeout}s") from e
        finally:
            pool.shutdown(wait=False)

    def _attempt(self, batch: Sequence[str]) -> Dict[str, Category]:
        response_text = self._call_with_deadline(self.build_prompt(batch))
        result = parse_category_map(response_text)

        categories: Dict[str, Category] = {}
        for i, desc in enumerate(batch, 1):
            raw = result.get(str(i))
            category = Category.coerce(raw)
            if category not in self._permitted:
                category = Category.OTHER
            if raw is not None and category is Category.OTHER and raw != Category.OTHER.value:
                logger.info("Classifier suggested unusable category %r for %r", raw, desc)
            categories[desc] = category
        return categories

    def classify_batch(self, batch: Sequence[str]) -> BatchResult:
        """
        Categorize one batch, retrying failed attempts

        Args:
            batch: Up to max_batch_size descriptions

        Returns:
            BatchResult; every description maps to a category, Other if the
            classifier could not decide or every attempt failed
        """
        batch = list(batch)
        if len(batch) > self.max_batch_size:
            raise ValueError(f"Batch of {len(batch)} exceeds max_batch_size={self.max_batch_size}")

        if not batch:
            return BatchResult(categories={}, attempts=0)

        if not self.enabled:
            return BatchResult(categories={d: Category.OTHER for d in batch}, attempts=0, exhausted=True)

        retries_remaining = self.max_retries
        attempts = 0
        while True:
            attempts += 1
            try:
                categories = self._attempt(batch)
                return BatchResult(categories=categories, attempts=attempts)
            except (TransportError, ParseError) as e:
                if retries_remaining <= 0:
                    logger.warning("Classifier gave up on batch of %d after %d attempts: %s",
                                   len(batch), attempts, e)
                    break

                delay = self._backoff_delay(retries_remaining)
                logger.info("Classifier attempt %d failed (%s), retrying in %.1fs", attempts, e, delay)
                retries_remaining -= 1
                self._sleep(delay)

        return BatchResult(categories={d: Category.OTHER for d in batch}, attempts=attempts, exhausted=True)

    def classify(self, batch: Sequence[str]) -> Dict[str, Category]:
        """Categorize one batch: description -> category"""
        return self.classify_batch(batch).categories

    def __repr__(self) -> str:
        return f"LLMCategorizer(transport={self.transport!r}, max_batch_size={self.max_batch_size})"

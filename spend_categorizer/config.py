"""
Configuration for the category resolver.

Values come from the environment (a .env file is loaded first). Every
setting has a default except credentials: without ANTHROPIC_API_KEY the
classifier is skipped, without DATABASE_URL / DB_HOST the remote cache tier
is skipped.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .core.errors import ConfigurationError

# Load environment variables
load_dotenv()

DEFAULT_LOCAL_CACHE_PATH = Path.home() / '.spend_categorizer' / 'category_cache.json'

_TRUE = {'1', 'true', 'yes', 'on'}
_FALSE = {'0', 'false', 'no', 'off'}


def _get_int(env: Mapping[str, str], name: str, default: Optional[int]) -> Optional[int]:
    raw = env.get(name)
    if raw is None or raw == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _get_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == '':
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


def _get_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw == '':
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be true or false, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    """Resolver settings"""

    # Claude API
    anthropic_api_key: Optional[str] = None
    enable_llm: bool = True
    llm_model: str = 'claude-sonnet-4-20250514'
    llm_max_tokens: int = 4000

    # Batching
    batch_size: int = 20
    batch_delay: float = 1.0

    # Error handling
    request_timeout: float = 30.0
    max_retries: int = 2
    retry_base_delay: float = 2.0

    # Remote cache tier
    database_url: Optional[str] = None
    db_host: Optional[str] = None
    db_port: Optional[int] = None
    db_connect_timeout: int = 5

    # Local cache tier
    local_cache_path: Path = DEFAULT_LOCAL_CACHE_PATH
    local_cache_max_entries: int = 1000
    local_cache_ttl_days: int = 30

    log_level: str = 'INFO'

    @property
    def remote_configured(self) -> bool:
        return bool(self.database_url or self.db_host)

    @property
    def llm_configured(self) -> bool:
        return self.enable_llm and bool(self.anthropic_api_key)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'Settings':
        """
        Build settings from environment variables

        Raises:
            ConfigurationError: if a numeric or boolean value is malformed
        """
        env = os.environ if environ is None else environ

        batch_size = _get_int(env, 'BATCH_SIZE', cls.batch_size)
        if batch_size < 1:
            raise ConfigurationError(f"BATCH_SIZE must be positive, got {batch_size}")

        max_retries = _get_int(env, 'MAX_RETRIES', cls.max_retries)
        if max_retries < 0:
            raise ConfigurationError(f"MAX_RETRIES cannot be negative, got {max_retries}")

        cache_path = env.get('LOCAL_CACHE_PATH')

        return cls(
            anthropic_api_key=env.get('ANTHROPIC_API_KEY') or None,
            enable_llm=_get_bool(env, 'ENABLE_LLM', cls.enable_llm),
            llm_model=env.get('LLM_MODEL') or cls.llm_model,
            llm_max_tokens=_get_int(env, 'LLM_MAX_TOKENS', cls.llm_max_tokens),
            batch_size=batch_size,
            batch_delay=_get_float(env, 'BATCH_DELAY', cls.batch_delay),
            request_timeout=_get_float(env, 'REQUEST_TIMEOUT', cls.request_timeout),
            max_retries=max_retries,
            retry_base_delay=_get_float(env, 'RETRY_BASE_DELAY', cls.retry_base_delay),
            database_url=env.get('DATABASE_URL') or None,
            db_host=env.get('DB_HOST') or None,
            db_port=_get_int(env, 'DB_PORT', None),
            db_connect_timeout=_get_int(env, 'DB_CONNECT_TIMEOUT', cls.db_connect_timeout),
            local_cache_path=Path(cache_path).expanduser() if cache_path else DEFAULT_LOCAL_CACHE_PATH,
            local_cache_max_entries=_get_int(env, 'LOCAL_CACHE_MAX_ENTRIES', cls.local_cache_max_entries),
            local_cache_ttl_days=_get_int(env, 'LOCAL_CACHE_TTL_DAYS', cls.local_cache_ttl_days),
            log_level=(env.get('LOG_LEVEL') or cls.log_level).upper(),
        )

"""
Runtime settings for the collector, read from the environment.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger("consoletap.config")

DEFAULT_IGNORED_PATTERNS = ['@vite/', 'node_modules']


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid integer {name}={raw!r}, using {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid number {name}={raw!r}, using {default}")
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.environ.get(name)
    if raw is None:
        return list(default)
    return [part.strip() for part in raw.split(',') if part.strip()]


@dataclass
class CollectorConfig:
    host: str = 'localhost'
    port: int = 9222
    log_limit: int = 100
    error_limit: int = 100
    max_reconnect_attempts: int = 3
    http_timeout: float = 5.0
    ignored_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORED_PATTERNS))

    @property
    def endpoint(self) -> str:
        return f"http://{self.host}:{self.port}"

    @classmethod
    def from_env(cls, host: Optional[str] = None, port: Optional[int] = None) -> "CollectorConfig":
        """Build a config from CHROME_* / CONSOLETAP_* variables; explicit arguments win."""
        return cls(
            host=host or os.environ.get('CHROME_HOST') or 'localhost',
            port=port if port is not None else _env_int('CHROME_PORT', 9222),
            log_limit=_env_int('CONSOLETAP_LOG_LIMIT', 100),
            error_limit=_env_int('CONSOLETAP_ERROR_LIMIT', 100),
            max_reconnect_attempts=_env_int('CONSOLETAP_MAX_RECONNECT', 3),
            http_timeout=_env_float('CONSOLETAP_HTTP_TIMEOUT', 5.0),
            ignored_patterns=_env_list('CONSOLETAP_IGNORED_PATTERNS', DEFAULT_IGNORED_PATTERNS),
        )

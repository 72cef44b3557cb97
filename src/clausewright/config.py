"""
Harness configuration.

Values come from the environment, optionally seeded from
~/.clausewright/.env. Each accessor re-reads the environment so tests can
patch variables without reloading the module.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

CLAUSEWRIGHT_DIR = Path.home() / ".clausewright"
CLAUSEWRIGHT_ENV = CLAUSEWRIGHT_DIR / ".env"

DEFAULT_NODE_URL = "http://localhost:8669/"  # Thor solo
DEFAULT_POLL_ATTEMPTS = 5
DEFAULT_POLL_INTERVAL = 10.0  # one Thor block
DEFAULT_HTTP_TIMEOUT = 30.0


def load_env(env_path: Optional[Path] = None) -> None:
    """Load the .env file into os.environ without overriding set variables."""
    env_path = env_path or CLAUSEWRIGHT_ENV
    if env_path.exists():
        load_dotenv(env_path, override=False)


def get_node_url() -> str:
    return os.environ.get("THOR_NODE_URL", DEFAULT_NODE_URL)


def get_poll_attempts() -> int:
    return int(os.environ.get("CLAUSEWRIGHT_POLL_ATTEMPTS", str(DEFAULT_POLL_ATTEMPTS)))


def get_poll_interval() -> float:
    return float(os.environ.get("CLAUSEWRIGHT_POLL_INTERVAL", str(DEFAULT_POLL_INTERVAL)))


def get_http_timeout() -> float:
    return float(os.environ.get("CLAUSEWRIGHT_HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT)))


@dataclass(frozen=True)
class HarnessConfig:
    node_url: str = DEFAULT_NODE_URL
    poll_attempts: int = DEFAULT_POLL_ATTEMPTS
    poll_interval: float = DEFAULT_POLL_INTERVAL
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    @classmethod
    def from_env(cls, env_path: Optional[Path] = None) -> "HarnessConfig":
        load_env(env_path)
        config = cls(
            node_url=get_node_url(),
            poll_attempts=get_poll_attempts(),
            poll_interval=get_poll_interval(),
            http_timeout=get_http_timeout(),
        )
        if config.poll_attempts < 1:
            raise ValueError("CLAUSEWRIGHT_POLL_ATTEMPTS must be at least 1")
        if config.poll_interval < 0:
            raise ValueError("CLAUSEWRIGHT_POLL_INTERVAL must not be negative")
        return config

"""
Short code generation strategies for URL shortener.
Uses Strategy Pattern to allow different generation algorithms.

Short codes double as access tokens, so every strategy draws from the
`secrets` CSPRNG. Uniqueness is not checked here: the links table's
unique constraint rejects collisions at insert time.
"""

import re
import secrets
import string
from abc import ABC, abstractmethod


class ShortCodeStrategy(ABC):
    """Abstract base class for short code generation strategies"""

    @abstractmethod
    def generate(self) -> str:
        """
        Generate a short code.

        Returns:
            A random short code string (not checked for uniqueness)
        """
        pass


class HexShortCodeStrategy(ShortCodeStrategy):
    """
    Default strategy: random bytes rendered as lowercase hex.

    3 bytes -> 6 hex characters -> 16,777,216 combinations.
    """

    def __init__(self, num_bytes: int = 3):
        if num_bytes < 1:
            raise ValueError(f"num_bytes must be positive (given: {num_bytes})")
        self.num_bytes = num_bytes

    @property
    def length(self) -> int:
        return self.num_bytes * 2

    def generate(self) -> str:
        return secrets.token_hex(self.num_bytes)


class AlphanumericShortCodeStrategy(ShortCodeStrategy):
    """
    Random string over [A-Za-z0-9].

    Denser than hex: 6 characters -> 62^6 = 56,800,235,584 combinations.
    """

    CHARACTERS = string.ascii_letters + string.digits

    def __init__(self, length: int = 6):
        if not 1 <= length <= 20:
            raise ValueError(f"length must be between 1 and 20 (given: {length})")
        self.length = length

    def generate(self) -> str:
        return "".join(secrets.choice(self.CHARACTERS) for _ in range(self.length))


ALIAS_RE = re.compile(r"[a-zA-Z0-9_-]{1,20}")

# Redirects are served at /<short_code>, next to these fixed root paths
RESERVED_CODES = frozenset({"api", "docs", "redoc", "health"})


def is_reserved_code(short_code: str) -> bool:
    return short_code in RESERVED_CODES


def is_valid_alias(alias: str) -> bool:
    """Alias: 1-20 characters of letters, digits, underscore or hyphen"""
    return bool(alias) and ALIAS_RE.fullmatch(alias) is not None

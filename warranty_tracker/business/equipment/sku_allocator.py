"""
SKU Allocator

Generates human-readable equipment identifiers of the form
``EQ-<timestamp36>-<random4>``. Uniqueness is advisory; the registration
workflow owns the retry-on-collision policy.
"""

import secrets
import string
import time
from typing import Callable, Optional

ALPHABET = string.digits + string.ascii_uppercase


def to_base36(value: int) -> str:
    """Encode a non-negative integer in upper-case base 36"""
    if value < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if value == 0:
        return '0'
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(ALPHABET[remainder])
    return ''.join(reversed(digits))


class SkuAllocator:
    """
    Produce candidate SKUs.

    The timestamp part uses microseconds so allocations made in a tight loop
    still differ in their prefix most of the time; the random suffix covers
    the rest.
    """

    def __init__(
        self,
        prefix: str = 'EQ',
        suffix_length: int = 4,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.prefix = prefix
        self.suffix_length = suffix_length
        self._clock = clock or (lambda: time.time_ns() // 1000)

    def _random_suffix(self) -> str:
        return ''.join(secrets.choice(ALPHABET) for _ in range(self.suffix_length))

    def allocate(self) -> str:
        return f"{self.prefix}-{to_base36(self._clock())}-{self._random_suffix()}"

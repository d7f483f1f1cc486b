"""Deterministic seed handling for the randomizer.

The generator is Mulberry32 on wrapped 32-bit arithmetic, so a given seed
yields the same stream on every platform and matches seeds shared by players
from earlier releases.
"""

from __future__ import annotations

import re
from typing import Any, Optional, Sequence, TypeVar

from .errors import SeedRequiredError

T = TypeVar("T")

_MASK32 = 0xFFFFFFFF
ACT_STREAM_XOR = 0xDEADBEEF

# Numeric seed text as shared seeds have always been read: ASCII decimal with
# optional fraction and exponent, or an unsigned 0x/0o/0b literal.
_DECIMAL_SEED_RE = re.compile(r"^[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$")
_RADIX_SEED_RE = re.compile(r"^0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")


def _to_signed32(value: int) -> int:
    value &= _MASK32
    return value - 0x100000000 if value & 0x80000000 else value


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


class SeededRNG:
    """Mulberry32 stream with the range and shuffle helpers the pipeline uses."""

    def __init__(self, seed: int) -> None:
        self.seed = int(seed)
        self._state = int(seed) & _MASK32

    def next(self) -> float:
        self._state = (self._state + 0x6D2B79F5) & _MASK32
        s = self._state
        t = _imul(s ^ (s >> 15), 1 | s)
        t = ((t + _imul(t ^ (t >> 7), 61 | t)) & _MASK32) ^ t
        return ((t ^ (t >> 14)) & _MASK32) / 4294967296.0

    def rand_int(self, low: int, high: int) -> int:
        """Inclusive integer in [low, high]."""
        return low + int(self.next() * (high - low + 1))

    def shuffle(self, items: Sequence[T]) -> list[T]:
        """Fisher-Yates from the tail; returns a new list."""
        out = list(items)
        for i in range(len(out) - 1, 0, -1):
            j = int(self.next() * (i + 1))
            out[i], out[j] = out[j], out[i]
        return out


def seed_from_string(text: str) -> int:
    """Order-dependent 31x hash over UTF-16 code units, as a signed 32-bit int."""
    raw = text.encode("utf-16-le")
    value = 0
    for idx in range(0, len(raw), 2):
        unit = raw[idx] | (raw[idx + 1] << 8)
        value = (value * 31 + unit) & _MASK32
    return _to_signed32(value)


def numeric_seed(text: str) -> Optional[int]:
    """Integer value of a numeric seed string, or ``None`` when it must be hashed.

    Values go through a double first, so ``"1e3"`` is 1000 and ``"1.5"`` or
    ``"1_000"`` are hashed like any other text.
    """
    if _RADIX_SEED_RE.match(text):
        try:
            value = float(int(text, 0))
        except OverflowError:
            return None
    elif _DECIMAL_SEED_RE.match(text):
        value = float(text)
    else:
        return None
    if not value.is_integer():
        return None
    return int(value)


def resolve_seed(value: Any) -> int:
    """Turn user input into the integer seed.

    Integers and numeric strings with an integer value are used as-is; any
    other text is hashed. ``None`` and blank strings raise ``SeedRequiredError``.
    """
    if value is None or isinstance(value, bool):
        raise SeedRequiredError("Seed is required")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            return seed_from_string(repr(value))
        return int(value)

    text = str(value).strip()
    if not text:
        raise SeedRequiredError("Seed is required")
    numeric = numeric_seed(text)
    return numeric if numeric is not None else seed_from_string(text)


def act_shuffle_seed(seed: int) -> int:
    """Derived seed for the act stream; independent of the skill stream."""
    return _to_signed32(int(seed) ^ ACT_STREAM_XOR)


def create_rng(seed: int) -> SeededRNG:
    return SeededRNG(seed)

"""
Mapping raw oracle randomness onto a mint amount.

    amount = (raw mod range_width) + 1

The modulus bounds the value before the add, so every non-negative input maps
into [1, range_width]. Uniformity is only as good as the oracle's output
distribution; the mapping guarantees boundedness, nothing more.
"""

from __future__ import annotations

from .errors import MalformedCallback


class AmountDeriver:
    def __init__(self, range_width: int) -> None:
        if not isinstance(range_width, int) or range_width <= 0:
            raise ValueError("range_width must be a positive int")
        self.range_width = range_width

    @classmethod
    def for_token(cls, max_whole_tokens: int, decimals: int) -> "AmountDeriver":
        return cls(max_whole_tokens * (10 ** decimals))

    @property
    def min_amount(self) -> int:
        return 1

    @property
    def max_amount(self) -> int:
        return self.range_width

    def derive(self, raw: int) -> int:
        if not isinstance(raw, int) or isinstance(raw, bool):
            raise MalformedCallback(handle=None, reason=f"random word must be an int, got {type(raw).__name__}")
        if raw < 0:
            raise MalformedCallback(handle=None, reason="random word must be non-negative")
        return (raw % self.range_width) + 1


__all__ = ["AmountDeriver"]

"""Character-level claim map.

Once a tagging pass claims a span, later passes may not tag any character
inside it, which keeps the final entity list non-overlapping.
"""


class ClaimMap:
    """Bitmap over the characters of one request."""

    def __init__(self, length: int):
        self._claimed = bytearray(length)

    def __len__(self) -> int:
        return len(self._claimed)

    def is_free(self, start: int, end: int) -> bool:
        if start < 0 or end > len(self._claimed) or start >= end:
            return False
        return not any(self._claimed[start:end])

    def claim(self, start: int, end: int) -> None:
        if not self.is_free(start, end):
            raise ValueError(f"Span [{start}, {end}) overlaps an existing claim")
        self._claimed[start:end] = b"\x01" * (end - start)

    def claimed_ratio(self) -> float:
        if not self._claimed:
            return 0.0
        return sum(self._claimed) / len(self._claimed)

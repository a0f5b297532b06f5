"""Cursor over an immutable source buffer.

A ``Scanner`` is a ``(buffer, offset, limit)`` view. Deriving a new scanner
never copies the underlying text; only ``as_str`` materializes a slice.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class Scanner:
    buffer: str = field(repr=False)
    offset: int = 0
    limit: int = -1

    def __post_init__(self) -> None:
        if self.limit == -1:
            object.__setattr__(self, "limit", len(self.buffer))
        if not 0 <= self.offset <= self.limit <= len(self.buffer):
            raise ValueError(
                f"invalid scanner bounds: offset={self.offset}, limit={self.limit}, "
                f"buffer length={len(self.buffer)}"
            )

    @classmethod
    def from_str(cls, text: str) -> "Scanner":
        return cls(text, 0, len(text))

    @property
    def location(self) -> int:
        """Offset of the cursor in the full buffer."""
        return self.offset

    def __len__(self) -> int:
        return self.limit - self.offset

    def is_empty(self) -> bool:
        return self.offset == self.limit

    def as_str(self) -> str:
        return self.buffer[self.offset : self.limit]

    def startswith(self, prefix: str, ignore_case: bool = False) -> bool:
        if not ignore_case:
            return self.buffer.startswith(prefix, self.offset, self.limit)
        if len(prefix) > len(self):
            return False
        head = self.buffer[self.offset : self.offset + len(prefix)]
        return head.casefold() == prefix.casefold()

    def find(self, substring: str) -> int:
        """Index of ``substring`` relative to the cursor, or -1."""
        index = self.buffer.find(substring, self.offset, self.limit)
        return index if index == -1 else index - self.offset

    def match(self, pattern: re.Pattern[str]) -> re.Match[str] | None:
        """Anchor ``pattern`` at the cursor without slicing the buffer."""
        return pattern.match(self.buffer, self.offset, self.limit)

    def __getitem__(self, index: int) -> str:
        if not 0 <= index < len(self):
            raise IndexError(index)
        return self.buffer[self.offset + index]

    def __iter__(self) -> Iterator[str]:
        for i in range(self.offset, self.limit):
            yield self.buffer[i]

    def iter_indices(self) -> Iterator[tuple[int, str]]:
        for i in range(self.offset, self.limit):
            yield i - self.offset, self.buffer[i]

    def take(self, n: int) -> "Scanner":
        return self.split_at(n)[0]

    def advance(self, n: int) -> "Scanner":
        return self.split_at(n)[1]

    def split_at(self, n: int) -> tuple["Scanner", "Scanner"]:
        """Split into ``(consumed, remainder)`` views at relative index ``n``."""
        if not 0 <= n <= len(self):
            raise IndexError(f"cannot split {len(self)} characters at {n}")
        middle = self.offset + n
        return replace(self, limit=middle), replace(self, offset=middle)

"""
Shared cursor over the mutable source buffer.

Every recursive scan works on the same buffer object so that nested scopes
advance a single position, and heredoc bodies spliced out of the text are
gone for every caller.
"""

from __future__ import annotations

import re


class ScanBuffer:
    """Source text plus the current scan position."""

    def __init__(self, text: str, pos: int = 0):
        self.text = text
        self.pos = pos

    def __len__(self) -> int:
        return len(self.text)

    def __repr__(self) -> str:
        return f"ScanBuffer(pos={self.pos}, next={self.peek_text(20)!r})"

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def char(self, offset: int = 0) -> str:
        """Character at ``pos + offset`` ('' past either end)."""
        index = self.pos + offset
        if index < 0:
            return ""
        return self.text[index:index + 1]

    def char_at(self, index: int) -> str:
        return self.text[index:index + 1]

    def advance(self, count: int = 1) -> None:
        self.pos = min(self.pos + count, len(self.text))

    def match(self, pattern: re.Pattern) -> re.Match | None:
        """Match ``pattern`` at the cursor; advance past it on success only."""
        m = pattern.match(self.text, self.pos)
        if m:
            self.pos = m.end()
        return m

    def peek(self, pattern: re.Pattern) -> re.Match | None:
        """Match ``pattern`` at the cursor without moving."""
        return pattern.match(self.text, self.pos)

    def peek_text(self, length: int) -> str:
        return self.text[self.pos:self.pos + length]

    def slice(self, start: int, end: int | None = None) -> str:
        return self.text[start:self.pos if end is None else end]

    def splice(self, start: int, end: int) -> None:
        """Remove ``text[start:end]``; the cursor is left untouched."""
        self.text = self.text[:start] + self.text[end:]

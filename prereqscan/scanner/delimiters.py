"""
Delimiter utilities for quoted and regexp-like constructs.

Bracketing delimiters pair up (``(`` with ``)``, ``[`` with ``]``, ``{`` with
``}``, ``<`` with ``>``) and nest; any other non-space character closes
itself.  Compiled patterns are memoized per delimiter.
"""

from __future__ import annotations

import re
from functools import lru_cache

from .buffer import ScanBuffer

PAIRS = {"(": ")", "[": "]", "{": "}", "<": ">"}
REVERSE_PAIRS = {close: open_ for open_, close in PAIRS.items()}

# Characters that never appear unescaped in a one-shot regexp body
_REGEXP_SPECIALS = "\\(){}[]<>"


def _char_class(chars, negate: bool = False) -> str:
    body = "".join(re.escape(c) for c in sorted(set(chars)))
    return f"[{'^' if negate else ''}{body}]"


def is_bracket(delimiter: str) -> bool:
    return delimiter in PAIRS


def closing_delimiter(delimiter: str) -> str:
    """Closing counterpart of ``delimiter`` (itself unless it is a bracket)."""
    return PAIRS.get(delimiter, delimiter)


def opening_delimiter(delimiter: str) -> str:
    return REVERSE_PAIRS.get(delimiter, delimiter)


def mirror(text: str) -> str:
    """Swap every opening bracket in ``text`` for its closing bracket."""
    return "".join(PAIRS.get(c, c) for c in text)


@lru_cache(maxsize=None)
def string_body(delimiter: str) -> re.Pattern:
    """
    Body of a string closed by ``delimiter``, honoring backslash escapes.

    The pattern stops just before the closing delimiter.
    """
    if delimiter == "\\":
        return re.compile(r"[^\\]*(?:\\\\[^\\]*)*", re.S)
    stop = _char_class("\\" + delimiter, negate=True)
    return re.compile(rf"{stop}*(?:\\.{stop}*)*", re.S)


@lru_cache(maxsize=None)
def string_body_with_end(delimiter: str) -> re.Pattern:
    """Like :func:`string_body` but also consumes the closing delimiter."""
    return re.compile(string_body(delimiter).pattern + re.escape(delimiter), re.S)


@lru_cache(maxsize=None)
def regexp_shortcut(ldel: str, rdel: str | None = None) -> re.Pattern:
    """
    Fast path for a regexp body containing no brackets.

    Matches the body and its closing delimiter, or fails, in which case the
    caller falls back to a full structural scan.
    """
    rdel = rdel or ldel
    stop = _char_class(_REGEXP_SPECIALS + ldel + rdel, negate=True)
    return re.compile(rf"{stop}*(?:\\.{stop}*)*{re.escape(rdel)}", re.S)


@lru_cache(maxsize=None)
def balanced_skip(ldel: str) -> re.Pattern:
    """Run of characters that are neither delimiter nor backslash."""
    return re.compile(_char_class(ldel + closing_delimiter(ldel) + "\\", negate=True) + "+")


@lru_cache(maxsize=None)
def extended_comment(rdel: str) -> re.Pattern:
    """A ``#`` comment inside an extended regexp, up to the end of line."""
    return re.compile(rf"#{_char_class(rdel, negate=True)}*?\n")


def skip_balanced(buf: ScanBuffer, ldel: str) -> int:
    """
    Advance past a nested-bracket body whose opener was already consumed.

    Backslash escapes skip the next character.  Returns the remaining
    nesting depth: 0 on success, a positive value if the buffer ran out.
    """
    rdel = closing_delimiter(ldel)
    skip = balanced_skip(ldel)
    depth = 1
    while True:
        c = buf.char()
        if c == "\\":
            buf.advance(2)
            continue
        if c == ldel:
            depth += 1
            buf.advance()
            continue
        if c == rdel:
            buf.advance()
            depth -= 1
            if not depth:
                return 0
            continue
        if buf.match(skip):
            continue
        return depth

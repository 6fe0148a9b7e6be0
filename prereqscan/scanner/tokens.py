"""
Token and stack-frame types produced by the scanner.

A token is a ``(value, desc, kind)`` triple:

- ``value`` is raw text, or a structured literal: a :class:`QuotedString`
  for strings and quote-like operators, a :class:`Heredoc` for here-documents,
  or a list of tokens for a nested bracket scope;
- ``desc`` is a diagnostic label (``NUMBER``, ``HEREDOC``, ``()``...);
- ``kind`` is the :class:`TokenClass` used for parse decisions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple


class TokenClass(Enum):
    """Token classes used to disambiguate what may follow a token."""

    NONE = ""
    OP = "OP"
    TERM = "TERM"
    VARIABLE = "VARIABLE"
    WORD = "WORD"
    KEYWORD = "KEYWORD"
    METHOD = "METHOD"
    ARROW = "ARROW"
    STRING = "STRING"


class QuotedString(NamedTuple):
    """Body of a quoted literal and the quote character or operator that opened it."""

    body: str
    delimiter: str


class Heredoc(NamedTuple):
    """A here-document: its body, the ``<<LABEL`` introducer and the terminator line."""

    body: str
    introducer: str
    terminator: str


@dataclass
class Token:
    """
    A single scanned token.

    Attributes:
        value: Raw text or structured literal
        desc: Diagnostic label
        kind: Token class
    """

    value: Any
    desc: str = ""
    kind: TokenClass = TokenClass.NONE

    @property
    def word(self) -> str | None:
        """The token text, or None for structured tokens."""
        return self.value if isinstance(self.value, str) else None

    @property
    def text(self) -> str:
        """The token text, or an empty string for structured tokens."""
        return self.value if isinstance(self.value, str) else ""

    def __repr__(self) -> str:
        return f"Token({self.value!r}, {self.desc!r}, {self.kind.name})"


@dataclass(frozen=True)
class StackFrame:
    """
    An open bracket.

    Attributes:
        opener: Opening token (``{``, ``(``, ``[``, ``${``, ``@{``...)
        pos: Offset of the opener in the buffer
        owner: Block-introducing keyword owning a brace, or a marker
            such as ``VARIABLE`` / ``FUNC`` for dereference brackets
    """

    opener: str
    pos: int
    owner: str = ""

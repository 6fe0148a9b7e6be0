"""
Matchers for ``q``, ``qq``, ``qw`` and ``qx`` quote-like operators.

The cursor sits just after the operator name.  Whitespace (and, after a
leading space, comment lines) may separate the operator from its delimiter;
a ``#`` directly after the operator is itself the delimiter.
"""

from __future__ import annotations

import re

from ..core.errors import MatchError
from .buffer import ScanBuffer
from .delimiters import is_bracket, skip_balanced, string_body_with_end
from .tokens import QuotedString

COMMENT = re.compile(r"(?:[ \t\f\v\n]*#[^\n]*(?:\n|\Z))+")
LEADING_SPACE = re.compile(r"(?:\s" + COMMENT.pattern + r")?\s*", re.S)
DELIMITER = re.compile(r"\S")


def match_quotelike(buf: ScanBuffer, op: str, context_chars: int = 100) -> QuotedString:
    """
    Match the body of a quote-like operator.

    Returns:
        The body (without delimiters) tagged with ``op``

    Raises:
        MatchError: If no delimiter follows or the closing one is missing
    """
    buf.match(LEADING_SPACE)
    m = buf.match(DELIMITER)
    if not m:
        raise MatchError(f"No block delimiter found after {op}", buf.peek_text(context_chars))
    ldel = m.group()
    start = buf.pos
    if is_bracket(ldel):
        if skip_balanced(buf, ldel):
            raise MatchError(
                f"Unmatched {ldel} in {op} string", buf.text[start:start + context_chars]
            )
    elif not buf.match(string_body_with_end(ldel)):
        raise MatchError(f"Closing delimiter {ldel} not found for {op}", buf.peek_text(context_chars))
    return QuotedString(buf.text[start:buf.pos - 1], op)

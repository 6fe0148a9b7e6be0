"""
Here-document matching.

A heredoc body is spliced out of the shared buffer once matched, so that the
rest of the introducing line is scanned normally and scanning resumes after
the terminator without ever seeing the body.
"""

from __future__ import annotations

import re

from ..core.errors import MatchError
from .buffer import ScanBuffer
from .tokens import Heredoc

INTRODUCER = re.compile(r"<<\s*")
LOOKS_LIKE_HEREDOC = re.compile(r"<<\s*(?:[A-Za-z_]|['\"`])")
BARE_LABEL = re.compile(r"[A-Za-z_]\w*")
QUOTED_LABEL = re.compile(
    r"'([^\\']*(?:\\.[^\\']*)*)'"
    r"|\"([^\\\"]*(?:\\.[^\\\"]*)*)\""
    r"|`([^\\`]*(?:\\.[^\\`]*)*)`",
    re.S,
)
REST_OF_LINE = re.compile(r".*\n")
ESCAPE = re.compile(r"\\(.)")


def match_heredoc(buf: ScanBuffer) -> Heredoc:
    """
    Match a heredoc introduced at the cursor and splice its body out.

    On return the cursor sits right after the label, on the same line.

    Raises:
        MatchError: If no label follows ``<<`` or the terminator line is
            missing; the caller then treats ``<<`` as an operator
    """
    start = buf.pos
    buf.match(INTRODUCER)
    m = buf.match(BARE_LABEL)
    if m:
        label = m.group()
    else:
        m = buf.match(QUOTED_LABEL)
        if not m:
            buf.pos = start
            raise MatchError("No heredoc label found", buf.peek_text(20))
        label = ESCAPE.sub(r"\1", m.group(m.lastindex))
    introducer = buf.text[start:buf.pos]
    label_end = buf.pos

    # The body starts on the line after the introducer
    buf.match(REST_OF_LINE)
    body_start = buf.pos
    buf.pos -= 1

    terminator = re.compile(r".*?\n(?=" + re.escape(label) + r"(?:\n|\Z))", re.S)
    if not buf.match(terminator):
        buf.pos = start
        raise MatchError(f"Missing here-doc terminator {label!r}", buf.peek_text(20))
    body_end = buf.pos
    end = body_end + len(label)
    if buf.char_at(end) == "\n":
        end += 1

    body = buf.text[body_start:body_end]
    terminator_line = buf.text[body_end:end]
    buf.splice(body_start, end)
    buf.pos = label_end
    return Heredoc(body, introducer, terminator_line)

"""
Regexp, substitution and transliteration matchers.

Simple bodies are taken by a one-shot pattern.  Anything with brackets,
embedded code blocks, interpolated ``${...}`` expressions or extended-mode
comments goes through :meth:`PatternMatcher.scan_body`, which tracks bracket
nesting and re-enters the scanner for embedded code.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from ..core.errors import MatchError, ScanError
from .buffer import ScanBuffer
from .delimiters import (
    closing_delimiter,
    extended_comment,
    is_bracket,
    mirror,
    opening_delimiter,
    regexp_shortcut,
    skip_balanced,
    string_body_with_end,
)
from .flags import ScopeFlags
from .quotelike import COMMENT, DELIMITER, LEADING_SPACE

if TYPE_CHECKING:
    from ..context import Context
    from .tokenizer import Tokenizer

logger = logging.getLogger(__name__)

MATCH_MODIFIERS = re.compile(r"[msixpodualgcn]*")
SUBSTITUTE_MODIFIERS = re.compile(r"[msixpodualgcern]*")
TRANSLITERATE_MODIFIERS = re.compile(r"[cdsr]*")
X_MODIFIER = re.compile(r"[a-wyz]*x")

NEWLINE_RUN = re.compile(r"\n\s*")
SPACE_RUN = re.compile(r"\s*")
ESCAPED_CHAR = re.compile(r"\\.", re.S)
POSIX_CLASS = re.compile(r"\[\[:\^?\w+:\]\]")
CHAR_CLASS = re.compile(r"\[[^\\\]]*(?:\\.[^\\\]]*)*\]", re.S)
QUANTIFIER = re.compile(r"\{[0-9]+(?:,(?:[0-9]+)?)?\}")
CODE_BLOCK = re.compile(r"\(\?\??(?=\{)")
INLINE_COMMENT = re.compile(r"\(\?#[^\\)]*(?:\\.[^\\)]*)*\)", re.S)
GROUP_OPEN = re.compile(r"\((?:<[!=]|<\w+?>|>)?")
ANY_RUN = re.compile(r"\w+|.", re.S)
SECOND_DELIMITER = re.compile(r"\s*(\S)")


class PatternMatcher:
    """
    Matches regexp-like constructs for a :class:`Tokenizer`.

    Args:
        scanner: Scanner used to parse code embedded in a pattern
        context_chars: Number of characters of context kept in diagnostics
    """

    def __init__(self, scanner: "Tokenizer", context_chars: int = 100):
        self.scanner = scanner
        self.context_chars = context_chars

    def _excerpt(self, buf: ScanBuffer, start: int) -> str:
        return buf.text[start:start + self.context_chars]

    def match_slash(self, ctx: "Context", buf: ScanBuffer, start: int, undoubted: bool) -> str:
        """
        Match a slash-delimited regexp starting at offset ``start``.

        ``undoubted`` is set when the preceding token makes a regexp certain;
        otherwise stray outer closing brackets abort the match so that a
        division is assumed instead.
        """
        buf.pos = start + 1
        if not buf.match(regexp_shortcut("/")):
            try:
                self.scan_body(ctx, buf, "/", "/", "m" if undoubted else "")
            except MatchError as exc:
                raise MatchError(
                    f"Closing delimiter was not found: {exc.reason}", exc.context
                ) from exc
        modifiers = buf.match(MATCH_MODIFIERS).group()
        text = buf.text[start:buf.pos]
        if "\n" in text and "x" not in modifiers:
            raise MatchError("Multiline regexp without /x", self._excerpt(buf, start))
        return text

    def match_regexp(self, ctx: "Context", buf: ScanBuffer, op: str) -> str:
        """Match the delimiters, body and modifiers after ``m`` or ``qr``."""
        start = buf.pos
        buf.match(LEADING_SPACE)
        m = buf.match(DELIMITER)
        if not m:
            raise MatchError(f"No block delimiter found after {op}", self._excerpt(buf, start))
        ldel = m.group()
        rdel = closing_delimiter(ldel)
        if not buf.match(regexp_shortcut(ldel, rdel)):
            self.scan_body(ctx, buf, ldel, rdel, op)
        buf.match(MATCH_MODIFIERS)
        return buf.text[start:buf.pos]

    def match_substitute(self, ctx: "Context", buf: ScanBuffer) -> str:
        """Match both bodies and the modifiers of ``s///``."""
        start = buf.pos
        buf.match(LEADING_SPACE)
        m = buf.match(DELIMITER)
        if not m:
            raise MatchError("No block delimiter found after s", self._excerpt(buf, start))
        ldel = m.group()
        rdel = closing_delimiter(ldel)
        if ldel == "\\" or not buf.match(regexp_shortcut(ldel, rdel)):
            self.scan_body(ctx, buf, ldel, rdel, "s")
        self.scan_replacement(buf, ldel, "s")
        buf.match(SUBSTITUTE_MODIFIERS)
        return buf.text[start:buf.pos]

    def match_transliterate(self, buf: ScanBuffer, op: str) -> str:
        """Match both lists and the modifiers of ``tr///`` or ``y///``."""
        start = buf.pos
        buf.match(LEADING_SPACE)
        m = buf.match(DELIMITER)
        if not m:
            raise MatchError(f"No block delimiter found after {op}", self._excerpt(buf, start))
        ldel = m.group()
        if is_bracket(ldel):
            if not buf.match(string_body_with_end(closing_delimiter(ldel))):
                raise MatchError(f"Unmatched {ldel} in {op}", self._excerpt(buf, start))
            buf.match(COMMENT)
            m = buf.match(SECOND_DELIMITER)
            if not m:
                raise MatchError(f"Missing second block for {op}", self._excerpt(buf, start))
            ldel = m.group(1)
        elif not buf.match(string_body_with_end(ldel)):
            raise MatchError(f"Closing delimiter {ldel} not found for {op}", self._excerpt(buf, start))
        if not buf.match(string_body_with_end(closing_delimiter(ldel))):
            raise MatchError(f"Unterminated replacement list for {op}", self._excerpt(buf, start))
        buf.match(TRANSLITERATE_MODIFIERS)
        return buf.text[start:buf.pos]

    def scan_replacement(self, buf: ScanBuffer, ldel: str, op: str) -> str:
        """
        Match the second body of a substitution.

        With bracketing delimiters the second body has its own delimiter,
        possibly after whitespace and comments.
        """
        start = buf.pos
        if is_bracket(ldel):
            buf.match(COMMENT)
            m = buf.match(SECOND_DELIMITER)
            if not m:
                raise MatchError(f"Missing second block for quotelike {op}", self._excerpt(buf, start))
            ldel = m.group(1)
        if is_bracket(ldel):
            if skip_balanced(buf, ldel):
                raise MatchError(f"Unmatched {ldel} in second block of {op}", self._excerpt(buf, start))
        elif not buf.match(string_body_with_end(ldel)):
            raise MatchError(f"Closing delimiter {ldel} not found for {op}", self._excerpt(buf, start))
        return buf.text[start:buf.pos]

    def scan_body(self, ctx: "Context", buf: ScanBuffer, ldel: str, rdel: str, op: str) -> str:
        """
        Structurally scan a regexp body up to its closing delimiter.

        Tracks nested groups, character classes, quantifiers and escapes,
        skips extended-mode comments, and hands ``(?{...})`` code blocks and
        ``${...}`` / ``@{...}`` interpolations back to the scanner.  When
        ``op`` is empty the pattern may only be a guessed regexp, and closing
        brackets of the enclosing scope end the match with an error.

        Raises:
            MatchError: If the body is unterminated or structurally broken
        """
        start = buf.pos
        outer_open = outer_close = None
        if ctx.stack:
            outer_open = ctx.stack[-1].opener
            outer_close = mirror(outer_open)

        nesting = [ldel]
        multiline = saw_sharp = False
        while True:
            p = buf.pos
            c = buf.char()
            if c == "\n":
                buf.match(NEWLINE_RUN)
                multiline = True
                saw_sharp = False
                continue
            if c in (" ", "\t"):
                buf.match(SPACE_RUN)
                continue
            if c == "#" and rdel != "#":
                if not (multiline and buf.match(extended_comment(rdel))):
                    buf.pos = p + 1
                    saw_sharp = True
                continue
            if c == "\\" and rdel != "\\" and buf.match(ESCAPED_CHAR):
                continue
            if c == "[" and (buf.match(POSIX_CLASS) or buf.match(CHAR_CLASS)):
                continue
            if c == rdel:
                buf.pos = p + 1
                if saw_sharp:
                    # A closing delimiter after '#' is either the real end
                    # of a /x pattern or part of a comment.
                    resume = p + 1
                    if op == "s":
                        try:
                            self.scan_replacement(buf, ldel, op)
                        except MatchError:
                            buf.pos = resume
                            continue
                    if buf.peek(X_MODIFIER):
                        buf.pos = resume
                        nesting = []
                        break
                    buf.pos = resume
                    if multiline:
                        continue
                expected = rdel if ldel == rdel else opening_delimiter(rdel)
                while nesting:
                    if nesting.pop() == expected:
                        break
                if not nesting:
                    break
                continue
            elif c == ldel:
                buf.pos = p + 1
                if not (multiline and saw_sharp):
                    nesting.append(ldel)
                    continue
            if c == "{" and buf.match(QUANTIFIER):
                continue
            if c == "(":
                if buf.char_at(p + 1) == "?" and not (multiline and saw_sharp):
                    if buf.match(CODE_BLOCK):
                        nesting.append("(")
                        self._scan_code(ctx, buf)
                        continue
                    if buf.match(INLINE_COMMENT):
                        continue
                if buf.match(GROUP_OPEN):
                    nesting.append("(")
                    continue
            if c in ("$", "@") and buf.char_at(p + 1) == "{":
                saved_stack = list(ctx.stack)
                try:
                    self.scanner.scan(ctx, buf, ScopeFlags.EXPECTS_BRACKET)
                except ScanError as exc:
                    logger.debug("Interpolation at %d is not code: %s", p, exc.message)
                    buf.pos = p
                    ctx.stack = saved_stack
                if buf.pos > p:
                    continue
            if c == ")" and nesting and nesting[-1] == "(":
                nesting.pop()
                buf.pos = p + 1
                continue
            if not op and outer_open is not None:
                if c == outer_open:
                    nesting.append(c)
                    buf.pos = p + 1
                    continue
                if c == outer_close:
                    if nesting and nesting[-1] == outer_open:
                        nesting.pop()
                        buf.pos = p + 1
                        continue
                    raise MatchError(
                        f"Outer closing delimiter {outer_close} is found", self._excerpt(buf, start)
                    )
            if buf.match(ANY_RUN):
                continue
            break

        if nesting:
            raise MatchError(
                "Unmatched opening bracket(s): " + "..".join(nesting) + "..",
                self._excerpt(buf, start),
            )
        return buf.text[start:buf.pos]

    def _scan_code(self, ctx: "Context", buf: ScanBuffer) -> None:
        """Scan a ``{...}`` code block embedded in a regexp."""
        saved_stack = list(ctx.stack)
        start = buf.pos
        try:
            self.scanner.scan(ctx, buf, ScopeFlags.EXPECTS_BRACKET)
        except ScanError as exc:
            ctx.stack = saved_stack
            raise MatchError(f"Broken code block in regexp: {exc.message}", self._excerpt(buf, start)) from exc

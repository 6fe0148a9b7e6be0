"""
Recursive tokenizer for Perl source.

The tokenizer does not build a syntax tree.  It walks the buffer one token
at a time, keeps just enough state per bracket scope to tell a regexp from a
division, a hash subscript from a block, or a keyword from a bareword, and
hands the tokens of statements that may declare a dependency to the
statement dispatcher.

Each call to :meth:`Tokenizer.scan` handles one scope.  Opening brackets push
a :class:`StackFrame` on the context and recurse; the matching closing
bracket pops the frame and ends the nested call.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional

from ..core.config import ScannerSettings, get_settings
from ..core.errors import BracketMismatchError, MatchError, ScanError
from .buffer import ScanBuffer
from .delimiters import REVERSE_PAIRS, string_body
from .flags import EXPR_RESET, RESCAN, SENTENCE_RESET, ScopeFlags
from .heredoc import LOOKS_LIKE_HEREDOC, match_heredoc
from .keywords import (
    ENDS_EXPR,
    EXPECTS_BLOCK,
    EXPECTS_BLOCK_LIST,
    EXPECTS_EXPR_BLOCK,
    EXPECTS_FH_OR_BLOCK_LIST,
    EXPECTS_WORD,
    HAS_SIDE_EFFECT,
    IS_CONDITIONAL,
    KEYWORDS,
    REGEXP_MAY_FOLLOW,
)
from .quotelike import COMMENT, match_quotelike
from .regexp import PatternMatcher
from .tokens import QuotedString, StackFrame, Token, TokenClass

if TYPE_CHECKING:
    from ..context import Context

logger = logging.getLogger(__name__)

NONE = TokenClass.NONE
OP = TokenClass.OP
TERM = TokenClass.TERM
VARIABLE = TokenClass.VARIABLE
WORD = TokenClass.WORD
KEYWORD = TokenClass.KEYWORD
METHOD = TokenClass.METHOD
ARROW = TokenClass.ARROW
STRING = TokenClass.STRING

# Lexer results besides a token: None means "consumed, nothing to report"
STOP = object()
FALLTHROUGH = object()

NAMESPACE = r"(?:::|')?(?:\w+(?:(?:::|')\w+)*)"
NONBLOCK_CHARS = r"[^\\(){}\[\]<>/\"'`#q~,\s]*"
VARIABLE_NAME = (
    rf"(?:{NAMESPACE}"
    r"|\^[A-Z\]]"
    r"|\{\^[A-Z0-9_]+\}"
    r"|[_\"()<\\&`'+\-,./%#:=~|?!@*\[\]^])"
)

POD = re.compile(r"=[a-zA-Z]\w*\b.*?(?:\n=cut\b.*?(?:\n|\Z)|\Z)", re.S)
NEWLINES = re.compile(r"\n+")
BLANKS = re.compile(r"[ \t]+")
END_OF_CODE = re.compile(r"__(?:DATA|END)__\b")

SCALAR = re.compile(rf"\${VARIABLE_NAME}")
SCALAR_BRACED = re.compile(r"\$\{[\w\s]+\}")
SCALAR_DEREF = re.compile(rf"\$(?:\$)+{NAMESPACE}")
ARRAY_LAST = re.compile(rf"\$#{NAMESPACE}")
ARRAY_LAST_BRACED = re.compile(r"\$#\{[\w\s]+\}")
ARRAY_ARGS = re.compile(r"@_\b")
ARRAY = re.compile(rf"@{NAMESPACE}")
ARRAY_BRACED = re.compile(r"@\{[\w\s]+\}")
ARRAY_DEREF = re.compile(rf"@\${NAMESPACE}")
HASH = re.compile(rf"%{NAMESPACE}")
HASH_BRACED = re.compile(r"%\{[\w\s]+\}")
HASH_DEREF = re.compile(rf"%\${NAMESPACE}")
GLOB = re.compile(rf"\*{NAMESPACE}")
GLOB_BRACED = re.compile(r"\*\{[\w\s]+\}")
CODE = re.compile(rf"&{NAMESPACE}")
CODE_BRACED = re.compile(r"&\{[\w\s]+\}")
CODE_DEREF = re.compile(rf"&\${NAMESPACE}")
REF_BRACED = re.compile(r"\\\{[\w\s]+\}")
FILE_TEST = re.compile(r"-[ABCMORSTWXbcdefgkloprstuwxz]\b")

HASH_SHORTCUT = re.compile(
    rf"\{{\s*(?:\w+|(['\"])[\w\s]+\1|{NONBLOCK_CHARS})\s*(?<!\$)\}}"
)
INDEX_SHORTCUT = re.compile(rf"\[{NONBLOCK_CHARS}\]")
PAREN_SHORTCUT = re.compile(rf"\(({NONBLOCK_CHARS}(?<!\$))\)")
PROTOTYPE = re.compile(r"\([^)]*?\)")
READLINE = re.compile(r"<(?:\\.|\w|[./-]|\[[^\]]*\]|\{[^}]*\}|\*|\?|~|\$)*(?<!-)>", re.S)
ATTRIBUTE = re.compile(r":?[\w\s]+")
ATTRIBUTE_ARGS = re.compile(r"[^\\()]+")

HEX = re.compile(r"0x[0-9A-Fa-f_]+")
BINARY = re.compile(r"0b[01_]+")
NUMBER = re.compile(r"(?:0|[1-9][0-9_]*)(?:\.[0-9][0-9_]*)?")
VERSION_TAIL = re.compile(r"(?:\.[0-9_]+)+")
EXPONENT = re.compile(r"[Ee][+-]?[0-9]+")
VSTRING_HEAD = re.compile(r"v(?:0|[1-9][0-9]*)$")
VSTRING_TAIL = re.compile(r"(?:\.[0-9][0-9_]*)+")

WORD_RUN = re.compile(r"\w+")
NAMESPACE_TAIL = re.compile(r"(?:(?:::|')\w+)+\b")
FORMAT_BODY = re.compile(r".*?\n.*?\n\.\n", re.S)
REPEAT_OP = re.compile(r"x\b(?!\s*=>)")
QUOTE_OP = re.compile(r"(qq?)\b(?!\s*=>)")
WORDS_OP = re.compile(r"qw\b(?!\s*=>)")
COMMAND_OP = re.compile(r"qx\b(?!\s*=>)")
QR_OP = re.compile(r"qr\b(?!\s*=>)")
MATCH_OP = re.compile(r"m\b(?!\s*=>)")
SUBST_OP = re.compile(r"s\b(?!\s*=>)")
TRANS_OP = re.compile(r"(tr|y)\b(?!\s*=>)")

CONTROL = re.compile(r"[\x00-\x1f\x7f]+")
ASCII_RUN = re.compile(r"[\x00-\x7f]+")
NON_ASCII = re.compile(r"[^\x00-\x7f](?:[^\x00-\x7f]|\w)*")
NON_SPACE = re.compile(r"\S+")

EVAL_STRING_HINT = re.compile(
    r"\b(?:(?:use|no)\s+[A-Za-z]|require\s+(?:q[qw]?.|['\"])?[A-Za-z])"
)
EVAL_HEREDOC_HINT = re.compile(r"\b(?:use|require|no)\s+[A-Za-z]")
UNESCAPE = re.compile(r"\\(.)")

# Exact operator spellings, longest first, keyed by their first character
OPERATORS = {
    "|": ("||=", "||", "|=", "|"),
    "^": ("^=", "^"),
    "!": ("!~", "!=", "!"),
    "~": ("~~", "~"),
    "?": ("?",),
    ".": ("...", "..", ".=", "."),
}


@dataclass
class ScopeState:
    """Mutable state of one scope of :meth:`Tokenizer.scan`."""

    parent: ScopeFlags
    current: ScopeFlags = ScopeFlags.NONE
    line_top: bool = True
    waiting_for_block: bool = False
    prev: Token = field(default_factory=lambda: Token("", "", NONE))
    keywords: list[str] = field(default_factory=list)
    tokens: list[Token] = field(default_factory=list)
    scope_tokens: list[Token] = field(default_factory=list)
    caller_package: Optional[str] = None
    prepend: Optional[str] = None
    push: Optional[StackFrame] = None
    pop: Optional[str] = None

    @property
    def flags(self) -> ScopeFlags:
        return self.current | self.parent

    @property
    def prev_kind(self) -> TokenClass:
        return self.prev.kind

    @property
    def prev_word(self) -> str:
        return self.prev.text

    def prev_is_keyword_in(self, table) -> bool:
        return self.prev.kind is KEYWORD and self.prev.text in table

    def last_keyword_is_prev(self) -> bool:
        return (
            self.prev.kind is KEYWORD
            and bool(self.keywords)
            and self.keywords[-1] == self.prev.text
        )


class Tokenizer:
    """
    Scans Perl source for statements of interest.

    Args:
        settings: Scanner settings (nesting ceiling, diagnostic context size)
    """

    def __init__(self, settings: Optional[ScannerSettings] = None):
        self.settings = settings or get_settings()
        self.patterns = PatternMatcher(self, self.settings.CONTEXT_CHARS)
        self._handlers: dict[str, Callable[..., Any]] = {
            " ": self._lex_blank,
            "\t": self._lex_blank,
            "_": self._lex_underscore,
            "#": self._lex_comment,
            ";": self._lex_semicolon,
            "$": self._lex_dollar,
            "@": self._lex_at,
            "%": self._lex_percent,
            "*": self._lex_star,
            "&": self._lex_ampersand,
            "\\": self._lex_backslash,
            "-": self._lex_minus,
            '"': self._lex_string,
            "'": self._lex_string,
            "`": self._lex_string,
            "/": self._lex_slash,
            "{": self._lex_open_brace,
            "[": self._lex_open_bracket,
            "(": self._lex_open_paren,
            "}": self._lex_close,
            "]": self._lex_close,
            ")": self._lex_close,
            "<": self._lex_less,
            ":": self._lex_colon,
            "=": self._lex_equals,
            ">": self._lex_greater,
            "+": self._lex_plus,
            ",": self._lex_comma,
            "0": self._lex_zero,
        }
        for char in OPERATORS:
            self._handlers[char] = self._lex_operator

    # ------------------------------------------------------------------
    # Scope loop
    # ------------------------------------------------------------------

    def scan(
        self, ctx: "Context", buf: ScanBuffer, parent: ScopeFlags = ScopeFlags.NONE
    ) -> list[Token]:
        """
        Scan one scope from the cursor.

        Returns when the closing bracket of the scope is consumed, the buffer
        is exhausted, scanning has been ended, or a diagnostic was recorded.

        Args:
            ctx: Scan context receiving requirements and diagnostics
            buf: Shared source buffer
            parent: Flags inherited from the enclosing scope

        Returns:
            Tokens seen in this scope, when the parent keeps tokens

        Raises:
            ScanError: On bracket mismatch or excessive nesting
        """
        if ctx.ended:
            return []
        if ctx.depth >= self.settings.MAX_DEPTH:
            raise ScanError("nesting too deep", {"pos": buf.pos})
        ctx.depth += 1
        try:
            return self._scan_scope(ctx, buf, ScopeState(parent=parent))
        finally:
            ctx.depth -= 1

    def _scan_scope(self, ctx: "Context", buf: ScanBuffer, scope: ScopeState) -> list[Token]:
        while True:
            token = self._lex(ctx, buf, scope)
            if token is STOP:
                break
            if token is not None and self._settle(ctx, buf, scope, token):
                break
            if ctx.errors and not scope.parent & ScopeFlags.STRING_EVAL:
                break
        if scope.tokens and scope.tokens[0].word is not None:
            self._dispatch(ctx, scope)
        return scope.scope_tokens

    def _settle(self, ctx: "Context", buf: ScanBuffer, scope: ScopeState, token: Token) -> bool:
        """Update scope state after ``token``; True ends the scope."""
        word = token.word

        if not scope.current & ScopeFlags.EXPR:
            scope.current |= ScopeFlags.EXPR
        elif scope.current & ScopeFlags.EXPR_END or word in ENDS_EXPR:
            scope.keywords.clear()
            scope.current &= ~EXPR_RESET

        scope.prepend = None
        if scope.parent & ScopeFlags.KEEP_TOKENS:
            scope.scope_tokens.append(token)
            if word in ("-", "+"):
                scope.prepend = word

        if (
            not scope.current & ScopeFlags.KEEP_TOKENS
            and word is not None
            and token.kind is not METHOD
            and (ctx.has_statement_handler(word) or ctx.has_callback_for("keyword", word))
        ):
            scope.current |= ScopeFlags.KEEP_TOKENS

        if word in EXPECTS_BLOCK:
            scope.waiting_for_block = True

        stack_top = ctx.stack[-1].opener if ctx.stack else None
        if scope.current & ScopeFlags.EVAL or (scope.parent & ScopeFlags.EVAL and stack_top != "{"):
            if token.kind is STRING:
                if EVAL_STRING_HINT.search(token.value.body):
                    self._rescan_string(ctx, scope, token.value.body)
                scope.current &= ~ScopeFlags.EVAL
            elif token.desc == "HEREDOC":
                if EVAL_HEREDOC_HINT.search(token.value.body):
                    self._rescan_string(ctx, scope, token.value.body)
                scope.current &= ~ScopeFlags.EVAL
            ctx.eval = bool(scope.flags & ScopeFlags.EVAL)
        if word == "eval":
            scope.current |= ScopeFlags.EVAL
            ctx.eval = True

        if scope.current & ScopeFlags.KEEP_TOKENS:
            scope.tokens.append(token)
            if word in ("-", "+"):
                scope.prepend = word
            if token.kind is KEYWORD and word in HAS_SIDE_EFFECT:
                scope.current |= ScopeFlags.SIDE_EFFECT

        if scope.push is not None:
            self._descend(ctx, buf, scope, token)

        if scope.pop is not None:
            closer, scope.pop = scope.pop, None
            if ctx.stack:
                frame = ctx.stack.pop()
                opener = frame.opener[-1]
                if REVERSE_PAIRS[closer] != opener:
                    excerpt = buf.text[frame.pos:buf.pos]
                    raise BracketMismatchError(opener, closer, excerpt)
                scope.current |= ScopeFlags.SCOPE_END

        if scope.current & ScopeFlags.SENTENCE_END:
            if scope.current & ScopeFlags.KEEP_TOKENS and scope.tokens:
                self._dispatch(ctx, scope)
            scope.tokens = []
            scope.keywords = []
            scope.current &= ~SENTENCE_RESET
            scope.caller_package = None
            token = Token("", "", NONE)

        if scope.current & ScopeFlags.SCOPE_END or ctx.ended:
            return True
        scope.prev = token
        return False

    def _descend(self, ctx: "Context", buf: ScanBuffer, scope: ScopeState, token: Token) -> None:
        """Scan the bracketed scope opened by ``token`` and fold its tokens in."""
        frame, scope.push = scope.push, None
        ctx.stack.append(frame)

        child = scope.flags
        if token.word == "{" and frame.owner in IS_CONDITIONAL:
            child |= ScopeFlags.CONDITIONAL
        scanned = self.scan(ctx, buf, child & RESCAN)

        if token.word == "{" and scope.current & ScopeFlags.EVAL:
            scope.current &= ~ScopeFlags.EVAL
            ctx.eval = bool(scope.flags & ScopeFlags.EVAL)

        if scope.current & ScopeFlags.KEEP_TOKENS:
            self._fold(scope.tokens, scanned)
        elif scope.parent & ScopeFlags.KEEP_TOKENS:
            self._fold(scope.scope_tokens, scanned)

        if frame.opener == "(" and scope.last_keyword_is_prev() and scope.prev_word not in EXPECTS_EXPR_BLOCK:
            scope.keywords.pop()

        if (
            frame.opener == "{"
            and scope.keywords
            and scope.keywords[0] in EXPECTS_BLOCK
            and scope.keywords[-1] not in EXPECTS_BLOCK_LIST
            and not (scope.tokens and scope.keywords[-1] in ("sub", "eval"))
        ):
            scope.current |= ScopeFlags.SENTENCE_END

    @staticmethod
    def _fold(tokens: list[Token], scanned: list[Token]) -> None:
        """Replace the opening bracket in ``tokens`` by the nested token list."""
        start = tokens.pop().text if tokens else ""
        end = scanned.pop().text if scanned else ""
        tokens.append(Token(scanned, start + end, TERM))

    def _dispatch(self, ctx: "Context", scope: ScopeState) -> None:
        tokens = scope.tokens
        first = tokens[0].word
        if first == "->":
            first = tokens[1].word if len(tokens) > 1 else None
            if first in ("use", "no"):
                first = None
            elif first == "require":
                # Class->require (UNIVERSAL::require) loads the class itself
                if not scope.caller_package:
                    return
                tokens = [tokens[1], Token(scope.caller_package, "WORD", WORD)]
        if not first:
            return

        ctx.cond = bool(scope.flags & (ScopeFlags.CONDITIONAL | ScopeFlags.SIDE_EFFECT))
        if ctx.has_statement_handler(first):
            ctx.run_statement_handler(first, list(tokens))
        if ctx.has_callback_for("keyword", first):
            ctx.run_callback_for("keyword", first, list(tokens))
        if scope.caller_package and ctx.has_callback_for("method", first):
            caller = Token(scope.caller_package, "WORD", WORD)
            ctx.run_callback_for("method", first, [caller, *tokens])

    def _rescan_string(self, ctx: "Context", scope: ScopeState, text: str) -> None:
        """Scan the contents of an evaluated string as code."""
        if not text:
            return
        source = UNESCAPE.sub(r"\1", text)
        ctx.eval = True
        saved_stack, ctx.stack = ctx.stack, []
        try:
            self.scan(ctx, ScanBuffer(source), (scope.flags | ScopeFlags.STRING_EVAL) & RESCAN)
        except ScanError as exc:
            logger.debug("Ignoring unparsable eval string: %s", exc.message)
        finally:
            ctx.stack = saved_stack

    # ------------------------------------------------------------------
    # Lexer
    # ------------------------------------------------------------------

    def _lex(self, ctx: "Context", buf: ScanBuffer, scope: ScopeState):
        pos = buf.pos
        c1 = buf.char()
        if scope.line_top and c1 == "=" and buf.match(POD):
            return None
        if c1 == "\n":
            buf.match(NEWLINES)
            scope.line_top = True
            return None
        scope.line_top = False

        handler = self._handlers.get(c1)
        if handler is not None:
            result = handler(ctx, buf, scope, pos, c1)
            if result is not FALLTHROUGH:
                return result
        return self._lex_term(ctx, buf, scope, pos, c1)

    def _attempt(self, ctx: "Context", buf: ScanBuffer, pos: int, matcher: Callable[[], Any]):
        """Run a speculative matcher, rewinding cursor and stack when it fails."""
        saved_stack = list(ctx.stack)
        try:
            return matcher()
        except MatchError as exc:
            logger.debug("No literal at %d: %s", pos, exc.reason)
            buf.pos = pos
            ctx.stack = saved_stack
            return None

    def _lex_blank(self, ctx, buf, scope, pos, c1):
        buf.match(BLANKS)
        return None

    def _lex_underscore(self, ctx, buf, scope, pos, c1):
        if buf.char(1) == "_" and buf.match(END_OF_CODE):
            ctx.ended = True
            return STOP
        return FALLTHROUGH

    def _lex_comment(self, ctx, buf, scope, pos, c1):
        if buf.match(COMMENT):
            scope.line_top = True
            return None
        return FALLTHROUGH

    def _lex_semicolon(self, ctx, buf, scope, pos, c1):
        buf.advance()
        scope.current |= ScopeFlags.SENTENCE_END | ScopeFlags.EXPR_END
        return Token(";", ";", NONE)

    def _open_deref(self, scope, buf, pos, opener, owner, kind):
        """Consume an opener like ``${`` and schedule its nested scope."""
        buf.pos = pos + len(opener)
        scope.push = StackFrame(opener, pos, owner)
        return Token(opener, opener, kind)

    def _end_if_bracket_expected(self, scope: ScopeState, token: Token) -> Token:
        if scope.parent & ScopeFlags.EXPECTS_BRACKET:
            scope.current |= ScopeFlags.SCOPE_END
        return token

    def _lex_dollar(self, ctx, buf, scope, pos, c1):
        c2 = buf.char(1)
        if c2 == "#":
            if buf.char(2) == "{":
                m = buf.match(ARRAY_LAST_BRACED)
                if m:
                    return Token(m.group(), "$#{NAME}", TERM)
                return self._open_deref(scope, buf, pos, "$#{", "VARIABLE", TERM)
            m = buf.match(ARRAY_LAST)
            if m:
                return Token(m.group(), "$#NAME", TERM)
            if scope.prev_kind is ARROW:
                if buf.char(2) == "*":
                    buf.pos = pos + 3
                    return Token("$#*", "VARIABLE", VARIABLE)
                return FALLTHROUGH
            buf.pos = pos + 2
            return Token("$#", "SPECIAL_VARIABLE", TERM)
        if c2 == "$":
            m = buf.match(SCALAR_DEREF)
            if m:
                return Token(m.group(), "$$NAME", VARIABLE)
            buf.pos = pos + 2
            return Token("$$", "SPECIAL_VARIABLE", TERM)
        if c2 == "{":
            m = buf.match(SCALAR_BRACED)
            if m:
                token = Token(m.group(), "${NAME}", VARIABLE)
                if scope.prev_is_keyword_in(EXPECTS_FH_OR_BLOCK_LIST):
                    token.kind = NONE
                    return token
            else:
                token = self._open_deref(scope, buf, pos, "${", "VARIABLE", VARIABLE)
            return self._end_if_bracket_expected(scope, token)
        m = buf.match(SCALAR)
        if m:
            return Token(m.group(), "$NAME", VARIABLE)
        buf.pos = pos + 1
        return Token("$", "$", VARIABLE)

    def _lex_at(self, ctx, buf, scope, pos, c1):
        c2 = buf.char(1)
        if c2 == "_" and buf.match(ARRAY_ARGS):
            return Token("@_", "SPECIAL_VARIABLE", VARIABLE)
        if c2 == "{":
            m = buf.match(ARRAY_BRACED)
            if m:
                token = Token(m.group(), "@{NAME}", VARIABLE)
            else:
                token = self._open_deref(scope, buf, pos, "@{", "VARIABLE", VARIABLE)
            return self._end_if_bracket_expected(scope, token)
        if c2 == "$":
            m = buf.match(ARRAY_DEREF)
            if m:
                return Token(m.group(), "@$NAME", VARIABLE)
            buf.pos = pos + 2
            return Token("@$", "@$", VARIABLE)
        if scope.prev_kind is ARROW:
            if c2 == "*":
                buf.pos = pos + 2
                return Token("@*", "VARIABLE", VARIABLE)
            buf.pos = pos + 1
            return Token("@", "VARIABLE", VARIABLE)
        if c2 == "[":
            buf.pos = pos + 2
            return Token("@[", "SPECIAL_VARIABLE", VARIABLE)
        m = buf.match(ARRAY)
        if m:
            return Token(m.group(), "@NAME", VARIABLE)
        buf.pos = pos + 1
        return Token("@", "@", VARIABLE)

    def _lex_percent(self, ctx, buf, scope, pos, c1):
        c2 = buf.char(1)
        if c2 == "{":
            m = buf.match(HASH_BRACED)
            if m:
                token = Token(m.group(), "%{NAME}", VARIABLE)
            else:
                token = self._open_deref(scope, buf, pos, "%{", "VARIABLE", VARIABLE)
            return self._end_if_bracket_expected(scope, token)
        if c2 == "=":
            buf.pos = pos + 2
            return Token("%=", "%=", OP)
        m = buf.match(HASH_DEREF) or buf.match(HASH)
        if m:
            desc = "%$NAME" if m.group().startswith("%$") else "%NAME"
            return Token(m.group(), desc, VARIABLE)
        buf.pos = pos + 1
        if scope.prev_kind in (VARIABLE, TERM):
            return Token("%", "%", OP)
        if scope.prev_kind is ARROW and c2 == "*":
            buf.pos = pos + 2
            return Token("%*", "VARIABLE", VARIABLE)
        return Token("%", "%", VARIABLE)

    def _lex_star(self, ctx, buf, scope, pos, c1):
        c2 = buf.char(1)
        if c2 == "{":
            m = buf.match(GLOB_BRACED)
            if m:
                token = Token(m.group(), "*{NAME}", VARIABLE)
                if scope.prev_is_keyword_in(EXPECTS_FH_OR_BLOCK_LIST):
                    token.kind = NONE
                    return token
            else:
                token = self._open_deref(scope, buf, pos, "*{", "VARIABLE", VARIABLE)
            return self._end_if_bracket_expected(scope, token)
        if c2 == "*":
            if buf.char(2) == "=":
                buf.pos = pos + 3
                return Token("**=", "**=", OP)
            buf.pos = pos + 2
            return Token("**", "**", VARIABLE if scope.prev_kind is ARROW else OP)
        if c2 == "=":
            buf.pos = pos + 2
            return Token("*=", "*=", OP)
        m = buf.match(GLOB)
        if m:
            return Token(m.group(), "*NAME", VARIABLE)
        buf.pos = pos + 1
        return Token("*", "*", OP)

    def _lex_ampersand(self, ctx, buf, scope, pos, c1):
        c2 = buf.char(1)
        if c2 == "&":
            buf.pos = pos + 2
            return Token("&&", "&&", OP)
        if c2 == "=":
            buf.pos = pos + 2
            return Token("&=", "&=", OP)
        if c2 == "{":
            m = buf.match(CODE_BRACED)
            if m:
                token = Token(m.group(), "&{NAME}", TERM)
            else:
                token = self._open_deref(scope, buf, pos, "&{", "FUNC", TERM)
            return self._end_if_bracket_expected(scope, token)
        m = buf.match(CODE) or buf.match(CODE_DEREF)
        if m:
            desc = "&$NAME" if m.group().startswith("&$") else "&NAME"
            return Token(m.group(), desc, TERM)
        if scope.prev_kind is ARROW:
            if c2 == "*":
                buf.pos = pos + 2
                return Token("&*", "VARIABLE", VARIABLE)
            return FALLTHROUGH
        buf.pos = pos + 1
        return Token("&", "&", OP)

    def _lex_backslash(self, ctx, buf, scope, pos, c1):
        if buf.char(1) == "{":
            m = buf.match(REF_BRACED)
            if m:
                token = Token(m.group(), "\\{NAME}", VARIABLE)
            else:
                token = self._open_deref(scope, buf, pos, "\\{", "VARIABLE", VARIABLE)
            return self._end_if_bracket_expected(scope, token)
        buf.pos = pos + 1
        return Token("\\", "\\", NONE)

    def _lex_minus(self, ctx, buf, scope, pos, c1):
        c2 = buf.char(1)
        if c2 == ">":
            buf.pos = pos + 2
            if scope.prev_kind in (WORD, KEYWORD):
                scope.caller_package = scope.prev_word
                scope.current |= ScopeFlags.KEEP_TOKENS
            return Token("->", "ARROW", ARROW)
        if c2 == "-":
            buf.pos = pos + 2
            return Token("--", "--", scope.prev_kind)
        if c2 == "=":
            buf.pos = pos + 2
            return Token("-=", "-=", OP)
        m = buf.match(FILE_TEST)
        if m:
            return Token(m.group(), "FILE_TEST", TERM)
        buf.pos = pos + 1
        return Token("-", "-", OP)

    def _lex_string(self, ctx, buf, scope, pos, c1):
        buf.pos = pos + 1
        m = buf.match(string_body(c1))
        if m and buf.char() == c1:
            buf.advance()
            if c1 == "`":
                return Token(QuotedString(m.group(), c1), "BACKTICK", TERM)
            return Token(QuotedString(m.group(), c1), "STRING", STRING)
        buf.pos = pos
        return FALLTHROUGH

    def _lex_slash(self, ctx, buf, scope, pos, c1):
        prev_kind = scope.prev_kind
        if prev_kind in (NONE, OP) or scope.prev_is_keyword_in(REGEXP_MAY_FOLLOW):
            text = self._attempt(
                ctx, buf, pos, lambda: self.patterns.match_slash(ctx, buf, pos, undoubted=True)
            )
            if text is not None:
                return Token(text, "REGEXP", TERM)
        if (
            prev_kind is NONE
            or (prev_kind is WORD and not scope.current & ScopeFlags.EXPR)
            or scope.last_keyword_is_prev()
        ):
            text = self._attempt(
                ctx, buf, pos, lambda: self.patterns.match_slash(ctx, buf, pos, undoubted=False)
            )
            if text is not None:
                return Token(text, "REGEXP", TERM)
        c2 = buf.char(1)
        if c2 == "/":
            if buf.char(2) == "=":
                buf.pos = pos + 3
                return Token("//=", "//=", OP)
            buf.pos = pos + 2
            return Token("//", "//", OP)
        if c2 == "=":
            buf.pos = pos + 2
            return Token("/=", "/=", OP)
        buf.pos = pos + 1
        return Token("/", "/", OP)

    def _brace_kind(self, scope: ScopeState, fallback: TokenClass) -> TokenClass:
        if scope.prev_kind in (ARROW, VARIABLE):
            return VARIABLE
        if scope.waiting_for_block:
            scope.waiting_for_block = False
            return scope.prev_kind
        return fallback

    def _lex_open_brace(self, ctx, buf, scope, pos, c1):
        m = buf.match(HASH_SHORTCUT)
        if m:
            if scope.parent & ScopeFlags.EXPECTS_BRACKET:
                scope.current |= ScopeFlags.SCOPE_END
                return Token(m.group(), "{TERM}", NONE)
            fallback = NONE if scope.prev_is_keyword_in(EXPECTS_FH_OR_BLOCK_LIST) else TERM
            return Token(m.group(), "{TERM}", self._brace_kind(scope, fallback))

        buf.pos = pos + 1
        owner = next((k for k in reversed(scope.keywords) if k in EXPECTS_BLOCK), "")
        scope.push = StackFrame("{", pos, owner)
        if scope.parent & ScopeFlags.EXPECTS_BRACKET:
            scope.current |= ScopeFlags.SCOPE_END | ScopeFlags.SENTENCE_END | ScopeFlags.EXPR_END
            return Token("{", "{", NONE)
        fallback = TERM if scope.flags & ScopeFlags.KEEP_TOKENS else NONE
        return Token("{", "{", self._brace_kind(scope, fallback))

    def _lex_open_bracket(self, ctx, buf, scope, pos, c1):
        m = buf.match(INDEX_SHORTCUT)
        if m:
            return Token(m.group(), "[TERM]", VARIABLE)
        return self._open_deref(scope, buf, pos, "[", "VARIABLE", VARIABLE)

    def _lex_open_paren(self, ctx, buf, scope, pos, c1):
        if scope.waiting_for_block and scope.keywords and scope.keywords[-1] == "sub":
            m = buf.match(PROTOTYPE)
            if m:
                return Token(m.group(), "(PROTOTYPE)", NONE)
        m = buf.match(PAREN_SHORTCUT)
        if m:
            if scope.last_keyword_is_prev() and scope.prev_word not in EXPECTS_EXPR_BLOCK:
                scope.keywords.pop()
            return Token([Token(m.group(1), "TERM", TERM)], "()", TERM)
        owner = scope.keywords[-1] if scope.keywords else ""
        return self._open_deref(scope, buf, pos, "(", owner, TERM)

    def _lex_close(self, ctx, buf, scope, pos, c1):
        buf.pos = pos + 1
        scope.pop = c1
        if c1 == "}":
            scope.current |= ScopeFlags.SENTENCE_END | ScopeFlags.EXPR_END
        return Token(c1, c1, NONE)

    def _lex_less(self, ctx, buf, scope, pos, c1):
        c2 = buf.char(1)
        if c2 == "<":
            if buf.peek(LOOKS_LIKE_HEREDOC):
                heredoc = self._attempt(ctx, buf, pos, lambda: match_heredoc(buf))
                if heredoc is not None:
                    return Token(heredoc, "HEREDOC", TERM)
            if buf.char(2) == "=":
                buf.pos = pos + 3
                return Token("<<=", "<<=", OP)
            buf.pos = pos + 2
            return Token("<<", "<<", OP)
        if c2 == "=":
            if buf.char(2) == ">":
                buf.pos = pos + 3
                return Token("<=>", "<=>", OP)
            buf.pos = pos + 2
            return Token("<=", "<=", OP)
        if c2 == ">":
            buf.pos = pos + 2
            return Token("<>", "<>", OP)
        m = buf.match(READLINE)
        if m:
            return Token(m.group(), "<NAME>", TERM)
        buf.pos = pos + 1
        return Token("<", "<", OP)

    def _lex_colon(self, ctx, buf, scope, pos, c1):
        if buf.char(1) == ":":
            buf.pos = pos + 2
            return Token("::", "::", NONE)
        if scope.waiting_for_block and scope.keywords and scope.keywords[-1] == "sub":
            self._skip_attributes(buf)
            if buf.pos > pos:
                return Token(buf.text[pos:buf.pos], "ATTRIBUTE", NONE)
        buf.pos = pos + 1
        return Token(":", ":", OP)

    def _skip_attributes(self, buf: ScanBuffer) -> None:
        """Skip subroutine attributes such as ``:lvalue :prototype($)``."""
        while buf.match(ATTRIBUTE):
            if buf.char() != "(":
                continue
            buf.advance()
            depth = 1
            while depth:
                c = buf.char()
                if c == "\\":
                    buf.advance(2)
                elif c == "(":
                    depth += 1
                    buf.advance()
                elif c == ")":
                    depth -= 1
                    buf.advance()
                elif not buf.match(ATTRIBUTE_ARGS):
                    return

    def _lex_equals(self, ctx, buf, scope, pos, c1):
        c2 = buf.char(1)
        if c2 == ">":
            buf.pos = pos + 2
            if scope.last_keyword_is_prev():
                scope.keywords.pop()
                if not scope.keywords and scope.current & ScopeFlags.KEEP_TOKENS:
                    scope.current &= ~ScopeFlags.KEEP_TOKENS
                    scope.tokens = []
            return Token("=>", "COMMA", OP)
        if c2 in ("=", "~"):
            buf.pos = pos + 2
            return Token(c1 + c2, c1 + c2, OP)
        buf.pos = pos + 1
        return Token("=", "=", OP)

    def _lex_greater(self, ctx, buf, scope, pos, c1):
        for op in (">>=", ">>", ">=", ">"):
            if buf.text.startswith(op, pos):
                buf.pos = pos + len(op)
                return Token(op, op, OP)

    def _lex_plus(self, ctx, buf, scope, pos, c1):
        if buf.text.startswith("++", pos):
            buf.pos = pos + 2
            return Token("++", "++", scope.prev_kind)
        if buf.char(1) == "=":
            buf.pos = pos + 2
            return Token("+=", "+=", OP)
        buf.pos = pos + 1
        return Token("+", "+", OP)

    def _lex_comma(self, ctx, buf, scope, pos, c1):
        buf.pos = pos + 1
        return Token(",", "COMMA", OP)

    def _lex_operator(self, ctx, buf, scope, pos, c1):
        for op in OPERATORS[c1]:
            if buf.text.startswith(op, pos):
                buf.pos = pos + len(op)
                return Token(op, op, OP)

    def _lex_zero(self, ctx, buf, scope, pos, c1):
        c2 = buf.char(1)
        if c2 == "x":
            m = buf.match(HEX)
            if m:
                return Token(m.group(), "HEX NUMBER", TERM)
        elif c2 == "b":
            m = buf.match(BINARY)
            if m:
                return Token(m.group(), "BINARY NUMBER", TERM)
        return FALLTHROUGH

    def _with_prepend(self, scope: ScopeState, token: Token) -> Token:
        """Glue a preceding unary ``-``/``+`` onto ``token``."""
        if scope.prepend:
            token.value = scope.prepend + token.value
            for tokens in (scope.tokens, scope.scope_tokens):
                if tokens and tokens[-1].word == scope.prepend:
                    tokens.pop()
        return token

    def _lex_term(self, ctx, buf, scope, pos, c1):
        """Numbers, quote-like operators, words, and whatever is left."""
        m = buf.match(NUMBER)
        if m:
            number = m.group()
            after = buf.pos
            if buf.char() == ".":
                tail = buf.match(VERSION_TAIL)
                if tail:
                    return Token(number + tail.group(), "VERSION_STRING", TERM)
                if not buf.text.startswith("..", after):
                    number += "."
                    buf.pos = after + 1
            elif buf.char() in ("E", "e"):
                exponent = buf.match(EXPONENT)
                if exponent:
                    number += exponent.group()
            return self._with_prepend(scope, Token(number, "NUMBER", TERM))

        if scope.prev_kind is not ARROW and not scope.prev_is_keyword_in(EXPECTS_WORD):
            token = self._lex_quotelike(ctx, buf, scope, pos, c1)
            if token is not None:
                return token

        m = (c1 <= "\x7f" or ctx.decoded) and buf.match(WORD_RUN)
        if m:
            return self._lex_word(ctx, buf, scope, pos, c1, m.group())

        if buf.match(CONTROL):
            return None
        m = buf.match(ASCII_RUN) or buf.match(NON_ASCII) or buf.match(NON_SPACE)
        if m:
            text = m.group()
            if text[0] > "\x7f" and ctx.utf8:
                return Token(text, "UTF8", NONE)
            if scope.parent & ScopeFlags.STRING_EVAL:
                return STOP
            ctx.errors.append(f'"{text}"')
            return Token(text, "UNKNOWN", NONE)
        return STOP

    def _lex_quotelike(self, ctx, buf, scope, pos, c1) -> Optional[Token]:
        if c1 == "x":
            if scope.prev_kind in (TERM, VARIABLE) and buf.match(REPEAT_OP):
                return Token("x", "x", NONE)
            return None
        if c1 == "q":
            m = buf.match(QUOTE_OP)
            if m:
                op = m.group(1)
                quoted = self._attempt(
                    ctx, buf, pos, lambda: match_quotelike(buf, op, self.settings.CONTEXT_CHARS)
                )
                return Token(quoted, "STRING", STRING) if quoted else None
            if buf.match(WORDS_OP):
                quoted = self._attempt(
                    ctx, buf, pos, lambda: match_quotelike(buf, "qw", self.settings.CONTEXT_CHARS)
                )
                return Token(quoted, "QUOTED_WORD_LIST", TERM) if quoted else None
            if buf.match(COMMAND_OP):
                quoted = self._attempt(
                    ctx, buf, pos, lambda: match_quotelike(buf, "qx", self.settings.CONTEXT_CHARS)
                )
                return Token(quoted, "BACKTICK", TERM) if quoted else None
            if buf.match(QR_OP):
                text = self._attempt(ctx, buf, pos, lambda: self.patterns.match_regexp(ctx, buf, "qr"))
                return Token("qr" + text, "qr", TERM) if text is not None else None
            return None
        if c1 == "m":
            if buf.match(MATCH_OP):
                text = self._attempt(ctx, buf, pos, lambda: self.patterns.match_regexp(ctx, buf, "m"))
                return Token("m" + text, "m", TERM) if text is not None else None
            return None
        if c1 == "s":
            if buf.match(SUBST_OP):
                text = self._attempt(ctx, buf, pos, lambda: self.patterns.match_substitute(ctx, buf))
                return Token("s" + text, "s", TERM) if text is not None else None
            return None
        if c1 in ("t", "y"):
            m = buf.match(TRANS_OP)
            if m:
                op = m.group(1)
                text = self._attempt(ctx, buf, pos, lambda: self.patterns.match_transliterate(buf, op))
                return Token(op + text, op, TERM) if text is not None else None
        return None

    def _lex_word(self, ctx, buf, scope, pos, c1, word: str) -> Token:
        if scope.prev_kind is ARROW:
            tail = buf.match(NAMESPACE_TAIL)
            if tail:
                word += tail.group()
            return Token(word, "METHOD", METHOD)
        if word == "CORE":
            return Token(word, "NAMESPACE", WORD)
        if word == "format":
            body = buf.match(FORMAT_BODY)
            if body:
                scope.current |= ScopeFlags.SENTENCE_END | ScopeFlags.EXPR_END
                return Token(word + body.group(), "FORMAT", NONE)
        if (word in KEYWORDS and not scope.prev_is_keyword_in(EXPECTS_WORD)) or (
            scope.prev_word == "sub" and word == "BEGIN"
        ):
            if word != "undef":
                scope.keywords.append(word)
            return Token(word, "KEYWORD", KEYWORD)
        if c1 == "v" and VSTRING_HEAD.match(word):
            tail = buf.match(VSTRING_TAIL)
            if tail:
                return Token(word + tail.group(), "VERSION_STRING", TERM)
        tail = buf.match(NAMESPACE_TAIL)
        if tail:
            word += tail.group()
        return self._with_prepend(scope, Token(word, "WORD", WORD))

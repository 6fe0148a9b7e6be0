"""
Scope flags.

Each nesting level of the scanner carries its own flags (``current``) and
receives a filtered copy of its parent's (``parent``).
"""

from enum import IntFlag, auto


class ScopeFlags(IntFlag):
    """Per-scope scanning state."""

    NONE = 0
    EXPR = auto()  # an expression is active
    EXPR_END = auto()  # the active expression just ended
    SENTENCE_END = auto()  # statement boundary reached
    SCOPE_END = auto()  # leave the current scope after this token
    KEEP_TOKENS = auto()  # collecting tokens for dispatch
    EVAL = auto()  # eval is active
    STRING_EVAL = auto()  # scanning the body of an evaluated string
    EXPECTS_BRACKET = auto()  # scan exactly one bracketed expression
    CONDITIONAL = auto()  # inside a conditional block
    SIDE_EFFECT = auto()  # statement has a side-effect operator (and, or, if...)


# Flags a child scope inherits from its parent
RESCAN = (
    ScopeFlags.KEEP_TOKENS
    | ScopeFlags.EVAL
    | ScopeFlags.STRING_EVAL
    | ScopeFlags.CONDITIONAL
    | ScopeFlags.SIDE_EFFECT
)

# Flags cleared at a statement boundary
SENTENCE_RESET = (
    ScopeFlags.KEEP_TOKENS
    | ScopeFlags.SENTENCE_END
    | ScopeFlags.EXPR
    | ScopeFlags.EXPR_END
    | ScopeFlags.SIDE_EFFECT
)

EXPR_RESET = ScopeFlags.EXPR | ScopeFlags.EXPR_END

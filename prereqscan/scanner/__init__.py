"""
Perl source scanner.

Splits Perl source into tokens just far enough to find the statements that
declare dependencies.
"""

from .tokens import Heredoc, QuotedString, StackFrame, Token, TokenClass
from .buffer import ScanBuffer
from .flags import ScopeFlags
from .tokenizer import Tokenizer

__all__ = [
    "Heredoc",
    "QuotedString",
    "StackFrame",
    "Token",
    "TokenClass",
    "ScanBuffer",
    "ScopeFlags",
    "Tokenizer",
]

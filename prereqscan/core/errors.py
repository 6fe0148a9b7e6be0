"""
Scanner exceptions and warning collection.

Two severities exist while scanning:

- fatal errors (:class:`ScanError`) abort the current scope and propagate
  up to the top-level scan, which records them as a diagnostic;
- soft failures (:class:`MatchError`) are raised by the speculative literal
  matchers and are always caught by the tokenizer, which rewinds the cursor
  and tries another interpretation.
"""

from __future__ import annotations


class PrereqScanError(Exception):
    """Base exception for prereqscan errors"""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ScanError(PrereqScanError):
    """Raised when a scope cannot be scanned any further"""


class BracketMismatchError(ScanError):
    """Raised when closing punctuation does not match the innermost open bracket"""

    def __init__(self, opened: str, closed: str, excerpt: str):
        super().__init__(
            message=f"mismatch {opened} {closed}\n{excerpt}",
            details={"opened": opened, "closed": closed},
        )
        self.opened = opened
        self.closed = closed
        self.excerpt = excerpt


class MatchError(PrereqScanError):
    """Raised when a quote-like, regexp or heredoc literal cannot be matched"""

    def __init__(self, reason: str, context: str = ""):
        super().__init__(message=reason + context, details={"reason": reason})
        self.reason = reason
        self.context = context


class PluginError(PrereqScanError):
    """Raised when a parser plugin cannot be resolved"""

    def __init__(self, name: str, error: str):
        super().__init__(
            message=f"Parser Error: {name}: {error}",
            details={"parser": name, "error": error},
        )


class ScanWarnings:
    """Warnings raised by plugin callbacks, kept apart from scan diagnostics."""

    def __init__(self):
        self.messages: list[str] = []

    def warn(self, message: str) -> None:
        self.messages.append(message)

    def __bool__(self) -> bool:
        return bool(self.messages)

    def __iter__(self):
        return iter(self.messages)

    def clear(self) -> None:
        """Clear all warnings."""
        self.messages.clear()

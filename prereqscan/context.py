"""
Scan context: accumulated requirements, diagnostics and dispatch tables.

One :class:`Context` is created per scanned string.  The tokenizer mutates
it while walking the source; parser plugins receive it in every callback and
record requirements through :meth:`Context.add` and friends.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .core.errors import ScanWarnings
from .requirements import Requirements, ScanReport, dedupe
from .scanner.dispatcher import STATEMENT_HANDLERS
from .scanner.tokens import StackFrame, Token

logger = logging.getLogger(__name__)

CALLBACK_KINDS = ("use", "no", "keyword", "method")


@dataclass(frozen=True)
class Handler:
    """
    A bound plugin callback.

    Calls ``getattr(parser, method)(ctx, *args, tokens)``; ``args`` carries the
    triggering module name for ``use``/``no`` callbacks.
    """

    parser: Any
    method: str
    args: tuple = ()

    def __call__(self, ctx: "Context", tokens: list[Token]) -> Any:
        return getattr(self.parser, self.method)(ctx, *self.args, tokens)

    @property
    def name(self) -> str:
        return f"{type(self.parser).__name__}.{self.method}"


class Context:
    """
    Per-scan state.

    Args:
        mapping: Plugin callbacks by kind (``use``, ``no``, ``keyword``,
            ``method``) and trigger name
        suggests: Record requirements found inside ``eval`` as suggestions
            instead of dropping them
        file: Name of the scanned file, for reporting
    """

    def __init__(
        self,
        mapping: Optional[dict[str, dict[str, Handler]]] = None,
        suggests: bool = False,
        file: Optional[str] = None,
    ):
        mapping = mapping or {}
        self.file = file
        self.record_suggests = suggests

        self.requires = Requirements()
        self.recommends = Requirements()
        self.suggests = Requirements()
        self.noes = Requirements()
        self.errors: list[str] = []
        self.warnings = ScanWarnings()

        self.stack: list[StackFrame] = []
        self.depth = 0

        self.eval = False
        self.cond = False
        self.force_cond = False
        self.utf8 = False
        self.decoded = False
        self.ended = False
        self.redo = False
        self.perl6 = False

        self._statements: dict[str, Callable[["Context", list[Token]], None]] = dict(
            STATEMENT_HANDLERS
        )
        self._callbacks: dict[str, dict[str, Handler]] = {
            kind: dict(mapping.get(kind, {})) for kind in CALLBACK_KINDS
        }

    def __repr__(self) -> str:
        return (
            f"Context(file={self.file!r}, requires={len(self.requires)}, "
            f"errors={len(self.errors)})"
        )

    # Recording

    def add(self, name: str, version: object = 0) -> None:
        """
        Record a module found by a plain statement.

        Inside ``eval`` the module becomes a suggestion; in a conditional or
        side-effect context it becomes a recommendation.
        """
        if self.eval:
            self.add_suggestion(name, version)
        elif self.cond or self.force_cond:
            self.add_recommendation(name, version)
        else:
            self.requires.add(name, version)

    def add_conditional(self, name: str, version: object = 0) -> None:
        """Record a module loaded at run time (``require``)."""
        if self.eval:
            self.add_suggestion(name, version)
        else:
            self.add_recommendation(name, version)

    def add_recommendation(self, name: str, version: object = 0) -> None:
        self.recommends.add(name, version)

    def add_suggestion(self, name: str, version: object = 0) -> None:
        if self.record_suggests:
            self.suggests.add(name, version)

    def add_no(self, name: str, version: object = 0) -> None:
        """Record a module named by ``no``; it still has to be installed."""
        self.noes.add(name, version)
        self.add(name, version)

    # Dispatch

    def register_keyword(self, name: str, handler: Handler) -> None:
        """Make ``name`` start a statement that is handed to ``handler``."""
        self._callbacks["keyword"][name] = handler

    def has_statement_handler(self, name: str) -> bool:
        return name in self._statements

    def run_statement_handler(self, name: str, tokens: list[Token]) -> None:
        self._statements[name](self, tokens)

    def has_callback_for(self, kind: str, name: str) -> bool:
        return name in self._callbacks.get(kind, {})

    def run_callback_for(self, kind: str, name: str, tokens: list[Token]) -> None:
        """
        Run the plugin callback registered for ``name``.

        A failing callback does not abort the scan; it is logged and kept as
        a warning on the context.
        """
        handler = self._callbacks[kind][name]
        try:
            handler(self, tokens)
        except Exception as exc:
            message = f"Callback Error: {handler.name} ({kind} {name}): {exc}"
            logger.warning(message, exc_info=logger.isEnabledFor(logging.DEBUG))
            self.warnings.warn(message)

    # Reporting

    def report(self) -> ScanReport:
        """Snapshot of the scan outcome."""
        return dedupe(
            ScanReport(
                file=self.file,
                requires=self.requires.as_dict(),
                recommends=self.recommends.as_dict(),
                suggests=self.suggests.as_dict(),
                noes=self.noes.as_dict(),
                errors=list(self.errors),
                warnings=list(self.warnings),
                perl6=self.perl6,
            )
        )

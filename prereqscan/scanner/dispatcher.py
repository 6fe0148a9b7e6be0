"""
Handlers for the ``use``, ``no`` and ``require`` statements.

Each handler receives the scan context and the statement's tokens, starting
with the statement keyword itself.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from ..util import is_module_name
from .keywords import UNSUPPORTED_PACKAGES
from .tokens import QuotedString, Token

if TYPE_CHECKING:
    from ..context import Context

logger = logging.getLogger(__name__)

VERSION_DESCS = ("NUMBER", "VERSION_STRING")


def _perl_version(ctx: "Context", name: str, add: Callable[[str, object], None]) -> bool:
    """
    Handle ``use 5.010`` / ``use v5.36`` / ``use v6``.

    Returns:
        True if ``name`` was a language version
    """
    if name[0].isdigit():
        if name[0] == "6":
            ctx.perl6 = True
            ctx.ended = True
        else:
            add("perl", name)
        return True
    if name[0] == "v" and name[1:2].isdigit():
        if name[1] == "6":
            ctx.perl6 = True
            ctx.ended = True
        else:
            add("perl", name)
        return True
    return False


def _add_with_version(add: Callable[[str, object], None], name: str, tokens: list[Token]) -> None:
    if tokens and tokens[0].desc in VERSION_DESCS:
        add(name, tokens.pop(0).value)
    else:
        add(name, 0)


def _module_name(tokens: list[Token]) -> str | None:
    """Drop the statement keyword and return the bare name following it."""
    tokens.pop(0)
    if not tokens:
        return None
    name = tokens.pop(0).value
    return name if isinstance(name, str) and name else None


def use_statement(ctx: "Context", tokens: list[Token]) -> None:
    """``use MODULE [VERSION] [LIST]`` and ``use VERSION``."""
    name = _module_name(tokens)
    if name is None or _perl_version(ctx, name, ctx.add):
        return

    if name == "utf8":
        ctx.utf8 = True
        if not ctx.decoded:
            # Restart on the decoded source
            logger.debug("use utf8 found, rescanning decoded source")
            ctx.decoded = True
            ctx.redo = True
            ctx.ended = True

    if is_module_name(name):
        _add_with_version(ctx.add, name, tokens)

    if ctx.has_callback_for("use", name):
        ctx.run_callback_for("use", name, tokens)

    if name in UNSUPPORTED_PACKAGES:
        logger.info("Stopped scanning at unsupported module %s", name)
        ctx.ended = True


def no_statement(ctx: "Context", tokens: list[Token]) -> None:
    """``no MODULE [VERSION] [LIST]`` and ``no VERSION``."""
    name = _module_name(tokens)
    if name is None or _perl_version(ctx, name, ctx.add_no):
        return

    if name == "utf8":
        ctx.utf8 = False

    if is_module_name(name):
        _add_with_version(ctx.add_no, name, tokens)

    if ctx.has_callback_for("no", name):
        ctx.run_callback_for("no", name, tokens)


def require_statement(ctx: "Context", tokens: list[Token]) -> None:
    """
    ``require MODULE``, ``require "Path/To/Module.pm"`` and ``require VERSION``.

    Modules loaded by ``require`` are always recorded as conditional.
    """
    tokens.pop(0)
    if not tokens:
        return
    name = tokens.pop(0).value
    if isinstance(name, QuotedString):
        name = name.body
        if name.lower().endswith(".pl"):
            return
        name = name.replace("/", "::")
        if name.lower().endswith(".pm"):
            name = name[:-3]
    if not isinstance(name, str) or not name:
        return

    if _perl_version(ctx, name, ctx.add_conditional):
        return
    if is_module_name(name):
        ctx.add_conditional(name, 0)


STATEMENT_HANDLERS: dict[str, Callable[["Context", list[Token]], None]] = {
    "use": use_statement,
    "no": no_statement,
    "require": require_statement,
}

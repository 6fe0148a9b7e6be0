"""
Class and role composition in Moose-style object systems.

After ``use Moose`` (or Mouse, Moo and their role variants) the ``extends``
and ``with`` keywords name further modules to load.  A module name may be
followed by an option hash carrying a minimum version::

    extends 'Base::Class' => { -version => '1.02' };
    with 'Role::A', 'Role::B';
"""

from __future__ import annotations

from ..context import Handler
from ..scanner.tokens import Token
from ..util import convert_string_tokens, is_module_name, is_version, token_text

MOOSE_LIKE = (
    "Moose",
    "Moose::Role",
    "Mouse",
    "Mouse::Role",
    "Moo",
    "Moo::Role",
)


class MooseParser:
    def register(self):
        return {"use": {name: "parse_moose_args" for name in MOOSE_LIKE}}

    def parse_moose_args(self, ctx, used_module: str, raw_tokens: list[Token]) -> None:
        ctx.register_keyword("extends", Handler(self, "parse_extends_args", (used_module,)))
        ctx.register_keyword("with", Handler(self, "parse_with_args", (used_module,)))

    def parse_extends_args(self, ctx, used_module: str, raw_tokens: list[Token]) -> None:
        self._add_modules(ctx, convert_string_tokens(raw_tokens[1:]))

    def parse_with_args(self, ctx, used_module: str, raw_tokens: list[Token]) -> None:
        self._add_modules(ctx, convert_string_tokens(raw_tokens[1:]))

    def _add_modules(self, ctx, tokens) -> None:
        pending = None
        for token in tokens:
            if isinstance(token, str):
                if pending:
                    ctx.add(pending, 0)
                pending = token if is_module_name(token) else None
            elif isinstance(token.value, list) and token.desc == "{}":
                if pending:
                    ctx.add(pending, self._version_option(token.value) or 0)
                    pending = None
        if pending:
            ctx.add(pending, 0)

    @staticmethod
    def _version_option(tokens: list[Token]):
        """Value of ``-version`` in an option hash, if present."""
        items = [token_text(item) for item in convert_string_tokens(tokens)]
        for index, item in enumerate(items):
            if item != "-version":
                continue
            for value in items[index + 1:index + 3]:
                if is_version(value):
                    return value
        return None

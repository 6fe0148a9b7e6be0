"""
Loader pragmas shipped with Perl itself.

- ``use base qw(Foo Bar)`` and ``use parent 'Foo'`` require their classes
  (``parent -norequire`` loads nothing);
- ``use if COND, Module => ARGS`` loads ``Module`` only when ``COND`` holds,
  so it is recorded as a recommendation.
"""

from __future__ import annotations

import logging

from ..scanner.tokens import Token
from ..util import convert_string_tokens, is_module_name, is_version, token_text

logger = logging.getLogger(__name__)


class CoreParser:
    def register(self):
        return {
            "use": {
                "base": "parse_base_args",
                "parent": "parse_parent_args",
                "if": "parse_if_args",
            },
        }

    def parse_base_args(self, ctx, used_module: str, raw_tokens: list[Token]) -> None:
        tokens = convert_string_tokens(raw_tokens)
        if tokens and is_version(token_text(tokens[0])):
            ctx.add(used_module, token_text(tokens.pop(0)))
        for token in tokens:
            name = token_text(token)
            if is_module_name(name):
                ctx.add(name, 0)

    def parse_parent_args(self, ctx, used_module: str, raw_tokens: list[Token]) -> None:
        tokens = convert_string_tokens(raw_tokens)
        if any(token_text(token) == "-norequire" for token in tokens):
            return
        self.parse_base_args(ctx, used_module, raw_tokens)

    def parse_if_args(self, ctx, used_module: str, raw_tokens: list[Token]) -> None:
        tokens = list(raw_tokens)
        # Skip the condition
        while tokens:
            if tokens.pop(0).desc == "COMMA":
                break
        converted = convert_string_tokens(tokens)
        if not converted:
            return
        module = token_text(converted.pop(0))
        if not is_module_name(module):
            logger.debug("use if: no module name after the condition")
            return
        version = 0
        if len(converted) >= 2 and getattr(converted[0], "desc", None) == "COMMA":
            candidate = token_text(converted[1])
            if is_version(candidate):
                version = candidate
        ctx.add_recommendation(module, version)

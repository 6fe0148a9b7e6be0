"""
Test::More conventions.

``done_testing`` needs Test::More 0.88.  A ``plan skip_all`` inside a
``BEGIN`` block means the rest of the script may never run, so everything
found after it is only recommended.
"""

from __future__ import annotations

from ..context import Handler
from ..scanner.tokens import Token
from ..util import convert_string_tokens, token_text

DONE_TESTING_VERSION = "0.88"


class TestMoreParser:
    def register(self):
        return {"use": {"Test::More": "parse_test_more_args"}}

    def parse_test_more_args(self, ctx, used_module: str, raw_tokens: list[Token]) -> None:
        ctx.register_keyword("done_testing", Handler(self, "parse_done_testing_args", (used_module,)))
        ctx.register_keyword("plan", Handler(self, "parse_plan_args", (used_module,)))

    def parse_done_testing_args(self, ctx, used_module: str, raw_tokens: list[Token]) -> None:
        ctx.add(used_module, DONE_TESTING_VERSION)

    def parse_plan_args(self, ctx, used_module: str, raw_tokens: list[Token]) -> None:
        tokens = convert_string_tokens(raw_tokens)[1:]
        if tokens and token_text(tokens[0]) == "skip_all":
            if any(frame.opener == "{" and frame.owner == "BEGIN" for frame in ctx.stack):
                ctx.force_cond = True

"""
``Module->VERSION(1.23)`` checks a minimum version at run time.
"""

from __future__ import annotations

from ..scanner.tokens import Token
from ..util import convert_string_tokens, is_module_name, is_version, token_text


class UniversalVersionParser:
    def register(self):
        return {"method": {"VERSION": "parse_version_args"}}

    def parse_version_args(self, ctx, raw_tokens: list[Token]) -> None:
        tokens = convert_string_tokens(raw_tokens)
        module = token_text(tokens[0]) if tokens else None
        if not is_module_name(module):
            return
        # Tokens after the method name are its arguments
        texts = [token_text(token) for token in tokens]
        if "VERSION" not in texts:
            return
        for text in texts[texts.index("VERSION") + 1:]:
            if is_version(text):
                ctx.add(module, text)
                return

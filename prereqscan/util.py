"""
Helpers shared by the statement dispatcher and the parser plugins.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional, Union

from .scanner.tokens import QuotedString, Token

MODULE_NAME = re.compile(r"[A-Za-z_]\w*(?:(?:::|')\w+)*", re.ASCII)
VERSION = re.compile(r"v?[0-9][0-9_]*(?:\.[0-9_]*)*", re.ASCII)


def is_module_name(name: object) -> bool:
    """True for package names such as ``Foo``, ``Foo::Bar`` or ``Foo'Bar``."""
    return isinstance(name, str) and MODULE_NAME.fullmatch(name) is not None


def is_version(version: object) -> bool:
    """True for decimal (``1.23``) and dotted (``v1.2.3``, ``1.2.3``) versions."""
    return isinstance(version, str) and VERSION.fullmatch(version) is not None


def version_key(version: object) -> Optional[tuple[int, ...]]:
    """
    Comparable key for a version string.

    Dotted versions (a leading ``v`` or two or more dots) compare component
    by component.  Decimal versions split their fraction into groups of three
    digits, so ``1.5`` equals ``v1.500.0`` and ``1.10`` is older than ``1.9``.
    Underscores (development releases) are ignored.  Trailing zero components
    are dropped so that ``1.0`` equals ``1``.

    Returns:
        Tuple of integers, or None when ``version`` is not a version
    """
    if isinstance(version, (int, float)):
        version = str(version)
    if not is_version(version):
        return None
    text = version.replace("_", "")
    if text.startswith("v") or text.count(".") >= 2:
        parts = [int(part or 0) for part in text.lstrip("v").split(".")]
    else:
        whole, _, fraction = text.partition(".")
        if len(fraction) % 3:
            fraction += "0" * (3 - len(fraction) % 3)
        parts = [int(whole or 0)] + [int(fraction[i:i + 3]) for i in range(0, len(fraction), 3)]
    while len(parts) > 1 and parts[-1] == 0:
        parts.pop()
    return tuple(parts)


def version_gt(new: object, current: object) -> bool:
    """True if ``new`` is a strictly higher version than ``current``."""
    new_key = version_key(new)
    if new_key is None:
        return False
    current_key = version_key(current)
    return current_key is None or new_key > current_key


def convert_string_tokens(tokens: Iterable[Token]) -> list[Union[str, Token]]:
    """
    Flatten a statement's tokens for argument inspection.

    Quoted strings become their bodies, ``qw`` lists become one string per
    word, and parenthesized lists are inlined.  Everything else is kept as a
    :class:`Token`.
    """
    converted: list[Union[str, Token]] = []
    pending = list(tokens)
    while pending:
        token = pending.pop(0)
        if token.desc == "()" and isinstance(token.value, list):
            pending[0:0] = token.value
        elif isinstance(token.value, QuotedString) and token.desc == "STRING":
            converted.append(token.value.body)
        elif isinstance(token.value, QuotedString) and token.desc == "QUOTED_WORD_LIST":
            converted.extend(token.value.body.split())
        else:
            converted.append(token)
    return converted


def token_text(item: Union[str, Token, None]) -> Optional[str]:
    """Text of a converted item: strings as is, words and terms by value."""
    if isinstance(item, str):
        return item
    if isinstance(item, Token) and isinstance(item.value, str) and item.desc != "COMMA":
        return item.value
    return None

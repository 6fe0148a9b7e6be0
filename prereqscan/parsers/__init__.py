"""
Parser plugins that recognize dependency declarations beyond ``use`` and
``require``.
"""

from .registry import (
    BUNDLED_PARSERS,
    DEFAULT_PARSERS,
    build_mapping,
    get_parser_info,
    load_parser,
    resolve_parsers,
)

__all__ = [
    "BUNDLED_PARSERS",
    "DEFAULT_PARSERS",
    "build_mapping",
    "get_parser_info",
    "load_parser",
    "resolve_parsers",
]

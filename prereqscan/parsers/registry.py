"""
Parser plugin registry.

Plugins are described by small descriptor dicts and imported on demand.  A
plugin class exposes ``register()``, returning the names it reacts to per
callback kind::

    {"use": {"Moose": "parse_moose_args"}, "keyword": {...}, "method": {...}}

Plugin specifications accepted by :func:`resolve_parsers`:

- ``:default`` - the plugins enabled when nothing is configured
- ``:bundled`` - every plugin shipped with prereqscan
- ``Name`` - a bundled plugin by name
- ``+package.module:Class`` - a plugin class from any importable module
- ``-Name`` - drop a plugin selected by an earlier specification
"""

from __future__ import annotations

import importlib
import logging
from functools import lru_cache
from typing import Any, Iterable

from ..context import CALLBACK_KINDS, Handler
from ..core.errors import PluginError

logger = logging.getLogger(__name__)

BUNDLED_PARSERS = {
    "Core": {
        "target": "prereqscan.parsers.core:CoreParser",
        "description": "Loader pragmas: base, parent and if",
    },
    "Moose": {
        "target": "prereqscan.parsers.moose:MooseParser",
        "description": "extends/with in Moose, Mouse and Moo classes and roles",
    },
    "TestMore": {
        "target": "prereqscan.parsers.test_more:TestMoreParser",
        "description": "done_testing and skip_all plans in Test::More scripts",
    },
    "UniversalVersion": {
        "target": "prereqscan.parsers.universal_version:UniversalVersionParser",
        "description": "Version checks through Module->VERSION(...)",
    },
}

DEFAULT_PARSERS = ["Core", "Moose"]


def get_parser_info(name: str) -> dict[str, Any] | None:
    """Descriptor of a bundled plugin, or None if there is no such plugin."""
    return BUNDLED_PARSERS.get(name)


def resolve_parsers(specs: Iterable[str] | None = None) -> list[str]:
    """
    Expand plugin specifications into import targets (``module:Class``).

    Raises:
        PluginError: If a name does not refer to a bundled plugin
    """
    targets: list[str] = []
    ignored: set[str] = set()
    for spec in specs or [":default"]:
        if spec == ":default":
            targets.extend(BUNDLED_PARSERS[name]["target"] for name in DEFAULT_PARSERS)
        elif spec == ":bundled":
            targets.extend(info["target"] for info in BUNDLED_PARSERS.values())
        elif spec.startswith("+"):
            targets.append(spec[1:])
        elif spec.startswith("-"):
            info = get_parser_info(spec[1:])
            ignored.add(info["target"] if info else spec[1:])
        else:
            info = get_parser_info(spec)
            if info is None:
                raise PluginError(spec, "no such bundled parser")
            targets.append(info["target"])

    resolved: list[str] = []
    for target in targets:
        if target not in ignored and target not in resolved:
            resolved.append(target)
    return resolved


@lru_cache(maxsize=None)
def load_parser(target: str) -> tuple[Any, dict[str, dict[str, str]]]:
    """
    Import and instantiate a plugin class, and fetch its registrations.

    Raises:
        PluginError: If the module, class or ``register`` method is missing
    """
    module_name, _, class_name = target.partition(":")
    if not class_name:
        raise PluginError(target, "expected 'package.module:Class'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise PluginError(target, str(exc)) from exc
    parser_class = getattr(module, class_name, None)
    if parser_class is None:
        raise PluginError(target, f"module {module_name} has no {class_name}")
    parser = parser_class()
    register = getattr(parser, "register", None)
    registrations = register() if callable(register) else {}
    logger.debug("Loaded parser %s", target)
    return parser, registrations


def build_mapping(specs: Iterable[str] | None = None) -> dict[str, dict[str, Handler]]:
    """
    Callback table for a scan: kind -> trigger name -> :class:`Handler`.

    ``use`` and ``no`` handlers receive the module name as an extra argument.
    Later plugins override earlier ones for the same trigger.
    """
    mapping: dict[str, dict[str, Handler]] = {kind: {} for kind in CALLBACK_KINDS}
    for target in resolve_parsers(specs):
        parser, registrations = load_parser(target)
        for kind in CALLBACK_KINDS:
            for name, method in registrations.get(kind, {}).items():
                args = (name,) if kind in ("use", "no") else ()
                mapping[kind][name] = Handler(parser, method, args)
    return mapping

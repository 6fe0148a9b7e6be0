"""Tests for parser plugin resolution."""

import pytest

from prereqscan import Context, Handler, Scanner
from prereqscan.core.errors import PluginError
from prereqscan.parsers import (
    BUNDLED_PARSERS,
    build_mapping,
    get_parser_info,
    load_parser,
    resolve_parsers,
)
from prereqscan.parsers.core import CoreParser
from prereqscan.scanner import ScanBuffer


CORE = BUNDLED_PARSERS["Core"]["target"]
MOOSE = BUNDLED_PARSERS["Moose"]["target"]


class TestResolveParsers:
    """Test plugin specifications."""

    def test_default(self):
        """Test the default plugin set."""
        assert resolve_parsers() == [CORE, MOOSE]
        assert resolve_parsers([":default"]) == [CORE, MOOSE]

    def test_bundled(self):
        """Test that :bundled selects every shipped plugin."""
        assert resolve_parsers([":bundled"]) == [info["target"] for info in BUNDLED_PARSERS.values()]

    def test_removal(self):
        """Test that -Name drops a plugin selected earlier."""
        assert resolve_parsers([":bundled", "-Moose", "-TestMore"]) == [
            CORE,
            BUNDLED_PARSERS["UniversalVersion"]["target"],
        ]

    def test_duplicates(self):
        """Test that a plugin is only loaded once."""
        assert resolve_parsers([":default", "Core"]) == [CORE, MOOSE]

    def test_external_target(self):
        """Test a +module:Class specification."""
        assert resolve_parsers(["+my.parsers:Custom"]) == ["my.parsers:Custom"]

    def test_unknown_name(self):
        """Test that an unknown bundled name is an error."""
        with pytest.raises(PluginError, match="Parser Error: Nope"):
            resolve_parsers(["Nope"])

    def test_parser_info(self):
        """Test descriptor lookup."""
        assert get_parser_info("Core")["target"] == CORE
        assert get_parser_info("Nope") is None


class TestLoadParser:
    """Test plugin import."""

    def test_load_bundled(self):
        """Test importing a bundled plugin."""
        parser, registrations = load_parser(CORE)
        assert isinstance(parser, CoreParser)
        assert set(registrations["use"]) == {"base", "parent", "if"}

    def test_missing_module(self):
        """Test a module that cannot be imported."""
        with pytest.raises(PluginError):
            load_parser("prereqscan.parsers.does_not_exist:Parser")

    def test_missing_class(self):
        """Test a module without the named class."""
        with pytest.raises(PluginError, match="has no Missing"):
            load_parser("prereqscan.parsers.core:Missing")

    def test_missing_class_name(self):
        """Test a target without a class part."""
        with pytest.raises(PluginError):
            load_parser("prereqscan.parsers.core")

    def test_scanner_rejects_unknown_parser(self):
        """Test that the scanner reports bad plugin names on creation."""
        with pytest.raises(PluginError):
            Scanner(parsers=["Nope"])


class TestBuildMapping:
    """Test callback tables."""

    def test_use_handlers_carry_module_name(self):
        """Test that use callbacks receive the used module."""
        mapping = build_mapping([":default"])
        handler = mapping["use"]["Moose::Role"]
        assert isinstance(handler, Handler)
        assert handler.args == ("Moose::Role",)
        assert handler.name == "MooseParser.parse_moose_args"

    def test_method_handlers(self):
        """Test that method callbacks get no extra arguments."""
        mapping = build_mapping(["UniversalVersion"])
        assert mapping["method"]["VERSION"].args == ()
        assert mapping["use"] == {}


class RecordingParser:
    def __init__(self):
        self.calls = []

    def parse_args(self, ctx, used_module, tokens):
        self.calls.append((used_module, [token.value for token in tokens]))
        ctx.add("Extra::Module", "1.0")


class FailingParser:
    def parse_args(self, ctx, used_module, tokens):
        raise ValueError("broken plugin")


class TestCustomParsers:
    """Test plugins wired into a context by hand."""

    def test_use_callback(self, tokenizer):
        """Test that a use callback sees the tokens after the module name."""
        parser = RecordingParser()
        ctx = Context(mapping={"use": {"Foo": Handler(parser, "parse_args", ("Foo",))}})
        tokenizer.scan(ctx, ScanBuffer("use Foo 'bar';\n"))
        assert parser.calls[0][0] == "Foo"
        assert ctx.requires.as_dict() == {"Extra::Module": "1.0", "Foo": "0"}

    def test_failing_callback(self, tokenizer):
        """Test that a failing plugin becomes a warning."""
        ctx = Context(mapping={"use": {"Foo": Handler(FailingParser(), "parse_args", ("Foo",))}})
        tokenizer.scan(ctx, ScanBuffer("use Foo;\nuse Bar;\n"))
        assert ctx.requires.as_dict() == {"Bar": "0", "Foo": "0"}
        assert ctx.errors == []
        warnings = list(ctx.warnings)
        assert len(warnings) == 1
        assert warnings[0].startswith("Callback Error: FailingParser.parse_args (use Foo)")
        assert "broken plugin" in warnings[0]
        assert ctx.report().warnings == warnings

"""Tests for the scan context."""

from prereqscan import Context, Handler
from prereqscan.scanner import Token


class TestContextRecording:
    """Test how the context classifies requirements."""

    def test_add_requires(self):
        """Test a plain requirement."""
        ctx = Context()
        ctx.add("Foo", "1.0")
        assert ctx.requires.as_dict() == {"Foo": "1.0"}

    def test_add_in_conditional(self):
        """Test that conditional statements recommend."""
        ctx = Context()
        ctx.cond = True
        ctx.add("Foo")
        assert ctx.recommends.as_dict() == {"Foo": "0"}
        assert len(ctx.requires) == 0

    def test_force_cond(self):
        """Test that a forced condition outlives statement flags."""
        ctx = Context()
        ctx.force_cond = True
        ctx.add("Foo")
        assert "Foo" in ctx.recommends

    def test_add_in_eval(self):
        """Test that eval turns requirements into suggestions."""
        ctx = Context(suggests=True)
        ctx.eval = True
        ctx.add("Foo")
        ctx.add_conditional("Bar")
        assert ctx.suggests.as_dict() == {"Bar": "0", "Foo": "0"}

    def test_suggestions_disabled(self):
        """Test that suggestions are dropped by default."""
        ctx = Context()
        ctx.eval = True
        ctx.add("Foo")
        assert len(ctx.suggests) == 0
        assert len(ctx.requires) == 0

    def test_add_no(self):
        """Test that no statements are listed and follow add."""
        ctx = Context()
        ctx.add_no("warnings")
        assert ctx.noes.as_dict() == {"warnings": "0"}
        assert ctx.requires.as_dict() == {"warnings": "0"}

    def test_add_no_in_conditional(self):
        """Test that a conditional no statement is recommended."""
        ctx = Context()
        ctx.cond = True
        ctx.add_no("Foo", "1.2")
        assert ctx.noes.as_dict() == {"Foo": "1.2"}
        assert ctx.recommends.as_dict() == {"Foo": "1.2"}
        assert len(ctx.requires) == 0


class TestContextDispatch:
    """Test handler tables."""

    def test_statement_handlers(self):
        """Test the built-in statement handlers."""
        ctx = Context()
        assert ctx.has_statement_handler("use")
        assert ctx.has_statement_handler("require")
        assert not ctx.has_statement_handler("print")

    def test_register_keyword(self):
        """Test adding a keyword callback while scanning."""
        seen = []

        class Parser:
            def on_keyword(self, ctx, tokens):
                seen.append([token.value for token in tokens])

        ctx = Context()
        assert not ctx.has_callback_for("keyword", "extends")
        ctx.register_keyword("extends", Handler(Parser(), "on_keyword"))
        assert ctx.has_callback_for("keyword", "extends")
        ctx.run_callback_for("keyword", "extends", [Token("extends", "WORD")])
        assert seen == [["extends"]]

    def test_registration_is_per_context(self):
        """Test that keywords registered on one context do not leak."""
        mapping = {"use": {}}
        first = Context(mapping=mapping)
        first.register_keyword("with", Handler(object(), "missing"))
        assert not Context(mapping=mapping).has_callback_for("keyword", "with")


class TestContextReport:
    """Test report snapshots."""

    def test_report(self):
        """Test that the report mirrors the context."""
        ctx = Context(suggests=True, file="lib/Foo.pm")
        ctx.add("Foo", "1.0")
        ctx.add_recommendation("Foo", "0.5")
        ctx.add_recommendation("Bar")
        ctx.errors.append("Scan Error: x")
        report = ctx.report()
        assert report.file == "lib/Foo.pm"
        assert report.requires == {"Foo": "1.0"}
        assert report.recommends == {"Bar": "0"}
        assert report.errors == ["Scan Error: x"]
        assert not report.perl6

"""Tests for the prereqscan command line."""

import json

import pytest
import yaml

from prereqscan.cli import collect_files, main, render
from prereqscan.requirements import ScanReport


@pytest.fixture
def project(tmp_path):
    """A small Perl distribution."""
    lib = tmp_path / "lib" / "My"
    lib.mkdir(parents=True)
    (lib / "App.pm").write_text(
        "package My::App;\nuse strict;\nuse parent 'My::Base';\nrequire JSON::PP;\n1;\n"
    )
    tests = tmp_path / "t"
    tests.mkdir()
    (tests / "basic.t").write_text("use Test::More 0.98;\neval { require Test::Pod };\ndone_testing;\n")
    (tmp_path / "README").write_text("use Not::Perl;\n")
    return tmp_path


class TestCollectFiles:
    """Test input discovery."""

    def test_directory_walk(self, project):
        """Test that directories yield Perl files only."""
        files, missing = collect_files([project])
        assert sorted(path.name for path in files) == ["App.pm", "basic.t"]
        assert missing == []

    def test_missing_path(self, tmp_path):
        """Test that missing paths are reported."""
        files, missing = collect_files([tmp_path / "nope.pm"])
        assert files == []
        assert missing == [tmp_path / "nope.pm"]


class TestMain:
    """Test the main entry point."""

    def test_text_output(self, project, capsys):
        """Test the default text report."""
        assert main([str(project / "lib")]) == 0
        out = capsys.readouterr().out
        assert "requires:" in out
        assert "  My::Base  0" in out
        assert "recommends:" in out
        assert "JSON::PP" in out

    def test_json_output(self, project, capsys):
        """Test the JSON report for a whole directory."""
        assert main([str(project), "--format", "json", "--parsers", ":bundled", "--suggests"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["requires"] == {
            "My::Base": "0",
            "Test::More": "0.98",
            "parent": "0",
            "strict": "0",
        }
        assert data["recommends"] == {"JSON::PP": "0"}
        assert data["suggests"] == {"Test::Pod": "0"}

    def test_yaml_output(self, project, capsys):
        """Test the YAML report."""
        assert main([str(project / "t" / "basic.t"), "--format", "yaml"]) == 0
        data = yaml.safe_load(capsys.readouterr().out)
        assert data == {"requires": {"Test::More": "0.98"}}

    def test_missing_input(self, tmp_path, capsys):
        """Test that a missing input exits with status 1."""
        assert main([str(tmp_path / "missing.pm")]) == 1
        assert "does not exist" in capsys.readouterr().err

    def test_unknown_parser(self, project, capsys):
        """Test that an unknown parser exits with status 1."""
        assert main([str(project), "--parsers", "Nope"]) == 1
        assert "Parser Error: Nope" in capsys.readouterr().err

    def test_strict_with_errors(self, tmp_path, capsys):
        """Test that --strict fails on diagnostics."""
        path = tmp_path / "broken.pl"
        path.write_text("use Foo;\nfoo(1];\n")
        assert main([str(path), "--strict", "--show-errors", "--format", "json"]) == 2
        data = json.loads(capsys.readouterr().out)
        assert data["requires"] == {"Foo": "0"}
        assert data["errors"][0].startswith(f"{path}: Scan Error: mismatch")

    def test_errors_hidden_by_default(self, tmp_path, capsys):
        """Test that diagnostics are left out unless requested."""
        path = tmp_path / "broken.pl"
        path.write_text("use Foo;\nfoo(1];\n")
        assert main([str(path), "--format", "json", "-q"]) == 0
        assert "errors" not in json.loads(capsys.readouterr().out)


class TestRender:
    """Test report rendering."""

    def test_text_columns(self):
        """Test aligned module names."""
        report = ScanReport(requires={"A": "0", "Long::Name": "1.2"})
        assert render(report, "text", show_errors=False) == (
            "requires:\n  A           0\n  Long::Name  1.2"
        )

    def test_perl6(self):
        """Test the perl6 marker."""
        assert render(ScanReport(perl6=True), "json", show_errors=False) == '{\n  "perl6": true\n}'

    def test_warnings_shown(self):
        """Test that warnings are listed with errors."""
        report = ScanReport(warnings=["Callback Error: x"])
        assert render(report, "text", show_errors=True) == "warnings:\n  Callback Error: x"

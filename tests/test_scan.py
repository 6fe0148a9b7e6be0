"""Tests for the scanner facade and source preparation."""

import pytest

from prereqscan import Scanner
from prereqscan.scan import decode_utf8, prepare_source


class TestPrepareSource:
    """Test input decoding and normalization."""

    def test_bytes_stay_undecoded(self):
        """Test that plain bytes are kept one character per byte."""
        text, decoded = prepare_source("café".encode("utf-8"))
        assert text == "cafÃ©"
        assert not decoded

    def test_utf8_bom(self):
        """Test that a UTF-8 byte order mark decodes the source."""
        text, decoded = prepare_source(b"\xef\xbb\xbfuse Foo; # caf\xc3\xa9\n")
        assert text == "use Foo; # café\n"
        assert decoded

    def test_other_bom_is_stripped(self):
        """Test that other byte order marks are removed."""
        text, _ = prepare_source(b"\xff\xfeuse Foo;")
        assert text == "use Foo;"

    def test_line_endings(self):
        """Test CRLF and CR normalization."""
        text, _ = prepare_source(b"use Foo;\r\nuse Bar;\ruse Baz;\n")
        assert text == "use Foo;\nuse Bar;\nuse Baz;\n"

    def test_text_input(self):
        """Test that str input is decoded and loses its BOM."""
        assert prepare_source("\ufeffuse Foo;") == ("use Foo;", True)

    def test_none(self):
        """Test empty input."""
        assert prepare_source(None) == ("", False)

    def test_invalid_utf8_is_kept(self):
        """Test that undecodable text is left alone."""
        assert decode_utf8("été") == "été"


class TestScanner:
    """Test the scanner facade."""

    def test_scan_string(self, scanner):
        """Test scanning a string."""
        ctx = scanner.scan_string("use strict;\nuse Foo::Bar 0.5;\n")
        assert ctx.requires.as_dict() == {"Foo::Bar": "0.5", "strict": "0"}
        assert ctx.file is None

    def test_scan_empty(self, scanner):
        """Test scanning nothing."""
        ctx = scanner.scan_string("")
        assert len(ctx.requires) == 0
        assert ctx.errors == []

    def test_scan_file(self, scanner, tmp_path):
        """Test scanning a file."""
        path = tmp_path / "Foo.pm"
        path.write_bytes(b"package Foo;\r\nuse parent 'Base::Class';\r\n1;\r\n")
        ctx = scanner.scan_file(path)
        assert ctx.file == str(path)
        assert ctx.requires.as_dict() == {"Base::Class": "0", "parent": "0"}

    def test_missing_file(self, scanner, tmp_path):
        """Test that a missing file raises."""
        with pytest.raises(FileNotFoundError):
            scanner.scan_file(tmp_path / "Missing.pm")

    def test_settings_defaults(self, settings):
        """Test that parsers and suggests come from settings."""
        scanner = Scanner(settings=settings)
        assert scanner.parsers == [":default"]
        assert scanner.suggests is False

    def test_scanner_is_reusable(self, scanner):
        """Test that scans do not share state."""
        scanner.scan_string("use Foo;\nfoo(];\n")
        ctx = scanner.scan_string("use Bar;\n")
        assert ctx.requires.as_dict() == {"Bar": "0"}
        assert ctx.errors == []

    def test_realistic_module(self, bundled_scanner):
        """Test a module mixing most constructs."""
        source = (
            "package My::App;\n"
            "use strict;\n"
            "use warnings;\n"
            "use 5.010;\n"
            "use Moo;\n"
            "extends 'My::Base';\n"
            "use List::Util 1.45 qw(first max);\n"
            "\n"
            "our $VERSION = '0.01';\n"
            "\n"
            "sub run {\n"
            "    my ($self, %args) = @_;\n"
            "    my $total = $args{count} / 2;\n"
            "    if ($args{json}) {\n"
            "        require JSON::PP;\n"
            "    }\n"
            "    eval { require Cpanel::JSON::XS; 1 } or warn 'no xs';\n"
            "    my @parts = split /,/, $args{list};\n"
            "    (my $clean = $args{name}) =~ s{^\\s+}{}g;\n"
            "    print <<\"END\";\n"
            "use Not::A::Dependency;\n"
            "END\n"
            "    return $total;\n"
            "}\n"
            "\n"
            "1;\n"
            "__END__\n"
            "\n"
            "=head1 SYNOPSIS\n"
            "\n"
            "  use My::App;\n"
        )
        report = bundled_scanner.scan_string(source).report()
        assert report.errors == []
        assert report.requires == {
            "List::Util": "1.45",
            "Moo": "0",
            "My::Base": "0",
            "perl": "5.010",
            "strict": "0",
            "warnings": "0",
        }
        assert report.recommends == {"JSON::PP": "0"}
        assert report.suggests == {"Cpanel::JSON::XS": "0"}

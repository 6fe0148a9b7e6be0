"""Tests for Test::More conventions."""


def scan_bundled(bundled_scanner, source):
    return bundled_scanner.scan_string(source).report()


class TestTestMoreParser:
    """Test done_testing and skip_all plans."""

    def test_done_testing_needs_0_88(self, bundled_scanner):
        """Test that done_testing raises the Test::More version."""
        report = scan_bundled(bundled_scanner, "use Test::More;\nok(1);\ndone_testing;\n")
        assert report.requires == {"Test::More": "0.88"}

    def test_done_testing_with_parens(self, bundled_scanner):
        """Test done_testing() with an empty argument list."""
        report = scan_bundled(bundled_scanner, "use Test::More;\ndone_testing();\n")
        assert report.requires == {"Test::More": "0.88"}

    def test_higher_version_is_kept(self, bundled_scanner):
        """Test that an explicit newer version is not lowered."""
        report = scan_bundled(bundled_scanner, "use Test::More 0.98;\ndone_testing;\n")
        assert report.requires == {"Test::More": "0.98"}

    def test_skip_all_in_begin(self, bundled_scanner):
        """Test that a skip_all plan in BEGIN makes later modules optional."""
        report = scan_bundled(
            bundled_scanner,
            "use Test::More;\n"
            "BEGIN { plan skip_all => 'no db' unless $ENV{DB}; }\n"
            "use DBI;\n",
        )
        assert report.requires == {"Test::More": "0"}
        assert report.recommends == {"DBI": "0"}

    def test_plan_outside_begin(self, bundled_scanner):
        """Test that a runtime plan does not change later modules."""
        report = scan_bundled(bundled_scanner, "use Test::More;\nplan tests => 3;\nuse DBI;\n")
        assert report.requires == {"Test::More": "0", "DBI": "0"}

    def test_not_enabled_by_default(self, scan):
        """Test that the default parsers ignore done_testing."""
        report = scan("use Test::More;\ndone_testing;\n")
        assert report.requires == {"Test::More": "0"}

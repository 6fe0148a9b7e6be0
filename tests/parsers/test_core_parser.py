"""Tests for the base, parent and if pragmas."""


class TestBaseAndParent:
    """Test inheritance pragmas."""

    def test_base_qw(self, scan):
        """Test that every class in a qw list is required."""
        report = scan("use base qw(Foo Bar);")
        assert report.requires == {"base": "0", "Foo": "0", "Bar": "0"}

    def test_parent_string(self, scan):
        """Test a single quoted parent class."""
        report = scan("use parent 'Foo::Base';")
        assert report.requires == {"parent": "0", "Foo::Base": "0"}

    def test_parent_list(self, scan):
        """Test a parenthesized list of parents."""
        report = scan("use parent ('Foo', 'Bar');")
        assert report.requires == {"parent": "0", "Foo": "0", "Bar": "0"}

    def test_parent_norequire(self, scan):
        """Test that -norequire loads nothing."""
        report = scan("use parent -norequire, 'Foo';")
        assert report.requires == {"parent": "0"}

    def test_base_with_version(self, scan):
        """Test a version for the pragma itself."""
        report = scan("use base 2.18 'Foo';")
        assert report.requires == {"base": "2.18", "Foo": "0"}


class TestUseIf:
    """Test use if COND, MODULE => ARGS."""

    def test_module_is_recommended(self, scan):
        """Test that the conditional module is only recommended."""
        report = scan("use if $ENV{FOO}, 'Foo::Bar';")
        assert report.requires == {"if": "0"}
        assert report.recommends == {"Foo::Bar": "0"}

    def test_module_with_version(self, scan):
        """Test a version after the module name."""
        report = scan("use if $x, Foo => 1.5;")
        assert report.recommends == {"Foo": "1.5"}

    def test_module_with_arguments(self, scan):
        """Test that import arguments are not versions."""
        report = scan("use if $] < 5.008, 'utf8' => qw(decode);")
        assert report.recommends == {"utf8": "0"}

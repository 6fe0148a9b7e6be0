"""Randomized scanning of generated Perl source."""

import random

import pytest

from prereqscan import Scanner
from prereqscan.core.config import ScannerSettings

STATEMENTS = [
    "use Foo;",
    "my $x = 1;",
    "my $y = $x / 3;",
    "my %h = (a => 1, b => [1, 2]);",
    "$h{key}++;",
    "my @a = map { $_ * 2 } @b;",
    "s/foo/bar/g;",
    "$x =~ m{a(b)c};",
    "my @parts = split /,/, $z;",
    "my $s = q{a{b}c};",
    "print <<END;\nbody\nEND",
    "# comment",
    "eval { require Bar; 1 };",
    "my $r = $x->{list}[0];",
    "print STDERR 'done', \"\\n\";",
    "return unless defined $x;",
]

ALPHABET = "abqsmxy_$@%&*{}[]()<>/\\'\"`#;:,.=~!?+- 0123456789\n"


def generate(rng, depth=0):
    lines = []
    for _ in range(rng.randint(1, 6)):
        roll = rng.random()
        if depth < 4 and roll < 0.15:
            lines.append("sub f%d {\n%s\n}" % (rng.randint(0, 99), generate(rng, depth + 1)))
        elif depth < 4 and roll < 0.3:
            lines.append("if ($x) {\n%s\n}" % generate(rng, depth + 1))
        else:
            lines.append(rng.choice(STATEMENTS))
    return "\n".join(lines)


class TestFuzz:
    """Test that scanning always terminates cleanly."""

    @pytest.mark.parametrize("seed", range(50))
    def test_generated_code(self, seed):
        """Test balanced generated code leaves no open brackets or errors."""
        rng = random.Random(seed)
        source = generate(rng) + "\n"
        ctx = Scanner(suggests=True, settings=ScannerSettings()).scan_string(source)
        assert ctx.errors == [], source
        assert ctx.stack == [], source
        assert ctx.depth == 0
        if "use Foo;" in source:
            assert "Foo" in ctx.requires or "Foo" in ctx.recommends

    @pytest.mark.parametrize("seed", range(50))
    def test_random_characters(self, seed):
        """Test that arbitrary input terminates without raising."""
        rng = random.Random(seed)
        source = "".join(rng.choice(ALPHABET) for _ in range(rng.randint(1, 120)))
        ctx = Scanner(settings=ScannerSettings()).scan_string(source)
        assert ctx.depth == 0

"""
Shared pytest fixtures for the scanner tests.

This module provides:
- Scanner fixtures with the default and the bundled parser sets
- Helpers that run the tokenizer directly on a context and buffer
- Isolation of the package logger configured by the CLI
"""

import logging

import pytest

from prereqscan import Context, Scanner
from prereqscan.core.config import ScannerSettings
from prereqscan.scanner import ScanBuffer, ScopeFlags, Tokenizer


@pytest.fixture
def settings():
    """Settings with defaults only."""
    return ScannerSettings()


@pytest.fixture
def scanner(settings):
    """Scanner with the default parsers that records suggestions."""
    return Scanner(suggests=True, settings=settings)


@pytest.fixture
def bundled_scanner(settings):
    """Scanner with every bundled parser enabled."""
    return Scanner(parsers=[":bundled"], suggests=True, settings=settings)


@pytest.fixture
def scan(scanner):
    """Scan a string and return its report."""
    def _scan(source):
        return scanner.scan_string(source).report()
    return _scan


@pytest.fixture
def tokenizer(settings):
    """Tokenizer with default settings."""
    return Tokenizer(settings)


@pytest.fixture
def tokenize(tokenizer):
    """
    Tokenize a string at top level.

    Returns the tokens of the outermost scope and the context used.
    """
    def _tokenize(source, ctx=None):
        ctx = ctx or Context()
        tokens = tokenizer.scan(ctx, ScanBuffer(source), ScopeFlags.KEEP_TOKENS)
        return tokens, ctx
    return _tokenize


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handlers installed by setup_logging."""
    yield
    logger = logging.getLogger("prereqscan")
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []
    logger.setLevel(logging.NOTSET)
    logger.propagate = True

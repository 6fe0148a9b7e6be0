"""
Scanner facade.

Usage::

    from prereqscan import Scanner

    ctx = Scanner(parsers=[":bundled"]).scan_file("lib/Foo.pm")
    print(ctx.requires.as_dict())
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Optional, Union

from .context import Context
from .core.config import ScannerSettings, get_settings
from .core.errors import ScanError
from .parsers.registry import build_mapping
from .scanner.buffer import ScanBuffer
from .scanner.tokenizer import Tokenizer

logger = logging.getLogger(__name__)

UTF8_BOM = b"\xef\xbb\xbf"
OTHER_BOMS = (b"\x00\x00\xfe\xff", b"\xff\xfe\x00\x00", b"\xfe\xff", b"\xff\xfe")
LINE_ENDINGS = re.compile(r"\r\n?")


def prepare_source(source: Union[str, bytes, None]) -> tuple[str, bool]:
    """
    Turn raw input into scannable text.

    Bytes are kept one character per byte until the source declares
    ``use utf8`` or starts with a UTF-8 byte order mark.  Text input counts
    as decoded already.

    Returns:
        The text with normalized line endings, and whether it is decoded
    """
    if source is None:
        return "", False
    if isinstance(source, str):
        return LINE_ENDINGS.sub("\n", source.removeprefix("\ufeff")), True

    decoded = False
    if source.startswith(UTF8_BOM):
        source = source[len(UTF8_BOM):]
        text = decode_utf8(source.decode("latin-1"))
        decoded = True
    else:
        for bom in OTHER_BOMS:
            if source.startswith(bom):
                source = source[len(bom):]
                break
        text = source.decode("latin-1")
    return LINE_ENDINGS.sub("\n", text), decoded


def decode_utf8(text: str) -> str:
    """Decode a one-char-per-byte string as UTF-8, or leave it as is."""
    try:
        return text.encode("latin-1").decode("utf-8")
    except (UnicodeEncodeError, UnicodeDecodeError):
        logger.info("Source is not valid UTF-8; scanning it undecoded")
        return text


class Scanner:
    """
    Finds the modules a piece of Perl code depends on.

    Args:
        parsers: Parser plugin specifications (see
            :func:`prereqscan.parsers.registry.resolve_parsers`); defaults to
            the configured ``PARSERS``
        suggests: Record modules loaded inside ``eval`` as suggestions
        settings: Scanner settings; defaults to the environment
    """

    def __init__(
        self,
        parsers: Optional[Iterable[str]] = None,
        suggests: Optional[bool] = None,
        settings: Optional[ScannerSettings] = None,
    ):
        self.settings = settings or get_settings()
        self.parsers = list(parsers) if parsers is not None else list(self.settings.PARSERS)
        self.suggests = self.settings.SUGGESTS if suggests is None else suggests
        self.mapping = build_mapping(self.parsers)
        self.tokenizer = Tokenizer(self.settings)

    def scan_file(self, path: Union[str, Path]) -> Context:
        """
        Scan a file.

        Raises:
            FileNotFoundError: If ``path`` does not exist
        """
        path = Path(path)
        logger.debug("Scanning %s", path)
        return self.scan_string(path.read_bytes(), file=str(path))

    def scan_string(self, source: Union[str, bytes, None], file: Optional[str] = None) -> Context:
        """
        Scan Perl source.

        Fatal scan errors do not propagate: they are recorded on the returned
        context as ``"Scan Error: ..."`` next to the partial results.
        """
        ctx = Context(mapping=self.mapping, suggests=self.suggests, file=file)
        text, ctx.decoded = prepare_source(source)

        while True:
            buf = ScanBuffer(text)
            try:
                self.tokenizer.scan(ctx, buf)
            except ScanError as exc:
                logger.info("Scan error in %s: %s", file or "<string>", exc.message)
                ctx.errors.append(f"Scan Error: {exc.message}")
            if not ctx.redo:
                break
            text = decode_utf8(text)
            ctx.redo = False
            ctx.ended = False
            ctx.stack = []
            ctx.depth = 0
            ctx.eval = False
        return ctx

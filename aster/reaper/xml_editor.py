"""Surgical removal of one XML element without re-serializing the file.

The file is streamed through expat only to learn the line span of the first
element accepted by an ElementMatcher. The rewrite then copies the original
bytes line by line, dropping exactly that span, so indentation, comments,
attribute quoting and line endings everywhere else stay byte-identical.
"""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional
from xml.parsers import expat

from aster.analyzer.extractor import NAMESPACE_SEPARATOR
from aster.errors import XmlEditError
from aster.reaper.matcher import ElementMatcher


@dataclass(frozen=True)
class ElementLocation:
    """1-based, inclusive line span of a matched element."""
    start_line: int
    end_line: int


class LocatorState(Enum):
    SCANNING = "scanning"
    INSIDE_MATCH = "inside_match"
    FOUND = "found"


class _ElementFound(Exception):
    """Raised from an expat callback to stop parsing once the span is known."""


def _count_line_breaks(segment: bytes) -> int:
    # \r\n, \r and \n each end a line, same as expat and bytes.splitlines()
    return segment.count(b'\n') + segment.count(b'\r') - segment.count(b'\r\n')


def _tag_end_line(content: bytes, tag_start: int, tag_line: int) -> int:
    """Line holding the '>' that closes the tag starting at ``tag_start``.

    Handles tags split across lines, e.g. ``</string\\n>`` or a self-closing
    ``<string name="x"\\n/>``. A '>' inside a quoted attribute value does not
    close the tag.
    """
    quote = None
    for offset in range(tag_start, len(content)):
        byte = content[offset:offset + 1]
        if quote is not None:
            if byte == quote:
                quote = None
        elif byte in (b'"', b"'"):
            quote = byte
        elif byte == b'>':
            return tag_line + _count_line_breaks(content[tag_start:offset])
    return tag_line


class ElementLocator:
    """expat callbacks implementing the Scanning -> InsideMatch -> Found machine."""

    def __init__(self, content: bytes, matcher: ElementMatcher):
        self.content = content
        self.matcher = matcher
        self.parser = expat.ParserCreate(namespace_separator=NAMESPACE_SEPARATOR)
        self.parser.StartElementHandler = self.start_element
        self.parser.EndElementHandler = self.end_element

        self.state = LocatorState.SCANNING
        self.depth = 0
        self.start_depth = -1
        self.start_line = 0
        self.start_index = -1
        self.location: Optional[ElementLocation] = None

    def start_element(self, name: str, attributes: dict):
        self.depth += 1
        if self.state is LocatorState.SCANNING and self.matcher.matches(name, attributes):
            self.state = LocatorState.INSIDE_MATCH
            self.start_depth = self.depth
            self.start_line = self.parser.CurrentLineNumber
            self.start_index = self.parser.CurrentByteIndex

    def _closing_line(self) -> int:
        index = self.parser.CurrentByteIndex
        line = self.parser.CurrentLineNumber
        # expat positions an end event either at the start of the closing token
        # ("</name>", or the "<name/>" tag itself) or just past a "/>"
        if index == self.start_index or self.content.startswith(b'</', index):
            return _tag_end_line(self.content, index, line)
        return line

    def end_element(self, name: str):
        if self.state is LocatorState.INSIDE_MATCH and self.depth == self.start_depth:
            self.location = ElementLocation(self.start_line, self._closing_line())
            self.state = LocatorState.FOUND
            raise _ElementFound()

        # Closing a descendant of the match (or any element while scanning)
        self.depth -= 1

    def locate(self) -> Optional[ElementLocation]:
        """Run the parser until the match closes or the document ends.

        Raises:
            expat.ExpatError: If the document is malformed before the match closes
        """
        try:
            self.parser.Parse(self.content, True)
        except _ElementFound:
            pass
        return self.location


def find_element_location(content: bytes | str, matcher: ElementMatcher) -> Optional[ElementLocation]:
    """Find the line span of the first element the matcher accepts.

    Args:
        content: Whole XML document (str is encoded as UTF-8)
        matcher: Element predicate

    Returns:
        ElementLocation, or None if no element matches

    Raises:
        expat.ExpatError: If the document is malformed before a match is closed
    """
    if isinstance(content, str):
        content = content.encode('utf-8')
    return ElementLocator(content, matcher).locate()


def remove_element(path: str | Path, matcher: ElementMatcher) -> bool:
    """Delete the lines spanned by the first matching element, in place.

    Only the first match in document order is removed; call again to remove
    the next one. The file is not locked: a concurrent writer loses.

    Args:
        path: XML file to edit
        matcher: Element predicate

    Returns:
        True if an element was removed, False if none matched (file untouched)

    Raises:
        XmlEditError: If the file cannot be read, parsed or written
    """
    path = Path(path)

    # Read once; the same bytes feed the parser and the rewrite
    try:
        content = path.read_bytes()
    except OSError as e:
        raise XmlEditError(f"Cannot read {path}: {e.strerror or e}") from e

    try:
        location = find_element_location(content, matcher)
    except expat.ExpatError as e:
        raise XmlEditError(f"Malformed XML in {path}: {e}") from e

    if location is None:
        return False

    kept = [
        line
        for line_number, line in enumerate(content.splitlines(keepends=True), start=1)
        if not location.start_line <= line_number <= location.end_line
    ]

    try:
        path.write_bytes(b''.join(kept))
    except OSError as e:
        raise XmlEditError(f"Cannot write {path}: {e.strerror or e}") from e

    return True

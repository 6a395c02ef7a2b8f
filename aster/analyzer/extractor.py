"""Per-file extraction of string declarations and string references.

Two extractors, both pure functions of a file path:

- ``extract_xml_file`` streams resource/manifest XML through expat and records
  ``<string name="...">`` declarations plus ``@string/...`` references found in
  attribute values, CDATA sections and element text.
- ``extract_source_file`` scans Java/Kotlin sources line by line for
  ``R.string.<id>`` accesses.

Neither keeps state between calls, so the walker runs them on many worker
threads at once.
"""
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Tuple
from xml.parsers import expat

from aster.errors import ExtractionError

STRING_MARKER = "@string"
XML_USAGE_PATTERN = re.compile(r"@string/(\w+)")
SOURCE_USAGE_PATTERN = re.compile(r"R\.string\.(\w+)")

# Byte-level prefilter so only candidate lines are decoded
SOURCE_USAGE_PREFIX = b"R.string."

# expat reports namespaced names as "<uri> <local>"
NAMESPACE_SEPARATOR = " "


@dataclass(frozen=True)
class FileRecord:
    """Facts extracted from one scanned file."""
    path: str
    declared_ids: Tuple[str, ...] = ()  # one entry per declaration, document order
    referenced_ids: Tuple[str, ...] = ()  # one entry per reference, document order


Extractor = Callable[[Path], FileRecord]


def local_name(name: str) -> str:
    """Strip the namespace URI expat prepends to element and attribute names."""
    return name.rsplit(NAMESPACE_SEPARATOR, 1)[-1]


class _XmlFactHandler:
    """expat callbacks that accumulate declarations and references for one file."""

    def __init__(self):
        self.declared_ids: List[str] = []
        self.referenced_ids: List[str] = []
        self._text: List[str] = []

    def start_element(self, name: str, attributes: dict):
        self._flush_text()
        declares = local_name(name) == "string"

        for attr_name, value in attributes.items():
            if STRING_MARKER in value:
                match = XML_USAGE_PATTERN.search(value)
                if match:
                    self.referenced_ids.append(match.group(1))
            if declares and local_name(attr_name) == "name":
                self.declared_ids.append(value)

    def end_element(self, name: str):
        self._flush_text()

    def character_data(self, data: str):
        self._text.append(data)

    def boundary(self):
        self._flush_text()

    def _flush_text(self):
        # expat may split one run of text across several callbacks
        if not self._text:
            return
        text = "".join(self._text)
        self._text = []
        if STRING_MARKER in text:
            self.referenced_ids.extend(m.group(1) for m in XML_USAGE_PATTERN.finditer(text))


def extract_xml_file(path: str | Path) -> FileRecord:
    """Index a resource or manifest XML file.

    Args:
        path: File to parse

    Returns:
        FileRecord with declarations and references in document order

    Raises:
        ExtractionError: If the file cannot be read or is not well-formed XML
    """
    path = Path(path)
    handler = _XmlFactHandler()

    parser = expat.ParserCreate(namespace_separator=NAMESPACE_SEPARATOR)
    parser.StartElementHandler = handler.start_element
    parser.EndElementHandler = handler.end_element
    parser.CharacterDataHandler = handler.character_data
    parser.StartCdataSectionHandler = handler.boundary
    parser.EndCdataSectionHandler = handler.boundary

    try:
        with open(path, "rb") as f:
            parser.ParseFile(f)
    except OSError as e:
        raise ExtractionError(str(path), f"cannot read file: {e.strerror or e}") from e
    except expat.ExpatError as e:
        raise ExtractionError(str(path), f"malformed XML: {e}") from e

    return FileRecord(
        path=str(path),
        declared_ids=tuple(handler.declared_ids),
        referenced_ids=tuple(handler.referenced_ids),
    )


def extract_source_file(path: str | Path) -> FileRecord:
    """Index a Java or Kotlin source file.

    Every ``R.string.<id>`` occurrence contributes one reference; source files
    never declare strings.

    Raises:
        ExtractionError: If the file cannot be read or a matching line is not UTF-8
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ExtractionError(str(path), f"cannot read file: {e.strerror or e}") from e

    referenced_ids = []
    for line_number, raw_line in enumerate(raw.splitlines(), start=1):
        if SOURCE_USAGE_PREFIX not in raw_line:
            continue
        try:
            line = raw_line.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ExtractionError(str(path), f"invalid UTF-8 on line {line_number}") from e

        referenced_ids.extend(m.group(1) for m in SOURCE_USAGE_PATTERN.finditer(line))

    return FileRecord(path=str(path), referenced_ids=tuple(referenced_ids))

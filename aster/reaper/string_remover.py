"""Remove unused <string> declarations from every resource file declaring them."""
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from aster.errors import XmlEditError
from aster.reaper.matcher import ElementMatcher
from aster.reaper.xml_editor import remove_element


@dataclass(frozen=True)
class RemovalResult:
    """Outcome of removing one identifier from one file."""
    identifier: str
    path: str
    removed: bool
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def string_matcher(identifier: str) -> ElementMatcher:
    """Matcher for ``<string name="identifier">``."""
    return ElementMatcher.for_local_name("string").attr("name", identifier)


class StringRemover:
    """Runs the surgical XML editor over a batch of identifiers."""

    def remove_strings(
        self, identifiers: Iterable[str], definitions: Dict[str, List[str]]
    ) -> List[RemovalResult]:
        """Remove each identifier from every file that declares it.

        A file listed twice for the same identifier is edited twice, removing
        both declarations. A failure on one file is recorded and the batch
        continues with the next file.

        Args:
            identifiers: Identifiers to remove
            definitions: Identifier -> declaring files (ResourceIndex.definitions())

        Returns:
            One RemovalResult per (identifier, file) pair, in processing order
        """
        results = []

        for identifier in identifiers:
            matcher = string_matcher(identifier)
            for location in definitions.get(identifier, []):
                try:
                    removed = remove_element(Path(location), matcher)
                    results.append(RemovalResult(identifier, location, removed))
                except XmlEditError as e:
                    results.append(RemovalResult(identifier, location, False, error=str(e)))

        return results

"""Cross-reference index over the records produced by a walk."""
from typing import Dict, Iterable, List, Set, Tuple

from aster.analyzer.extractor import FileRecord


class ResourceIndex:
    """Read-only view over a frozen list of FileRecords.

    Every lookup is derived from the records on each call; nothing is cached,
    so callers issuing repeated queries should keep the returned maps.
    """

    def __init__(self, files: Iterable[FileRecord]):
        self._files: Tuple[FileRecord, ...] = tuple(files)

    def __len__(self) -> int:
        return len(self._files)

    def __repr__(self) -> str:
        return f"ResourceIndex(files={len(self._files)})"

    def files(self) -> Tuple[FileRecord, ...]:
        return self._files

    def definitions(self) -> Dict[str, List[str]]:
        """Map each declared identifier to the files declaring it.

        Paths keep insertion order and repeat when a file declares the same
        identifier twice.
        """
        definitions_to_files: Dict[str, List[str]] = {}
        for record in self._files:
            for key in record.declared_ids:
                if key not in definitions_to_files:
                    definitions_to_files[key] = []
                definitions_to_files[key].append(record.path)
        return definitions_to_files

    def usages(self) -> Dict[str, List[str]]:
        """Map each referenced identifier to the files referencing it."""
        usages_to_files: Dict[str, List[str]] = {}
        for record in self._files:
            for key in record.referenced_ids:
                if key not in usages_to_files:
                    usages_to_files[key] = []
                usages_to_files[key].append(record.path)
        return usages_to_files

    def defined_ids(self) -> Set[str]:
        return {key for record in self._files for key in record.declared_ids}

    def used_ids(self) -> Set[str]:
        return {key for record in self._files for key in record.referenced_ids}

    def unused_ids(self) -> Set[str]:
        """Identifiers declared somewhere but never referenced by any indexed file."""
        return self.defined_ids() - self.used_ids()


def filter_unused(index: ResourceIndex, denylist: Iterable[str]) -> List[str]:
    """Unused identifiers minus dynamically referenced ones, sorted.

    Identifiers containing any denylisted substring (gender and emoji variants
    looked up by name at runtime) are never reported or removed.

    Args:
        index: Index to query
        denylist: Substrings that exclude an identifier

    Returns:
        Sorted list of identifiers safe to report as unused
    """
    denylist = tuple(denylist)
    return sorted(
        key for key in index.unused_ids()
        if not any(fragment in key for fragment in denylist)
    )

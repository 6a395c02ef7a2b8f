"""Build a ResourceIndex by walking the resource, source and manifest roots."""
import time
from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console

from aster.analyzer.extractor import Extractor, FileRecord, extract_source_file, extract_xml_file
from aster.analyzer.resource_index import ResourceIndex
from aster.analyzer.walker import FileWalker, WalkFailure
from aster.config import MANIFEST_GLOBS, RESOURCE_GLOBS, SOURCE_GLOBS, Config


class Indexer:
    """Runs the three walks one after another and merges their records."""

    def __init__(
        self,
        java_root: str | Path,
        res_root: str | Path,
        manifest_root: Optional[str | Path] = None,
        config: Optional[Config] = None,
        console: Optional[Console] = None,
    ):
        """Initialize indexer.

        Args:
            java_root: Root of the Java/Kotlin sources
            res_root: Root of the resource XML files
            manifest_root: Where to look for AndroidManifest.xml (default: res_root)
            config: Walker settings (default: a fresh Config)
            console: Progress and warning output (None = silent)
        """
        self.java_root = Path(java_root)
        self.res_root = Path(res_root)
        self.manifest_root = Path(manifest_root) if manifest_root is not None else self.res_root
        self.config = config or Config()
        self.console = console
        self.failures: List[WalkFailure] = []

    def _say(self, message: str):
        if self.console is not None:
            self.console.print(message)

    def _walk(self, label: str, root: Path, globs: Sequence[str], extractor: Extractor) -> List[FileRecord]:
        start_time = time.time()
        walker = FileWalker(
            root,
            globs,
            extractor,
            threads=self.config.threads,
            excluded_dirs=self.config.excluded_dirs,
            console=self.console,
        )
        records = walker.walk()
        self.failures.extend(walker.failures)
        self._say(f"Indexed {len(records)} {label} files in {time.time() - start_time:.2f}s")
        return records

    def index(self) -> ResourceIndex:
        """Walk every root and build the index.

        Raises:
            WalkError: If any root cannot be walked
        """
        self._say("[bold blue]Indexing resources...[/bold blue]")
        self.failures = []

        xml_files = self._walk("xml", self.res_root, RESOURCE_GLOBS, extract_xml_file)
        source_files = self._walk("source", self.java_root, SOURCE_GLOBS, extract_source_file)
        # The *.xml walk already covers a manifest living under the resource root
        manifest_files = []
        if self.manifest_root.resolve() != self.res_root.resolve():
            manifest_files = self._walk("manifest", self.manifest_root, MANIFEST_GLOBS, extract_xml_file)

        start_time = time.time()
        index = ResourceIndex(source_files + xml_files + manifest_files)
        self._say(f"Inverted index in {time.time() - start_time:.2f}s")

        if self.failures:
            self._say(f"[dim]Skipped {len(self.failures)} unreadable or malformed file(s)[/dim]")

        return index

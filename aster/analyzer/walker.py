"""Parallel directory walker that extracts a FileRecord from every matching file.

Every directory listing is one task on a bounded thread pool. The task runs the
extractor on each matching file itself and hands subdirectories back to the
coordinating thread for scheduling, so concurrency never depends on how deep
or wide the tree is.

Results travel over a queue to a single RecordCollector thread. ``walk()``
returns only after the pool is drained and the collector has consumed the
sentinel, so callers never observe a partial result list.
"""
import os
import queue
import threading
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, List, Optional, Set

from rich.console import Console
from rich.markup import escape

from aster.analyzer.extractor import Extractor, FileRecord
from aster.errors import ExtractionError, WalkError

DEFAULT_EXCLUDED_DIRS = frozenset({
    'build', '.git', '.gradle', '.idea', 'node_modules', '__pycache__', '.aster_cache'
})

# Marks the end of the stream for the collector
_DONE = object()


def default_thread_count() -> int:
    """Same sizing rule ThreadPoolExecutor uses when max_workers is None."""
    return min(32, (os.cpu_count() or 1) + 4)


@dataclass(frozen=True)
class WalkFailure:
    """A file (or directory) that was skipped during a walk."""
    path: str
    reason: str


class RecordCollector(threading.Thread):
    """Single consumer that fans in results produced by walker threads."""

    def __init__(self, channel: queue.Queue, console: Optional[Console] = None):
        """Initialize collector.

        Args:
            channel: Queue the walker threads put FileRecord / WalkFailure items on
            console: Where soft failures are reported (None = silent)
        """
        super().__init__(name="aster-collector", daemon=True)
        self.channel = channel
        self.console = console
        self.records: List[FileRecord] = []
        self.failures: List[WalkFailure] = []

    def run(self):
        while True:
            item = self.channel.get()
            if item is _DONE:
                return

            if isinstance(item, WalkFailure):
                self.failures.append(item)
                if self.console is not None:
                    self.console.print(
                        f"[yellow]Warning:[/yellow] skipped {escape(item.path)}: {escape(item.reason)}",
                        soft_wrap=True,
                    )
            else:
                self.records.append(item)

    def close(self):
        """Signal that no producer will put anything else on the channel."""
        self.channel.put(_DONE)


class FileWalker:
    """Find files under a root by name glob and extract facts from each one."""

    def __init__(
        self,
        root: str | Path,
        globs: Iterable[str],
        extractor: Extractor,
        threads: Optional[int] = None,
        excluded_dirs: Optional[Set[str]] = None,
        console: Optional[Console] = None,
    ):
        """Initialize walker.

        Args:
            root: Directory to search recursively
            globs: File-name patterns (e.g. ['*.java', '*.kt']); a file matching any is kept
            extractor: Function turning a matching path into a FileRecord
            threads: Worker pool size (default: ThreadPoolExecutor's sizing rule)
            excluded_dirs: Directory names never descended into
            console: Console for soft-failure warnings (None = silent)
        """
        self.root = Path(root)
        self.globs = list(globs)
        self.extractor = extractor
        self.threads = threads or default_thread_count()
        self.excluded_dirs = DEFAULT_EXCLUDED_DIRS if excluded_dirs is None else frozenset(excluded_dirs)
        self.console = console
        self.failures: List[WalkFailure] = []

    def _validate(self):
        """Reject walks that cannot start.

        Raises:
            WalkError: If the root is not a directory or a glob is unusable
        """
        if not self.root.is_dir():
            raise WalkError(f"Not a directory: {self.root}")
        if not self.globs:
            raise WalkError(f"No file patterns given for {self.root}")
        for glob in self.globs:
            if not glob or '/' in glob or os.sep in glob:
                raise WalkError(f"Invalid file pattern {glob!r}: must be a non-empty file-name glob")

    def matches(self, name: str) -> bool:
        return any(fnmatchcase(name, glob) for glob in self.globs)

    def walk(self) -> List[FileRecord]:
        """Walk the root and return one FileRecord per successfully indexed file.

        Soft failures are collected on ``self.failures`` instead of being raised.
        The order of the returned records is unspecified.

        Raises:
            WalkError: If the walk cannot start
        """
        self._validate()

        channel: queue.Queue = queue.Queue()
        collector = RecordCollector(channel, self.console)
        collector.start()

        try:
            with ThreadPoolExecutor(max_workers=self.threads, thread_name_prefix="aster-walk") as executor:
                pending = {executor.submit(self._visit, self.root, channel)}
                while pending:
                    done, pending = wait(pending, return_when=FIRST_COMPLETED)
                    for future in done:
                        for subdir in future.result():
                            pending.add(executor.submit(self._visit, subdir, channel))
        finally:
            # All producers are finished (or failed) at this point
            collector.close()
            collector.join()

        self.failures = collector.failures
        return collector.records

    def _visit(self, directory: Path, channel: queue.Queue) -> List[Path]:
        """List one directory, extract its matching files, return subdirectories."""
        subdirs = []
        try:
            with os.scandir(directory) as entries:
                entries = list(entries)
        except OSError as e:
            channel.put(WalkFailure(str(directory), f"cannot list directory: {e.strerror or e}"))
            return subdirs

        for entry in entries:
            if entry.name.startswith('.'):
                continue

            try:
                if entry.is_dir(follow_symlinks=False):
                    if entry.name not in self.excluded_dirs:
                        subdirs.append(Path(entry.path))
                    continue
                is_file = entry.is_file()
            except OSError as e:
                channel.put(WalkFailure(entry.path, f"cannot stat: {e.strerror or e}"))
                continue

            if is_file and self.matches(entry.name):
                try:
                    channel.put(self.extractor(Path(entry.path)))
                except ExtractionError as e:
                    channel.put(WalkFailure(e.path, e.reason))

        return subdirs

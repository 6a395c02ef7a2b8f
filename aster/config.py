"""Configuration management for Aster.

Explicit constructor arguments win over environment variables (optionally loaded
from a .env file), which win over built-in defaults.
"""
import os
from pathlib import Path
from typing import Iterable, Optional, Tuple

from dotenv import load_dotenv

__version__ = "0.3.0"

# Resources looked up by composed name at runtime; static extraction never sees them
DEFAULT_DENYLIST = ("emoji", "f1gender", "m2gender")

RESOURCE_GLOBS = ("*.xml",)
SOURCE_GLOBS = ("*.java", "*.kt")
MANIFEST_GLOBS = ("AndroidManifest.xml",)


class Config:
    """Settings shared by indexing, filtering and the CLI."""

    def __init__(
        self,
        cache_dir: Optional[str | Path] = None,
        denylist: Optional[Iterable[str]] = None,
        threads: Optional[int] = None,
        excluded_dirs: Optional[Iterable[str]] = None,
        env_file: Optional[str | Path] = None,
    ):
        """Initialize config.

        Args:
            cache_dir: Directory holding the index snapshot
            denylist: Substrings that keep an identifier out of unused reports
            threads: Walker pool size
            excluded_dirs: Directory names the walker never descends into
            env_file: .env file to load (default: .env in the working directory, if any)
        """
        load_dotenv(env_file if env_file is not None else Path.cwd() / ".env")

        self._cache_dir = Path(cache_dir) if cache_dir is not None else None
        self._denylist = tuple(denylist) if denylist is not None else None
        self._threads = threads
        self._excluded_dirs = frozenset(excluded_dirs) if excluded_dirs is not None else None

    @property
    def cache_dir(self) -> Path:
        """Snapshot directory.

        Priority:
        1. cache_dir argument
        2. ASTER_CACHE_DIR environment variable
        3. $XDG_CACHE_HOME/aster, falling back to ~/.cache/aster
        """
        if self._cache_dir is not None:
            return self._cache_dir

        env_dir = os.getenv("ASTER_CACHE_DIR")
        if env_dir:
            return Path(env_dir).expanduser()

        xdg_cache = os.getenv("XDG_CACHE_HOME")
        base = Path(xdg_cache) if xdg_cache else Path.home() / ".cache"
        return base / "aster"

    @property
    def denylist(self) -> Tuple[str, ...]:
        """Substrings excluded from unused reports (ASTER_DENYLIST is comma-separated)."""
        if self._denylist is not None:
            return tuple(fragment for fragment in self._denylist if fragment)

        env_denylist = os.getenv("ASTER_DENYLIST")
        if env_denylist is not None:
            return tuple(fragment.strip() for fragment in env_denylist.split(",") if fragment.strip())

        return DEFAULT_DENYLIST

    @property
    def threads(self) -> Optional[int]:
        """Walker pool size, or None for the executor's default sizing.

        Raises:
            ValueError: If ASTER_THREADS is not a positive integer
        """
        if self._threads is not None:
            return self._threads

        env_threads = os.getenv("ASTER_THREADS")
        if not env_threads:
            return None
        try:
            threads = int(env_threads)
        except ValueError:
            raise ValueError(f"ASTER_THREADS must be an integer, got {env_threads!r}")
        if threads < 1:
            raise ValueError(f"ASTER_THREADS must be positive, got {threads}")
        return threads

    @property
    def excluded_dirs(self) -> Optional[frozenset]:
        """Directory names skipped by the walker (None = walker defaults)."""
        return self._excluded_dirs


# Singleton instance
_config = None


def get_config() -> Config:
    """Get or create singleton Config instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config()
    return _config

"""Exception types raised by Aster.

Library code raises these; the CLI turns them into a red message and exit code 1.
"""


class AsterError(Exception):
    """Base class for all Aster errors."""


class ExtractionError(AsterError):
    """A single file could not be indexed (unreadable, bad encoding, malformed XML).

    Soft failure: the walker logs it and drops the file.
    """

    def __init__(self, path: str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"In {self.path}: {reason}")


class WalkError(AsterError):
    """A walk could not start (missing root, bad glob)."""


class CacheError(AsterError):
    """The index snapshot could not be written or read."""


class CacheNotFoundError(CacheError, FileNotFoundError):
    """No snapshot exists in the cache directory."""


class CacheFormatError(CacheError):
    """The snapshot exists but cannot be decoded."""


class XmlEditError(AsterError):
    """A resource file could not be read, parsed or rewritten during removal."""

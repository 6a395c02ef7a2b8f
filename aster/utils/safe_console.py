"""Rich Console that degrades Aster's icons to ASCII on non-UTF-8 terminals."""
from typing import Any

from rich.console import Console

from .logger import is_utf8_capable, sanitize_for_terminal


class SafeConsole(Console):
    """Console wrapper that sanitizes string output for legacy terminals.

    Thread-safe like Rich's Console, so walker threads may share one instance.
    """

    def __init__(self, *args, **kwargs):
        """Initialize SafeConsole; all arguments go to Rich's Console."""
        self._needs_sanitization = not is_utf8_capable()

        if self._needs_sanitization:
            kwargs['legacy_windows'] = True

        super().__init__(*args, **kwargs)

    def print(self, *objects: Any, **kwargs) -> None:
        if self._needs_sanitization:
            objects = tuple(
                sanitize_for_terminal(obj, utf8=False) if isinstance(obj, str) else obj
                for obj in objects
            )
        super().print(*objects, **kwargs)

    def status(self, *args, **kwargs):
        """Status spinner; ASCII 'line' spinner on legacy terminals."""
        if self._needs_sanitization:
            kwargs['spinner'] = 'line'

        return super().status(*args, **kwargs)

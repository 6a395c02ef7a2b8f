"""Terminal encoding detection with ASCII fallbacks for Aster's status icons.

Windows consoles running a legacy code page crash on characters they cannot
encode; every icon Aster prints has an ASCII stand-in here.
"""
import locale
import sys

ICON_MAP = {
    '✓': '[OK]',
    '✗': '[FAIL]',
    '⚠': '[WARN]',
    '→': '->',
    '…': '...',
    '•': '*',
}


def detect_terminal_encoding() -> str:
    """Detect the terminal's encoding.

    Returns:
        str: Lower-cased encoding name ('utf-8', 'cp1252', 'ascii', ...)
    """
    if getattr(sys.stdout, 'encoding', None):
        return sys.stdout.encoding.lower()

    try:
        return locale.getpreferredencoding().lower()
    except Exception:
        return 'ascii'


def is_utf8_capable() -> bool:
    return detect_terminal_encoding().replace('_', '-') in ('utf-8', 'utf8')


def sanitize_for_terminal(text: str, utf8: bool | None = None) -> str:
    """Replace icons with ASCII equivalents when the terminal can't show them.

    Args:
        text: Text potentially containing icons
        utf8: Override terminal detection (None = detect)

    Returns:
        str: Text safe for the current terminal
    """
    if utf8 is None:
        utf8 = is_utf8_capable()
    if utf8:
        return text

    for icon, replacement in ICON_MAP.items():
        text = text.replace(icon, replacement)
    return text

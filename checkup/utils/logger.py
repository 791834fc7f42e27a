"""Windows-safe output handling with Unicode fallback for terminal compatibility.

Detects terminal encoding and provides ASCII alternatives for the icons used
in reports, so that non-UTF-8 terminals don't crash or print mojibake.
"""
import locale
import sys


# Unicode to ASCII icon mapping for Windows compatibility
ICON_MAP = {
    # Status icons
    '✓': '[OK]',
    '✗': '[FAIL]',
    '⚠': '[WARN]',

    # Report markers
    '➜': '->',
    '→': '->',
    '•': '*',
    '…': '...',
}


def detect_terminal_encoding() -> str:
    """Detect the terminal's encoding capability.

    Returns:
        str: Terminal encoding ('utf-8', 'cp1252', 'ascii', etc.)
    """
    # Try stdout encoding first
    if getattr(sys.stdout, 'encoding', None):
        return sys.stdout.encoding.lower()

    # Fallback to locale
    try:
        return locale.getpreferredencoding().lower()
    except (AttributeError, ValueError):
        # Ultimate fallback
        return 'ascii'


def is_utf8_capable() -> bool:
    """Check if the terminal can handle UTF-8 Unicode characters."""
    return detect_terminal_encoding().replace('-', '').replace('_', '') == 'utf8'


def sanitize_for_terminal(text: str, force: bool = False) -> str:
    """Replace Unicode icons with ASCII equivalents if terminal doesn't support UTF-8.

    Args:
        text: Text potentially containing Unicode icons
        force: Sanitize regardless of the detected terminal

    Returns:
        str: Sanitized text safe for current terminal
    """
    if not force and is_utf8_capable():
        return text

    sanitized = text
    for unicode_char, ascii_replacement in ICON_MAP.items():
        sanitized = sanitized.replace(unicode_char, ascii_replacement)

    return sanitized

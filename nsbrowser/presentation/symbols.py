"""
Symbols — Visual vocabulary for browser states

Progressive enhancement: Unicode when supported, ASCII fallback.
Configurable via the display.symbols setting.

Also provides safe output utilities:
- safe_print(): Encoding-safe printing for host-supplied text
- sanitize_control_chars(): Strips terminal control characters
"""

import os
import sys
from dataclasses import dataclass
from typing import Optional


# Common Unicode to ASCII replacements for display
UNICODE_TO_ASCII = {
    '→': '->',
    '←': '<-',
    '…': '...',
    '–': '-',
    '—': '--',
    '“': '"',
    '”': '"',
    '‘': "'",
    '’': "'",
    '•': '*',
    '·': '.',
    '×': 'x',
    '≈': '~',
    '≠': '!=',
    '≤': '<=',
    '≥': '>=',
}


def sanitize_control_chars(text: str) -> str:
    """
    Remove control characters from host-supplied text.

    Docstrings and source come from the browsed environment and may carry
    ANSI escapes or null bytes. Preserves newlines, tabs and carriage
    returns.
    """
    if not text:
        return text
    return ''.join(ch for ch in text if ord(ch) >= 32 or ch in '\t\n\r')


def safe_print(text: str, end: str = '\n', file=None) -> None:
    """
    Print with graceful encoding fallback.

    Handles UnicodeEncodeError by replacing unencodable characters
    with ASCII equivalents or '?' as last resort.
    """
    if file is None:
        file = sys.stdout

    try:
        print(text, end=end, file=file)
    except UnicodeEncodeError:
        safe_text = text
        for unicode_char, ascii_equiv in UNICODE_TO_ASCII.items():
            safe_text = safe_text.replace(unicode_char, ascii_equiv)

        try:
            print(safe_text, end=end, file=file)
        except UnicodeEncodeError:
            encoding = getattr(file, 'encoding', 'utf-8') or 'utf-8'
            encoded = safe_text.encode(encoding, errors='replace')
            print(encoded.decode(encoding), end=end, file=file)


SUMMARY_LENGTH = 120


def truncate(text: str, length: int = SUMMARY_LENGTH, full: bool = False) -> str:
    """
    Truncate text with ellipsis, respecting full mode.

    Examples:
        truncate("Short", 50)                 -> "Short"
        truncate("Any length", 5, full=True)  -> "Any length"
    """
    if not text:
        return ""
    if full or len(text) <= length:
        return text
    if length <= 3:
        return text[:length]
    return text[:length - 3] + "..."


@dataclass(frozen=True)
class SymbolSet:
    """Markers used when rendering the browser panes as text."""
    # Namespace states
    loaded: str
    unloaded: str

    # Selection
    selected: str
    unselected: str

    # Slot states
    idle: str
    pending: str
    ok: str
    error: str

    # Filter states
    invalid_pattern: str
    stale: str

    # Structural
    arrow: str
    bullet: str
    rule: str
    ellipsis: str


UNICODE = SymbolSet(
    loaded='●',
    unloaded='○',
    selected='▸',
    unselected=' ',
    idle='·',
    pending='◌',
    ok='✓',
    error='✗',
    invalid_pattern='⚠',
    stale='↺',
    arrow='→',
    bullet='•',
    rule='─',
    ellipsis='…',
)

ASCII = SymbolSet(
    loaded='[L]',
    unloaded='[ ]',
    selected='>',
    unselected=' ',
    idle='[.]',
    pending='[..]',
    ok='[OK]',
    error='[ERR]',
    invalid_pattern='[!]',
    stale='[~]',
    arrow='->',
    bullet='*',
    rule='-',
    ellipsis='...',
)


def supports_unicode() -> bool:
    """
    Check if environment likely supports Unicode output.

    Conservative: defaults to ASCII if uncertain.
    """
    if os.environ.get('NSB_ASCII_ONLY', '').lower() in ('1', 'true', 'yes'):
        return False
    if os.environ.get('NSB_UNICODE', '').lower() in ('1', 'true', 'yes'):
        return True

    stdout_encoding = getattr(sys.stdout, 'encoding', None)
    if stdout_encoding:
        encoding_lower = stdout_encoding.lower().replace('-', '').replace('_', '')
        if encoding_lower.startswith('cp') or encoding_lower in ('ascii', 'latin1', 'iso88591'):
            return False
        if encoding_lower.startswith('utf'):
            return True

    lang = os.environ.get('LANG', '').lower()
    lc_all = os.environ.get('LC_ALL', '').lower()
    return 'utf-8' in lang or 'utf8' in lang or 'utf-8' in lc_all or 'utf8' in lc_all


def get_symbols(preference: Optional[str] = None) -> SymbolSet:
    """
    Get appropriate symbol set based on preference or auto-detection.

    Args:
        preference: "unicode", "ascii", or "auto" (None = auto)
    """
    if preference == 'unicode':
        return UNICODE
    if preference == 'ascii':
        return ASCII
    return UNICODE if supports_unicode() else ASCII


def symbol_for_status(symbols: SymbolSet, status: str) -> str:
    """Marker for a slot status label ("ok", "pending", "error(NotFound)")."""
    if status.startswith('error'):
        return symbols.error
    return getattr(symbols, status, symbols.idle)

"""
Presentation — Display model, symbols and text/JSON formatting
"""

from .projection import DisplayModel, project
from .symbols import SymbolSet, UNICODE, ASCII, get_symbols, safe_print, truncate
from .formatters import render_text, render_json, format_entries

__all__ = [
    'DisplayModel', 'project',
    'SymbolSet', 'UNICODE', 'ASCII', 'get_symbols', 'safe_print', 'truncate',
    'render_text', 'render_json', 'format_entries',
]

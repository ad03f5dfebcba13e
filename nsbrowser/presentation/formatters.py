"""
Formatters — Text and JSON renderings of a DisplayModel

Used by the CLI. A widget renderer would read the DisplayModel directly.
"""

from typing import List

import orjson

from .projection import DisplayModel
from .symbols import SymbolSet, get_symbols, sanitize_control_chars, symbol_for_status, truncate


def format_entries(count: int) -> str:
    """Entry-count label shown under a list ("1 entry", "12 entries")."""
    return f"{count} entry" if count == 1 else f"{count} entries"


def render_json(model: DisplayModel, compact: bool = False) -> str:
    option = 0 if compact else orjson.OPT_INDENT_2
    return orjson.dumps(model.to_dict(), option=option).decode()


def render_text(model: DisplayModel, symbols: SymbolSet = None, full: bool = False, width: int = 72) -> str:
    """
    Render the three panes one after the other.

    Example (ASCII):
        Namespaces [loaded] 2 entries
        > [L] alpha
          [L] gamma
        Members [publics] 1 entry
        > foo
        Documentation [Source] alpha/foo [OK]
        (defn foo [] 42)
    """
    symbols = symbols or get_symbols()
    lines: List[str] = []

    lines.append(_header("Namespaces", model.namespace_mode, model.namespace_match_count,
                         model.namespace_filter_invalid, symbols))
    for name, loaded in zip(model.namespace_rows, model.namespace_loaded):
        marker = symbols.selected if name == model.selected_namespace else symbols.unselected
        state = symbols.loaded if loaded else symbols.unloaded
        lines.append(f"{marker} {state} {name}")
    if model.require_status != "idle":
        lines.append(f"  require {model.require_target}: "
                     f"{symbol_for_status(symbols, model.require_status)} {model.require_status}")
    if model.catalog_error:
        lines.append(f"  {symbols.error} {model.catalog_error}")

    lines.append("")
    lines.append(_header("Members", model.member_mode, model.member_match_count,
                         model.member_filter_invalid, symbols))
    selected = model.selected_member.partition("/")[2] if model.selected_member else None
    for name in model.member_rows:
        marker = symbols.selected if name == selected else symbols.unselected
        lines.append(f"{marker} {name}")

    lines.append("")
    status = symbol_for_status(symbols, model.doc_status)
    target = model.doc_target or symbols.ellipsis
    lines.append(f"Documentation [{model.doc_facet}] {target} {status}")
    lines.append(symbols.rule * width)
    if model.doc_text:
        lines.append(sanitize_control_chars(model.doc_text) if full else
                     truncate(sanitize_control_chars(model.doc_text), length=width * 20))
    elif model.doc_status.startswith("error"):
        lines.append(model.doc_status)

    if model.stale_selection:
        lines.append("")
        lines.append(f"{symbols.stale} selection ignored (not in the current list)")

    return "\n".join(lines)


def _header(title: str, mode: str, count: int, invalid: bool, symbols: SymbolSet) -> str:
    header = f"{title} [{mode}] {format_entries(count)}"
    if invalid:
        header += f" {symbols.invalid_pattern} invalid filter"
    return header

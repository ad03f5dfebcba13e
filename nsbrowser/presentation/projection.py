"""
View Projection — Engine state → immutable display model

project() is a pure function: no side effects, no waiting, and equal
inputs give equal DisplayModels, so a renderer can compare snapshots
cheaply and redraw only on change.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Sequence, Tuple

from ..core.catalog import CatalogStore
from ..core.filters import FilterState
from ..core.model import Member, Namespace
from ..core.selection import SelectionState
from ..services.resolution import OutcomeState, SlotOutcome


@dataclass(frozen=True)
class DisplayModel:
    """Everything a renderer needs to draw the three panes."""
    # Namespace pane (ns-lb, ns-entries-lbl)
    namespace_rows: Tuple[str, ...] = ()
    namespace_loaded: Tuple[bool, ...] = ()
    namespace_match_count: int = 0
    namespace_mode: str = ""
    namespace_filter_invalid: bool = False

    # Member pane (vars-lb, vars-entries-lbl)
    member_rows: Tuple[str, ...] = ()
    member_match_count: int = 0
    member_mode: str = ""
    member_filter_invalid: bool = False

    # Documentation pane (doc-tf, doc-ta)
    doc_text: str = ""
    doc_status: str = "idle"
    doc_facet: str = ""
    doc_target: str = ""

    # Selection
    selected_namespace: Optional[str] = None
    selected_member: Optional[str] = None
    stale_selection: bool = False

    # Actions
    require_enabled: bool = False
    require_status: str = "idle"
    require_target: str = ""
    trace_enabled: bool = False

    catalog_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict for JSON output."""
        data = asdict(self)
        data["namespace_rows"] = list(self.namespace_rows)
        data["namespace_loaded"] = list(self.namespace_loaded)
        data["member_rows"] = list(self.member_rows)
        return data


def project(
    catalog: CatalogStore,
    namespace_filter: FilterState,
    member_filter: FilterState,
    selection: SelectionState,
    doc: SlotOutcome,
    require: SlotOutcome,
    namespace_view: Sequence[Namespace] = (),
    member_view: Sequence[Member] = (),
    stale_selection: bool = False,
    catalog_error: Optional[str] = None,
) -> DisplayModel:
    """
    Build the display model.

    Args:
        catalog: Catalog the views were computed from
        namespace_filter: Namespace list filter (mode, counts, validity)
        member_filter: Member list filter
        selection: Current selection and doc facet
        doc: Latest applied outcome of the DOC slot
        require: Latest applied outcome of the REQUIRE slot
        namespace_view: Filtered namespaces, in display order
        member_view: Filtered members of the selected namespace
        stale_selection: Whether the last selection command was ignored
        catalog_error: Last catalog refresh failure, if any
    """
    ns = selection.selected_namespace
    member = selection.selected_member

    # The catalog holds the live loaded flag for the selected namespace
    live_ns = catalog.get_namespace(ns.name) if ns is not None else None
    ns_loaded = live_ns.loaded if live_ns is not None else False

    require_pending = require.is_pending and ns is not None and require.target == ns.name

    return DisplayModel(
        namespace_rows=tuple(n.name for n in namespace_view),
        namespace_loaded=tuple(n.loaded for n in namespace_view),
        namespace_match_count=namespace_filter.match_count,
        namespace_mode=namespace_filter.mode.label,
        namespace_filter_invalid=namespace_filter.invalid_pattern,
        member_rows=tuple(m.name for m in member_view),
        member_match_count=member_filter.match_count,
        member_mode=member_filter.mode.label,
        member_filter_invalid=member_filter.invalid_pattern,
        doc_text=doc.text if doc.state == OutcomeState.OK else "",
        doc_status=doc.label(),
        doc_facet=selection.doc_facet.label,
        doc_target=member.qualified_name if member is not None else "",
        selected_namespace=ns.name if ns is not None else None,
        selected_member=member.qualified_name if member is not None else None,
        stale_selection=stale_selection,
        require_enabled=ns is not None and not ns_loaded and not require_pending,
        require_status=require.label(),
        require_target=require.target,
        trace_enabled=member is not None and ns_loaded and member.kind.traceable,
        catalog_error=catalog_error,
    )

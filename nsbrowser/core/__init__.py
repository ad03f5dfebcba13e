"""
Core — Catalog, filtering and selection

Synchronous, single-owner layer. Nothing here blocks or spawns work;
resolution requests are handed back to the caller.
"""

from .model import (
    Namespace, Member, MemberKind, NamespaceMode, MemberMode, DocFacet, Slot,
    NamespaceInfo, MemberInfo, qualify, split_qualified,
)
from .errors import BrowserError, HostUnavailable, LoadError, NotFound, error_kind
from .catalog import CatalogStore
from .filters import FilterEngine, FilterState, CompiledPattern
from .selection import (
    SelectionCoordinator, SelectionState, CoordinatorState,
    Transition, RequireRequest, DocRequest,
)

__all__ = [
    # Model
    'Namespace', 'Member', 'MemberKind', 'NamespaceMode', 'MemberMode', 'DocFacet', 'Slot',
    'NamespaceInfo', 'MemberInfo', 'qualify', 'split_qualified',
    # Errors
    'BrowserError', 'HostUnavailable', 'LoadError', 'NotFound', 'error_kind',
    # Components
    'CatalogStore',
    'FilterEngine', 'FilterState', 'CompiledPattern',
    'SelectionCoordinator', 'SelectionState', 'CoordinatorState',
    'Transition', 'RequireRequest', 'DocRequest',
]

"""
Selection Coordinator — Namespace → member → documentation state machine

States:
    IDLE               nothing selected
    NAMESPACE_SELECTED a namespace is selected, no member
    MEMBER_SELECTED    a member of the selected namespace is selected

The coordinator owns both list filters and their current views, and a
single monotonic generation counter. Every request it hands out carries a
generation; each slot remembers the generation of its latest request, and
a completion is only worth applying while its generation is still the
slot's current one. Selecting something new therefore invalidates older
in-flight work without touching it.

The coordinator never performs resolution itself: transitions return the
request (if any) for the owner to submit.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

from .catalog import CatalogStore
from .filters import FilterEngine, FilterState
from .model import (
    DocFacet, Member, MemberMode, Namespace, NamespaceMode, Slot, split_qualified,
)

log = logging.getLogger(__name__)


class CoordinatorState(Enum):
    IDLE = "idle"
    NAMESPACE_SELECTED = "namespace_selected"
    MEMBER_SELECTED = "member_selected"


@dataclass
class SelectionState:
    """What the user is looking at."""
    selected_namespace: Optional[Namespace] = None
    selected_member: Optional[Member] = None
    doc_facet: DocFacet = DocFacet.DOC


@dataclass(frozen=True)
class RequireRequest:
    """Load an unloaded namespace."""
    namespace: str
    generation: int
    slot: Slot = field(default=Slot.REQUIRE, init=False)

    @property
    def target(self) -> str:
        return self.namespace


@dataclass(frozen=True)
class DocRequest:
    """Resolve one documentation facet of a member."""
    member: Member
    facet: DocFacet
    generation: int
    slot: Slot = field(default=Slot.DOC, init=False)

    @property
    def target(self) -> str:
        return self.member.qualified_name


Request = Union[RequireRequest, DocRequest]


@dataclass(frozen=True)
class Transition:
    """Outcome of a coordinator command."""
    accepted: bool
    request: Optional[Request] = None
    stale: bool = False
    reason: str = ""

    @classmethod
    def rejected(cls, reason: str) -> 'Transition':
        return cls(accepted=False, stale=True, reason=reason)


class SelectionCoordinator:
    """
    Keeps selection, filters and views consistent.

    Usage:
        coord = SelectionCoordinator(catalog, FilterEngine())
        coord.select_namespace("clojure.core")
        t = coord.select_member("clojure.core/map")
        if t.request:
            resolution.submit(t.request)
    """

    def __init__(
        self,
        catalog: CatalogStore,
        filters: FilterEngine,
        namespace_mode: NamespaceMode = NamespaceMode.LOADED,
        member_mode: MemberMode = MemberMode.PUBLICS,
        doc_facet: DocFacet = DocFacet.DOC,
    ):
        self.catalog = catalog
        self.filters = filters
        self.namespace_filter = FilterState(mode=namespace_mode)
        self.member_filter = FilterState(mode=member_mode)
        self.selection = SelectionState(doc_facet=doc_facet)

        self.generation = 0
        self._slot_generations: Dict[Slot, int] = {}
        self.stale_selection = False

        self.namespace_view: List[Namespace] = []
        self.member_view: List[Member] = []
        self._recompute_namespaces()
        self._recompute_members()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> CoordinatorState:
        if self.selection.selected_member is not None:
            return CoordinatorState.MEMBER_SELECTED
        if self.selection.selected_namespace is not None:
            return CoordinatorState.NAMESPACE_SELECTED
        return CoordinatorState.IDLE

    def current_generation(self, slot: Slot) -> Optional[int]:
        return self._slot_generations.get(slot)

    def is_current(self, slot: Slot, generation: int) -> bool:
        """True if a completion with this generation should be applied."""
        return self._slot_generations.get(slot) == generation

    # -------------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------------

    def set_namespace_filter(self, mode=None, pattern: Optional[str] = None) -> Transition:
        """
        Change the namespace list filter.

        The selected namespace stays selected even when the new filter
        hides it; its member list is unaffected.
        """
        self.namespace_filter.update(mode=mode, pattern=pattern)
        self._recompute_namespaces()
        return self._accept()

    def set_member_filter(self, mode=None, pattern: Optional[str] = None) -> Transition:
        """
        Change the member list filter.

        A selected member the new filter hides is deselected and its
        pending documentation request is invalidated.
        """
        self.member_filter.update(mode=mode, pattern=pattern)
        self._recompute_members()
        self._drop_hidden_member()
        return self._accept()

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def select_namespace(self, name: str) -> Transition:
        """Select a namespace, clearing any member selection. Legal from any state."""
        ns = self.catalog.get_namespace(name)
        if ns is None:
            return self._reject(f"Unknown namespace: {name}")

        self.selection.selected_namespace = ns
        self.selection.selected_member = None
        self._bump(Slot.DOC)
        self._recompute_members()
        log.debug("Selected namespace %s (generation %d)", name, self.generation)
        return self._accept()

    def select_member(self, qualified_name: str) -> Transition:
        """
        Select a member from the current filtered member list.

        Anything not in that list is a stale selection and changes nothing.
        """
        member = self._visible_member(qualified_name)
        if member is None:
            return self._reject(f"Not in member list: {qualified_name}")

        self.selection.selected_member = member
        return self._accept(self._doc_request())

    def change_doc_facet(self, facet) -> Transition:
        """Switch documentation facet; re-resolves when a member is selected."""
        self.selection.doc_facet = DocFacet.parse(facet)
        if self.selection.selected_member is None:
            return self._accept()
        return self._accept(self._doc_request())

    def require(self, name: str) -> Transition:
        """
        Ask for an unloaded namespace to be loaded.

        Does not change the selection. Already-loaded namespaces need no
        work and produce no request.
        """
        ns = self.catalog.get_namespace(name)
        if ns is not None and ns.loaded:
            return self._accept()
        generation = self._bump(Slot.REQUIRE)
        log.debug("Require %s (generation %d)", name, generation)
        return self._accept(RequireRequest(namespace=name, generation=generation))

    def browse_to(self, qualified_name: str) -> Transition:
        """
        Jump straight to "ns/name" or a bare namespace name.

        If the member is hidden by the member filter, the filter is reset
        to the full namespace map first.
        """
        parts = split_qualified(qualified_name)
        if parts is None:
            return self.select_namespace(qualified_name.strip())

        ns_name, _ = parts
        transition = self.select_namespace(ns_name)
        if not transition.accepted:
            return transition

        target = qualified_name.strip()
        if self._visible_member(target) is None:
            self.member_filter.update(mode=MemberMode.MAP, pattern="")
            self._recompute_members()
        return self.select_member(target)

    def on_catalog_changed(self) -> None:
        """Recompute views after the catalog loaded or re-read namespaces."""
        self._recompute_namespaces()
        self._recompute_members()
        member = self.selection.selected_member
        if member is not None:
            # Keep the selection on the refreshed record for the same name
            fresh = self._visible_member(member.qualified_name)
            if fresh is not None:
                self.selection.selected_member = fresh
        self._drop_hidden_member()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _bump(self, slot: Slot) -> int:
        self.generation += 1
        self._slot_generations[slot] = self.generation
        return self.generation

    def _doc_request(self) -> DocRequest:
        generation = self._bump(Slot.DOC)
        return DocRequest(
            member=self.selection.selected_member,
            facet=self.selection.doc_facet,
            generation=generation,
        )

    def _visible_member(self, qualified_name: str) -> Optional[Member]:
        for member in self.member_view:
            if member.qualified_name == qualified_name:
                return member
        return None

    def _drop_hidden_member(self) -> None:
        member = self.selection.selected_member
        if member is not None and member not in self.member_view:
            self.selection.selected_member = None
            self._bump(Slot.DOC)
            log.debug("Deselected hidden member %s", member.qualified_name)

    def _recompute_namespaces(self) -> None:
        self.namespace_view = self.namespace_filter.apply(self.filters, self.catalog.list_namespaces())

    def _recompute_members(self) -> None:
        ns = self.selection.selected_namespace
        candidates = self.catalog.members_of(ns) if ns is not None else []
        self.member_view = self.member_filter.apply(self.filters, candidates)

    def _accept(self, request: Optional[Request] = None) -> Transition:
        self.stale_selection = False
        return Transition(accepted=True, request=request)

    def _reject(self, reason: str) -> Transition:
        self.stale_selection = True
        log.debug("Stale selection: %s", reason)
        return Transition.rejected(reason)

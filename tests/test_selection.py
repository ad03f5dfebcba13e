"""
Tests for Selection Coordinator — Namespace → member → doc state machine

Tests verify:
- Selecting a namespace clears the member selection
- Selections outside the filtered list are stale no-ops
- Every doc-affecting change moves the DOC slot to a new generation
- require is idempotent for loaded namespaces
- Filter changes keep or drop selections as documented
"""

import pytest

from nsbrowser.core.filters import FilterEngine
from nsbrowser.core.model import DocFacet, MemberKind, MemberMode, NamespaceMode, Slot
from nsbrowser.core.selection import (
    CoordinatorState, DocRequest, RequireRequest, SelectionCoordinator,
)


class TestSelectNamespace:
    """Namespace selection."""

    def test_starts_idle(self, coordinator):
        assert coordinator.state == CoordinatorState.IDLE
        assert coordinator.member_view == []

    def test_select_namespace(self, coordinator):
        t = coordinator.select_namespace("alpha")
        assert t.accepted and t.request is None
        assert coordinator.state == CoordinatorState.NAMESPACE_SELECTED
        assert coordinator.selection.selected_namespace.name == "alpha"

    def test_member_view_follows_namespace(self, coordinator):
        coordinator.select_namespace("alpha")
        names = [m.name for m in coordinator.member_view]
        assert "foo" in names
        assert "helper" not in names  # private, default mode is publics

    def test_select_namespace_clears_member(self, coordinator):
        coordinator.select_namespace("alpha")
        coordinator.select_member("alpha/foo")
        coordinator.select_namespace("gamma")
        assert coordinator.selection.selected_member is None
        assert coordinator.state == CoordinatorState.NAMESPACE_SELECTED

    def test_reselect_same_namespace_clears_member(self, coordinator):
        coordinator.select_namespace("alpha")
        coordinator.select_member("alpha/foo")
        coordinator.select_namespace("alpha")
        assert coordinator.selection.selected_member is None

    def test_unknown_namespace_is_stale(self, coordinator):
        coordinator.select_namespace("alpha")
        t = coordinator.select_namespace("nope")
        assert not t.accepted and t.stale
        assert coordinator.stale_selection is True
        assert coordinator.selection.selected_namespace.name == "alpha"

    def test_select_namespace_invalidates_doc(self, coordinator):
        coordinator.select_namespace("alpha")
        t = coordinator.select_member("alpha/foo")
        coordinator.select_namespace("gamma")
        assert not coordinator.is_current(Slot.DOC, t.request.generation)


class TestSelectMember:
    """Member selection."""

    def test_select_member_requests_doc(self, coordinator):
        coordinator.select_namespace("alpha")
        t = coordinator.select_member("alpha/foo")
        assert isinstance(t.request, DocRequest)
        assert t.request.target == "alpha/foo"
        assert t.request.facet == DocFacet.DOC
        assert coordinator.is_current(Slot.DOC, t.request.generation)
        assert coordinator.state == CoordinatorState.MEMBER_SELECTED

    def test_member_not_in_view_is_stale(self, coordinator):
        """A private member is hidden under publics."""
        coordinator.select_namespace("alpha")
        coordinator.select_member("alpha/foo")
        t = coordinator.select_member("alpha/helper")
        assert not t.accepted
        assert t.request is None
        assert coordinator.stale_selection is True
        assert coordinator.selection.selected_member.name == "foo"

    def test_member_of_other_namespace_is_stale(self, coordinator):
        coordinator.select_namespace("alpha")
        assert not coordinator.select_member("gamma/if").accepted

    def test_member_without_namespace_is_stale(self, coordinator):
        assert not coordinator.select_member("alpha/foo").accepted

    def test_accepted_command_clears_stale_flag(self, coordinator):
        coordinator.select_namespace("nope")
        coordinator.select_namespace("alpha")
        assert coordinator.stale_selection is False

    def test_generations_strictly_increase(self, coordinator):
        coordinator.select_namespace("alpha")
        first = coordinator.select_member("alpha/foo").request.generation
        second = coordinator.select_member("alpha/bar").request.generation
        assert second > first
        assert not coordinator.is_current(Slot.DOC, first)
        assert coordinator.is_current(Slot.DOC, second)


class TestDocFacet:
    """Facet changes."""

    def test_facet_change_without_member(self, coordinator):
        t = coordinator.change_doc_facet("Source")
        assert t.accepted and t.request is None
        assert coordinator.selection.doc_facet == DocFacet.SOURCE

    def test_facet_change_reissues_request(self, coordinator):
        coordinator.select_namespace("alpha")
        first = coordinator.select_member("alpha/foo").request
        second = coordinator.change_doc_facet("Source").request
        assert second.facet == DocFacet.SOURCE
        assert second.member == first.member
        assert second.generation > first.generation

    def test_unknown_facet_raises(self, coordinator):
        with pytest.raises(ValueError):
            coordinator.change_doc_facet("Gossip")


class TestRequire:
    """Namespace loading requests."""

    def test_require_unloaded(self, coordinator):
        t = coordinator.require("beta")
        assert isinstance(t.request, RequireRequest)
        assert t.request.target == "beta"
        assert coordinator.is_current(Slot.REQUIRE, t.request.generation)

    def test_require_loaded_is_noop(self, coordinator):
        generation = coordinator.generation
        t = coordinator.require("alpha")
        assert t.accepted and t.request is None
        assert coordinator.generation == generation
        assert coordinator.current_generation(Slot.REQUIRE) is None

    def test_require_keeps_selection(self, coordinator):
        coordinator.select_namespace("alpha")
        coordinator.select_member("alpha/foo")
        doc_generation = coordinator.current_generation(Slot.DOC)
        coordinator.require("beta")
        assert coordinator.selection.selected_member.name == "foo"
        assert coordinator.current_generation(Slot.DOC) == doc_generation

    def test_selection_does_not_invalidate_require(self, coordinator):
        t = coordinator.require("beta")
        coordinator.select_namespace("gamma")
        assert coordinator.is_current(Slot.REQUIRE, t.request.generation)


class TestFilters:
    """Filter changes and their effect on selection."""

    def test_namespace_filter_keeps_selection(self, coordinator):
        coordinator.select_namespace("alpha")
        coordinator.set_namespace_filter(mode="unloaded")
        assert "alpha" not in [ns.name for ns in coordinator.namespace_view]
        assert coordinator.selection.selected_namespace.name == "alpha"
        assert coordinator.member_view

    def test_member_filter_hiding_member_deselects(self, coordinator):
        coordinator.select_namespace("alpha")
        t = coordinator.select_member("alpha/foo")
        coordinator.set_member_filter(pattern="^bar$")
        assert coordinator.selection.selected_member is None
        assert not coordinator.is_current(Slot.DOC, t.request.generation)

    def test_member_filter_keeping_member(self, coordinator):
        coordinator.select_namespace("alpha")
        t = coordinator.select_member("alpha/foo")
        coordinator.set_member_filter(pattern="fo")
        assert coordinator.selection.selected_member.name == "foo"
        assert coordinator.is_current(Slot.DOC, t.request.generation)

    def test_invalid_pattern_empties_view(self, coordinator):
        coordinator.select_namespace("alpha")
        coordinator.set_member_filter(pattern="[")
        assert coordinator.member_view == []
        assert coordinator.member_filter.invalid_pattern is True

    def test_initial_modes(self, catalog):
        coord = SelectionCoordinator(
            catalog, FilterEngine(),
            namespace_mode=NamespaceMode.ALL, member_mode=MemberMode.MAP,
        )
        assert len(coord.namespace_view) == 4


class TestBrowseTo:
    """Jumping to a qualified name."""

    def test_browse_to_member(self, coordinator):
        t = coordinator.browse_to("alpha/foo")
        assert t.accepted
        assert t.request.target == "alpha/foo"
        assert coordinator.selection.selected_namespace.name == "alpha"

    def test_browse_to_hidden_member_resets_filter(self, coordinator):
        t = coordinator.browse_to("alpha/helper")
        assert t.accepted
        assert coordinator.member_filter.mode is MemberMode.MAP
        assert coordinator.selection.selected_member.name == "helper"

    def test_browse_to_namespace(self, coordinator):
        t = coordinator.browse_to("gamma")
        assert t.accepted and t.request is None
        assert coordinator.selection.selected_namespace.name == "gamma"

    def test_browse_to_unknown_member(self, coordinator):
        assert not coordinator.browse_to("alpha/missing").accepted
        assert coordinator.stale_selection is True


class TestCatalogChanged:
    """Views follow catalog updates."""

    def test_loaded_namespace_appears(self, rich_host, catalog, coordinator):
        rich_host.require_namespace("beta")
        catalog.mark_loaded("beta")
        coordinator.on_catalog_changed()
        assert "beta" in [ns.name for ns in coordinator.namespace_view]

    def test_selected_member_rebound(self, rich_host, catalog, coordinator):
        coordinator.select_namespace("alpha")
        coordinator.select_member("alpha/foo")
        old = coordinator.selection.selected_member
        rich_host.set_kind("alpha/foo", MemberKind.TRACED)
        catalog.sync_namespace("alpha")
        coordinator.on_catalog_changed()
        assert coordinator.selection.selected_member is not old
        assert coordinator.selection.selected_member.kind == MemberKind.TRACED

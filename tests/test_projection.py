"""
Tests for View Projection — Engine state to display model

Tests verify:
- project() is pure: equal inputs give equal models
- Action enablement (require, trace) follows the selection
- Doc text is only shown for a successful outcome
"""

from nsbrowser.core.filters import FilterEngine, FilterState
from nsbrowser.core.model import DocFacet, MemberMode, NamespaceMode
from nsbrowser.core.selection import SelectionState
from nsbrowser.presentation.projection import DisplayModel, project
from nsbrowser.services.resolution import SlotOutcome


def _project(catalog, selection=None, doc=None, require=None, **kwargs):
    filters = FilterEngine()
    ns_filter = FilterState(mode=NamespaceMode.LOADED)
    member_filter = FilterState(mode=MemberMode.PUBLICS)
    selection = selection or SelectionState()
    namespace_view = ns_filter.apply(filters, catalog.list_namespaces())
    ns = selection.selected_namespace
    member_view = member_filter.apply(filters, catalog.members_of(ns)) if ns else []
    return project(
        catalog, ns_filter, member_filter, selection,
        doc or SlotOutcome.idle(), require or SlotOutcome.idle(),
        namespace_view=namespace_view, member_view=member_view, **kwargs
    )


class TestPurity:
    """Same inputs, same model."""

    def test_equal_inputs_equal_models(self, catalog):
        selection = SelectionState(selected_namespace=catalog.get_namespace("alpha"))
        first = _project(catalog, selection)
        second = _project(catalog, selection)
        assert first == second
        assert hash(first) == hash(second)

    def test_model_is_frozen(self, catalog):
        model = _project(catalog)
        try:
            model.doc_text = "x"
        except AttributeError:
            pass
        else:
            raise AssertionError("DisplayModel should be immutable")

    def test_empty_state(self, catalog):
        model = _project(catalog)
        assert model.namespace_rows == ("alpha", "gamma")
        assert model.namespace_loaded == (True, True)
        assert model.namespace_match_count == 2
        assert model.member_rows == ()
        assert model.selected_namespace is None
        assert model.doc_status == "idle"
        assert model.namespace_mode == "loaded"
        assert model.member_mode == "publics"
        assert model.doc_facet == "Doc"


class TestEnablement:
    """Require and trace buttons."""

    def test_require_enabled_for_unloaded(self, catalog):
        selection = SelectionState(selected_namespace=catalog.get_namespace("beta"))
        assert _project(catalog, selection).require_enabled is True

    def test_require_disabled_for_loaded(self, catalog):
        selection = SelectionState(selected_namespace=catalog.get_namespace("alpha"))
        assert _project(catalog, selection).require_enabled is False

    def test_require_disabled_while_pending_for_it(self, catalog):
        selection = SelectionState(selected_namespace=catalog.get_namespace("beta"))
        model = _project(catalog, selection, require=SlotOutcome.pending("beta"))
        assert model.require_enabled is False
        other = _project(catalog, selection, require=SlotOutcome.pending("broken"))
        assert other.require_enabled is True

    def test_trace_enabled_for_public(self, catalog):
        selection = SelectionState(
            selected_namespace=catalog.get_namespace("alpha"),
            selected_member=catalog.find_member("alpha/foo"),
        )
        assert _project(catalog, selection).trace_enabled is True

    def test_trace_disabled_for_macro(self, catalog):
        selection = SelectionState(
            selected_namespace=catalog.get_namespace("alpha"),
            selected_member=catalog.find_member("alpha/when-ready"),
        )
        assert _project(catalog, selection).trace_enabled is False


class TestDocPane:
    """Documentation text and status."""

    def test_ok_shows_text(self, catalog):
        model = _project(catalog, doc=SlotOutcome.ok("alpha/foo", "Returns 42."))
        assert model.doc_text == "Returns 42."
        assert model.doc_status == "ok"

    def test_error_hides_text(self, catalog):
        model = _project(catalog, doc=SlotOutcome.failed("alpha/foo", "NotFound"))
        assert model.doc_text == ""
        assert model.doc_status == "error(NotFound)"

    def test_facet_label(self, catalog):
        model = _project(catalog, SelectionState(doc_facet=DocFacet.SEE_ALSOS))
        assert model.doc_facet == "See alsos"

    def test_to_dict_uses_lists(self, catalog):
        data = _project(catalog, catalog_error="boom").to_dict()
        assert data["namespace_rows"] == ["alpha", "gamma"]
        assert data["catalog_error"] == "boom"
        assert set(data) == set(DisplayModel.__dataclass_fields__)

"""
Browser Engine — The single owner of browser state

Wires catalog, filters, selection and resolution together and exposes
the commands a renderer sends (filter changes, selections, require,
trace, clipboard). Every command runs synchronously on the caller's
thread; background results are only applied when the owner calls
pump() or wait_idle(), which makes the caller the only mutator.

Usage:
    engine = BrowserEngine(StaticHost.from_file("catalog.yaml"))
    engine.set_namespace_filter(mode="loaded", pattern="")
    engine.select_namespace("alpha")
    engine.select_member("alpha/foo")
    engine.set_doc_facet("Source")
    engine.wait_idle()
    model = engine.display()
"""

import logging
from typing import Callable, Dict, Optional

from .config import Config
from .core.catalog import CatalogStore
from .core.errors import HostUnavailable
from .core.filters import FilterEngine
from .core.model import DocFacet, MemberMode, NamespaceMode, Slot
from .core.selection import SelectionCoordinator, Transition
from .orchestrator import TaskOrchestrator, TaskResult
from .presentation.projection import DisplayModel, project
from .services.actions import ActionHandler, RecordingActions
from .services.host import HostProvider
from .services.resolution import ResolutionService, SlotOutcome

log = logging.getLogger(__name__)


class BrowserEngine:
    """
    Namespace browsing engine.

    Thread Safety:
    - Not thread-safe; drive it from one thread (the UI loop)
    - Host calls for require/doc run on the orchestrator's workers
    """

    def __init__(
        self,
        host: HostProvider,
        config: Optional[Config] = None,
        orchestrator: Optional[TaskOrchestrator] = None,
        actions: Optional[ActionHandler] = None,
    ):
        settings = (config or Config()).browser

        self.host = host
        self.actions = actions or RecordingActions()
        self.catalog = CatalogStore(host)
        self.catalog_error: Optional[str] = None
        self._refresh_catalog()

        self.coordinator = SelectionCoordinator(
            self.catalog,
            FilterEngine(cache_size=settings.pattern_cache_size),
            namespace_mode=NamespaceMode.parse(settings.namespace_mode),
            member_mode=MemberMode.parse(settings.member_mode),
            doc_facet=DocFacet.parse(settings.doc_facet),
        )
        self.resolution = ResolutionService(host, orchestrator)
        self._outcomes: Dict[Slot, SlotOutcome] = {
            Slot.REQUIRE: SlotOutcome.idle(),
            Slot.DOC: SlotOutcome.idle(),
        }

    # -------------------------------------------------------------------------
    # Renderer commands
    # -------------------------------------------------------------------------

    def set_namespace_filter(self, mode=None, pattern: Optional[str] = None) -> Transition:
        return self._run(self.coordinator.set_namespace_filter, mode, pattern)

    def set_member_filter(self, mode=None, pattern: Optional[str] = None) -> Transition:
        return self._run(self.coordinator.set_member_filter, mode, pattern)

    def select_namespace(self, name: str) -> Transition:
        return self._run(self.coordinator.select_namespace, name)

    def select_member(self, qualified_name: str) -> Transition:
        return self._run(self.coordinator.select_member, qualified_name)

    def set_doc_facet(self, facet) -> Transition:
        return self._run(self.coordinator.change_doc_facet, facet)

    def require(self, namespace: str) -> Transition:
        return self._run(self.coordinator.require, namespace)

    def browse_to(self, qualified_name: str) -> Transition:
        """Jump to "ns/name" (or a namespace) typed into the doc field."""
        return self._run(self.coordinator.browse_to, qualified_name)

    def refresh(self) -> bool:
        """Re-sync the catalog from the host. Returns False on host failure."""
        ok = self._refresh_catalog()
        self._run(self._catalog_changed)
        return ok

    def trace(self, qualified_name: str) -> bool:
        """
        Hand a traceable member to the trace collaborator.

        The member's namespace is re-read afterwards so a kind change
        (traced/untraced) shows up in the lists.
        """
        member = self.catalog.find_member(qualified_name)
        ns = self.catalog.get_namespace(member.namespace) if member else None
        if member is None or not ns.loaded or not member.kind.traceable:
            return False

        self.actions.trace(member.qualified_name)
        try:
            self.catalog.sync_namespace(ns.name)
        except HostUnavailable as e:
            log.warning("Could not re-read %s after trace: %s", ns.name, e)
        self._run(self._catalog_changed)
        return True

    def edit(self, qualified_name: str) -> bool:
        return self._delegate(self.actions.edit, qualified_name)

    def browse(self, qualified_name: str) -> bool:
        return self._delegate(self.actions.browse, qualified_name)

    def copy_fqn(self) -> Optional[str]:
        """Copy the selected member's qualified name (or the namespace name)."""
        selection = self.coordinator.selection
        if selection.selected_member is not None:
            text = selection.selected_member.qualified_name
        elif selection.selected_namespace is not None:
            text = selection.selected_namespace.name
        else:
            return None
        self.actions.copy(text)
        return text

    def paste_fqn(self) -> Optional[str]:
        """Clipboard text, stripped. Does not change any state."""
        text = self.actions.paste()
        return text.strip() if text else None

    # -------------------------------------------------------------------------
    # Completions
    # -------------------------------------------------------------------------

    def pump(self, timeout: float = 0.0) -> int:
        """
        Apply background results that have arrived.

        Waits up to `timeout` for the first one. Returns how many results
        were applied (stale ones are dropped and not counted).
        """
        return self._apply_all(self.resolution.drain(timeout=timeout))

    def wait_idle(self, timeout: float = 5.0) -> int:
        """Apply results until no resolution is in flight, or timeout."""
        return self._apply_all(self.resolution.wait_idle(timeout=timeout))

    def outcome(self, slot: Slot) -> SlotOutcome:
        return self._outcomes[slot]

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    def display(self) -> DisplayModel:
        coord = self.coordinator
        return project(
            self.catalog,
            coord.namespace_filter,
            coord.member_filter,
            coord.selection,
            self._outcomes[Slot.DOC],
            self._outcomes[Slot.REQUIRE],
            namespace_view=coord.namespace_view,
            member_view=coord.member_view,
            stale_selection=coord.stale_selection,
            catalog_error=self.catalog_error,
        )

    def shutdown(self) -> bool:
        """
        Drop pending resolutions and stop the worker pool.

        Waits for host calls already running, bounded by
        NSB_SHUTDOWN_TIMEOUT. Returns False if some were still running.
        """
        return self.resolution.shutdown(wait=True)

    def __enter__(self) -> 'BrowserEngine':
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _run(self, command: Callable[..., Transition], *args) -> Transition:
        """Run a coordinator command and act on what it asks for."""
        doc_generation = self.coordinator.current_generation(Slot.DOC)
        transition = command(*args)

        if transition.request is not None:
            request = transition.request
            self._outcomes[request.slot] = SlotOutcome.pending(request.target)
            self.resolution.submit(request)
        if (self.coordinator.current_generation(Slot.DOC) != doc_generation
                and (transition.request is None or transition.request.slot is not Slot.DOC)):
            # Doc target went away without a replacement request
            self.resolution.cancel(Slot.DOC)
            self._outcomes[Slot.DOC] = SlotOutcome.idle()
        return transition

    def _apply_all(self, results) -> int:
        applied = 0
        for result in results:
            if self._apply(result):
                applied += 1
        return applied

    def _apply(self, result: TaskResult) -> bool:
        if not self.coordinator.is_current(result.slot, result.generation):
            log.debug("Discarded stale %s result for %s (generation %d)",
                      result.slot.value, result.target, result.generation)
            return False

        if not result.success:
            log.info("%s for %s failed: %s", result.slot.value, result.target, result.error)
            self._outcomes[result.slot] = SlotOutcome.failed(result.target, result.error_kind)
            return True

        if result.slot is Slot.DOC:
            self._outcomes[Slot.DOC] = SlotOutcome.ok(result.target, str(result.result or ""))
            return True

        try:
            self.catalog.mark_loaded(result.target)
        except HostUnavailable as e:
            self._outcomes[Slot.REQUIRE] = SlotOutcome.failed(result.target, e.kind)
            return True
        self._outcomes[Slot.REQUIRE] = SlotOutcome.ok(result.target)
        self._run(self._catalog_changed)
        return True

    def _catalog_changed(self) -> Transition:
        self.coordinator.on_catalog_changed()
        return Transition(accepted=True)

    def _refresh_catalog(self) -> bool:
        try:
            self.catalog.refresh()
        except HostUnavailable as e:
            log.warning("Catalog refresh failed: %s", e)
            self.catalog_error = str(e)
            return False
        self.catalog_error = None
        return True

    def _delegate(self, action: Callable[[str], None], qualified_name: str) -> bool:
        member = self.catalog.find_member(qualified_name)
        if member is None:
            return False
        action(member.qualified_name)
        return True

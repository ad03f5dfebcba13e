"""
Shared pytest fixtures for the nsbrowser test suite.

Hosts are in-memory StaticHosts built from the catalogs in
tests/factories.py; no test needs a live environment.

Usage in tests:
    def test_something(engine):
        engine.select_namespace("alpha")
        assert engine.display().selected_namespace == "alpha"

    def test_ordering(gated_host):
        gated_host.hold("alpha/foo")
        engine = make_engine(gated_host)
        ...
"""

import pytest

from nsbrowser.core.catalog import CatalogStore
from nsbrowser.core.filters import FilterEngine
from nsbrowser.core.selection import SelectionCoordinator
from nsbrowser.services.host import StaticHost
from tests.factories import (
    GatedHost, make_engine, make_orchestrator, rich_catalog, scenario_catalog,
)


NSB_ENV_VARS = (
    "NSB_PARALLEL_ENABLED", "NSB_RESOLVE_WORKERS", "NSB_RESOLVE_TIMEOUT",
    "NSB_SHUTDOWN_TIMEOUT", "NSB_NAMESPACE_MODE", "NSB_MEMBER_MODE",
    "NSB_DOC_FACET", "NSB_SYMBOLS", "NSB_CATALOG", "NSB_ASCII_ONLY", "NSB_UNICODE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's NSB_* environment out of every test."""
    for key in NSB_ENV_VARS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def scenario_host():
    """alpha (loaded: foo, bar) and beta (unloaded)."""
    return StaticHost(scenario_catalog())


@pytest.fixture
def rich_host():
    """Every member kind, several facets, one namespace that fails to load."""
    return StaticHost(rich_catalog())


@pytest.fixture
def gated_host():
    """
    Rich catalog whose require/doc calls can be held.

    Anything still held is released at teardown so workers finish.
    """
    host = GatedHost(rich_catalog())
    yield host
    host.release_all()


@pytest.fixture
def orchestrator():
    """Threaded orchestrator with a short resolution timeout."""
    orch = make_orchestrator(parallel=True, timeout=5.0)
    yield orch
    orch.shutdown(wait=False)


@pytest.fixture
def catalog(rich_host):
    """Refreshed catalog over the rich host."""
    store = CatalogStore(rich_host)
    store.refresh()
    return store


@pytest.fixture
def coordinator(catalog):
    return SelectionCoordinator(catalog, FilterEngine())


@pytest.fixture
def engine(rich_host):
    """Threaded engine over the rich catalog."""
    eng = make_engine(rich_host)
    yield eng
    eng.shutdown()


@pytest.fixture
def scenario_engine(scenario_host):
    eng = make_engine(scenario_host)
    yield eng
    eng.shutdown()

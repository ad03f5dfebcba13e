"""
Tests for Catalog Store — Namespace index over a host

Tests verify:
- Namespaces are listed in name order, members sorted by name
- Unloaded namespaces have no members until loaded
- Namespace objects survive refreshes (identity is stable)
- mark_loaded is idempotent
- Host failures surface as HostUnavailable
"""

import pytest

from nsbrowser.core.catalog import CatalogStore
from nsbrowser.core.errors import HostUnavailable
from nsbrowser.core.model import MemberKind
from nsbrowser.services.host import StaticHost
from tests.factories import FlakyHost, rich_catalog


class TestQueries:
    """Read side of the catalog."""

    def test_namespaces_sorted(self, catalog):
        assert [ns.name for ns in catalog.list_namespaces()] == ["alpha", "beta", "broken", "gamma"]

    def test_members_sorted_by_name(self, catalog):
        names = [m.name for m in catalog.members_of("alpha")]
        assert names == sorted(names)
        assert "foo" in names

    def test_members_of_accepts_object(self, catalog):
        alpha = catalog.get_namespace("alpha")
        assert catalog.members_of(alpha) == catalog.members_of("alpha")

    def test_unloaded_namespace_has_no_members(self, catalog):
        assert catalog.get_namespace("beta").loaded is False
        assert catalog.members_of("beta") == []

    def test_unknown_namespace(self, catalog):
        assert catalog.get_namespace("nope") is None
        assert catalog.members_of("nope") == []
        assert "nope" not in catalog

    def test_find_member(self, catalog):
        member = catalog.find_member("alpha/foo")
        assert member.kind == MemberKind.PUBLIC
        assert catalog.find_member("alpha/missing") is None
        assert catalog.find_member("foo") is None

    def test_len(self, catalog):
        assert len(catalog) == 4

    def test_suggest_namespace(self, catalog):
        assert "alpha" in catalog.suggest("alpah")

    def test_suggest_member(self, catalog):
        assert "alpha/foo" in catalog.suggest("alpha/fo")


class TestMutations:
    """Refresh and loading."""

    def test_refresh_keeps_identity(self, catalog):
        alpha = catalog.get_namespace("alpha")
        listing = catalog.list_namespaces()
        catalog.refresh()
        assert catalog.get_namespace("alpha") is alpha
        assert catalog.list_namespaces() is listing

    def test_refresh_bumps_revision(self, catalog):
        before = catalog.revision
        catalog.refresh()
        assert catalog.revision == before + 1

    def test_mark_loaded_reads_members(self, rich_host, catalog):
        rich_host.require_namespace("beta")
        beta = catalog.mark_loaded("beta")
        assert beta.loaded is True
        assert [m.qualified_name for m in beta.members] == ["beta/baz"]

    def test_mark_loaded_idempotent(self, catalog):
        alpha = catalog.get_namespace("alpha")
        members = alpha.members
        revision = catalog.revision
        assert catalog.mark_loaded("alpha") is alpha
        assert alpha.members is members
        assert catalog.revision == revision

    def test_mark_loaded_adds_unknown(self):
        data = rich_catalog()
        host = StaticHost(data)
        catalog = CatalogStore(host)
        catalog.mark_loaded("fresh")
        assert "fresh" in catalog
        assert [ns.name for ns in catalog.list_namespaces()] == ["fresh"]

    def test_namespaces_never_removed(self):
        """A namespace the host stops reporting stays in the catalog."""
        data = rich_catalog()
        catalog = CatalogStore(StaticHost(data))
        catalog.refresh()
        del data["namespaces"]["gamma"]
        catalog._host = StaticHost(data)
        catalog.refresh()
        assert "gamma" in catalog

    def test_sync_namespace_rereads_kinds(self, rich_host, catalog):
        rich_host.set_kind("alpha/foo", MemberKind.TRACED)
        catalog.sync_namespace("alpha")
        assert catalog.find_member("alpha/foo").kind == MemberKind.TRACED


class TestHostFailures:
    """Host errors become HostUnavailable."""

    def test_refresh_failure(self):
        host = FlakyHost(rich_catalog())
        catalog = CatalogStore(host)
        catalog.refresh()
        host.down = True
        with pytest.raises(HostUnavailable):
            catalog.refresh()
        # Previous state untouched
        assert len(catalog) == 4

    def test_member_listing_failure_changes_nothing(self):
        """A new namespace whose members cannot be read is not half-added."""
        host = FlakyHost(rich_catalog())
        catalog = CatalogStore(host)
        catalog.refresh()
        revision = catalog.revision
        host.add_namespace("delta", members={"qux": {"kind": "public"}})
        host.failing_members.add("delta")

        with pytest.raises(HostUnavailable):
            catalog.refresh()
        assert "delta" not in catalog
        assert catalog.revision == revision

        host.failing_members.clear()
        catalog.refresh()
        assert "delta" in [ns.name for ns in catalog.list_namespaces()]
        assert [m.qualified_name for m in catalog.members_of("delta")] == ["delta/qux"]

    def test_member_listing_failure_keeps_loaded_flags(self):
        host = FlakyHost(rich_catalog())
        catalog = CatalogStore(host)
        catalog.refresh()
        host.require_namespace("beta")
        host.failing_members.add("beta")
        with pytest.raises(HostUnavailable):
            catalog.refresh()
        assert catalog.get_namespace("beta").loaded is False

    def test_unavailable_host(self):
        host = FlakyHost(rich_catalog())
        host.available = False
        catalog = CatalogStore(host)
        with pytest.raises(HostUnavailable):
            catalog.refresh()
        assert len(catalog) == 0


class TestListingIsShared:
    """The ordered listing is an immutable shared value."""

    def test_listing_cannot_be_mutated(self, catalog):
        listing = catalog.list_namespaces()
        assert isinstance(listing, tuple)
        with pytest.raises(AttributeError):
            listing.append(None)

    def test_listing_rebuilt_when_namespace_added(self):
        host = FlakyHost(rich_catalog())
        catalog = CatalogStore(host)
        catalog.refresh()
        before = catalog.list_namespaces()
        host.add_namespace("aardvark", loaded=False)
        catalog.refresh()
        after = catalog.list_namespaces()
        assert after is not before
        assert after[0].name == "aardvark"

"""
Catalog Store — Every known namespace and its members

Holds the namespaces reported by the host, indexed by name, with their
member lists sorted for display. All introspection is delegated to the
injected host; the store itself performs no I/O.

Identity guarantees:
- One Namespace object per name for the lifetime of the store
- refresh() updates namespaces in place, so views holding references
  to them stay valid
- The ordered namespace list is rebuilt only when the set of names changes
"""

import logging
from typing import Dict, List, Optional, Tuple, TYPE_CHECKING

from rapidfuzz import process, fuzz

from .errors import HostUnavailable
from .model import Member, Namespace, split_qualified

if TYPE_CHECKING:
    from ..services.host import HostProvider

log = logging.getLogger(__name__)


class CatalogStore:
    """
    Namespace and member index backed by a host provider.

    Usage:
        catalog = CatalogStore(host)
        catalog.refresh()
        for ns in catalog.list_namespaces():
            print(ns.name, ns.loaded, ns.member_count)
    """

    def __init__(self, host: 'HostProvider'):
        self._host = host
        self._namespaces: Dict[str, Namespace] = {}
        self._ordered: Optional[Tuple[Namespace, ...]] = None
        # Bumped on every change that can alter a filtered view
        self.revision = 0

    @property
    def host(self) -> 'HostProvider':
        return self._host

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list_namespaces(self) -> Tuple[Namespace, ...]:
        """Namespaces in lexicographic order by name (shared, immutable)."""
        if self._ordered is None:
            self._ordered = tuple(self._namespaces[n] for n in sorted(self._namespaces))
        return self._ordered

    def members_of(self, namespace) -> List[Member]:
        """Members of a namespace (object or name), sorted by name."""
        ns = self._coerce(namespace)
        return ns.members if ns is not None else []

    def get_namespace(self, name: str) -> Optional[Namespace]:
        return self._namespaces.get(name)

    def find_member(self, qualified_name: str) -> Optional[Member]:
        """Look up a member by "ns/name"."""
        parts = split_qualified(qualified_name)
        if parts is None:
            return None
        ns = self._namespaces.get(parts[0])
        if ns is None:
            return None
        for member in ns.members:
            if member.name == parts[1]:
                return member
        return None

    def suggest(self, name: str, limit: int = 3, cutoff: float = 60.0) -> List[str]:
        """
        Namespace or qualified member names close to an unknown name.

        Uses rapidfuzz for fast similarity scoring.
        """
        if "/" in name:
            choices = [m.qualified_name for ns in self.list_namespaces() for m in ns.members]
        else:
            choices = list(self._namespaces)
        matches = process.extract(name, choices, scorer=fuzz.WRatio, limit=limit, score_cutoff=cutoff)
        return [match[0] for match in matches]

    def __contains__(self, name: str) -> bool:
        return name in self._namespaces

    def __len__(self) -> int:
        return len(self._namespaces)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def refresh(self) -> None:
        """
        Re-sync the whole catalog from the host.

        Existing Namespace objects are updated in place. Namespaces the host
        no longer reports are kept: they are never destroyed while the
        store is alive. Every host call is made before anything changes,
        so a failure leaves the catalog as it was.

        Raises:
            HostUnavailable: If the host is unavailable or cannot be
                introspected
        """
        if not self._host.is_available:
            raise HostUnavailable("Host is not available")
        infos = self._call(self._host.list_namespaces)

        updates = []
        for info in infos:
            ns = self._namespaces.get(info.name)
            loaded = info.loaded or (ns is not None and ns.loaded)
            members = self._load_members(info.name) if loaded else None
            updates.append((info.name, ns, loaded, members))

        for name, ns, loaded, members in updates:
            if ns is None:
                ns = Namespace(name=name)
                self._namespaces[name] = ns
                self._ordered = None
            ns.loaded = loaded
            if members is not None:
                ns.members = members

        self.revision += 1
        log.debug("Catalog refreshed: %d namespaces", len(self._namespaces))

    def mark_loaded(self, name: str) -> Namespace:
        """
        Record that a namespace is loaded and read its members.

        Idempotent: an already-loaded namespace is returned untouched.
        A namespace the catalog has not seen yet is added.

        Raises:
            HostUnavailable: If the member listing fails
        """
        ns = self._namespaces.get(name)
        if ns is not None and ns.loaded:
            return ns

        members = self._load_members(name)
        if ns is None:
            ns = Namespace(name=name)
            self._namespaces[name] = ns
            self._ordered = None
        ns.loaded = True
        ns.members = members
        self.revision += 1
        log.debug("Namespace %s loaded with %d members", name, len(members))
        return ns

    def sync_namespace(self, name: str) -> Optional[Namespace]:
        """Re-read the members of one loaded namespace."""
        ns = self._namespaces.get(name)
        if ns is None or not ns.loaded:
            return ns
        ns.members = self._load_members(name)
        self.revision += 1
        return ns

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _load_members(self, name: str) -> List[Member]:
        infos = self._call(self._host.list_members, name)
        members = {
            info.name: Member(namespace=name, name=info.name, kind=info.kind)
            for info in infos
        }
        return [members[n] for n in sorted(members)]

    def _call(self, fn, *args):
        target = args[0] if args else ""
        try:
            return fn(*args)
        except HostUnavailable:
            raise
        except Exception as e:
            log.warning("Host introspection failed for %r: %s", target or "catalog", e)
            raise HostUnavailable(str(e), target=target) from e

    def _coerce(self, namespace) -> Optional[Namespace]:
        if isinstance(namespace, Namespace):
            return namespace
        return self._namespaces.get(namespace)

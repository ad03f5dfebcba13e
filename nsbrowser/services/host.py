"""
Host Providers — Where namespaces, members and documentation come from

The browser treats the browsed environment as an injected host. Hosts
answer four questions:
- which namespaces exist (and which are loaded)
- which members a loaded namespace has
- load ("require") a namespace
- fetch one documentation facet for a member

Listing calls are expected to be quick; require and fetch_doc may block
and are always run off the owner's thread.

StaticHost serves a catalog file (YAML), for the CLI and for tests.
"""

import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..core.errors import HostUnavailable, LoadError, NotFound
from ..core.model import DocFacet, Member, MemberInfo, MemberKind, NamespaceInfo


class HostProvider(ABC):
    """Abstract base for host introspection providers."""

    @abstractmethod
    def list_namespaces(self) -> List[NamespaceInfo]:
        """Every namespace the host knows about, loaded or not."""
        pass

    @abstractmethod
    def list_members(self, namespace: str) -> List[MemberInfo]:
        """Members of a loaded namespace."""
        pass

    @abstractmethod
    def require_namespace(self, namespace: str) -> bool:
        """
        Load a namespace.

        Returns:
            True once the namespace is loaded

        Raises:
            LoadError: If the namespace cannot be loaded
            HostUnavailable: If the host cannot be reached
        """
        pass

    @abstractmethod
    def fetch_doc(self, member: Member, facet: DocFacet) -> str:
        """
        Documentation text for one facet of a member.

        Only individual facets are requested; DocFacet.ALL is composed by
        the resolution service.

        Raises:
            NotFound: If the member has nothing for this facet
            HostUnavailable: If the host cannot be reached
        """
        pass

    @property
    def is_available(self) -> bool:
        """Check if the host is ready to answer."""
        return True


def facet_key(facet: DocFacet) -> str:
    """Key under which a catalog file stores a facet ("see_alsos", ...)."""
    return facet.name.lower()


class StaticHost(HostProvider):
    """
    Host backed by an in-memory catalog, usually loaded from YAML.

    Catalog shape:

        namespaces:
          clojure.core:
            loaded: true
            members:
              map:
                kind: public
                doc: "Returns a lazy sequence ..."
                source: "(defn map ...)"
          clojure.set:
            loaded: false
            load_error: "Could not locate clojure/set__init.class"
            members: {...}

    Members of an unloaded namespace are hidden until it is required.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        """
        Raises:
            ValueError: If the catalog is malformed
        """
        self._lock = threading.Lock()
        self._namespaces: Dict[str, Dict[str, Any]] = {}
        namespaces = (data or {}).get("namespaces") or {}
        if not isinstance(namespaces, dict):
            raise ValueError("'namespaces' must be a mapping of name to namespace")
        for name, ns_data in namespaces.items():
            self._namespaces[str(name)] = _normalize_namespace(str(name), ns_data or {})

    @classmethod
    def from_file(cls, path: Path) -> 'StaticHost':
        """
        Load a catalog file.

        Raises:
            HostUnavailable: If the file is missing, is not valid YAML or
                does not describe a catalog
        """
        path = Path(path)
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise HostUnavailable(f"Cannot read catalog {path}: {e}", target=str(path)) from e
        if not isinstance(data, dict):
            raise HostUnavailable(f"Catalog {path} is not a mapping", target=str(path))
        try:
            return cls(data)
        except ValueError as e:
            raise HostUnavailable(f"Invalid catalog {path}: {e}", target=str(path)) from e

    def list_namespaces(self) -> List[NamespaceInfo]:
        with self._lock:
            return [
                NamespaceInfo(name=name, loaded=ns_data["loaded"])
                for name, ns_data in self._namespaces.items()
            ]

    def list_members(self, namespace: str) -> List[MemberInfo]:
        with self._lock:
            ns_data = self._namespaces.get(namespace)
            if ns_data is None or not ns_data["loaded"]:
                return []
            return [
                MemberInfo(name=name, kind=member["kind"])
                for name, member in ns_data["members"].items()
            ]

    def require_namespace(self, namespace: str) -> bool:
        with self._lock:
            ns_data = self._namespaces.get(namespace)
            if ns_data is None:
                raise LoadError(f"No such namespace: {namespace}", target=namespace)
            if ns_data["load_error"]:
                raise LoadError(ns_data["load_error"], target=namespace)
            ns_data["loaded"] = True
            return True

    def fetch_doc(self, member: Member, facet: DocFacet) -> str:
        with self._lock:
            ns_data = self._namespaces.get(member.namespace)
            entry = ns_data["members"].get(member.name) if ns_data else None
            text = entry.get(facet_key(facet)) if entry else None
        if text is None:
            raise NotFound(f"No {facet.label} for {member.qualified_name}", target=member.qualified_name)
        return str(text)

    def set_kind(self, qualified_name: str, kind: MemberKind) -> None:
        """Change a member's kind (e.g. after tracing it)."""
        ns, _, name = qualified_name.partition("/")
        with self._lock:
            self._namespaces[ns]["members"][name]["kind"] = kind


def _normalize_namespace(name: str, ns_data: Any) -> Dict[str, Any]:
    """
    Validate one namespace entry of a catalog.

    Raises:
        ValueError: If the entry or one of its members is malformed
    """
    if not isinstance(ns_data, dict):
        raise ValueError(f"Namespace {name!r} must be a mapping, got {type(ns_data).__name__}")
    raw_members = ns_data.get("members") or {}
    if not isinstance(raw_members, dict):
        raise ValueError(f"Members of {name!r} must be a mapping")

    members = {}
    for member_name, member_spec in raw_members.items():
        member_spec = member_spec or {}
        if not isinstance(member_spec, dict):
            raise ValueError(f"Member {name}/{member_name} must be a mapping")
        # "See alsos" / "see-alsos" / "see_alsos" all land on one key
        entry = {
            str(key).lower().replace("-", "_").replace(" ", "_"): value
            for key, value in member_spec.items()
        }
        try:
            entry["kind"] = MemberKind.parse(entry.get("kind", MemberKind.PUBLIC.value))
        except ValueError as e:
            raise ValueError(f"Member {name}/{member_name}: {e}") from e
        members[str(member_name)] = entry
    return {
        "loaded": bool(ns_data.get("loaded", False)),
        "load_error": ns_data.get("load_error"),
        "members": members,
    }

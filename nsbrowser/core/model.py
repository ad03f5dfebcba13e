"""
Model — Namespaces, members and the closed vocabularies that classify them

Defines:
- Namespace: named grouping of members, loaded or not
- Member: named entity inside exactly one namespace
- MemberKind: what a member is (public, macro, alias, ...)
- NamespaceMode / MemberMode / DocFacet: the choices offered by the
  namespace, member and documentation mode selectors

Design principles:
- Vocabularies are closed Enums, parsed from user labels in one place
- A member's kind alone decides which member-mode buckets it falls into
- Namespace identity is its name; the object survives catalog refreshes
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional


def _normalize_label(label: str) -> str:
    """Fold case, spaces, hyphens and underscores for label lookup."""
    return "".join(ch for ch in label.strip().lower() if ch not in " -_")


class _LabelledEnum(Enum):
    """Enum whose values are display labels, parsed leniently."""

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def parse(cls, label) -> "_LabelledEnum":
        """
        Resolve a user-supplied label to a member of this enum.

        Accepts the enum member itself, its value, or its name, ignoring
        case, spaces, hyphens and underscores ("See-alsos" == "See alsos").

        Raises:
            ValueError: If the label names no member
        """
        if isinstance(label, cls):
            return label
        key = _normalize_label(str(label))
        for member in cls:
            if key in (_normalize_label(member.value), _normalize_label(member.name)):
                return member
        valid = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown {cls.__name__} '{label}'. Valid: {valid}")

    @classmethod
    def labels(cls) -> List[str]:
        return [m.value for m in cls]


class NamespaceMode(_LabelledEnum):
    """Namespace list modes."""
    LOADED = "loaded"
    UNLOADED = "unloaded"
    ALL = "all"


class MemberMode(_LabelledEnum):
    """Member list modes (buckets)."""
    PUBLICS = "publics"
    PRIVATES = "privates"
    INTERNS = "interns"
    INTERNS_MACRO = "interns-macro"
    INTERNS_MULTIMETHOD = "interns-multimethod"
    REFERS = "refers"
    IMPORTS = "imports"
    MAP = "map"
    ALIASES = "aliases"
    SPECIAL_FORMS = "special-forms"
    TRACED = "traced"


class DocFacet(_LabelledEnum):
    """Documentation views. ALL concatenates every other facet."""
    ALL = "All"
    DOC = "Doc"
    SOURCE = "Source"
    EXAMPLES = "Examples"
    COMMENTS = "Comments"
    SEE_ALSOS = "See alsos"
    VALUE = "Value"

    @classmethod
    def individual(cls) -> List["DocFacet"]:
        """Every facet a host can be asked for directly."""
        return [f for f in cls if f is not cls.ALL]


class Slot(Enum):
    """Resolution targets that admit one in-flight task each."""
    REQUIRE = "require"
    DOC = "doc"


class MemberKind(_LabelledEnum):
    """What a member is."""
    PUBLIC = "public"
    PRIVATE = "private"
    INTERN = "intern"
    MACRO = "macro"
    SPECIAL_FORM = "special-form"
    REFER = "refer"
    IMPORT = "import"
    ALIAS = "alias"
    MAP_ENTRY = "map-entry"
    MULTIMETHOD = "multimethod"
    TRACED = "traced"

    @property
    def buckets(self) -> FrozenSet[MemberMode]:
        """Member modes under which a member of this kind is listed."""
        return KIND_BUCKETS[self]

    @property
    def traceable(self) -> bool:
        return self in TRACEABLE_KINDS


# MAP is the namespace's whole mapping, so every kind lands in it
KIND_BUCKETS: Dict[MemberKind, FrozenSet[MemberMode]] = {
    MemberKind.PUBLIC: frozenset({MemberMode.PUBLICS, MemberMode.INTERNS, MemberMode.MAP}),
    MemberKind.PRIVATE: frozenset({MemberMode.PRIVATES, MemberMode.INTERNS, MemberMode.MAP}),
    MemberKind.INTERN: frozenset({MemberMode.INTERNS, MemberMode.MAP}),
    MemberKind.MACRO: frozenset({
        MemberMode.PUBLICS, MemberMode.INTERNS, MemberMode.INTERNS_MACRO, MemberMode.MAP,
    }),
    MemberKind.MULTIMETHOD: frozenset({
        MemberMode.PUBLICS, MemberMode.INTERNS, MemberMode.INTERNS_MULTIMETHOD, MemberMode.MAP,
    }),
    MemberKind.TRACED: frozenset({
        MemberMode.PUBLICS, MemberMode.INTERNS, MemberMode.TRACED, MemberMode.MAP,
    }),
    MemberKind.SPECIAL_FORM: frozenset({MemberMode.SPECIAL_FORMS, MemberMode.MAP}),
    MemberKind.REFER: frozenset({MemberMode.REFERS, MemberMode.MAP}),
    MemberKind.IMPORT: frozenset({MemberMode.IMPORTS, MemberMode.MAP}),
    MemberKind.ALIAS: frozenset({MemberMode.ALIASES, MemberMode.MAP}),
    MemberKind.MAP_ENTRY: frozenset({MemberMode.MAP}),
}

TRACEABLE_KINDS = frozenset({
    MemberKind.PUBLIC,
    MemberKind.PRIVATE,
    MemberKind.INTERN,
    MemberKind.MULTIMETHOD,
    MemberKind.TRACED,
})


def qualify(namespace: str, name: str) -> str:
    return f"{namespace}/{name}"


def split_qualified(qualified_name: str) -> Optional[tuple]:
    """
    Split "ns/name" into (ns, name).

    The namespace part ends at the first slash so that members named "/"
    (clojure.core//) keep their name. Returns None for text without a
    namespace part.
    """
    text = qualified_name.strip()
    ns, sep, name = text.partition("/")
    if not sep or not ns or not name:
        return None
    return ns, name


@dataclass(frozen=True)
class Member:
    """A named entity inside exactly one namespace."""
    namespace: str
    name: str
    kind: MemberKind = MemberKind.PUBLIC

    @property
    def qualified_name(self) -> str:
        return qualify(self.namespace, self.name)

    @property
    def display_name(self) -> str:
        return self.name

    def in_bucket(self, mode: MemberMode) -> bool:
        return mode in self.kind.buckets


@dataclass(eq=False)
class Namespace:
    """
    A named grouping of members.

    Compared by identity: the catalog keeps one object per name for its
    whole lifetime, flipping `loaded` and swapping `members` in place.
    """
    name: str
    loaded: bool = False
    members: List[Member] = field(default_factory=list, repr=False)

    @property
    def member_count(self) -> int:
        return len(self.members)

    @property
    def display_name(self) -> str:
        return self.name


@dataclass(frozen=True)
class NamespaceInfo:
    """Raw namespace record as reported by a host."""
    name: str
    loaded: bool = False


@dataclass(frozen=True)
class MemberInfo:
    """Raw member record as reported by a host."""
    name: str
    kind: MemberKind = MemberKind.PUBLIC

"""
Filter Engine — Mode + regex filtering for the namespace and member lists

A filter is a categorical mode (which bucket) plus a free-text pattern
(case-insensitive regex searched in the display name).

Policy:
- Empty pattern matches everything
- Invalid pattern matches nothing and is flagged, never raised
- Same (candidates, mode, pattern) always gives the same result
- A pattern is compiled once while it stays in the engine's cache, so
  rapid typing does not recompile the same text
"""

import re
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Pattern, Sequence, TypeVar

from .model import Member, MemberMode, Namespace, NamespaceMode

T = TypeVar("T")


NAMESPACE_PREDICATES: Dict[NamespaceMode, Callable[[Namespace], bool]] = {
    NamespaceMode.LOADED: lambda ns: ns.loaded,
    NamespaceMode.UNLOADED: lambda ns: not ns.loaded,
    NamespaceMode.ALL: lambda ns: True,
}

MEMBER_PREDICATES: Dict[MemberMode, Callable[[Member], bool]] = {
    mode: (lambda member, mode=mode: member.in_bucket(mode))
    for mode in MemberMode
}


@dataclass(frozen=True)
class CompiledPattern:
    """A filter pattern compiled once; invalid patterns match nothing."""
    pattern: str
    regex: Optional[Pattern] = None
    valid: bool = True
    error: Optional[str] = None

    def matches(self, text: str) -> bool:
        if not self.valid:
            return False
        if self.regex is None:
            return True
        return self.regex.search(text) is not None


class FilterEngine:
    """
    Applies mode predicates and compiled patterns to candidate lists.

    Usage:
        engine = FilterEngine()
        rows = engine.apply(catalog.list_namespaces(), NamespaceMode.LOADED, "core")
    """

    def __init__(self, cache_size: int = 64):
        self._cache_size = max(1, cache_size)
        self._cache: "OrderedDict[str, CompiledPattern]" = OrderedDict()
        self.compile_count = 0

    def compile(self, pattern: str) -> CompiledPattern:
        """Compile a pattern, reusing the cached result for repeated text."""
        cached = self._cache.get(pattern)
        if cached is not None:
            self._cache.move_to_end(pattern)
            return cached

        self.compile_count += 1
        if not pattern:
            compiled = CompiledPattern(pattern=pattern)
        else:
            try:
                compiled = CompiledPattern(pattern=pattern, regex=re.compile(pattern, re.IGNORECASE))
            except re.error as e:
                compiled = CompiledPattern(pattern=pattern, valid=False, error=str(e))

        self._cache[pattern] = compiled
        if len(self._cache) > self._cache_size:
            self._cache.popitem(last=False)
        return compiled

    def predicate(self, mode) -> Callable:
        """Mode predicate; every NamespaceMode and MemberMode has one."""
        if isinstance(mode, NamespaceMode):
            return NAMESPACE_PREDICATES[mode]
        if isinstance(mode, MemberMode):
            return MEMBER_PREDICATES[mode]
        raise TypeError(f"Not a filter mode: {mode!r}")

    def apply(self, candidates: Sequence[T], mode, pattern: str) -> List[T]:
        """Candidates passing the mode predicate whose name matches pattern."""
        return self.apply_compiled(candidates, mode, self.compile(pattern))

    def apply_compiled(self, candidates: Sequence[T], mode, matcher: CompiledPattern) -> List[T]:
        if not matcher.valid:
            return []
        keep = self.predicate(mode)
        return [c for c in candidates if keep(c) and matcher.matches(c.display_name)]


@dataclass
class FilterState:
    """
    Mode, pattern and last result size for one list.

    compiled_matcher is either None or compiled from the current pattern.
    """
    mode: object
    pattern: str = ""
    compiled_matcher: Optional[CompiledPattern] = None
    match_count: int = 0
    invalid_pattern: bool = False

    def update(self, mode=None, pattern: Optional[str] = None) -> bool:
        """
        Change mode and/or pattern. Returns True if anything changed.

        Mode labels are parsed into this filter's mode enum.

        Raises:
            ValueError: If mode is not a valid label for this list
        """
        changed = False
        if mode is not None:
            mode = type(self.mode).parse(mode)
            if mode is not self.mode:
                self.mode = mode
                changed = True
        if pattern is not None and pattern != self.pattern:
            self.pattern = pattern
            self.compiled_matcher = None
            changed = True
        return changed

    def matcher(self, engine: FilterEngine) -> CompiledPattern:
        if self.compiled_matcher is None:
            self.compiled_matcher = engine.compile(self.pattern)
            self.invalid_pattern = not self.compiled_matcher.valid
        return self.compiled_matcher

    def apply(self, engine: FilterEngine, candidates: Sequence[T]) -> List[T]:
        result = engine.apply_compiled(candidates, self.mode, self.matcher(engine))
        self.match_count = len(result)
        return result

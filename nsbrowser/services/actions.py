"""
Action Handlers — Side effects the browser delegates

Tracing, opening an editor or a documentation browser, and the clipboard
all live outside the browser. Handlers only ever receive a resolved
qualified name or plain text.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple


class ActionHandler(ABC):
    """Abstract base for action collaborators."""

    @abstractmethod
    def trace(self, qualified_name: str) -> None:
        """Toggle tracing of a member."""
        pass

    @abstractmethod
    def edit(self, qualified_name: str) -> None:
        """Open the member's source in an editor."""
        pass

    @abstractmethod
    def browse(self, qualified_name: str) -> None:
        """Open external documentation for the member."""
        pass

    @abstractmethod
    def copy(self, text: str) -> None:
        """Put text on the clipboard."""
        pass

    @abstractmethod
    def paste(self) -> Optional[str]:
        """Text currently on the clipboard, if any."""
        pass


class RecordingActions(ActionHandler):
    """
    Handler that only remembers what it was asked to do.

    Default for headless use (CLI, tests); keeps an in-process clipboard.
    """

    def __init__(self):
        self.calls: List[Tuple[str, str]] = []
        self.clipboard: Optional[str] = None

    def trace(self, qualified_name: str) -> None:
        self.calls.append(("trace", qualified_name))

    def edit(self, qualified_name: str) -> None:
        self.calls.append(("edit", qualified_name))

    def browse(self, qualified_name: str) -> None:
        self.calls.append(("browse", qualified_name))

    def copy(self, text: str) -> None:
        self.calls.append(("copy", text))
        self.clipboard = text

    def paste(self) -> Optional[str]:
        return self.clipboard

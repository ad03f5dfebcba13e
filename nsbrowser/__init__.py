"""
nsbrowser — Namespace browsing engine

Lists namespaces, their members and member documentation, with mode and
regex filters, and loads namespaces on demand. Expensive host calls run
in the background; only the latest request per slot is ever shown.

Usage:
    nsbrowser --catalog catalog.yaml namespaces --mode all
    nsbrowser --catalog catalog.yaml members clojure.core --mode interns
    nsbrowser --catalog catalog.yaml doc clojure.core/map --facet Source
    nsbrowser --catalog catalog.yaml require clojure.set
    nsbrowser config
"""

__version__ = "0.1.0"

# Core layer (state)
from .core.model import (
    Namespace, Member, MemberKind, NamespaceMode, MemberMode, DocFacet, Slot,
)
from .core.errors import BrowserError, HostUnavailable, LoadError, NotFound
from .core.catalog import CatalogStore
from .core.filters import FilterEngine, FilterState
from .core.selection import SelectionCoordinator, Transition

# Services layer
from .services.host import HostProvider, StaticHost
from .services.resolution import ResolutionService, SlotOutcome
from .services.actions import ActionHandler, RecordingActions

# Presentation layer
from .presentation.projection import DisplayModel, project
from .presentation.symbols import get_symbols, SymbolSet, UNICODE, ASCII

# Config (stays at root)
from .config import Config, ConfigManager, get_config, BrowserSettings, DisplayConfig

from .engine import BrowserEngine

__all__ = [
    # Core
    'Namespace', 'Member', 'MemberKind', 'NamespaceMode', 'MemberMode', 'DocFacet', 'Slot',
    'BrowserError', 'HostUnavailable', 'LoadError', 'NotFound',
    'CatalogStore', 'FilterEngine', 'FilterState', 'SelectionCoordinator', 'Transition',
    # Services
    'HostProvider', 'StaticHost',
    'ResolutionService', 'SlotOutcome',
    'ActionHandler', 'RecordingActions',
    # Presentation
    'DisplayModel', 'project',
    'get_symbols', 'SymbolSet', 'UNICODE', 'ASCII',
    # Config
    'Config', 'ConfigManager', 'get_config', 'BrowserSettings', 'DisplayConfig',
    # Engine
    'BrowserEngine',
]

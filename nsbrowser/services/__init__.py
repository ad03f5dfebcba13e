"""
Services — Host access, background resolution and delegated actions
"""

from .host import HostProvider, StaticHost, facet_key
from .resolution import ResolutionService, ResolutionTask, SlotOutcome, OutcomeState
from .actions import ActionHandler, RecordingActions

__all__ = [
    'HostProvider', 'StaticHost', 'facet_key',
    'ResolutionService', 'ResolutionTask', 'SlotOutcome', 'OutcomeState',
    'ActionHandler', 'RecordingActions',
]

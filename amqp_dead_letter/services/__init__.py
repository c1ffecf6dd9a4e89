from .action_service import ActionService, build_republish_copy
from .triage_service import TriageService

__all__ = [
    "ActionService",
    "TriageService",
    "build_republish_copy",
]

from .triage_worker import TriageWorker, WorkerState

__all__ = [
    "TriageWorker",
    "WorkerState",
]

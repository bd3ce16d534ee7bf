"""새 버그 리포터 모듈"""

from bugbridge.reporter.claim import ClaimHandler, ClaimOutcome, ClaimRequest
from bugbridge.reporter.new_bugs import NewBugReporter
from bugbridge.reporter.reconciler import MessageReconciler
from bugbridge.reporter.registry import MessageRegistry
from bugbridge.reporter.scheduler import SyncScheduler
from bugbridge.reporter.state import StateError, StateStore
from bugbridge.reporter.types import ClaimIntent, ClaimPayloadError, SyncError, TrackedMessage

__all__ = [
    "ClaimHandler",
    "ClaimOutcome",
    "ClaimRequest",
    "NewBugReporter",
    "MessageReconciler",
    "MessageRegistry",
    "SyncScheduler",
    "StateError",
    "StateStore",
    "ClaimIntent",
    "ClaimPayloadError",
    "SyncError",
    "TrackedMessage",
]

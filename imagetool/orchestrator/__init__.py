"""Orchestrator package - drives a processing session."""
from .core import UploadOrchestrator
from .notice import NoticeTimer
from .state import SessionState, SessionView

__all__ = ["UploadOrchestrator", "NoticeTimer", "SessionState", "SessionView"]

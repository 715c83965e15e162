"""Utility helpers."""
from .events import STATE_CHANGED, EventEmitter

__all__ = ["EventEmitter", "STATE_CHANGED"]

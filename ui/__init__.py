"""
UI package for the divelist core.

PySide6 bridge between the dive log and Qt windows.
"""

from .notifier import DiveListNotifier

__all__ = [
    "DiveListNotifier",
]

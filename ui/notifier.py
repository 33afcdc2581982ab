"""
Qt bridge for dive list notifications.

The core has no UI of its own; it only calls the context's
update_window_title hook when the dirty flag flips. DiveListNotifier
turns that hook into Qt signals that windows can connect to.
"""

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from config.app_context import AppContext

logger = logging.getLogger(__name__)


class DiveListNotifier(QObject):
    """
    Emits Qt signals for changes of the dive log.

    Signals:
        dive_list_changed(bool): The dirty flag changed to the given value
        window_title_update(): The window title should be refreshed
    """

    dive_list_changed = Signal(bool)
    window_title_update = Signal()

    def __init__(self, context: Optional[AppContext] = None, parent=None):
        super().__init__(parent)
        self.context = None
        if context is not None:
            self.connect_context(context)

    def connect_context(self, context: AppContext):
        """Install this notifier as the window title hook of a context."""
        self.context = context
        context.update_window_title = self.notify
        logger.debug("Dive list notifier connected")

    def disconnect_context(self):
        if self.context is not None and self.context.update_window_title == self.notify:
            self.context.update_window_title = None
        self.context = None

    def notify(self):
        """Called by the core when the dirty flag flips."""
        changed = self.context.dive_list_changed if self.context is not None else False
        self.dive_list_changed.emit(changed)
        self.window_title_update.emit()

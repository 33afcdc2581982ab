"""
Unit tests for the Qt dive list notifier.
"""

import pytest
from PySide6.QtCore import QCoreApplication

from operations.dive_ops import mark_divelist_changed
from ui.notifier import DiveListNotifier


@pytest.fixture(scope="module")
def qt_app():
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


def test_notifier_emits_on_dirty_flag_flip(qt_app, ctx):
    notifier = DiveListNotifier(ctx)
    changes = []
    titles = []
    notifier.dive_list_changed.connect(lambda changed: changes.append(changed))
    notifier.window_title_update.connect(lambda: titles.append(True))

    mark_divelist_changed(ctx, True)
    mark_divelist_changed(ctx, True)
    mark_divelist_changed(ctx, False)

    assert changes == [True, False]
    assert len(titles) == 2


def test_disconnected_notifier_is_silent(qt_app, ctx):
    notifier = DiveListNotifier(ctx)
    changes = []
    notifier.dive_list_changed.connect(lambda changed: changes.append(changed))

    notifier.disconnect_context()
    mark_divelist_changed(ctx, True)

    assert ctx.update_window_title is None
    assert changes == []

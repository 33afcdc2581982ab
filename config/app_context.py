"""
Application Context for the divelist core.

Centralized dive-log state and dependency injection.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from domain.models import Dive
from domain.table import DiveTable, TripTable
from services.dive_merge import try_to_merge as default_try_to_merge
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """
    Centralized dive-log context.

    Holds the two global tables and the selection/dirty state that
    operations read and mutate. Passed explicitly to every operation.

    Key principles:
    - The dive table is the owner of all dives, the trip table of all trips
    - All collaborators explicit (merge function, window title hook)
    - No hidden initialization - create with create_app_context()

    Example:
        >>> from config.app_context import create_app_context
        >>> from operations.dive_ops import add_single_dive
        >>>
        >>> ctx = create_app_context()
        >>> add_single_dive(ctx, -1, dive)
        >>> ctx.dive_table.nr
        1
    """

    settings: Settings = field(default_factory=get_settings)

    # The dive log
    dive_table: DiveTable = field(default_factory=DiveTable)
    trip_table: TripTable = field(default_factory=TripTable)

    # Selection state
    amount_selected: int = 0
    current_dive: Optional[Dive] = None

    # File state
    dive_list_changed: bool = False
    min_datafile_version: int = 0

    # Autogroup toggle (initialized from settings)
    autogroup: bool = field(default_factory=lambda: get_settings().autogroup)

    # Known dive computers: (model, deviceid) -> nickname
    dc_nicknames: Dict[tuple, str] = field(default_factory=dict)

    # Collaborators
    try_to_merge: Callable[[Dive, Dive, bool], Optional[Dive]] = default_try_to_merge
    update_window_title: Optional[Callable[[], None]] = None

    def has_current_dive(self) -> bool:
        """Check if a dive is currently selected as current."""
        return self.current_dive is not None


def create_app_context(
    settings: Optional[Settings] = None,
    autogroup: Optional[bool] = None,
    try_to_merge: Optional[Callable[[Dive, Dive, bool], Optional[Dive]]] = None,
    update_window_title: Optional[Callable[[], None]] = None,
) -> AppContext:
    """
    Factory function to create AppContext.

    Args:
        settings: Settings instance (defaults to global settings)
        autogroup: Autogroup toggle (defaults to settings.autogroup)
        try_to_merge: Dive merge collaborator (defaults to services.dive_merge)
        update_window_title: Hook called when the dirty flag flips

    Returns:
        AppContext instance with empty tables

    Example:
        >>> ctx = create_app_context(autogroup=True)
    """
    if settings is None:
        settings = get_settings()

    if autogroup is None:
        autogroup = settings.autogroup

    ctx = AppContext(
        settings=settings,
        autogroup=autogroup,
        update_window_title=update_window_title,
    )
    if try_to_merge is not None:
        ctx.try_to_merge = try_to_merge

    logger.debug(f"Created dive log context (autogroup={autogroup})")
    return ctx


# Global context instance (lazy-loaded)
_context: Optional[AppContext] = None


def get_app_context() -> AppContext:
    """
    Get the process-wide dive-log context.

    Thin facade for callers that want the dive log as a singleton.
    Operations themselves always take the context as a parameter.
    """
    global _context
    if _context is None:
        _context = create_app_context()
    return _context


def reset_app_context():
    """
    Drop the process-wide context.

    Useful for testing - a fresh context is created on next get_app_context() call.
    """
    global _context
    _context = None

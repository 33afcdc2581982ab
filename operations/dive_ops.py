"""
Dive Operations for the divelist core.

The global dive table: identity lookup, selection tracking, adding and
removing dives, numbering, surface intervals and the dirty flag.
All functions take the AppContext explicitly - no hidden global state.

Identity:
- Dives are looked up by their id, never by object identity, because
  callers routinely pass in copies of a dive.
"""

import logging
from typing import Optional

from config.app_context import AppContext
from domain.models import Dive, Trip
from domain.rules import dive_endtime
from domain.table import DiveTable
from services.dive_computers import set_dc_nickname
from .trip_ops import autogroup_dives, remove_dive_from_trip

logger = logging.getLogger(__name__)


# ==================== Identity ====================


def get_dive(ctx: AppContext, idx: int) -> Optional[Dive]:
    """Dive at index idx of the global table, or None if out of range."""
    if idx < 0 or idx >= ctx.dive_table.nr:
        return None
    return ctx.dive_table[idx]


def get_divenr(ctx: AppContext, dive: Optional[Dive]) -> int:
    """
    Index of a dive in the global table, matched by id.

    Returns:
        Index, or -1 if the dive is None or not in the table
    """
    if dive is None:
        return -1
    return get_idx_by_uniq_id(ctx, dive.id)


def get_idx_by_uniq_id(ctx: AppContext, dive_id: int) -> int:
    """Index of the dive with the given id, -1 if there is none."""
    for i, dive in enumerate(ctx.dive_table):
        if dive.id == dive_id:
            return i
    return -1


def get_dive_by_uniq_id(ctx: AppContext, dive_id: int) -> Optional[Dive]:
    return get_dive(ctx, get_idx_by_uniq_id(ctx, dive_id))


def _same_dive(a: Optional[Dive], b: Optional[Dive]) -> bool:
    return a is not None and b is not None and a.id == b.id


# ==================== Selection ====================


def select_dive(ctx: AppContext, dive: Optional[Dive]):
    """Select a dive and make it the current dive."""
    if dive is None:
        return
    if not dive.selected:
        dive.selected = True
        ctx.amount_selected += 1
    ctx.current_dive = dive


def deselect_dive(ctx: AppContext, dive: Optional[Dive]):
    """
    Deselect a dive.

    If the dive was the current dive, the nearest remaining selected dive
    becomes current: first searching towards older dives, then towards
    newer ones. Otherwise (or if nothing else is selected) there is no
    current dive afterwards.
    """
    if dive is None or not dive.selected:
        return

    dive.selected = False
    if ctx.amount_selected:
        ctx.amount_selected -= 1

    if _same_dive(ctx.current_dive, dive) and ctx.amount_selected > 0:
        idx = get_divenr(ctx, dive)
        for i in range(idx - 1, -1, -1):
            if ctx.dive_table[i].selected:
                ctx.current_dive = ctx.dive_table[i]
                return
        for i in range(idx + 1, ctx.dive_table.nr):
            if ctx.dive_table[i].selected:
                ctx.current_dive = ctx.dive_table[i]
                return

    ctx.current_dive = None


def select_dives_in_trip(ctx: AppContext, trip: Optional[Trip]):
    """Select all dives of a trip that are not hidden by the filter."""
    if trip is None:
        return
    for dive in trip.dives:
        if not dive.hidden_by_filter:
            select_dive(ctx, dive)


def deselect_dives_in_trip(ctx: AppContext, trip: Optional[Trip]):
    if trip is None:
        return
    for dive in trip.dives:
        deselect_dive(ctx, dive)


def filter_dive(ctx: AppContext, dive: Optional[Dive], shown: bool):
    """Show or hide a dive. Hidden dives are deselected."""
    if dive is None:
        return
    dive.hidden_by_filter = not shown
    if not shown and dive.selected:
        deselect_dive(ctx, dive)


def first_selected_dive(ctx: AppContext) -> Optional[Dive]:
    for dive in ctx.dive_table:
        if dive.selected:
            return dive
    return None


def last_selected_dive(ctx: AppContext) -> Optional[Dive]:
    ret = None
    for dive in ctx.dive_table:
        if dive.selected:
            ret = dive
    return ret


def consecutive_selected(ctx: AppContext) -> bool:
    """True if the selected dives form one contiguous block of the table."""
    if ctx.amount_selected <= 1:
        return True

    first_found = False
    last_found = False
    for dive in ctx.dive_table:
        if dive.selected:
            if not first_found:
                first_found = True
            elif last_found:
                return False
        elif first_found:
            last_found = True
    return True


def dump_selection(ctx: AppContext):
    """Log the indices of the selected dives at debug level."""
    indices = [str(i) for i, dive in enumerate(ctx.dive_table) if dive.selected]
    logger.debug(f"Currently selected are {ctx.amount_selected} dives: {' '.join(indices)}")


# ==================== Table Mutation ====================


def set_autogroup(ctx: AppContext, value: bool):
    ctx.autogroup = value


def delete_dive_from_table(table: DiveTable, idx: int):
    """
    Remove and drop the dive at idx of a table.

    Assumes the dive was already removed from its trip and deselected.
    """
    dive = table.remove_at(idx)
    logger.debug(f"Deleted dive {dive.id}")


def clear_table(table: DiveTable):
    """Drop all dives of a table."""
    table.clear()


def unregister_dive(ctx: AppContext, idx: int) -> Optional[Dive]:
    """
    Remove a dive from the global table without dropping it.

    The dive is deselected (without promoting another current dive) but
    keeps its trip; the caller is responsible for the trip.

    Returns:
        The unregistered dive, or None if idx is out of range
    """
    dive = get_dive(ctx, idx)
    if dive is None:
        return None

    ctx.dive_table.remove_at(idx)
    if dive.selected:
        ctx.amount_selected -= 1
    dive.selected = False
    return dive


def delete_single_dive(ctx: AppContext, idx: int):
    """
    Delete a dive from the global table and its trip.

    A trip left empty is deleted as well.
    """
    dive = get_dive(ctx, idx)
    if dive is None:
        return
    if dive.selected:
        deselect_dive(ctx, dive)
    remove_dive_from_trip(dive, ctx.trip_table)
    delete_dive_from_table(ctx.dive_table, idx)


def add_single_dive(ctx: AppContext, idx: int, dive: Dive) -> int:
    """
    Add a dive to the global table, keeping track of the selection.

    Args:
        ctx: Application context
        idx: Position to insert at; negative means at the sorted position
        dive: Dive to add

    Returns:
        Index the dive was inserted at
    """
    if idx < 0:
        idx = ctx.dive_table.insertion_index(dive)
    ctx.dive_table.add_at(idx, dive)
    if dive.selected:
        ctx.amount_selected += 1
    return idx


# ==================== History ====================


def is_trip_before_after(ctx: AppContext, dive: Dive, before: bool) -> bool:
    """Check if the dive directly before (or after) this dive is in a trip."""
    idx = get_idx_by_uniq_id(ctx, dive.id)
    if before:
        return idx > 0 and ctx.dive_table[idx - 1].trip is not None
    return 0 <= idx < ctx.dive_table.nr - 1 and ctx.dive_table[idx + 1].trip is not None


def get_surface_interval(ctx: AppContext, when: int) -> int:
    """
    Surface interval before a dive starting at `when`.

    The dive does not have to be in the table yet. The interval is
    measured to the end of the latest dive that started before `when`.

    Returns:
        -1 if there is no earlier dive, 0 if `when` lies inside the
        earlier dive, else the interval in seconds
    """
    for i in range(ctx.dive_table.nr - 1, -1, -1):
        prev = ctx.dive_table[i]
        if prev.when < when:
            prev_end = dive_endtime(prev)
            if prev_end > when:
                return 0
            return when - prev_end
    return -1


def get_dive_id_closest_to(ctx: AppContext, when: int) -> int:
    """
    Id of the dive starting closest to `when`.

    On a tie the later dive wins. Returns 0 for an empty table.
    """
    table = ctx.dive_table
    nr = table.nr
    if nr == 0:
        return 0
    if nr == 1:
        return table[0].id

    i = 0
    while i < nr and table[i].when <= when:
        i += 1

    if i == nr:
        return table[i - 1].id
    if i == 0:
        return table[0].id

    if when - table[i - 1].when < table[i].when - when:
        return table[i - 1].id
    return table[i].id


def find_next_visible_dive(ctx: AppContext, when: int) -> Optional[Dive]:
    """
    Find a dive not hidden by the filter close to `when`.

    Searches towards older dives first, then towards newer ones.
    """
    table = ctx.dive_table
    if not table:
        return None

    i = 0
    while i < table.nr and when > table[i].when:
        i += 1

    for j in range(i - 1, -1, -1):
        if not table[j].hidden_by_filter:
            return table[j]
    for j in range(i, table.nr):
        if not table[j].hidden_by_filter:
            return table[j]
    return None


# ==================== Numbering ====================


def get_dive_nr_at_idx(ctx: AppContext, idx: int) -> int:
    """
    Number a dive gets when inserted at idx (call before inserting).

    Returns:
        1 for an empty log, last number + 1 when appending after a
        numbered dive, else 0
    """
    table = ctx.dive_table
    if table.nr == 0:
        return 1
    if idx >= table.nr:
        last_dive = table[table.nr - 1]
        return last_dive.number + 1 if last_dive.number else 0
    return 0


def set_dive_nr_for_current_dive(ctx: AppContext):
    """Number the current dive if it is the only or the newest dive."""
    current = ctx.current_dive
    if current is None:
        return

    table = ctx.dive_table
    idx = get_divenr(ctx, current)
    if table.nr == 1:
        current.number = 1
    elif idx == table.nr - 1 and table[table.nr - 2].number:
        current.number = table[table.nr - 2].number + 1


# ==================== File State ====================


def mark_divelist_changed(ctx: AppContext, changed: bool):
    """Set the dirty flag, notifying the window title hook when it flips."""
    if ctx.dive_list_changed == changed:
        return
    ctx.dive_list_changed = changed
    if ctx.update_window_title is not None:
        ctx.update_window_title()


def unsaved_changes(ctx: AppContext) -> bool:
    return ctx.dive_list_changed


def get_min_datafile_version(ctx: AppContext) -> int:
    return ctx.min_datafile_version


def reset_min_datafile_version(ctx: AppContext):
    ctx.min_datafile_version = 0


def report_datafile_version(ctx: AppContext, version: int):
    """Remember the oldest data file version seen since the last reset."""
    if ctx.min_datafile_version == 0 or ctx.min_datafile_version > version:
        ctx.min_datafile_version = version


def process_loaded_dives(ctx: AppContext):
    """
    Prepare freshly loaded dives.

    Registers dive computer nicknames, sorts both tables and autogroups
    the dives if the user enabled it.
    """
    for dive in ctx.dive_table:
        set_dc_nickname(ctx.dc_nicknames, dive)

    ctx.dive_table.sort()
    ctx.trip_table.sort()

    autogroup_dives(ctx, ctx.dive_table, ctx.trip_table)
    logger.info(f"Loaded {ctx.dive_table.nr} dives in {ctx.trip_table.nr} trips")


def clear_dive_file_data(ctx: AppContext):
    """
    Drop all dives and trips of the log.

    Deleting the dives deletes their trips; trips left over indicate a
    bug and are dropped with a warning.
    """
    while ctx.dive_table.nr:
        delete_single_dive(ctx, 0)

    if ctx.trip_table.nr != 0:
        logger.warning(f"Trip table not empty in clear_dive_file_data ({ctx.trip_table.nr} trips)")
        ctx.trip_table.clear()

    ctx.current_dive = None
    reset_min_datafile_version(ctx)


def total_weight(dive: Optional[Dive]) -> int:
    """Total weight (grams) of all weight systems of a dive."""
    if dive is None:
        return 0
    return sum(ws.grams for ws in dive.weights)

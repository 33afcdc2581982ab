"""
Import Operations for the divelist core.

Merges a table of imported dives (and optionally their trips) into the
dive log. The work is split in two steps so the result can be recorded
for undo before it is applied:

1. process_imported_dives() computes an ImportPlan: dives to add, dives
   to remove (replaced by merged dives) and trips to add. The live
   tables are not touched; the import tables are consumed.
2. apply_import_plan() executes the plan on the live tables.

add_imported_dives() does both in one go.
"""

import logging
from typing import Optional

from config.app_context import AppContext
from domain.models import Dive, ImportFlags, ImportPlan, Trip
from domain.ordering import dive_less_than
from domain.rules import dive_endtime
from domain.table import DiveTable, TripTable
from services.dive_computers import set_dc_nickname
from .dive_ops import add_single_dive, delete_single_dive, get_divenr, mark_divelist_changed
from .trip_ops import (
    add_dive_to_trip,
    autogroup_dives,
    create_trip_from_dive,
    insert_trip,
    trips_overlap,
)

logger = logging.getLogger(__name__)


# ==================== Helpers ====================


def merge_imported_dives(ctx: AppContext, table: DiveTable):
    """
    Merge consecutive dives of a sorted import table where possible.

    Only overlapping dives are merged, or pairs where one dive has no
    duration (such as a GPS fix). Assumes the dives are neither selected
    nor part of a trip.
    """
    i = 1
    while i < table.nr:
        prev = table[i - 1]
        dive = table[i]

        if prev.duration and dive.duration and dive_endtime(prev) < dive.when:
            i += 1
            continue

        merged = ctx.try_to_merge(prev, dive, False)
        if merged is None:
            i += 1
            continue

        # replace the first of the two dives, drop the second and
        # retry the merged dive against its new successor
        table[i - 1] = merged
        table.remove_at(i)


def try_to_merge_into(
    ctx: AppContext,
    dive_to_add: Dive,
    idx: int,
    table: DiveTable,
    prefer_imported: bool,
    plan: ImportPlan,
) -> bool:
    """
    Try to merge a new dive into the dive at position idx of a table.

    On success the old dive goes to plan.dives_to_remove and the merged
    dive (inheriting the old dive's trip) to plan.dives_to_add. On
    failure nothing changes.

    Returns:
        True if the dives were merged
    """
    old_dive = table[idx]
    merged = ctx.try_to_merge(old_dive, dive_to_add, prefer_imported)
    if merged is None:
        return False

    merged.trip = old_dive.trip
    plan.dives_to_remove.insert(old_dive)
    plan.dives_to_add.insert(merged)
    return True


def dive_is_after_last(ctx: AppContext, dive: Dive) -> bool:
    """Check if a dive sorts after the last dive of the global table."""
    if ctx.dive_table.nr == 0:
        return True
    return dive_less_than(ctx.dive_table.last(), dive)


def merge_dive_tables(
    ctx: AppContext,
    dives_from: DiveTable,
    delete_from: Optional[DiveTable],
    dives_to: DiveTable,
    prefer_imported: bool,
    trip: Optional[Trip],
    plan: ImportPlan,
) -> bool:
    """
    Merge the dives of one sorted table into another.

    Overlapping dives are merged, all others are moved: both end up in
    plan.dives_to_add, the merged-into dives in plan.dives_to_remove.
    Moved dives get `trip` as their (pending) trip. Each merged dive
    bumps plan.start_renumbering_at. dives_from is emptied.

    Pathological cases are not handled: a new dive bridging two old
    dives, or a dive mergeable only with a non-adjacent dive.

    Args:
        ctx: Application context (global table, merge collaborator)
        dives_from: Incoming dives, sorted
        delete_from: Table to remove consumed dives from, or None
        dives_to: Existing dives, sorted
        prefer_imported: Prefer incoming data on merge conflicts
        trip: Trip for moved dives, or None
        plan: Plan collecting the results

    Returns:
        True if a moved dive does not sort after the last dive of the
        global table (the sequence of the log changes)
    """
    last_merged_into = -1
    sequence_changed = False

    j = 0  # index in dives_to
    for dive_to_add in dives_from:
        if delete_from is not None:
            delete_from.remove(dive_to_add)

        # find insertion point
        while j < dives_to.nr and dive_less_than(dives_to[j], dive_to_add):
            j += 1

        # never merge into the same dive twice, it would be removed twice
        if j > 0 and j - 1 > last_merged_into and dive_endtime(dives_to[j - 1]) > dive_to_add.when:
            if try_to_merge_into(ctx, dive_to_add, j - 1, dives_to, prefer_imported, plan):
                last_merged_into = j - 1
                plan.start_renumbering_at += 1
                continue

        if j < dives_to.nr and j > last_merged_into and dive_endtime(dive_to_add) > dives_to[j].when:
            if try_to_merge_into(ctx, dive_to_add, j, dives_to, prefer_imported, plan):
                last_merged_into = j
                plan.start_renumbering_at += 1
                continue

        plan.dives_to_add.insert(dive_to_add)
        sequence_changed |= not dive_is_after_last(ctx, dive_to_add)
        dive_to_add.trip = trip

    dives_from.clear()
    return sequence_changed


def try_to_merge_trip(
    ctx: AppContext,
    trip_import: Trip,
    import_table: DiveTable,
    prefer_imported: bool,
    plan: ImportPlan,
) -> bool:
    """
    Merge an imported trip into the first existing trip it overlaps.

    All dives of the imported trip are consumed; the trip itself is
    dropped on success. Updates plan.sequence_changed.

    Returns:
        True if the trip was merged
    """
    for trip_old in ctx.trip_table:
        if trips_overlap(trip_import, trip_old):
            logger.debug(f"Merging imported trip '{trip_import.location}' into '{trip_old.location}'")
            plan.sequence_changed |= merge_dive_tables(
                ctx,
                trip_import.dives,
                import_table,
                trip_old.dives,
                prefer_imported,
                trip_old,
                plan,
            )
            return True
    return False


# ==================== Planning ====================


def process_imported_dives(
    ctx: AppContext,
    import_table: DiveTable,
    import_trip_table: Optional[TripTable] = None,
    flags: ImportFlags = ImportFlags.NONE,
    plan: Optional[ImportPlan] = None,
) -> ImportPlan:
    """
    Compute the plan for importing a table of dives.

    The dives and trips of the import tables are consumed: on return
    both tables are empty and their contents are owned by the plan.
    New dives carry their target trip in dive.trip but are not yet part
    of that trip; apply_import_plan() takes care of that.

    Flags:
        PREFER_IMPORTED: incoming data wins on merge conflicts
        MERGE_ALL_TRIPS: merge all overlapping trips, not only
            autogenerated ones
        IS_DOWNLOADED: all dives come from one dive computer, only the
            first dive registers its nickname
        ADD_TO_NEW_TRIP: tripless dives go into one new trip instead of
            being merged into the log

    Renumbering: if the new dives are appended after the end of the log,
    none of them carries a number, and the last dive of the log is
    numbered, the added dives are numbered consecutively after
    the last dive. Merged dives keep their numbers.

    Args:
        ctx: Application context
        import_table: Imported dives
        import_trip_table: Imported trips, or None if all dives are tripless
        flags: ImportFlags
        plan: Plan to fill (cleared first); a new one if None

    Returns:
        The ImportPlan

    Example:
        >>> plan = process_imported_dives(ctx, table, flags=ImportFlags.PREFER_IMPORTED)
        >>> apply_import_plan(ctx, plan)
    """
    if plan is None:
        plan = ImportPlan()
    else:
        plan.clear()

    # a local trip table is needed when tripless dives get autogrouped
    if import_trip_table is None:
        import_trip_table = TripTable()

    prefer_imported = bool(flags & ImportFlags.PREFER_IMPORTED)
    new_dive_has_number = any(dive.number > 0 for dive in import_table)

    if not import_table.nr:
        return plan

    if flags & ImportFlags.IS_DOWNLOADED:
        set_dc_nickname(ctx.dc_nicknames, import_table[0])
    else:
        for dive in import_table:
            set_dc_nickname(ctx.dc_nicknames, dive)

    import_table.sort()
    merge_imported_dives(ctx, import_table)

    # don't autogroup dives that should go into a new trip
    if not flags & ImportFlags.ADD_TO_NEW_TRIP:
        autogroup_dives(ctx, import_table, import_trip_table)

    # not many trips get imported at once: a simple n*m loop is fine
    for trip_import in import_trip_table:
        if (flags & ImportFlags.MERGE_ALL_TRIPS) or trip_import.autogen:
            if try_to_merge_trip(ctx, trip_import, import_table, prefer_imported, plan):
                continue

        # no trip to merge into: add the trip as-is
        for dive in trip_import.dives:
            plan.dives_to_add.insert(dive)
            plan.sequence_changed |= not dive_is_after_last(ctx, dive)
            import_table.remove(dive)

        insert_trip(trip_import, plan.trips_to_add)
        # the dives keep their trip reference; apply_import_plan() re-adds them
        trip_import.dives.clear()
    import_trip_table.clear()

    if (flags & ImportFlags.ADD_TO_NEW_TRIP) and import_table.nr > 0:
        new_trip = create_trip_from_dive(import_table[0])
        insert_trip(new_trip, plan.trips_to_add)

        for dive in import_table:
            dive.trip = new_trip
            plan.dives_to_add.insert(dive)
            plan.sequence_changed |= not dive_is_after_last(ctx, dive)
        import_table.clear()
    elif import_table.nr > 0:
        plan.sequence_changed |= merge_dive_tables(
            ctx, import_table, None, ctx.dive_table, prefer_imported, None, plan
        )

    last = ctx.dive_table.last()
    nr = last.number if last is not None else 0
    # merged dives come first in dives_to_add when the sequence did not change
    if not plan.sequence_changed and nr > 0 and not new_dive_has_number:
        for i in range(plan.start_renumbering_at, plan.dives_to_add.nr):
            nr += 1
            plan.dives_to_add[i].number = nr

    logger.info(
        f"Import plan: {plan.dives_to_add.nr} dives to add, "
        f"{plan.dives_to_remove.nr} to remove, {plan.trips_to_add.nr} new trips"
    )
    return plan


# ==================== Applying ====================


def apply_import_plan(ctx: AppContext, plan: ImportPlan):
    """
    Apply an import plan to the live tables.

    New dives are attached to their trips first, so that trips don't get
    deleted when the dives they replace are removed. Afterwards the
    newest dive becomes the current dive and the log is marked dirty.
    The plan is emptied.
    """
    for dive in plan.dives_to_add:
        trip = dive.trip
        if trip is None:
            continue
        dive.trip = None
        add_dive_to_trip(dive, trip)

    for dive in plan.dives_to_remove:
        delete_single_dive(ctx, get_divenr(ctx, dive))

    for dive in plan.dives_to_add:
        add_single_dive(ctx, -1, dive)

    for trip in plan.trips_to_add:
        insert_trip(trip, ctx.trip_table)

    plan.clear()

    ctx.current_dive = ctx.dive_table.last()
    mark_divelist_changed(ctx, True)


def add_imported_dives(
    ctx: AppContext,
    import_table: DiveTable,
    import_trip_table: Optional[TripTable] = None,
    flags: ImportFlags = ImportFlags.NONE,
):
    """
    Import dives into the log: compute the plan and apply it.

    See process_imported_dives() for the meaning of the arguments.
    """
    plan = process_imported_dives(ctx, import_table, import_trip_table, flags)
    apply_import_plan(ctx, plan)

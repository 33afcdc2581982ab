"""
Unit tests for Import Operations.

Tests cover merging imported dives into the log, trip handling and
renumbering of appended dives.
"""

import pytest

from config.app_context import create_app_context
from domain.models import Dive, DiveComputer, ImportFlags, ImportPlan, Trip
from domain.table import DiveTable, TripTable
from operations.dive_ops import add_single_dive
from operations.import_ops import (
    add_imported_dives,
    apply_import_plan,
    dive_is_after_last,
    merge_imported_dives,
    process_imported_dives,
)
from operations.trip_ops import add_dive_to_trip, create_and_hookup_trip_from_dive, insert_trip

DAY = 24 * 60 * 60


# ==================== Fixtures ====================


@pytest.fixture
def numbered_log(ctx):
    """A log of 42 dives numbered 1 to 42, one per day."""
    for i in range(42):
        add_single_dive(ctx, -1, Dive(when=i * DAY, duration=3600, number=i + 1))
    return ctx


def _import_table(*dives):
    return DiveTable(dives)


# ==================== Helpers ====================


def test_merge_imported_dives_merges_overlaps(ctx):
    table = _import_table(
        Dive(when=0, duration=3600),
        Dive(when=600, duration=3600),
        Dive(when=DAY, duration=3600),
    )

    merge_imported_dives(ctx, table)

    assert table.nr == 2
    assert table[0].duration == 4200
    assert table[1].when == DAY


def test_merge_imported_dives_merges_zero_duration_fix(ctx):
    # a GPS fix without a duration, shortly after the dive started
    table = _import_table(Dive(when=0, duration=3600), Dive(when=30, duration=0))

    merge_imported_dives(ctx, table)

    assert table.nr == 1


def test_dive_is_after_last(ctx):
    assert dive_is_after_last(ctx, Dive(when=0))

    add_single_dive(ctx, -1, Dive(when=1000))

    assert dive_is_after_last(ctx, Dive(when=2000))
    assert not dive_is_after_last(ctx, Dive(when=500))


# ==================== Planning ====================


def test_empty_import_gives_empty_plan(ctx):
    plan = process_imported_dives(ctx, DiveTable())

    assert plan.is_empty
    assert not plan.sequence_changed


def test_overlapping_import_replaces_existing_dive(ctx):
    existing = Dive(when=0, duration=3600, location="House reef")
    add_single_dive(ctx, -1, existing)
    imported = Dive(when=1800, duration=3600, location="Imported reef")

    plan = process_imported_dives(ctx, _import_table(imported), flags=ImportFlags.PREFER_IMPORTED)

    assert list(plan.dives_to_remove) == [existing]
    assert plan.dives_to_add.nr == 1
    merged = plan.dives_to_add[0]
    assert merged is not existing and merged is not imported
    assert merged.location == "Imported reef"
    assert plan.trips_to_add.nr == 0
    assert plan.sequence_changed is False


def test_merged_dive_inherits_trip(ctx):
    existing = Dive(when=0, duration=3600)
    add_single_dive(ctx, -1, existing)
    trip = create_and_hookup_trip_from_dive(existing, ctx.trip_table)

    plan = process_imported_dives(ctx, _import_table(Dive(when=600, duration=3600)))

    assert plan.dives_to_add[0].trip is trip


def test_import_consumes_input_tables(ctx):
    table = _import_table(Dive(when=0), Dive(when=DAY))
    trips = TripTable()

    process_imported_dives(ctx, table, trips)

    assert table.nr == 0
    assert trips.nr == 0


def test_plan_is_reused_and_cleared(ctx):
    plan = ImportPlan()
    plan.sequence_changed = True
    plan.trips_to_add.insert(Trip())

    result = process_imported_dives(ctx, _import_table(Dive(when=0)), plan=plan)

    assert result is plan
    assert plan.trips_to_add.nr == 0
    assert plan.dives_to_add.nr == 1


def test_import_before_last_dive_changes_sequence(ctx):
    add_single_dive(ctx, -1, Dive(when=10 * DAY, duration=3600))

    plan = process_imported_dives(ctx, _import_table(Dive(when=0, duration=3600)))

    assert plan.sequence_changed is True


def test_is_downloaded_registers_first_computer_only(ctx):
    table = _import_table(
        Dive(when=0, dc=DiveComputer(model="Perdix", deviceid=1)),
        Dive(when=DAY, dc=DiveComputer(model="Petrel", deviceid=2)),
    )

    process_imported_dives(ctx, table, flags=ImportFlags.IS_DOWNLOADED)

    assert list(ctx.dc_nicknames) == [("Perdix", 1)]


def test_add_to_new_trip(ctx):
    table = _import_table(Dive(when=0, location="Dahab"), Dive(when=DAY))

    plan = process_imported_dives(ctx, table, flags=ImportFlags.ADD_TO_NEW_TRIP)

    assert plan.trips_to_add.nr == 1
    trip = plan.trips_to_add[0]
    assert trip.location == "Dahab"
    assert all(dive.trip is trip for dive in plan.dives_to_add)
    # dives are only attached when the plan is applied
    assert trip.dives.nr == 0


def test_imported_trip_added_as_new_trip(ctx):
    add_single_dive(ctx, -1, Dive(when=0, duration=3600))
    create_and_hookup_trip_from_dive(ctx.dive_table[0], ctx.trip_table)

    imported = Dive(when=600, duration=600)
    trip_import = Trip(location="Logged trip")
    add_dive_to_trip(imported, trip_import)
    trips = TripTable()
    insert_trip(trip_import, trips)

    # user trips are only merged with MERGE_ALL_TRIPS
    plan = process_imported_dives(ctx, _import_table(imported), trips)

    assert list(plan.trips_to_add) == [trip_import]
    assert list(plan.dives_to_add) == [imported]
    assert imported.trip is trip_import
    assert plan.dives_to_remove.nr == 0


def test_imported_trip_merged_into_overlapping_trip(ctx):
    a = Dive(when=0, duration=3600)
    b = Dive(when=DAY, duration=3600)
    add_single_dive(ctx, -1, a)
    add_single_dive(ctx, -1, b)
    trip_old = create_and_hookup_trip_from_dive(a, ctx.trip_table)
    add_dive_to_trip(b, trip_old)

    imported = Dive(when=DAY // 2, duration=3600)
    trip_import = Trip()
    add_dive_to_trip(imported, trip_import)
    trips = TripTable()
    insert_trip(trip_import, trips)

    plan = process_imported_dives(ctx, _import_table(imported), trips, ImportFlags.MERGE_ALL_TRIPS)

    assert plan.trips_to_add.nr == 0
    assert list(plan.dives_to_add) == [imported]
    assert imported.trip is trip_old
    assert plan.sequence_changed is True


def test_pure_append_renumbers(numbered_log):
    ctx = numbered_log
    start = 50 * DAY
    table = _import_table(*(Dive(when=start + i * DAY, duration=3600) for i in range(3)))

    add_imported_dives(ctx, table)

    assert [dive.number for dive in ctx.dive_table][-3:] == [43, 44, 45]


def test_numbered_import_keeps_numbers(numbered_log):
    ctx = numbered_log
    table = _import_table(Dive(when=50 * DAY, duration=3600), Dive(when=51 * DAY, number=7))

    add_imported_dives(ctx, table)

    assert [dive.number for dive in ctx.dive_table][-2:] == [0, 7]


def test_no_renumbering_when_sequence_changes(numbered_log):
    ctx = numbered_log
    table = _import_table(Dive(when=10 * DAY + 7200, duration=600))

    plan = process_imported_dives(ctx, table)

    assert plan.sequence_changed
    assert plan.dives_to_add[0].number == 0


def test_append_renumbers_after_numbered_last_dive(ctx):
    # older dives were logged without numbers
    add_single_dive(ctx, -1, Dive(when=0, duration=3600))
    add_single_dive(ctx, -1, Dive(when=DAY, duration=3600))
    add_single_dive(ctx, -1, Dive(when=2 * DAY, duration=3600, number=1))

    add_imported_dives(ctx, _import_table(Dive(when=3 * DAY, duration=3600)))

    assert [dive.number for dive in ctx.dive_table] == [0, 0, 1, 2]


def test_import_into_empty_log_is_not_numbered(ctx):
    add_imported_dives(ctx, _import_table(Dive(when=0, duration=3600), Dive(when=DAY, duration=3600)))

    assert [dive.number for dive in ctx.dive_table] == [0, 0]


# ==================== Applying ====================


def test_apply_import_plan(ctx):
    calls = []
    ctx.update_window_title = lambda: calls.append(True)
    existing = Dive(when=0, duration=3600)
    add_single_dive(ctx, -1, existing)
    create_and_hookup_trip_from_dive(existing, ctx.trip_table)
    table = _import_table(Dive(when=600, duration=3600), Dive(when=DAY, duration=3600))

    plan = process_imported_dives(ctx, table)
    apply_import_plan(ctx, plan)

    assert ctx.dive_table.nr == 2
    assert existing not in list(ctx.dive_table)
    merged = ctx.dive_table[0]
    # the trip survived the removal of its only dive
    assert ctx.trip_table.nr == 1
    assert list(ctx.trip_table[0].dives) == [merged]
    assert ctx.current_dive is ctx.dive_table[1]
    assert ctx.dive_list_changed
    assert calls == [True]
    assert plan.is_empty


def test_apply_new_trip_registers_trip(ctx):
    table = _import_table(Dive(when=0), Dive(when=DAY))

    add_imported_dives(ctx, table, flags=ImportFlags.ADD_TO_NEW_TRIP)

    assert ctx.trip_table.nr == 1
    trip = ctx.trip_table[0]
    assert list(trip.dives) == list(ctx.dive_table)


def test_import_autogroups_into_overlapping_trip(ctx):
    ctx.autogroup = True
    a = Dive(when=0, duration=3600)
    b = Dive(when=DAY, duration=3600)
    add_single_dive(ctx, -1, a)
    add_single_dive(ctx, -1, b)
    trip = create_and_hookup_trip_from_dive(a, ctx.trip_table)
    add_dive_to_trip(b, trip)

    table = _import_table(Dive(when=DAY // 2, duration=3600), Dive(when=DAY // 2 + 7200, duration=600))

    add_imported_dives(ctx, table)

    assert ctx.trip_table.nr == 1
    assert trip.dives.nr == 4


@pytest.mark.parametrize("seed", [None, 1], ids=["empty_log", "numbered_log"])
def test_import_in_batches_matches_single_import(ctx, settings, seed):
    def seeded(context):
        if seed is not None:
            add_single_dive(context, -1, Dive(when=0, duration=3600, number=seed))
        return context

    def batch(*days):
        return _import_table(*(Dive(when=d * DAY, duration=3600) for d in days))

    single = seeded(ctx)
    add_imported_dives(single, batch(1, 2, 3))

    batched = seeded(create_app_context(settings=settings, autogroup=False))
    for days in [(1, 2), (3,)]:
        apply_import_plan(batched, process_imported_dives(batched, batch(*days)))

    def summary(context):
        return [(d.when, d.number, d.trip is None) for d in context.dive_table]

    assert summary(single) == summary(batched)
    expected = [0, 0, 0] if seed is None else [1, 2, 3, 4]
    assert [d.number for d in batched.dive_table] == expected
    assert batched.current_dive is batched.dive_table.last()

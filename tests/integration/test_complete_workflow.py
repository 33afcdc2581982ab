"""
Integration tests for complete workflow.

Tests the end-to-end flow from loading a dive log through importing a
download to the per-dive oxygen and deco numbers.
"""

import pytest

from config.app_context import create_app_context
from config.constants import TRIP_THRESHOLD
from domain.models import DiveComputer, ImportFlags
from domain.table import DiveTable
from operations import (
    add_imported_dives,
    add_single_dive,
    calculate_cns,
    clear_dive_file_data,
    create_deco_state,
    delete_single_dive,
    get_dive_gas_string,
    get_divenr,
    get_surface_interval,
    init_decompression,
    process_imported_dives,
    process_loaded_dives,
    select_dive,
    unsaved_changes,
    update_cylinder_related_info,
)

DAY = 24 * 60 * 60
HOUR = 60 * 60


# ==================== Fixtures ====================


@pytest.fixture
def app_context(settings):
    """Context with autogrouping on, as most users run it."""
    return create_app_context(settings=settings, autogroup=True)


@pytest.fixture
def loaded_log(app_context, make_dive):
    """A log of two trips, loaded as if read from a file."""
    ctx = app_context
    week = [make_dive(when=d * DAY, number=d + 1, location="Red Sea", depth_mm=25000) for d in range(4)]
    later = [make_dive(when=(40 + d) * DAY, number=d + 5, location="Lanzarote", depth_mm=18000) for d in range(2)]
    # file order is not necessarily sorted
    for dive in reversed(week + later):
        ctx.dive_table.add_at(ctx.dive_table.nr, dive)

    process_loaded_dives(ctx)
    return ctx


# ==================== Workflow Tests ====================


def test_load_groups_dives_into_trips(loaded_log):
    ctx = loaded_log

    assert [dive.number for dive in ctx.dive_table] == [1, 2, 3, 4, 5, 6]
    assert ctx.trip_table.nr == 2
    assert [trip.location for trip in ctx.trip_table] == ["Red Sea", "Lanzarote"]
    assert all(trip.autogen for trip in ctx.trip_table)
    assert not unsaved_changes(ctx)


def test_download_appends_and_renumbers(loaded_log, make_dive):
    ctx = loaded_log
    base = 42 * DAY
    downloaded = DiveTable([
        make_dive(when=base + 3 * HOUR, o2=320,
                  dc=DiveComputer(model="Teric", deviceid=0xBEEF)),
        make_dive(when=base, o2=320,
                  dc=DiveComputer(model="Teric", deviceid=0xBEEF)),
    ])

    add_imported_dives(ctx, downloaded, flags=ImportFlags.IS_DOWNLOADED)

    assert ctx.dive_table.nr == 8
    assert [dive.number for dive in ctx.dive_table][-2:] == [7, 8]
    # a new trip: the download does not overlap the Lanzarote trip
    assert ctx.trip_table.nr == 3
    assert ctx.trip_table[1].dives.nr == 2
    new_trip = ctx.trip_table[2]
    assert new_trip.autogen
    assert list(new_trip.dives) == list(ctx.dive_table)[-2:]
    assert ctx.current_dive is ctx.dive_table[7]
    assert unsaved_changes(ctx)
    assert ctx.dc_nicknames == {("Teric", 0xBEEF): "Teric"}


def test_redownload_merges_instead_of_duplicating(loaded_log, make_dive):
    ctx = loaded_log
    last = ctx.dive_table[5]
    again = make_dive(when=last.when + 30, depth_mm=18000, location="Playa Chica")

    plan = process_imported_dives(ctx, DiveTable([again]), flags=ImportFlags.PREFER_IMPORTED)

    assert list(plan.dives_to_remove) == [last]
    assert plan.dives_to_add.nr == 1
    merged = plan.dives_to_add[0]
    assert merged.number == last.number
    assert merged.location == "Playa Chica"
    assert merged.trip is last.trip


def test_physiology_for_repetitive_dives(loaded_log, make_dive):
    ctx = loaded_log
    # second dive of the day, 2 hours after the last Lanzarote dive
    last = ctx.dive_table[5]
    repeat = make_dive(when=last.when + last.duration + 2 * HOUR, depth_mm=20000, o2=320)
    add_imported_dives(ctx, DiveTable([repeat]))

    update_cylinder_related_info(ctx, repeat)
    ds = create_deco_state(ctx)
    surface_time = init_decompression(ctx, ds, repeat)

    assert get_dive_gas_string(repeat) == "32%"
    assert repeat.otu > 0
    assert repeat.maxcns == calculate_cns(ctx, repeat)
    assert surface_time == 2 * HOUR
    assert get_surface_interval(ctx, repeat.when) == 2 * HOUR


def test_delete_and_clear(loaded_log):
    ctx = loaded_log
    first = ctx.dive_table[0]
    select_dive(ctx, first)

    delete_single_dive(ctx, get_divenr(ctx, first))
    assert ctx.dive_table.nr == 5
    assert ctx.trip_table[0].dives.nr == 3

    clear_dive_file_data(ctx)
    assert ctx.dive_table.nr == 0
    assert ctx.trip_table.nr == 0


def test_lone_dive_stays_tripless(app_context, make_dive):
    ctx = app_context
    add_single_dive(ctx, -1, make_dive(when=0))
    add_single_dive(ctx, -1, make_dive(when=TRIP_THRESHOLD))

    process_loaded_dives(ctx)

    assert ctx.trip_table.nr == 0

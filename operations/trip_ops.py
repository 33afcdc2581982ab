"""
Trip Operations for the divelist core.

Trip registry management: allocating and registering trips, moving dives
in and out of trips, and autogrouping tripless dives into trips.
Plain functions with the tables passed in explicitly.

Ownership:
- The trip table owns the trips
- A trip owns its dive table; the entries alias dives owned by the
  global dive table
- unregister_* hands the object to the caller, delete_* drops it
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Tuple

from config.app_context import AppContext
from config.constants import TRIP_THRESHOLD
from domain.exceptions import InvariantError
from domain.models import AutogroupRange, Dive, Trip
from domain.ordering import trip_date, trip_enddate
from domain.rules import get_dive_location
from domain.table import DiveTable, TripTable

logger = logging.getLogger(__name__)


# ==================== Registry ====================


def alloc_trip() -> Trip:
    """Allocate an empty trip. It is not registered anywhere."""
    return Trip()


def insert_trip(trip: Trip, trip_table: TripTable) -> int:
    """
    Register a trip at its sorted position in a trip table.

    Returns:
        Index the trip was inserted at
    """
    idx = trip_table.insert(trip)
    dump_trip_list(trip_table)
    return idx


def unregister_trip(trip: Trip, trip_table: TripTable):
    """
    Remove a trip from the trip table without dropping it.

    The caller takes ownership of the trip. Only empty trips can be
    unregistered.

    Raises:
        InvariantError: If the trip still has dives
    """
    if trip.dives.nr:
        raise InvariantError(
            "Cannot unregister a trip that still has dives",
            details={"location": trip.location, "dives": trip.dives.nr},
        )
    trip_table.remove(trip)


def delete_trip(trip: Trip, trip_table: TripTable):
    """Unregister an empty trip and drop it."""
    unregister_trip(trip, trip_table)
    logger.debug(f"Deleted trip '{trip.location}'")


def create_trip_from_dive(dive: Dive) -> Trip:
    """Allocate a trip named after the location of a dive."""
    trip = alloc_trip()
    trip.location = get_dive_location(dive)
    return trip


def create_and_hookup_trip_from_dive(dive: Dive, trip_table: TripTable) -> Trip:
    """
    Create a trip for a dive, put the dive into it and register the trip.

    Returns:
        The new trip
    """
    trip = create_trip_from_dive(dive)
    add_dive_to_trip(dive, trip)
    insert_trip(trip, trip_table)
    return trip


# ==================== Membership ====================


def add_dive_to_trip(dive: Dive, trip: Trip):
    """
    Add a dive to a trip and set its back-reference.

    No-op if the dive is already in this trip. The caller is
    responsible for removing the dive from any other trip beforehand.
    """
    if dive.trip is trip:
        return
    if dive.trip is not None:
        logger.warning(f"Adding dive {dive.id} to trip that has trip set")
    trip.dives.insert(dive)
    dive.trip = trip


def unregister_dive_from_trip(dive: Dive) -> Optional[Trip]:
    """
    Remove a dive from its trip and clear the back-reference.

    An emptied trip is NOT deleted; the caller is responsible for that.

    Returns:
        The trip the dive was in, or None
    """
    trip = dive.trip
    if trip is None:
        return None

    trip.dives.remove(dive)
    dive.trip = None
    return trip


def remove_dive_from_trip(dive: Dive, trip_table: TripTable):
    """Remove a dive from its trip, deleting the trip if it became empty."""
    trip = unregister_dive_from_trip(dive)
    if trip is not None and trip.dives.nr == 0:
        delete_trip(trip, trip_table)


def combine_trips(trip_a: Trip, trip_b: Trip) -> Trip:
    """
    Combine the information of two trips into a new trip.

    Location and notes are taken from trip_a if set, else from trip_b.
    No dives are moved: the old trips stay intact so the operation can
    be undone.
    """
    trip = alloc_trip()
    trip.location = trip_a.location or trip_b.location
    trip.notes = trip_a.notes or trip_b.notes
    return trip


# ==================== Queries ====================


def _utc_date(when: int):
    return datetime.fromtimestamp(when, tz=timezone.utc).date()


def trip_is_single_day(trip: Trip) -> bool:
    """True if the first and last dive of the trip start on the same UTC day."""
    if trip.dives.nr <= 1:
        return True
    return _utc_date(trip.dives[0].when) == _utc_date(trip.dives[-1].when)


def trip_shown_dives(trip: Trip) -> int:
    """Number of dives of the trip not hidden by the filter."""
    return sum(1 for dive in trip.dives if not dive.hidden_by_filter)


def trips_overlap(t1: Trip, t2: Trip) -> bool:
    """
    Check if two trips overlap time-wise.

    Empty trips never overlap anything.
    """
    if t1.dives.nr == 0 or t2.dives.nr == 0:
        return False

    if trip_date(t1) < trip_date(t2):
        return trip_enddate(t1) >= trip_date(t2)
    return trip_enddate(t2) >= trip_date(t1)


# ==================== Autogrouping ====================


def get_trip_for_new_dive(ctx: AppContext, new_dive: Dive) -> Tuple[Trip, bool]:
    """
    Find the trip a new dive should be autogrouped with.

    Looks for a dive of the log within TRIP_THRESHOLD of the new dive
    that has a trip. If there is none, a new autogenerated trip is
    allocated (but not registered).

    Args:
        ctx: Application context
        new_dive: Dive about to be added

    Returns:
        Tuple of (trip, allocated)
    """
    for dive in ctx.dive_table:
        # past the range of possible dives
        if dive.when >= new_dive.when + TRIP_THRESHOLD:
            break
        if dive.when + TRIP_THRESHOLD >= new_dive.when and dive.trip is not None:
            return dive.trip, False

    trip = create_trip_from_dive(new_dive)
    trip.autogen = True
    return trip, True


def get_dives_to_autogroup(table: DiveTable, start: int) -> Optional[AutogroupRange]:
    """
    Find the next range of dives to autogroup, starting at index start.

    The range consists of consecutive dives that have no trip, were not
    explicitly removed from a trip (notrip), and are less than
    TRIP_THRESHOLD apart. The target trip is the trip of the preceding
    dive if that dive is close enough; otherwise a new autogenerated
    trip is allocated, which the caller still has to register.

    A lone dive does not start a new trip: ranges that would need a new
    trip for a single dive are skipped.

    Args:
        table: Sorted dive table to scan
        start: First index to consider

    Returns:
        AutogroupRange, or None if nothing is left to group
    """
    lastdive = None
    i = start
    while i < table.nr:
        dive = table[i]

        if dive.trip is not None:
            lastdive = dive
            i += 1
            continue

        # dives explicitly removed from a trip by the user stay tripless
        if dive.notrip:
            lastdive = None
            i += 1
            continue

        reuse = lastdive is not None and dive.when < lastdive.when + TRIP_THRESHOLD

        # find all dives that will be added to this trip
        end = i + 1
        prev = dive
        while end < table.nr:
            nxt = table[end]
            if nxt.trip is not None or nxt.notrip or nxt.when >= prev.when + TRIP_THRESHOLD:
                break
            prev = nxt
            end += 1

        if reuse:
            return AutogroupRange(trip=lastdive.trip, start=i, end=end, allocated=False)

        if end - i < 2:
            logger.debug(f"Not autogrouping lone dive {dive.id}")
            lastdive = None
            i = end
            continue

        trip = create_trip_from_dive(dive)
        trip.autogen = True
        for j in range(i + 1, end):
            location = get_dive_location(table[j])
            if location and not trip.location:
                trip.location = location
        return AutogroupRange(trip=trip, start=i, end=end, allocated=True)

    return None


def autogroup_dives(ctx: AppContext, table: DiveTable, trip_table: TripTable):
    """
    Put tripless dives of a table into trips, if autogrouping is enabled.

    Walks the table from the oldest dive, attaches every range found by
    get_dives_to_autogroup() to its trip and registers newly allocated
    trips in trip_table.
    """
    if not ctx.autogroup:
        return

    i = 0
    grouped = 0
    while True:
        group = get_dives_to_autogroup(table, i)
        if group is None:
            break
        for j in range(group.start, group.end):
            add_dive_to_trip(table[j], group.trip)
        if group.allocated:
            insert_trip(group.trip, trip_table)
        grouped += group.end - group.start
        i = group.end

    trip_table.sort()
    if grouped:
        logger.info(f"Autogrouped {grouped} dives ({trip_table.nr} trips)")


def dump_trip_list(trip_table: TripTable):
    """Log the trip table at debug level, flagging ordering problems."""
    if not logger.isEnabledFor(logging.DEBUG):
        return

    last_time = 0
    for i, trip in enumerate(trip_table):
        date = trip_date(trip)
        if date < last_time:
            logger.warning("Trip table out of order")
        logger.debug(
            f"{'autogen ' if trip.autogen else ''}trip {i + 1} to '{trip.location}' "
            f"on {datetime.fromtimestamp(date, tz=timezone.utc):%Y-%m-%d %H:%M:%S} "
            f"({trip.dives.nr} dives)"
        )
        last_time = date

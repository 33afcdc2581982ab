"""
Sort ordering of dives and trips.

The core and any view on the dive list must use these comparison
functions, and they must be stable. After editing a key used here
(start time, trip membership), the order of the tables has to be
re-established by the caller.

Dives are ordered lexicographically on (start time, trip time, id).
Trip time is defined such that dives that do not belong to a trip sort
*after* dives that do. Thus, in a chronologically descending view they
are shown *before*. "id" is the stable, strictly increasing unique
number handed out when a dive is allocated, which makes the order total.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Dive, Trip, DiveOrTrip


def _endtime(dive: "Dive") -> int:
    return dive.when + dive.duration


def trip_date(trip: "Trip") -> int:
    """Start time of a trip: the start of its first dive (0 if empty)."""
    if trip is None or len(trip.dives) == 0:
        return 0
    return trip.dives[0].when


def trip_enddate(trip: "Trip") -> int:
    """End time of a trip: the end of its last dive (0 if empty)."""
    if trip is None or len(trip.dives) == 0:
        return 0
    return _endtime(trip.dives[len(trip.dives) - 1])


def comp_dives(a: "Dive", b: "Dive") -> int:
    """Three-way comparison of two dives."""
    if a.when < b.when:
        return -1
    if a.when > b.when:
        return 1
    if a.trip is not b.trip:
        if b.trip is None:
            return -1
        if a.trip is None:
            return 1
        if trip_date(a.trip) < trip_date(b.trip):
            return -1
        if trip_date(a.trip) > trip_date(b.trip):
            return 1
    if a.id < b.id:
        return -1
    if a.id > b.id:
        return 1
    return 0  # only for the same dive or a copy of it


def comp_trips(a: "Trip", b: "Trip") -> int:
    """
    Three-way comparison of two trips by their first dive.

    Empty trips should never be compared, but don't crash on them:
    they rank before non-empty trips.
    """
    if len(a.dives) == 0:
        return 0 if len(b.dives) == 0 else -1
    if len(b.dives) == 0:
        return 1
    return comp_dives(a.dives[0], b.dives[0])


def dive_less_than(a: "Dive", b: "Dive") -> bool:
    return comp_dives(a, b) < 0


def trip_less_than(a: "Trip", b: "Trip") -> bool:
    return comp_trips(a, b) < 0


def _comp_dive_to_trip(dive: "Dive", trip: "Trip") -> int:
    # When comparing a dive to a trip, use the first dive of the trip
    if len(trip.dives) == 0:
        return -1
    return comp_dives(dive, trip.dives[0])


def comp_dive_or_trip(a: "DiveOrTrip", b: "DiveOrTrip") -> int:
    """Three-way comparison for mixed dive/trip traversal."""
    if a.dive is not None and b.dive is not None:
        return comp_dives(a.dive, b.dive)
    if a.trip is not None and b.trip is not None:
        return comp_trips(a.trip, b.trip)
    if a.dive is not None:
        return _comp_dive_to_trip(a.dive, b.trip)
    return -_comp_dive_to_trip(b.dive, a.trip)


def dive_or_trip_less_than(a: "DiveOrTrip", b: "DiveOrTrip") -> bool:
    return comp_dive_or_trip(a, b) < 0

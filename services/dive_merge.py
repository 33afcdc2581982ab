"""
Dive merging service.

Decides whether two dive records describe the same dive (for example the
same dive downloaded twice, or logged by two dive computers) and combines
them into a new dive. Used by the import planner through
AppContext.try_to_merge.
"""

import logging
from copy import copy
from typing import Optional

from domain.models import Dive, DiveComputer, Event, Sample, alloc_dive
from domain.rules import cylinder_none, dive_endtime

logger = logging.getLogger(__name__)

# Minimum time fuzz (seconds) when matching dive start times
MIN_MERGE_FUZZ = 60


def likely_same_dive(a: Dive, b: Dive) -> bool:
    """
    Check if two dives are probably the same dive.

    The start times must lie within half the longer duration of each
    other (at least a minute).

    Args:
        a: First dive
        b: Second dive

    Returns:
        True if the dives should be merged
    """
    fuzz = max(a.duration, b.duration) // 2
    if fuzz < MIN_MERGE_FUZZ:
        fuzz = MIN_MERGE_FUZZ

    return b.when - fuzz <= a.when <= b.when + fuzz


def _shift_dc(dc: DiveComputer, offset: int) -> DiveComputer:
    """Copy a dive computer log with all times moved by offset seconds."""
    shifted = copy(dc)
    shifted.samples = [
        Sample(
            time=s.time + offset,
            depth=s.depth,
            setpoint=s.setpoint,
            o2sensor=list(s.o2sensor),
        )
        for s in dc.samples
    ]
    shifted.events = [
        Event(time=ev.time + offset, name=ev.name, gas_index=ev.gas_index, divemode=ev.divemode)
        for ev in dc.events
    ]
    return shifted


def _has_cylinders(dive: Dive) -> bool:
    return any(not cylinder_none(cyl) for cyl in dive.cylinders)


def merge_dives(a: Dive, b: Dive, prefer_b: bool = False) -> Dive:
    """
    Combine two dives into a newly allocated dive.

    The preferred dive (b if prefer_b, else a) provides the profile,
    cylinders and weights when it has them; the other dive fills gaps.
    The result is not part of any table or trip and has a fresh id.

    Args:
        a: First dive (usually the one already in the log)
        b: Second dive (usually the imported one)
        prefer_b: Take b's data on conflicts

    Returns:
        New merged dive
    """
    primary, secondary = (b, a) if prefer_b else (a, b)

    when = min(a.when, b.when)
    end = max(dive_endtime(a), dive_endtime(b))

    dc_source, dc_owner = (primary.dc, primary) if primary.dc.samples else (secondary.dc, secondary)
    dc = _shift_dc(dc_source, dc_owner.when - when)
    dc.duration = end - when

    res = alloc_dive(
        when=when,
        duration=end - when,
        number=a.number or b.number,
        location=primary.location or secondary.location,
        notes=primary.notes or secondary.notes,
        cylinders=[copy(c) for c in (primary if _has_cylinders(primary) else secondary).cylinders],
        weights=[copy(w) for w in (primary.weights or secondary.weights)],
        dc=dc,
        surface_pressure_mbar=primary.surface_pressure_mbar or secondary.surface_pressure_mbar,
        salinity=primary.salinity or secondary.salinity,
        maxcns=max(a.maxcns, b.maxcns),
        notrip=a.notrip or b.notrip,
    )
    return res


def try_to_merge(a: Dive, b: Dive, prefer_imported: bool = False) -> Optional[Dive]:
    """
    Merge two dives if they are likely the same dive.

    Args:
        a: Dive already in a table
        b: Incoming dive
        prefer_imported: Prefer data of b

    Returns:
        New merged dive, or None if the dives should stay separate
    """
    if not likely_same_dive(a, b):
        return None

    merged = merge_dives(a, b, prefer_imported)
    logger.debug(f"Merged dive {a.id} and dive {b.id} into dive {merged.id}")
    return merged

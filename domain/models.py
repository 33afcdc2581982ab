"""
Domain models for the divelist core.

These dataclasses represent dives, trips and the data attached to them.
They are framework-agnostic and have no dependencies on storage or UI.

Dives and trips use identity semantics (eq=False): two dive records are
the same dive when their ids match, which holds for copies as well.
"""

import itertools
from copy import copy
from dataclasses import dataclass, field
from enum import Enum, IntFlag
from typing import List, Optional

from .constants import MAX_CYLINDERS, MAX_WEIGHTSYSTEMS
from .table import DiveTable, TripTable

_dive_ids = itertools.count(1)


def next_dive_id() -> int:
    """Hand out the next process-unique dive id. Ids are never reused."""
    return next(_dive_ids)


class DiveMode(Enum):
    """Breathing apparatus used for (a part of) a dive."""

    OC = "OC"
    CCR = "CCR"
    PSCR = "PSCR"
    FREEDIVE = "FREEDIVE"
    UNDEF_COMP_TYPE = "UNDEF_COMP_TYPE"


class ImportFlags(IntFlag):
    """Flags controlling how imported dives are merged into the log."""

    NONE = 0
    PREFER_IMPORTED = 1  # on merge conflicts, incoming data wins
    MERGE_ALL_TRIPS = 2  # merge non-autogenerated trips too
    IS_DOWNLOADED = 4  # all dives come from the same dive computer
    ADD_TO_NEW_TRIP = 8  # tripless dives go into one new trip


@dataclass(frozen=True)
class GasMix:
    """
    Breathing gas. Fractions in permille; o2 == 0 means air.
    """

    o2: int = 0
    he: int = 0

    def __post_init__(self):
        if self.o2 < 0 or self.he < 0:
            raise ValueError("gas fractions cannot be negative")
        if self.o2 + self.he > 1000:
            raise ValueError("o2 + he cannot exceed 1000 permille")


@dataclass
class Cylinder:
    """Tank with its gas and start/end pressures (mbar)."""

    gasmix: GasMix = field(default_factory=GasMix)
    size_ml: int = 0  # water volume
    workingpressure_mbar: int = 0
    start_mbar: int = 0
    end_mbar: int = 0
    sample_start_mbar: int = 0  # from the dive computer's pressure samples
    sample_end_mbar: int = 0
    description: str = ""


@dataclass
class WeightSystem:
    grams: int = 0
    description: str = ""


@dataclass
class Sample:
    """One point of a dive profile."""

    time: int  # seconds since dive start
    depth: int = 0  # mm
    setpoint: int = 0  # mbar
    o2sensor: List[int] = field(default_factory=lambda: [0, 0, 0])  # mbar


@dataclass
class Event:
    """
    Dive computer event.

    "gaschange" events switch to cylinder `gas_index`,
    "modechange" events switch to `divemode`.
    """

    time: int
    name: str
    gas_index: int = -1
    divemode: Optional[DiveMode] = None


@dataclass
class DiveComputer:
    """Log of one dive computer: profile samples and events."""

    model: str = ""
    deviceid: int = 0
    samples: List[Sample] = field(default_factory=list)
    events: List[Event] = field(default_factory=list)
    divemode: DiveMode = DiveMode.OC
    duration: int = 0  # seconds
    meandepth: int = 0  # mm
    maxdepth: int = 0  # mm


@dataclass(eq=False)
class Dive:
    """
    A single logged dive.

    The trip field is a non-owning back-reference: the dive is listed in
    trip.dives whenever trip is set (except in import plans, where it
    marks the trip the dive is going to be added to).
    """

    when: int = 0  # seconds since epoch
    duration: int = 0  # seconds
    number: int = 0  # 0 = unnumbered
    location: str = ""
    notes: str = ""
    cylinders: List[Cylinder] = field(default_factory=list)
    weights: List[WeightSystem] = field(default_factory=list)
    dc: DiveComputer = field(default_factory=DiveComputer)
    surface_pressure_mbar: int = 0
    salinity: int = 0  # g/10l, 0 = unknown

    # Cached physiology
    sac: int = 0  # ml/min
    otu: int = 0
    cns: int = 0  # percent
    maxcns: int = 0  # percent, as reported by a dive computer

    trip: Optional["Trip"] = field(default=None, repr=False)
    selected: bool = False
    hidden_by_filter: bool = False
    notrip: bool = False  # user removed the dive from a trip, don't autogroup

    id: int = field(default_factory=next_dive_id)

    def __post_init__(self):
        if len(self.cylinders) > MAX_CYLINDERS:
            raise ValueError(f"a dive can have at most {MAX_CYLINDERS} cylinders")
        if len(self.weights) > MAX_WEIGHTSYSTEMS:
            raise ValueError(f"a dive can have at most {MAX_WEIGHTSYSTEMS} weight systems")

    @property
    def endtime(self) -> int:
        return self.when + self.duration


@dataclass(eq=False)
class Trip:
    """
    A named group of dives, usually one outing.

    The trip owns its dive table; the entries alias dives owned by the
    global dive table.
    """

    location: str = ""
    notes: str = ""
    autogen: bool = False
    dives: DiveTable = field(default_factory=DiveTable, repr=False)

    @property
    def date(self) -> int:
        """Start time of the first dive, 0 for an empty trip."""
        return self.dives[0].when if len(self.dives) else 0

    @property
    def enddate(self) -> int:
        """End time of the last dive, 0 for an empty trip."""
        return self.dives[-1].endtime if len(self.dives) else 0


@dataclass(frozen=True)
class DiveOrTrip:
    """Either a dive or a trip, for unified chronological traversal."""

    dive: Optional[Dive] = None
    trip: Optional[Trip] = None

    def __post_init__(self):
        if (self.dive is None) == (self.trip is None):
            raise ValueError("exactly one of dive or trip must be set")


@dataclass
class AutogroupRange:
    """
    Range [start, end) of a dive table that should go into `trip`.

    If `allocated` is true the trip is new and the caller still has to
    register it.
    """

    trip: Trip
    start: int
    end: int
    allocated: bool


@dataclass
class ImportPlan:
    """
    Result of processing imported dives.

    The plan is applied atomically by the caller (or stored for undo).
    New dives carry the trip they go into in `dive.trip` without being
    members of that trip yet.
    """

    dives_to_add: DiveTable = field(default_factory=DiveTable)
    dives_to_remove: DiveTable = field(default_factory=DiveTable)
    trips_to_add: TripTable = field(default_factory=TripTable)
    sequence_changed: bool = False
    start_renumbering_at: int = 0  # merged dives in dives_to_add

    def clear(self):
        self.dives_to_add.clear()
        self.dives_to_remove.clear()
        self.trips_to_add.clear()
        self.sequence_changed = False
        self.start_renumbering_at = 0

    @property
    def is_empty(self) -> bool:
        return not (self.dives_to_add or self.dives_to_remove or self.trips_to_add)


def alloc_dive(**kwargs) -> Dive:
    """Allocate a new dive with a fresh id."""
    return Dive(**kwargs)


def copy_dive(dive: Dive) -> Dive:
    """
    Copy a dive record. The copy keeps the id (it is the same dive) and
    gets its own cylinder/weight lists.
    """
    dup = copy(dive)
    dup.cylinders = [copy(c) for c in dive.cylinders]
    dup.weights = [copy(w) for w in dive.weights]
    return dup

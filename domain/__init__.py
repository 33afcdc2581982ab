"""
Domain layer for the divelist core.

This module contains dives, trips, their ordering and the gas/pressure rules.
No dependencies on configuration, UI, or external frameworks.
"""

from .models import (
    Dive,
    Trip,
    DiveOrTrip,
    DiveComputer,
    DiveMode,
    Cylinder,
    WeightSystem,
    GasMix,
    Sample,
    Event,
    AutogroupRange,
    ImportPlan,
    ImportFlags,
    alloc_dive,
    copy_dive,
)

from .table import (
    OrderedTable,
    DiveTable,
    TripTable,
)

from .ordering import (
    comp_dives,
    comp_trips,
    comp_dive_or_trip,
    dive_less_than,
    trip_less_than,
    dive_or_trip_less_than,
    trip_date,
    trip_enddate,
)

from .exceptions import (
    DiveLogBaseException,
    InvariantError,
    ValidationError,
)

__all__ = [
    # Models
    "Dive",
    "Trip",
    "DiveOrTrip",
    "DiveComputer",
    "DiveMode",
    "Cylinder",
    "WeightSystem",
    "GasMix",
    "Sample",
    "Event",
    "AutogroupRange",
    "ImportPlan",
    "ImportFlags",
    "alloc_dive",
    "copy_dive",
    # Tables
    "OrderedTable",
    "DiveTable",
    "TripTable",
    # Ordering
    "comp_dives",
    "comp_trips",
    "comp_dive_or_trip",
    "dive_less_than",
    "trip_less_than",
    "dive_or_trip_less_than",
    "trip_date",
    "trip_enddate",
    # Exceptions
    "DiveLogBaseException",
    "InvariantError",
    "ValidationError",
]

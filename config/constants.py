"""
Application constants for the divelist core.

Centralized location for all application-wide constants.
Physical constants live in domain.constants and are re-exported here.
"""

from domain.constants import (  # noqa: F401
    MAX_CYLINDERS,
    MAX_WEIGHTSYSTEMS,
    TRIP_THRESHOLD,
    O2_IN_AIR,
    N2_IN_AIR,
    SURFACE_PRESSURE,
    SEAWATER_SALINITY,
    FRESHWATER_SALINITY,
    WV_PRESSURE,
    PO2_TOXICITY_THRESHOLD,
    CNS_HISTORY_WINDOW,
    DECO_HISTORY_WINDOW,
    CNS_HALF_TIME,
)
from domain.models import ImportFlags

# ==================== Application Info ====================

APP_NAME = "divelist"
APP_VERSION = "1.0.0"

# ==================== Import Flags ====================

PREFER_IMPORTED = ImportFlags.PREFER_IMPORTED
MERGE_ALL_TRIPS = ImportFlags.MERGE_ALL_TRIPS
IS_DOWNLOADED = ImportFlags.IS_DOWNLOADED
ADD_TO_NEW_TRIP = ImportFlags.ADD_TO_NEW_TRIP

# ==================== Decompression Defaults ====================

DEFAULT_DECO_SAC = 17000  # ml/min
DEFAULT_GF_LOW = 30  # percent
DEFAULT_GF_HIGH = 75  # percent
DEFAULT_O2_CONSUMPTION = 720  # ml/min
DEFAULT_PSCR_RATIO = 100  # 1:10 dump ratio, times 1000

# ==================== Logging ====================

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"

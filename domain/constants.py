"""
Physical and structural constants of the dive log.

Kept in the domain layer so models and rules have no dependency on
configuration. config.constants re-exports them.
"""

# ==================== Table Limits ====================

MAX_CYLINDERS = 20
MAX_WEIGHTSYSTEMS = 6

# Capacity step for ordered tables: (nr + 32) * 3 / 2
TABLE_GROW_STEP = 32

# ==================== Trips ====================

# Dives closer than this (seconds) are grouped into the same trip
TRIP_THRESHOLD = 3 * 24 * 60 * 60

# ==================== Gas & Pressure ====================

O2_IN_AIR = 209  # permille
N2_IN_AIR = 1000 - O2_IN_AIR

SURFACE_PRESSURE = 1013  # mbar
SEAWATER_SALINITY = 10300  # g/10l
FRESHWATER_SALINITY = 10000  # g/10l

# Water vapour pressure in the lungs (bar)
WV_PRESSURE = 0.0627

# Cap for the compressibility polynomial (bar)
MAX_COMPRESSIBILITY_PRESSURE = 500

# ==================== Physiology ====================

# PO2 (mbar) at or below which no oxygen toxicity is accumulated
PO2_TOXICITY_THRESHOLD = 500

# How far back previous dives are considered (seconds)
CNS_HISTORY_WINDOW = 12 * 60 * 60
DECO_HISTORY_WINDOW = 48 * 60 * 60

# CNS half time at the surface (seconds)
CNS_HALF_TIME = 90 * 60

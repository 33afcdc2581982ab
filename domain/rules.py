"""
Gas and pressure rules for the divelist core.

Pure functions used by the physiology engine and the dive merger:
gas fractions, cylinder usage, depth/pressure conversion, gas volume,
and resolving the gas and dive mode in use at a point of the profile.
"""

from .constants import (
    O2_IN_AIR,
    SURFACE_PRESSURE,
    SEAWATER_SALINITY,
    MAX_COMPRESSIBILITY_PRESSURE,
)
from .models import Cylinder, Dive, DiveComputer, DiveMode, GasMix

# Virial coefficients of the compressibility polynomial per gas
O2_COEFFICIENTS = (-7.18092073703e-04, +2.81852572808e-06, -1.50290620492e-09)
N2_COEFFICIENTS = (-2.19260353292e-04, +2.92844845532e-06, -2.07613482075e-09)
HE_COEFFICIENTS = (+4.87320026468e-04, -8.83632921053e-08, +5.33304543646e-11)

GASMIX_AIR = GasMix(o2=O2_IN_AIR, he=0)


# ==================== Gas Mixes ====================


def get_o2(gasmix: GasMix) -> int:
    """O2 permille of a mix; an unset mix is air."""
    return gasmix.o2 or O2_IN_AIR


def get_he(gasmix: GasMix) -> int:
    return gasmix.he


def gasmix_is_air(gasmix: GasMix) -> bool:
    return gasmix.he == 0 and (gasmix.o2 == 0 or gasmix.o2 == O2_IN_AIR)


def cylinder_none(cyl: Cylinder) -> bool:
    """True for a cylinder slot that carries no information at all."""
    return (
        not cyl.size_ml
        and not cyl.workingpressure_mbar
        and not cyl.description
        and not cyl.gasmix.o2
        and not cyl.gasmix.he
        and not cyl.start_mbar
        and not cyl.end_mbar
        and not cyl.sample_start_mbar
        and not cyl.sample_end_mbar
    )


def is_cylinder_used(dive: Dive, idx: int) -> bool:
    """
    Check whether a cylinder was breathed from during the dive.

    Rules:
    - A recorded pressure drop means the cylinder was used
    - A gas change to the cylinder means it was used
    - The first cylinder is used unless the profile starts with a switch
    """
    if idx < 0 or idx >= len(dive.cylinders):
        return False

    cyl = dive.cylinders[idx]
    start = cyl.start_mbar or cyl.sample_start_mbar
    end = cyl.end_mbar or cyl.sample_end_mbar
    if start and end and start > end:
        return True

    gaschanges = [ev for ev in dive.dc.events if ev.name == "gaschange"]
    if any(ev.gas_index == idx for ev in gaschanges):
        return True

    if idx == 0:
        return not any(ev.time <= 0 for ev in gaschanges)
    return False


# ==================== Pressure ====================


def get_surface_pressure_in_mbar(dive: Dive, non_null: bool = False) -> int:
    """
    Surface pressure of a dive in mbar.

    Returns 0 for unknown pressure unless non_null is set, in which case
    standard pressure is returned.
    """
    mbar = dive.surface_pressure_mbar
    if non_null and not mbar:
        mbar = SURFACE_PRESSURE
    return mbar


def depth_to_mbarf(depth: int, dive: Dive) -> float:
    """Absolute pressure (mbar) at a depth in mm."""
    surface_pressure = get_surface_pressure_in_mbar(dive, True)
    salinity = dive.salinity or SEAWATER_SALINITY
    specific_weight = salinity * 0.981 / 100000.0
    return depth * specific_weight + surface_pressure


def depth_to_mbar(depth: int, dive: Dive) -> int:
    return round(depth_to_mbarf(depth, dive))


def depth_to_bar(depth: int, dive: Dive) -> float:
    return depth_to_mbarf(depth, dive) / 1000.0


def depth_to_atm(depth: int, dive: Dive) -> float:
    return depth_to_mbarf(depth, dive) / SURFACE_PRESSURE


def mbar_to_atm(mbar: float) -> float:
    return mbar / SURFACE_PRESSURE


def _virial_m1(coefficients, x: float) -> float:
    return x * coefficients[0] + x * x * coefficients[1] + x * x * x * coefficients[2]


def gas_compressibility_factor(gasmix: GasMix, bar: float) -> float:
    """
    Compressibility factor Z of a gas mix at a pressure (bar).

    Least-squares fit of a cubic virial expansion per component gas,
    weighted by the mix fractions.
    """
    bar = min(bar, MAX_COMPRESSIBILITY_PRESSURE)
    o2 = get_o2(gasmix)
    he = get_he(gasmix)

    z = (
        _virial_m1(O2_COEFFICIENTS, bar) * o2
        + _virial_m1(HE_COEFFICIENTS, bar) * he
        + _virial_m1(N2_COEFFICIENTS, bar) * (1000 - o2 - he)
    )
    return z * 0.001 + 1.0


def gas_volume(cyl: Cylinder, mbar: int) -> float:
    """Surface volume (ml) of the gas in a cylinder at a given pressure."""
    bar = mbar / 1000.0
    z_factor = gas_compressibility_factor(cyl.gasmix, bar)
    return mbar_to_atm(mbar) * cyl.size_ml / z_factor


# ==================== Profile ====================


def dive_endtime(dive: Dive) -> int:
    return dive.when + dive.duration


def interpolate(a: int, b: int, part: int, whole: int) -> int:
    """Linear interpolation between a and b, rounded to nearest."""
    if whole == 0:
        return a
    return a + round((b - a) * part / whole)


def get_dive_location(dive: Dive) -> str:
    return dive.location


def _cylinder_gasmix(dive: Dive, idx: int) -> GasMix:
    if 0 <= idx < len(dive.cylinders):
        return dive.cylinders[idx].gasmix
    return GASMIX_AIR


def get_gasmix_at_time(dive: Dive, dc: DiveComputer, time: int) -> GasMix:
    """
    Gas breathed at a point of the profile.

    Starts on the first cylinder and follows "gaschange" events up to and
    including `time`.
    """
    gasmix = _cylinder_gasmix(dive, 0)
    for ev in sorted(dc.events, key=lambda e: e.time):
        if ev.time > time:
            break
        if ev.name == "gaschange":
            gasmix = _cylinder_gasmix(dive, ev.gas_index)
    return gasmix


def get_current_divemode(dc: DiveComputer, time: int) -> DiveMode:
    """Dive mode at a point of the profile, following "modechange" events."""
    divemode = dc.divemode
    for ev in sorted(dc.events, key=lambda e: e.time):
        if ev.time > time:
            break
        if ev.name == "modechange" and ev.divemode is not None:
            divemode = ev.divemode
    return divemode

"""
Physiology Operations for the divelist core.

Per-dive numbers derived from the dive profile, some of which depend on
the dives before it:

- get_dive_gas() / get_dive_gas_string() - gas summary of a dive
- calculate_otu() - pulmonary oxygen dose (OTU)
- calculate_cns() - CNS oxygen toxicity, carried over from previous dives
- calculate_sac() - surface air consumption
- init_decompression() - tissue loading left over from previous dives

All calculations use the first dive computer of a dive only.
"""

import logging
import math
from typing import Iterator, NamedTuple, Optional, Tuple

from config.app_context import AppContext
from config.constants import (
    CNS_HALF_TIME,
    CNS_HISTORY_WINDOW,
    DECO_HISTORY_WINDOW,
    O2_IN_AIR,
    PO2_TOXICITY_THRESHOLD,
)
from domain.models import Dive, DiveComputer, DiveMode, Sample
from domain.rules import (
    GASMIX_AIR,
    cylinder_none,
    depth_to_atm,
    depth_to_bar,
    dive_endtime,
    gas_volume,
    get_current_divemode,
    get_gasmix_at_time,
    get_he,
    get_o2,
    get_surface_pressure_in_mbar,
    interpolate,
    is_cylinder_used,
)
from services.deco import DecoState, add_segment, clear_deco, clear_vpmb_state, tissue_tolerance_calc
from .dive_ops import get_divenr

logger = logging.getLogger(__name__)


class CnsLimit(NamedTuple):
    """
    NOAA oxygen exposure limit at a PO2.

    Exposure times are in seconds. Slopes are given times 10 and are
    used to interpolate between rows.
    """

    po2: int  # mbar
    single_exposure: int
    single_slope: int
    daily_exposure: int
    daily_slope: int


# NOAA maximum oxygen exposure limits. The first and last row are not in
# the NOAA table: above 1.6 bar the 1.5-1.6 slope is extrapolated, and
# between 0.5 and 0.6 bar the 0.6-0.7 slope is used.
CNS_TABLE = (
    CnsLimit(1600, 45 * 60, 456, 150 * 60, 180),
    CnsLimit(1550, 83 * 60, 456, 165 * 60, 180),
    CnsLimit(1500, 120 * 60, 444, 180 * 60, 180),
    CnsLimit(1450, 135 * 60, 180, 180 * 60, 0),
    CnsLimit(1400, 150 * 60, 180, 180 * 60, 0),
    CnsLimit(1350, 165 * 60, 180, 195 * 60, 180),
    CnsLimit(1300, 180 * 60, 180, 210 * 60, 180),
    CnsLimit(1250, 195 * 60, 180, 225 * 60, 180),
    CnsLimit(1200, 210 * 60, 180, 240 * 60, 180),
    CnsLimit(1100, 240 * 60, 180, 270 * 60, 180),
    CnsLimit(1000, 300 * 60, 360, 300 * 60, 180),
    CnsLimit(900, 360 * 60, 360, 360 * 60, 360),
    CnsLimit(800, 450 * 60, 540, 450 * 60, 540),
    CnsLimit(700, 570 * 60, 720, 570 * 60, 720),
    CnsLimit(600, 720 * 60, 900, 720 * 60, 900),
    CnsLimit(500, 870 * 60, 900, 870 * 60, 900),
)


# ==================== Gas Summary ====================


def get_dive_gas(dive: Dive) -> Tuple[int, int, int]:
    """
    "Maximal" gas of a dive, used for display and sorting.

    Only used, non-empty cylinders count. Trimix trumps nitrox (highest
    He wins) and nitrox trumps air, even hypoxic. Among mixes with
    equal He the first used cylinder is reported.

    Returns:
        Tuple (o2, he, o2max) in permille: O2 of the winning mix, its He,
        and the highest O2 of any cylinder. All zero for air dives.
    """
    maxo2 = -1
    maxhe = -1
    mino2 = 1000

    for i, cyl in enumerate(dive.cylinders):
        if not is_cylinder_used(dive, i) or cylinder_none(cyl):
            continue

        o2 = get_o2(cyl.gasmix)
        he = get_he(cyl.gasmix)
        if o2 > maxo2:
            maxo2 = o2
        if he > maxhe:
            maxhe = he
            mino2 = o2

    # all air (or nothing at all): show and sort as "air"
    if (not maxhe and maxo2 == O2_IN_AIR and mino2 == maxo2) or (maxo2 == -1 and maxhe == -1):
        return 0, 0, 0
    return mino2, maxhe, maxo2


def get_dive_gas_string(dive: Dive) -> str:
    """Gas summary in percent, e.g. "32%", "21/35", "18/45…50%" or "air"."""
    o2, he, o2max = get_dive_gas(dive)
    o2 = (o2 + 5) // 10
    he = (he + 5) // 10
    o2max = (o2max + 5) // 10

    if he:
        if o2 == o2max:
            return f"{o2}/{he}"
        return f"{o2}/{he}…{o2max}%"
    if o2:
        if o2 == o2max:
            return f"{o2}%"
        return f"{o2}…{o2max}%"
    return "air"


# ==================== Oxygen Toxicity ====================


def _active_o2(dive: Dive, dc: DiveComputer, time: int) -> int:
    return get_o2(get_gasmix_at_time(dive, dc, time))


def _segment_po2(dive: Dive, dc: DiveComputer, psample: Sample, sample: Sample) -> Tuple[int, int]:
    """
    PO2 (mbar) at the start and end of a profile segment.

    Prefers the first O2 sensor, then (for CCR) the setpoint, else the
    inspired PO2 of the breathing gas at depth.
    """
    if sample.o2sensor and sample.o2sensor[0]:
        return psample.o2sensor[0] if psample.o2sensor else 0, sample.o2sensor[0]
    if dc.divemode == DiveMode.CCR:
        return psample.setpoint, sample.setpoint
    o2 = _active_o2(dive, dc, psample.time)
    return (
        round(o2 * depth_to_atm(psample.depth, dive)),
        round(o2 * depth_to_atm(sample.depth, dive)),
    )


def calculate_otu(dive: Dive) -> int:
    """
    Oxygen tolerance units of a dive.

    Uses a third-order continuous approximation of Baker's equation 2
    ("Oxygen Toxicity Calculations"), which also works for rebreathers.
    Segments below 500 mbar PO2 do not count; for segments crossing
    500 mbar only the part above it counts.
    """
    dc = dive.dc
    otu = 0.0
    for psample, sample in zip(dc.samples, dc.samples[1:]):
        t = sample.time - psample.time
        po2i, po2f = _segment_po2(dive, dc, psample, sample)

        if po2i <= PO2_TOXICITY_THRESHOLD and po2f <= PO2_TOXICITY_THRESHOLD:
            continue

        if po2i <= PO2_TOXICITY_THRESHOLD:
            # descent: only the part above the threshold
            t = t * (po2f - PO2_TOXICITY_THRESHOLD) // (po2f - po2i)
            po2i = PO2_TOXICITY_THRESHOLD + 1
        elif po2f <= PO2_TOXICITY_THRESHOLD:
            t = t * (po2i - PO2_TOXICITY_THRESHOLD) // (po2i - po2f)
            po2f = PO2_TOXICITY_THRESHOLD + 1

        pm = (po2f + po2i) / 1000.0 - 1.0
        otu += t / 60.0 * math.pow(pm, 5.0 / 6.0) * (
            1.0 - 5.0 * (po2f - po2i) * (po2f - po2i) / 216000000.0 / (pm * pm)
        )
    return round(otu)


def calculate_cns_dive(dive: Dive) -> float:
    """
    CNS percentage caused by a single dive, without history.

    The exposure limit of each segment is taken at the mean PO2 of the
    segment, interpolated linearly in the NOAA table.
    """
    dc = dive.dc
    cns = 0.0
    for psample, sample in zip(dc.samples, dc.samples[1:]):
        t = sample.time - psample.time
        po2i, po2f = _segment_po2(dive, dc, psample, sample)

        po2 = (po2i + po2f) // 2
        if po2 <= PO2_TOXICITY_THRESHOLD:
            continue

        j = 1
        while j < len(CNS_TABLE) and po2 <= CNS_TABLE[j].po2:
            j += 1
        row = CNS_TABLE[j]

        cns += t / (row.single_exposure - (po2 - row.po2) * row.single_slope / 10.0) * 100
    return cns


def _history_dives(ctx: AppContext, dive: Dive, window: int) -> Iterator[Dive]:
    """
    Yield the dives before `dive` that still affect it, oldest first.

    Walks back from the dive's position in the global table as long as
    the gaps between dives stay within `window` seconds, then yields the
    dives from there up to the dive. If the dive is in a trip, dives of
    other trips are skipped. The dive itself (or a copy of it) is never
    yielded.
    """
    table = ctx.dive_table
    divenr = get_divenr(ctx, dive)
    i = divenr if divenr >= 0 else table.nr

    # correct the position for a dive that is not (or no longer) sorted
    while i < table.nr - 1:
        if table[i].when > dive.when:
            break
        i += 1
    while i > 0:
        if table[i - 1].when < dive.when:
            break
        i -= 1

    last_starttime = dive.when
    while i > 0:
        i -= 1
        if i == divenr and i > 0:
            i -= 1
        pdive = table[i]
        if dive.trip is not None and pdive.trip is not dive.trip:
            continue
        if pdive.when >= dive.when or dive_endtime(pdive) + window < last_starttime:
            break
        last_starttime = pdive.when
    else:
        i = -1

    for idx in range(i + 1, table.nr):
        pdive = table[idx]
        if dive.trip is not None and pdive.trip is not dive.trip:
            continue
        if pdive.when >= dive.when:
            break
        if idx == divenr:
            continue
        yield pdive


def calculate_cns(ctx: AppContext, dive: Dive) -> int:
    """
    CNS percentage at the end of a dive, including previous dives.

    Dives up to 12 hours apart are chained; the accumulated CNS decays
    with a 90 minute half time during surface intervals. The result is
    stored in dive.cns. A dive that already has a CNS value is returned
    as is.

    Returns:
        CNS in percent
    """
    if dive.cns:
        return dive.cns

    cns = 0.0
    last_endtime = None
    for pdive in _history_dives(ctx, dive, CNS_HISTORY_WINDOW):
        if last_endtime is not None:
            cns /= math.pow(2, (pdive.when - last_endtime) / CNS_HALF_TIME)
        cns += calculate_cns_dive(pdive)
        logger.debug(f"CNS after previous dive {pdive.id}: {cns:.2f}")
        last_endtime = dive_endtime(pdive)

    if last_endtime is not None:
        cns /= math.pow(2, (dive.when - last_endtime) / CNS_HALF_TIME)
    cns += calculate_cns_dive(dive)

    dive.cns = round(cns)
    return dive.cns


# ==================== Gas Consumption ====================


def calculate_airuse(dive: Dive) -> float:
    """
    Gas used during a dive, in liters at surface pressure.

    Returns 0 if any used cylinder lacks a pressure drop: better not to
    report a total than a wrong one.
    """
    airuse = 0
    for i, cyl in enumerate(dive.cylinders):
        start = cyl.start_mbar or cyl.sample_start_mbar
        end = cyl.end_mbar or cyl.sample_end_mbar
        if not end or start <= end:
            if is_cylinder_used(dive, i):
                return 0.0
            continue

        airuse += int(gas_volume(cyl, start) - gas_volume(cyl, end))
    return airuse / 1000.0


def calculate_sac(dive: Dive) -> int:
    """
    Surface air consumption of a dive in ml/min.

    Returns 0 if gas use, duration or mean depth is unknown.
    """
    dc = dive.dc
    airuse = calculate_airuse(dive)
    if not airuse:
        return 0
    if not dc.duration:
        return 0
    if not dc.meandepth:
        return 0

    # SAC is in atm*l/min
    pressure = depth_to_atm(dc.meandepth, dive)
    sac = airuse / pressure * 60 / dc.duration
    return round(sac * 1000)


# ==================== Decompression ====================


def add_dive_to_deco(ds: DecoState, dive: Dive):
    """
    Load the tissues with the profile of a dive, second by second.

    Depths are interpolated linearly between samples; gas and dive mode
    follow the events of the dive computer.
    """
    dc = dive.dc
    for psample, sample in zip(dc.samples, dc.samples[1:]):
        t0 = psample.time
        t1 = sample.time
        for j in range(t0, t1):
            depth = interpolate(psample.depth, sample.depth, j - t0, t1 - t0)
            gasmix = get_gasmix_at_time(dive, dc, j)
            add_segment(
                ds,
                depth_to_bar(depth, dive),
                gasmix,
                1,
                sample.setpoint,
                get_current_divemode(dc, j),
                dive.sac,
            )


def init_decompression(ctx: AppContext, ds: DecoState, dive: Optional[Dive]) -> int:
    """
    Seed the tissue state for a dive from the dives before it.

    Dives up to 48 hours apart are chained, with air breathed at the
    surface in between. Without previous dives the tissues start
    saturated with air at surface pressure.

    Args:
        ctx: Application context (dive table, deco settings)
        ds: Deco state to initialize
        dive: Dive to prepare

    Returns:
        Surface interval before the dive in seconds (48 hours without
        previous dive). Negative if the dive overlaps the previous one.
    """
    if dive is None:
        return 0

    surface_time = DECO_HISTORY_WINDOW
    last_endtime = None
    deco_sac = ctx.settings.deco_sac

    for pdive in _history_dives(ctx, dive, DECO_HISTORY_WINDOW):
        surface_pressure = get_surface_pressure_in_mbar(pdive, True) / 1000.0
        if last_endtime is None:
            clear_deco(ds, surface_pressure)
        else:
            surface_time = pdive.when - last_endtime
            if surface_time < 0:
                logger.warning(f"Dive {pdive.id} overlaps the dive before it ({surface_time} s)")
                return surface_time
            add_segment(ds, surface_pressure, GASMIX_AIR, surface_time, 0, dive.dc.divemode, deco_sac)

        add_dive_to_deco(ds, pdive)
        logger.debug(f"Added dive {pdive.id} to deco state")
        last_endtime = dive_endtime(pdive)
        clear_vpmb_state(ds)

    surface_pressure = get_surface_pressure_in_mbar(dive, True) / 1000.0
    if last_endtime is None:
        clear_deco(ds, surface_pressure)
    else:
        surface_time = dive.when - last_endtime
        if surface_time < 0:
            logger.warning(f"Dive {dive.id} overlaps the dive before it ({surface_time} s)")
            return surface_time
        add_segment(ds, surface_pressure, GASMIX_AIR, surface_time, 0, dive.dc.divemode, deco_sac)

    # updates the tolerated pressures and guiding tissue kept in ds
    tissue_tolerance_calc(ds, dive, surface_pressure)
    return surface_time


def create_deco_state(ctx: AppContext) -> DecoState:
    """DecoState configured from the application settings."""
    settings = ctx.settings
    return DecoState(
        gf_low=settings.gf_low / 100.0,
        gf_high=settings.gf_high / 100.0,
        o2_consumption=settings.o2_consumption,
        pscr_ratio=settings.pscr_ratio,
    )


# ==================== Update ====================


def update_cylinder_related_info(ctx: AppContext, dive: Optional[Dive]):
    """
    Recompute the cached gas and oxygen numbers of a dive.

    The CNS is only calculated when no dive computer reported one.
    """
    if dive is None:
        return
    dive.sac = calculate_sac(dive)
    dive.otu = calculate_otu(dive)
    if dive.maxcns == 0:
        dive.maxcns = calculate_cns(ctx, dive)

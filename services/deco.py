"""
Decompression tissue model.

Bühlmann ZH-L16C with gradient factors, the collaborator the physiology
engine uses to seed the tissue state of a dive from the previous dives.

Pressures are in bar, times in seconds, gas fractions in permille.

The state is mutable: add_segment() loads the tissues, and
tissue_tolerance_calc() stores the per-tissue tolerated pressures, the
guiding tissue and the deepest ceiling of the dive in the state.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

from domain.constants import N2_IN_AIR, WV_PRESSURE
from domain.models import Dive, DiveMode, GasMix
from domain.rules import get_he, get_o2

logger = logging.getLogger(__name__)

TISSUE_COUNT = 16

# ZH-L16C coefficients
BUEHLMANN_N2_A = (1.1696, 1.0, 0.8618, 0.7562, 0.62, 0.5043, 0.441, 0.4,
                  0.375, 0.35, 0.3295, 0.3065, 0.2835, 0.261, 0.248, 0.2327)
BUEHLMANN_N2_B = (0.5578, 0.6514, 0.7222, 0.7825, 0.8126, 0.8434, 0.8693, 0.8910,
                  0.9092, 0.9222, 0.9319, 0.9403, 0.9477, 0.9544, 0.9602, 0.9653)
BUEHLMANN_N2_HALFLIFE = (5.0, 8.0, 12.5, 18.5, 27.0, 38.3, 54.3, 77.0,
                         109.0, 146.0, 187.0, 239.0, 305.0, 390.0, 498.0, 635.0)
BUEHLMANN_HE_A = (1.6189, 1.383, 1.1919, 1.0458, 0.922, 0.8205, 0.7305, 0.6502,
                  0.595, 0.5545, 0.5333, 0.5189, 0.5181, 0.5176, 0.5172, 0.5119)
BUEHLMANN_HE_B = (0.4770, 0.5747, 0.6527, 0.7223, 0.7582, 0.7957, 0.8279, 0.8553,
                  0.8757, 0.8903, 0.8997, 0.9073, 0.9122, 0.9171, 0.9217, 0.9267)
BUEHLMANN_HE_HALFLIFE = (1.88, 3.02, 4.72, 6.99, 10.21, 14.48, 20.53, 29.11,
                         41.20, 55.19, 70.69, 90.34, 115.29, 147.42, 188.24, 240.03)

# Depth (bar below surface) where GF low applies at the latest
GF_LOW_POSITION_MIN = 1.0


@dataclass
class DecoState:
    """
    Tissue loading and derived limits.

    Create one per calculation; clear_deco() must be called before the
    first segment is added.
    """

    gf_low: float = 0.30
    gf_high: float = 0.75
    o2_consumption: int = 720  # ml/min, PSCR only
    pscr_ratio: int = 100

    tissue_n2_sat: List[float] = field(default_factory=lambda: [0.0] * TISSUE_COUNT)
    tissue_he_sat: List[float] = field(default_factory=lambda: [0.0] * TISSUE_COUNT)
    tolerated_by_tissue: List[float] = field(default_factory=lambda: [0.0] * TISSUE_COUNT)
    guiding_tissue: int = -1
    gf_low_pressure_this_dive: float = 0.0

    # Bubble model bookkeeping, reset between dives
    max_ambient_pressure: float = 0.0
    max_n2_crushing_pressure: List[float] = field(default_factory=lambda: [0.0] * TISSUE_COUNT)
    max_he_crushing_pressure: List[float] = field(default_factory=lambda: [0.0] * TISSUE_COUNT)

    @property
    def tissue_inertgas_saturation(self) -> List[float]:
        return [n2 + he for n2, he in zip(self.tissue_n2_sat, self.tissue_he_sat)]


def clear_vpmb_state(ds: DecoState):
    """Reset the bubble model bookkeeping (kept separate from tissue loading)."""
    ds.max_ambient_pressure = 0.0
    ds.max_n2_crushing_pressure = [0.0] * TISSUE_COUNT
    ds.max_he_crushing_pressure = [0.0] * TISSUE_COUNT


def clear_deco(ds: DecoState, surface_pressure: float):
    """
    Saturate all tissues with air at the given surface pressure (bar).
    """
    n2_sat = (surface_pressure - WV_PRESSURE) * N2_IN_AIR / 1000.0
    ds.tissue_n2_sat = [n2_sat] * TISSUE_COUNT
    ds.tissue_he_sat = [0.0] * TISSUE_COUNT
    ds.tolerated_by_tissue = [0.0] * TISSUE_COUNT
    ds.guiding_tissue = -1
    ds.gf_low_pressure_this_dive = surface_pressure + GF_LOW_POSITION_MIN
    clear_vpmb_state(ds)


def _pscr_o2(ds: DecoState, amb_pressure: float, gasmix: GasMix, sac: int) -> float:
    fo2 = get_o2(gasmix) / 1000.0
    po2 = fo2 * amb_pressure - (1.0 - fo2) * ds.o2_consumption / (sac * ds.pscr_ratio / 1000.0)
    return max(po2, 0.0)


def fill_pressures(
    ds: DecoState,
    amb_pressure: float,
    gasmix: GasMix,
    setpoint: float,
    divemode: DiveMode,
    sac: int = 0,
) -> tuple:
    """
    Inspired partial pressures (o2, n2, he) in bar.

    Open circuit breathes the mix as is. A CCR keeps the setpoint and
    fills the rest with diluent; a PSCR breathes a mix depleted by the
    diver's metabolism.
    """
    fo2 = get_o2(gasmix) / 1000.0
    fhe = get_he(gasmix) / 1000.0
    fn2 = 1.0 - fo2 - fhe

    if divemode == DiveMode.CCR and setpoint > 0:
        if amb_pressure <= setpoint:
            return amb_pressure, 0.0, 0.0
        o2 = setpoint
    elif divemode == DiveMode.PSCR and sac > 0:
        o2 = _pscr_o2(ds, amb_pressure, gasmix, sac)
    else:
        return fo2 * amb_pressure, fn2 * amb_pressure, fhe * amb_pressure

    # the remainder is diluent, split in the diluent's inert gas ratio
    inert = fn2 + fhe
    rest = amb_pressure - o2
    if inert <= 0:
        return o2, 0.0, 0.0
    return o2, rest * fn2 / inert, rest * fhe / inert


def _factor(period: int, halflife_minutes: float) -> float:
    return 1.0 - math.pow(2.0, -period / (halflife_minutes * 60.0))


def add_segment(
    ds: DecoState,
    pressure: float,
    gasmix: GasMix,
    period_in_seconds: int,
    setpoint_mbar: int,
    divemode: DiveMode,
    sac: int,
):
    """
    Load the tissues for a constant-pressure segment.

    Args:
        ds: State to update
        pressure: Ambient pressure (bar)
        gasmix: Breathing gas (diluent for rebreathers)
        period_in_seconds: Segment length
        setpoint_mbar: CCR setpoint, 0 if none
        divemode: Breathing apparatus
        sac: Gas consumption (ml/min), used for PSCR
    """
    _, pn2, phe = fill_pressures(
        ds, pressure - WV_PRESSURE, gasmix, setpoint_mbar / 1000.0, divemode, sac
    )

    for ci in range(TISSUE_COUNT):
        ds.tissue_n2_sat[ci] += (pn2 - ds.tissue_n2_sat[ci]) * _factor(period_in_seconds, BUEHLMANN_N2_HALFLIFE[ci])
        ds.tissue_he_sat[ci] += (phe - ds.tissue_he_sat[ci]) * _factor(period_in_seconds, BUEHLMANN_HE_HALFLIFE[ci])

    if pressure > ds.max_ambient_pressure:
        ds.max_ambient_pressure = pressure


def tissue_tolerance_calc(ds: DecoState, dive: Optional[Dive], surface_pressure: float) -> float:
    """
    Compute the tolerated ambient pressure of every tissue.

    Stores the per-tissue values in ds.tolerated_by_tissue, the index of
    the limiting tissue in ds.guiding_tissue and pushes
    ds.gf_low_pressure_this_dive down to the deepest ceiling seen.

    Returns:
        Tolerated ambient pressure (bar) of the guiding tissue
    """
    ret = -1.0
    for ci in range(TISSUE_COUNT):
        n2 = ds.tissue_n2_sat[ci]
        he = ds.tissue_he_sat[ci]
        inert = n2 + he
        if inert <= 0:
            ds.tolerated_by_tissue[ci] = 0.0
            continue

        a = (BUEHLMANN_N2_A[ci] * n2 + BUEHLMANN_HE_A[ci] * he) / inert
        b = (BUEHLMANN_N2_B[ci] * n2 + BUEHLMANN_HE_B[ci] * he) / inert

        gf = ds.gf_low
        tolerated = (inert - gf * a) / (gf / b + 1.0 - gf)
        ds.tolerated_by_tissue[ci] = tolerated

        if tolerated > ret:
            ret = tolerated
            ds.guiding_tissue = ci

    if ret > ds.gf_low_pressure_this_dive:
        ds.gf_low_pressure_this_dive = ret

    logger.debug(
        f"Tissue tolerance for dive {dive.id if dive else '-'}: "
        f"{ret:.3f} bar (tissue {ds.guiding_tissue}, surface {surface_pressure:.3f} bar)"
    )
    return ret

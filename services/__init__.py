"""
Services layer for the divelist core.

Collaborators the dive list consumes: dive merging, the dive computer
registry, and the decompression tissue model.
"""

from .dive_merge import likely_same_dive, merge_dives, try_to_merge
from .dive_computers import get_dc_nickname, set_dc_nickname
from .deco import (
    DecoState,
    clear_deco,
    clear_vpmb_state,
    add_segment,
    tissue_tolerance_calc,
)

__all__ = [
    "likely_same_dive",
    "merge_dives",
    "try_to_merge",
    "get_dc_nickname",
    "set_dc_nickname",
    "DecoState",
    "clear_deco",
    "clear_vpmb_state",
    "add_segment",
    "tissue_tolerance_calc",
]

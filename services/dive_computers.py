"""
Dive computer registry.

Remembers the dive computers seen in loaded or imported dives so they can
be shown with a nickname. The registry itself is a plain dict kept in the
AppContext: (model, deviceid) -> nickname.
"""

import logging
from typing import Dict, Optional, Tuple

from domain.models import Dive

logger = logging.getLogger(__name__)

Registry = Dict[Tuple[str, int], str]


def get_dc_nickname(registry: Registry, model: str, deviceid: int) -> Optional[str]:
    """Nickname of a known dive computer, or None."""
    return registry.get((model, deviceid))


def set_dc_nickname(registry: Registry, dive: Dive) -> bool:
    """
    Register the dive computer of a dive if it is not known yet.

    Only computers with a model name and a device id are registered.
    The model name is used as the initial nickname.

    Returns:
        True if a new dive computer was registered
    """
    dc = dive.dc
    if not dc.model or not dc.deviceid:
        return False
    if get_dc_nickname(registry, dc.model, dc.deviceid) is not None:
        return False

    registry[(dc.model, dc.deviceid)] = dc.model
    logger.debug(f"Registered dive computer {dc.model} ({dc.deviceid:#x})")
    return True

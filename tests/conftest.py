"""
Shared fixtures for the divelist tests.
"""

import pytest

from config.app_context import create_app_context, reset_app_context
from config.settings import Settings, reset_settings
from domain.models import Cylinder, Dive, DiveComputer, GasMix, Sample


def square_profile(depth_mm: int, duration: int, descent: int = 60):
    """Samples of a simple dive: descend, stay at depth, ascend."""
    return [
        Sample(time=0, depth=0),
        Sample(time=descent, depth=depth_mm),
        Sample(time=duration - descent, depth=depth_mm),
        Sample(time=duration, depth=0),
    ]


@pytest.fixture
def settings():
    """Default settings, independent of the environment."""
    return Settings()


@pytest.fixture
def ctx(settings):
    """Fresh dive log context with autogrouping off."""
    context = create_app_context(settings=settings, autogroup=False)
    yield context
    reset_app_context()
    reset_settings()


@pytest.fixture
def make_dive():
    """Factory for dives with an optional square profile."""

    def _make_dive(when=0, duration=3600, number=0, location="", depth_mm=0, o2=0, **kwargs):
        dc = kwargs.pop("dc", None)
        if dc is None:
            samples = square_profile(depth_mm, duration) if depth_mm else []
            dc = DiveComputer(samples=samples, duration=duration, maxdepth=depth_mm, meandepth=depth_mm)
        cylinders = kwargs.pop("cylinders", None)
        if cylinders is None:
            cylinders = [Cylinder(gasmix=GasMix(o2=o2), size_ml=12000, workingpressure_mbar=232000)]
        return Dive(
            when=when,
            duration=duration,
            number=number,
            location=location,
            dc=dc,
            cylinders=cylinders,
            **kwargs,
        )

    return _make_dive

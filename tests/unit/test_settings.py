"""
Unit tests for settings, logging setup and the application context.
"""

import logging

import pytest

from config.app_context import (
    AppContext,
    create_app_context,
    get_app_context,
    reset_app_context,
)
from config.logging_config import setup_logging
from config.settings import Settings, get_settings, reset_settings
from domain.exceptions import ValidationError
from services.dive_merge import try_to_merge


@pytest.fixture(autouse=True)
def clean_globals(monkeypatch):
    """Isolate tests from the environment and cached globals."""
    for var in (
        "DIVELOG_AUTOGROUP",
        "DIVELOG_DECO_SAC",
        "DIVELOG_GF_LOW",
        "DIVELOG_GF_HIGH",
        "DIVELOG_O2_CONSUMPTION",
        "DIVELOG_PSCR_RATIO",
        "DIVELOG_DEBUG",
        "DIVELOG_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    reset_app_context()
    yield
    reset_settings()
    reset_app_context()


# ==================== Settings ====================


def test_defaults():
    settings = Settings()

    assert settings.autogroup is False
    assert settings.deco_sac == 17000
    assert settings.gf_low == 30
    assert settings.gf_high == 75
    assert settings.log_level == "INFO"


def test_from_env(monkeypatch):
    monkeypatch.setenv("DIVELOG_AUTOGROUP", "true")
    monkeypatch.setenv("DIVELOG_GF_LOW", "40")
    monkeypatch.setenv("DIVELOG_GF_HIGH", "85")
    monkeypatch.setenv("DIVELOG_LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.autogroup is True
    assert settings.gf_low == 40
    assert settings.gf_high == 85
    assert settings.log_level == "DEBUG"


def test_from_env_invalid(monkeypatch):
    monkeypatch.setenv("DIVELOG_GF_LOW", "90")
    monkeypatch.setenv("DIVELOG_GF_HIGH", "60")

    with pytest.raises(ValidationError):
        Settings.from_env()


def test_get_settings_is_cached(monkeypatch):
    first = get_settings()
    assert get_settings() is first

    monkeypatch.setenv("DIVELOG_DECO_SAC", "20000")
    reset_settings()
    assert get_settings().deco_sac == 20000


def test_to_dict():
    data = Settings(deco_sac=15000).to_dict()

    assert data["deco_sac"] == 15000
    assert set(data) >= {"autogroup", "gf_low", "gf_high", "log_level"}


# ==================== Logging ====================


def test_setup_logging_replaces_own_handler():
    root = logging.getLogger()
    before = [h for h in root.handlers if getattr(h, "_divelist_handler", False)]

    setup_logging(Settings(log_level="WARNING"))
    setup_logging(Settings(debug_mode=True))

    ours = [h for h in root.handlers if getattr(h, "_divelist_handler", False)]
    assert len(ours) == 1
    assert root.level == logging.DEBUG

    for handler in ours:
        root.removeHandler(handler)
    for handler in before:
        root.addHandler(handler)


# ==================== AppContext ====================


def test_create_app_context_defaults():
    ctx = create_app_context(settings=Settings(autogroup=True))

    assert isinstance(ctx, AppContext)
    assert ctx.autogroup is True
    assert ctx.dive_table.nr == 0
    assert ctx.trip_table.nr == 0
    assert ctx.amount_selected == 0
    assert ctx.has_current_dive() is False
    assert ctx.try_to_merge is try_to_merge


def test_create_app_context_overrides():
    def never_merge(a, b, prefer_b):
        return None

    ctx = create_app_context(settings=Settings(autogroup=True), autogroup=False, try_to_merge=never_merge)

    assert ctx.autogroup is False
    assert ctx.try_to_merge is never_merge


def test_global_context_facade():
    ctx = get_app_context()
    assert get_app_context() is ctx

    reset_app_context()
    assert get_app_context() is not ctx

import sys
from datetime import datetime
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]

# Prefer this workspace over any installed copy of the package
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from dbcharts.config.settings import Settings, clear_settings_cache
from dbcharts.periods.time_range import FixedClock


@pytest.fixture(autouse=True)
def fresh_settings():
    """Ensure environment changes in one test never leak into another"""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings():
    """Default settings, independent of the developer's environment"""
    return Settings()


@pytest.fixture
def clock():
    """Clock pinned to 2024-03-15 10:30 UTC"""
    return FixedClock(datetime(2024, 3, 15, 10, 30, 0), "UTC")


@pytest.fixture
def hourly_records():
    """Two records on 2024-01-01 in different hours"""
    return [
        {"created_at": "2024-01-01 00:30:00", "v": 5},
        {"created_at": "2024-01-01 01:10:00", "v": 3},
    ]

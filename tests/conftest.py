from __future__ import annotations

import pytest
import structlog

from hall_availability.config import Settings
from hall_availability.models import LocationConfig
from tests.helpers import TEST_LOCATIONS, SheetsStub, SleepRecorder, make_settings


@pytest.fixture(autouse=True, scope="session")
def route_logs_through_stdlib():
    # Keeps structlog output off stdout so CLI tests can read it.
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def sheets() -> SheetsStub:
    return SheetsStub()


@pytest.fixture
def locations() -> tuple[LocationConfig, ...]:
    return TEST_LOCATIONS

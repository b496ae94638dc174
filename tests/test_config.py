import json

import pytest
from structlog.testing import capture_logs

from hall_availability.config import Settings
from hall_availability.errors import ConfigurationError
from hall_availability.locations import DEFAULT_LOCATIONS, load_locations, total_halls
from tests.helpers import make_settings


def test_defaults_match_retry_policy(monkeypatch):
    monkeypatch.delenv("HALL_SHEETS_API_KEY", raising=False)
    settings = Settings(_env_file=None)

    assert settings.timeout_seconds == 15.0
    assert settings.max_retries == 3
    assert settings.backoff_base_seconds == 2.0
    assert settings.backoff_max_seconds == 10.0
    assert settings.backoff_jitter_seconds == 1.0
    assert settings.api_key is None


def test_api_key_read_from_environment(monkeypatch):
    monkeypatch.setenv("HALL_SHEETS_API_KEY", "from-env")

    assert Settings(_env_file=None).api_key_value == "from-env"


def test_blank_api_key_counts_as_missing():
    assert make_settings(api_key="   ").api_key is None


def test_non_positive_deadline_disables_it():
    assert make_settings(deadline_seconds=0).deadline_seconds is None


def test_missing_api_key_is_logged_as_configuration_error():
    with capture_logs() as logs:
        assert make_settings(api_key=None).check_credentials() is False
        assert make_settings().check_credentials() is True

    assert logs[0]["event"] == "config.api_key_missing"
    assert logs[0]["log_level"] == "error"
    assert logs[1] == {"event": "config.api_key_present", "log_level": "info", "length": 8}


def test_sheet_url_encodes_range_as_one_segment():
    url = make_settings().sheet_url("abc", "'MAY 2025'!B4:B33")

    assert url == "https://sheets.test/v4/spreadsheets/abc/values/%27MAY%202025%27%21B4%3AB33"


def test_default_locations_are_upper_cased():
    assert [location.name for location in DEFAULT_LOCATIONS] == ["GMK BANQUETS TATHAWADE", "GMK BANQUETS RAVET"]
    assert total_halls(DEFAULT_LOCATIONS) == 7


def test_load_locations_from_file(tmp_path):
    path = tmp_path / "locations.json"
    path.write_text(
        json.dumps(
            [
                {
                    "name": "Madhura Banquet",
                    "sheet_id": "sheet-m",
                    "halls": [
                        {
                            "name": "Main",
                            "morning_range": "B2:B33",
                            "evening_range": "C2:C33",
                            "morning_header_offset": 1,
                        }
                    ],
                }
            ]
        ),
        encoding="utf-8",
    )

    (location,) = load_locations(path)

    assert location.name == "MADHURA BANQUET"
    assert location.halls[0].morning_header_offset == 1
    assert location.halls[0].evening_header_offset == 0


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        json.dumps([{"name": "A", "sheet_id": "s", "halls": [{"name": "X"}]}]),
        json.dumps(
            [
                {"name": "A", "sheet_id": "s", "halls": []},
                {"name": "a ", "sheet_id": "s", "halls": []},
            ]
        ),
        json.dumps(
            [
                {
                    "name": "A",
                    "sheet_id": "s",
                    "halls": [
                        {"name": "X", "morning_range": "B1:B31", "evening_range": "C1:C31"},
                        {"name": "X", "morning_range": "D1:D31", "evening_range": "E1:E31"},
                    ],
                }
            ]
        ),
        json.dumps(
            [
                {
                    "name": "A",
                    "sheet_id": "s",
                    "halls": [
                        {"name": "X", "morning_range": "B1:B31", "evening_range": "C1:C31", "morning_header_offset": -1}
                    ],
                }
            ]
        ),
    ],
)
def test_invalid_location_files_raise_configuration_error(tmp_path, payload):
    path = tmp_path / "locations.json"
    path.write_text(payload, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_locations(path)


def test_missing_location_file_raises_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError):
        load_locations(tmp_path / "absent.json")

"""
Tests for environment-driven configuration
"""

import logging
import os

import pytest

from heatflow.config import (
    DEFAULT_AIR_HEAT_FACTOR,
    UNIT_INFILTRATION_SCALE,
    get_engine_settings,
    get_env_bool,
    get_env_float,
    get_reducer_settings,
    load_environment,
    setup_logging,
)


class TestEnvHelpers:

    @pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("off", False), ("maybe", True)])
    def test_get_env_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("HEATFLOW_FLAG", raw)
        assert get_env_bool("HEATFLOW_FLAG", default=True) is expected

    def test_invalid_numbers_fall_back(self, monkeypatch):
        monkeypatch.setenv("HEATFLOW_NUMBER", "abc")
        assert get_env_float("HEATFLOW_NUMBER", 1.5) == 1.5


class TestSettings:

    def test_engine_defaults(self, monkeypatch):
        monkeypatch.delenv("HEATFLOW_AIR_HEAT_FACTOR", raising=False)
        monkeypatch.delenv("HEATFLOW_INFILTRATION_SCALE", raising=False)
        settings = get_engine_settings()

        assert settings.air_heat_factor == DEFAULT_AIR_HEAT_FACTOR
        assert settings.infiltration_scale == UNIT_INFILTRATION_SCALE
        assert settings.hours_per_day == 24

    def test_engine_overrides(self, monkeypatch):
        monkeypatch.setenv("HEATFLOW_INFILTRATION_SCALE", "0.024")
        assert get_engine_settings().infiltration_scale == 0.024

    def test_reducer_overrides(self, monkeypatch):
        monkeypatch.setenv("HEATFLOW_COOLING_BASE_TEMP", "26")
        assert get_reducer_settings().cooling_base_temp == 26

    def test_load_environment_prefers_local_file(self, tmp_path, monkeypatch):
        # registered with monkeypatch so the loaded values are removed afterwards
        monkeypatch.setenv("HEATFLOW_AIR_HEAT_FACTOR", "placeholder")
        (tmp_path / ".env").write_text("HEATFLOW_AIR_HEAT_FACTOR=1.0\n")
        (tmp_path / ".env.local").write_text("HEATFLOW_AIR_HEAT_FACTOR=1.1\n")

        load_environment(tmp_path)

        assert os.environ["HEATFLOW_AIR_HEAT_FACTOR"] == "1.1"
        assert get_engine_settings().air_heat_factor == 1.1


def test_setup_logging_level(monkeypatch):
    monkeypatch.setenv("HEATFLOW_DEBUG", "true")
    monkeypatch.delenv("HEATFLOW_LOG_LEVEL", raising=False)

    app_logger = setup_logging()
    assert app_logger.level == logging.DEBUG

    assert setup_logging("warning").level == logging.WARNING

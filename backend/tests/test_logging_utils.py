"""
Tests for structured logging helpers
"""

import logging

import pytest

from heatflow.services.error_types import StateSchemaError, SweepConfigurationError, log_error_with_context
from heatflow.utils.logging_utils import log_operation, log_with_context, timed_operation

logger = logging.getLogger("heatflow.tests")


class TestLogOperation:

    def test_completion_carries_context(self, caplog):
        caplog.set_level(logging.DEBUG, logger="heatflow.tests")
        with log_operation("flat_import", {'file': 'a.csv'}, logger):
            pass

        statuses = [record.status for record in caplog.records]
        assert statuses == ['started', 'completed']
        assert caplog.records[-1].context == {'file': 'a.csv'}
        assert caplog.records[-1].duration_seconds >= 0

    def test_failure_is_logged_and_reraised(self, caplog):
        caplog.set_level(logging.DEBUG, logger="heatflow.tests")
        with pytest.raises(ValueError):
            with log_operation("flat_import", {}, logger):
                raise ValueError("boom")

        failed = caplog.records[-1]
        assert failed.levelno == logging.WARNING
        assert failed.error_type == "ValueError"


def test_log_with_context(caplog):
    caplog.set_level(logging.INFO, logger="heatflow.tests")
    log_with_context("info", "hello", {'skipped_elements': 2}, logger)

    assert caplog.records[0].context == {'skipped_elements': 2}


def test_timed_operation_uses_module_logger(caplog):
    caplog.set_level(logging.DEBUG, logger=__name__)

    @timed_operation("double")
    def double(x):
        return x * 2

    assert double(4) == 8
    assert any("[TIMING] double" in record.getMessage() for record in caplog.records)


def test_parse_errors_are_warnings(caplog):
    caplog.set_level(logging.WARNING, logger="heatflow.services.error_types")
    log_error_with_context(StateSchemaError("bad version", {'schema_version': 9}), {'file': 's.json'})
    log_error_with_context(SweepConfigurationError("bad step"), {})

    assert [r.levelno for r in caplog.records] == [logging.WARNING, logging.ERROR]
    assert str(StateSchemaError("bad version", {'schema_version': 9})) == "bad version | Details: {'schema_version': 9}"

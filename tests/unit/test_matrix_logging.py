"""Unit tests for matrix_logging module."""

import logging

import pytest

from giatmatrix.matrix_logging import (
    NOISY_LOGGERS,
    PACKAGE_LOGGERS,
    configure_matrix_logging,
    get_logging_status,
)

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def restore_levels(monkeypatch):
    monkeypatch.delenv("GIATMATRIX_DEBUG", raising=False)
    monkeypatch.delenv("GIATMATRIX_LOG_LEVEL", raising=False)
    names = ["", *PACKAGE_LOGGERS, *NOISY_LOGGERS]
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


class TestConfigureMatrixLogging:
    """Tests for configure_matrix_logging function."""

    def test_production_levels(self):
        configure_matrix_logging()
        assert logging.getLogger("giatmatrix").level == logging.INFO
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_debug_mode(self):
        configure_matrix_logging(debug_mode=True)
        assert logging.getLogger("giatmatrix").level == logging.DEBUG
        assert logging.getLogger().level == logging.DEBUG

    def test_env_debug(self, monkeypatch):
        monkeypatch.setenv("GIATMATRIX_DEBUG", "true")
        configure_matrix_logging()
        assert logging.getLogger("giatmatrix").level == logging.DEBUG

    def test_force_debug_overrides_env(self, monkeypatch):
        monkeypatch.setenv("GIATMATRIX_DEBUG", "1")
        configure_matrix_logging(force_debug=False)
        assert logging.getLogger("giatmatrix").level == logging.INFO

    def test_env_root_level(self, monkeypatch):
        monkeypatch.setenv("GIATMATRIX_LOG_LEVEL", "warning")
        configure_matrix_logging()
        assert logging.getLogger().level == logging.WARNING

    def test_status(self):
        configure_matrix_logging()
        status = get_logging_status()
        assert status["giatmatrix"] == "INFO"
        assert status["gspread"] == "WARNING"

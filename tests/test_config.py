"""
Unit tests for configuration and logging setup.
"""

import logging
import warnings
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from wellcontrol.config import Config, DEFAULT_CONFIG, MIN_ROOT_RTOL
from wellcontrol.logging_config import reset_logging, setup_logging


class TestConfig:
    """Test configuration defaults and validation."""

    def test_defaults(self):
        cfg = DEFAULT_CONFIG
        assert cfg.GRAVITY == 9.80665
        assert cfg.BOUNDARY_TOL == 1e-6
        assert cfg.DIAMETER_TOL == 1e-9
        assert cfg.ROOT_MAX_ITER == 96
        assert cfg.FALLBACK_DENSITY == 1260.0
        assert cfg.SWAB_SAFETY_FACTOR == 1.15

    def test_invalid_gravity_raises(self):
        with pytest.raises(ValueError):
            Config(GRAVITY=0.0)

    def test_iteration_cap_bounded(self):
        with pytest.raises(ValueError):
            Config(ROOT_MAX_ITER=200)

    def test_negative_tolerance_raises(self):
        with pytest.raises(ValueError):
            Config(BOUNDARY_TOL=-1.0)

    def test_rescale_cap_at_least_one(self):
        with pytest.raises(ValueError):
            Config(RESCALE_CAP=0.5)

    def test_root_rtol_floor(self):
        """Relative tolerance below four machine epsilons is rejected."""
        with pytest.raises(ValueError):
            Config(ROOT_RTOL=1e-17)
        assert Config(ROOT_RTOL=MIN_ROOT_RTOL).ROOT_RTOL == MIN_ROOT_RTOL


class TestLogging:
    """Test package logger setup."""

    def teardown_method(self):
        reset_logging()

    def test_setup_is_idempotent(self):
        logger = setup_logging(logging.DEBUG)
        setup_logging(logging.DEBUG)
        assert logger.name == "wellcontrol"
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
        assert not logger.propagate

    def test_caller_handlers_survive(self):
        logger = logging.getLogger("wellcontrol")
        own = logging.NullHandler()
        logger.addHandler(own)
        try:
            setup_logging(logging.INFO)
            setup_logging(logging.INFO)
            assert own in logger.handlers
            assert len(logger.handlers) == 2
        finally:
            logger.removeHandler(own)

    def test_log_file(self, tmp_path):
        path = tmp_path / "run.log"
        logger = setup_logging(logging.INFO, log_file=str(path), capture_warnings=False)
        logging.getLogger("wellcontrol.capacity").info("hello")
        for h in logger.handlers:
            h.flush()
        assert "wellcontrol.capacity - INFO - hello" in path.read_text(encoding="utf-8")

    def test_warnings_routed_to_log_file(self, tmp_path):
        path = tmp_path / "warn.log"
        logger = setup_logging(logging.INFO, log_file=str(path))
        with warnings.catch_warnings():
            warnings.simplefilter("always")
            warnings.warn("bisection stopped", RuntimeWarning)
        for h in logger.handlers:
            h.flush()
        assert "bisection stopped" in path.read_text(encoding="utf-8")

    def test_reset_removes_handlers(self):
        logger = setup_logging(logging.INFO)
        reset_logging()
        assert logger.handlers == []
        assert logging.getLogger("py.warnings").handlers == []
        assert logger.propagate

"""
Tests for stop conditions, predicate combinators and library logging.

Run with: pytest tests/test_stop_conditions.py -v
"""

import io
import logging

import pytest

from local_search import StopConditionCountLimit, StopConditionTimeLimit, never_stop
from utils.functors import AndFunctor, NotFunctor, OrFunctor, always_false, always_true, do_nothing
from utils.log import configure_logging, get_logger, set_log_level


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class TestStopConditionCountLimit:
    """Tests for the call-count stop condition."""

    def test_fires_after_limit(self):
        stop = StopConditionCountLimit(3)
        assert [stop() for _ in range(5)] == [False, False, False, True, True]

    def test_zero_limit_fires_immediately(self):
        assert StopConditionCountLimit(0)('solution', 'move') is True

    def test_reset(self):
        stop = StopConditionCountLimit(1)
        stop()
        assert stop()
        stop.reset()
        assert not stop()

    def test_negative_limit_rejected(self):
        with pytest.raises(ValueError):
            StopConditionCountLimit(-1)


class TestStopConditionTimeLimit:
    """Tests for the wall-clock stop condition."""

    def test_fires_after_duration(self):
        clock = FakeClock(100.0)
        stop = StopConditionTimeLimit(2.0, clock=clock)

        assert not stop()
        clock.now = 101.5
        assert not stop('solution', 'move')
        assert stop.elapsed() == pytest.approx(1.5)
        clock.now = 102.0
        assert stop()

    def test_reset(self):
        clock = FakeClock()
        stop = StopConditionTimeLimit(1.0, clock=clock)
        clock.now = 5.0
        assert stop()
        stop.reset()
        assert not stop()

    def test_duration_must_be_positive(self):
        with pytest.raises(ValueError):
            StopConditionTimeLimit(0)


class TestFunctors:
    """Tests for predicate helpers."""

    def test_constants_ignore_arguments(self):
        assert always_true(1, 2, key=3) is True
        assert always_false(1) is False
        assert never_stop('solution', 'move') is False
        assert do_nothing('anything') is None

    def test_not(self):
        assert NotFunctor(always_false)() is True
        assert NotFunctor(always_true)('x') is False

    def test_and_short_circuits(self):
        limit = StopConditionCountLimit(10)
        combined = AndFunctor(always_false, limit)

        assert combined() is False
        assert limit.count == 0
        assert AndFunctor(always_true, always_true)() is True

    def test_or_short_circuits(self):
        limit = StopConditionCountLimit(10)
        combined = OrFunctor(always_true, limit)

        assert combined() is True
        assert limit.count == 0
        assert OrFunctor(always_false, always_false)() is False


class TestLogging:
    """Tests for library logger configuration."""

    def test_logger_namespace(self):
        logger = get_logger('engine_test')
        assert logger.name == 'lsearch.engine_test'
        assert logger.propagate is False
        assert get_logger('engine_test') is logger

    def test_prefixed_name_kept(self):
        assert get_logger('lsearch.engine_test').name == 'lsearch.engine_test'

    def test_set_log_level(self):
        logger = get_logger('level_test')
        try:
            set_log_level('DEBUG')
            assert logger.level == logging.DEBUG
        finally:
            set_log_level(logging.WARNING)
        assert logger.level == logging.WARNING

    def test_configure_logging_redirects_output(self):
        logger = get_logger('configure_test')
        stream = io.StringIO()
        try:
            configure_logging('INFO', '%(name)s %(message)s', stream)
            logger.info('round done')
            logger.debug('hidden')
        finally:
            configure_logging(logging.WARNING)

        assert stream.getvalue() == 'lsearch.configure_test round done\n'
        assert logger.level == logging.WARNING

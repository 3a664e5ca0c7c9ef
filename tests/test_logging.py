"""
Tests for the logging package: configuration, run context and formatters.
"""

# Standard library imports
import json
import logging
import sys

# Third-party imports
import numpy as np
import pytest

# Local imports
from riskdesk.logging import (
    ConsoleFormatter,
    ErrorCode,
    LogContext,
    StructuredFormatter,
    configure_logging,
    current_context,
    get_logger,
    log_exception,
    log_with_context,
    parse_level,
    shutdown_logging,
)


def _record(message="hello", level=logging.INFO, **fields):
    record = logging.LogRecord('riskdesk.simulate.montecarlo', level, '', 0, message, (), None)
    if fields:
        record.fields = fields
    return record


@pytest.fixture
def detach_handlers():
    yield
    shutdown_logging()


class TestConfigureLogging:
    """Tests for configure_logging() and shutdown_logging()."""

    @pytest.mark.unit
    def test_console_only(self, detach_handlers):
        root = configure_logging(level="DEBUG", console=True, file=False)
        assert root.name == 'riskdesk'
        assert root.level == logging.DEBUG
        assert [h.get_name() for h in root.handlers].count('riskdesk.console') == 1

    @pytest.mark.unit
    def test_reconfigure_replaces_handlers(self, detach_handlers, tmp_path):
        configure_logging(console=True, file=True, log_dir=tmp_path)
        root = configure_logging(console=True, file=False)
        names = [h.get_name() for h in root.handlers]
        assert names.count('riskdesk.console') == 1
        assert 'riskdesk.file' not in names

    @pytest.mark.unit
    def test_shutdown_leaves_foreign_handlers(self):
        root = logging.getLogger('riskdesk')
        foreign = logging.NullHandler()
        root.addHandler(foreign)
        try:
            configure_logging(console=True, file=False)
            shutdown_logging()
            assert root.handlers.count(foreign) == 1
            assert all(h.get_name() != 'riskdesk.console' for h in root.handlers)
        finally:
            root.removeHandler(foreign)

    @pytest.mark.unit
    def test_file_handler_writes_json(self, tmp_path):
        configure_logging(level="INFO", log_dir=tmp_path, console=False, file=True)
        try:
            with LogContext(phase="gbm", seed=3):
                get_logger('simulate').info("paths simulated")
        finally:
            shutdown_logging()

        log_files = list(tmp_path.glob('riskdesk_*.log'))
        assert len(log_files) == 1
        payload = json.loads(log_files[0].read_text().strip().splitlines()[-1])
        assert payload['message'] == "paths simulated"
        assert payload['logger'] == 'riskdesk.simulate'
        assert payload['context'] == {'phase': 'gbm', 'seed': 3}

    @pytest.mark.unit
    def test_run_id_is_bound(self, detach_handlers):
        configure_logging(console=False, file=False, run_id="run-7")
        assert current_context()['run_id'] == "run-7"

    @pytest.mark.unit
    def test_invalid_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(level="LOUD", console=False, file=False)

    @pytest.mark.unit
    def test_parse_level(self):
        assert parse_level("warning") == logging.WARNING
        assert parse_level(logging.DEBUG) == logging.DEBUG

    @pytest.mark.unit
    def test_get_logger_namespace(self):
        assert get_logger('journal').name == 'riskdesk.journal'
        assert get_logger('riskdesk.metrics').name == 'riskdesk.metrics'


class TestLogContext:
    """Tests for LogContext."""

    @pytest.mark.unit
    def test_values_scoped_to_block(self):
        with LogContext(phase="montecarlo", seed=42):
            assert current_context() == {'phase': "montecarlo", 'seed': 42}
        assert current_context() == {}

    @pytest.mark.unit
    def test_nested_restores_outer(self):
        with LogContext(phase="metrics", strategy="breakout"):
            with LogContext(phase="bootstrap", resampling="iid"):
                context = current_context()
                assert context['phase'] == "bootstrap"
                assert context['strategy'] == "breakout"
                assert context['resampling'] == "iid"
            assert current_context() == {'phase': "metrics", 'strategy': "breakout"}

    @pytest.mark.unit
    def test_restored_after_exception(self):
        with pytest.raises(RuntimeError):
            with LogContext(phase="gbm"):
                raise RuntimeError("boom")
        assert current_context() == {}


class TestFormatters:
    """Tests for the console and JSON formatters."""

    @pytest.mark.unit
    def test_console_includes_context_and_code(self):
        formatter = ConsoleFormatter()
        with LogContext(phase="gbm", seed=7):
            text = formatter.format(_record(error_code='SIM_001', error_category='simulation'))
        assert " montecarlo hello " in text
        assert "[phase=gbm seed=7]" in text
        assert text.endswith("SIM_001")
        assert "\033[" not in text

    @pytest.mark.unit
    def test_console_colors_warnings(self):
        text = ConsoleFormatter(use_colors=True).format(_record(level=logging.WARNING))
        assert text.startswith(ConsoleFormatter.WARNING_COLOR)

    @pytest.mark.unit
    def test_structured_is_json(self):
        formatter = StructuredFormatter()
        with LogContext(phase="metrics"):
            payload = json.loads(formatter.format(_record(
                n_trades=np.int64(12), sharpe=float('nan'),
                error_code='MET_001', error_category='metrics',
            )))
        assert payload['level'] == 'INFO'
        assert payload['context'] == {'phase': 'metrics'}
        assert payload['fields'] == {'n_trades': 12, 'sharpe': 0.0}
        assert payload['error'] == {'code': 'MET_001', 'category': 'metrics'}

    @pytest.mark.unit
    def test_structured_exception(self):
        try:
            raise KeyError("missing")
        except KeyError:
            record = logging.LogRecord('riskdesk', logging.ERROR, '', 0, "failed", (), None)
            record.exc_info = sys.exc_info()
        payload = json.loads(StructuredFormatter().format(record))
        assert payload['exception']['type'] == 'KeyError'
        assert 'Traceback' in payload['exception']['traceback']


class TestLogHelpers:
    """Tests for log_with_context() and log_exception()."""

    @pytest.mark.unit
    def test_log_with_context_attaches_error_code(self, caplog):
        logger = logging.getLogger('riskdesk.tests')
        with caplog.at_level(logging.WARNING, logger='riskdesk'):
            log_with_context(logger, logging.WARNING, "too few trades",
                             error_code=ErrorCode.TRADES_INSUFFICIENT, n=1)
        record = caplog.records[-1]
        assert record.fields == {'n': 1, 'error_code': 'TRD_002', 'error_category': 'trades'}
        assert record.funcName == 'test_log_with_context_attaches_error_code'

    @pytest.mark.unit
    def test_log_with_context_respects_level(self, caplog):
        logger = logging.getLogger('riskdesk.tests')
        with caplog.at_level(logging.ERROR, logger='riskdesk'):
            log_with_context(logger, "INFO", "quiet")
        assert not caplog.records

    @pytest.mark.unit
    def test_log_exception(self, caplog):
        logger = logging.getLogger('riskdesk.tests')
        try:
            raise ConnectionError("feed down")
        except ConnectionError as e:
            with caplog.at_level(logging.WARNING, logger='riskdesk'):
                log_exception(logger, "benchmark failed", exc=e,
                              error_code=ErrorCode.BENCHMARK_UNAVAILABLE, level=logging.WARNING)
        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.fields['exception_type'] == 'ConnectionError'
        assert record.fields['error_code'] == 'MET_001'
        assert record.exc_info[0] is ConnectionError

    @pytest.mark.unit
    def test_log_exception_uses_active_exception(self, caplog):
        logger = logging.getLogger('riskdesk.tests')
        with caplog.at_level(logging.ERROR, logger='riskdesk'):
            try:
                raise ValueError("bad row")
            except ValueError:
                log_exception(logger, "row skipped")
        assert caplog.records[-1].fields['exception_type'] == 'ValueError'


class TestErrorCode:
    """Tests for ErrorCode."""

    @pytest.mark.unit
    def test_str_and_category(self):
        assert str(ErrorCode.SIMULATION_INVALID_PARAMS).startswith("SIM_001: ")
        assert ErrorCode.SIMULATION_INVALID_PARAMS.category == 'simulation'
        assert ErrorCode.SETTINGS_INVALID.category == 'config'

    @pytest.mark.unit
    def test_every_code_is_described(self):
        for code in ErrorCode:
            assert code.description
            assert code.category

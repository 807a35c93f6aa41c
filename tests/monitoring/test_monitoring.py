import logging

import pytest
from prometheus_client import REGISTRY

from testnet_cycler.core.error_handling import (
    CycleAbortedError, ExecutionError, InsufficientBalanceError, SubmissionError, record_error
)
from testnet_cycler.monitoring.logging_config import configure_logging

def error_count(component: str, error_type: str) -> float:
    value = REGISTRY.get_sample_value(
        'cycler_errors_total', {'component': component, 'error_type': error_type}
    )
    return value or 0.0

def test_record_error_counts_and_logs(caplog):
    before = error_count('test', 'SubmissionError')

    with caplog.at_level(logging.ERROR):
        record_error('test', SubmissionError("nonce too low"))

    assert error_count('test', 'SubmissionError') == before + 1
    assert "SubmissionError: nonce too low" in caplog.text

def test_error_messages():
    assert str(ExecutionError("wrap", 3, SubmissionError("underpriced"))) == "wrap failed after 3 attempt(s): underpriced"
    assert "Needed: 10 wei, available: 1 wei" in str(InsufficientBalanceError("wrap", 10, 1))
    assert str(CycleAbortedError(2, RuntimeError("boom"))) == "Cycle 2 failed: boom"

@pytest.mark.parametrize("level,expected", [("debug", logging.DEBUG), ("WARNING", logging.WARNING), ("nonsense", logging.INFO)])
def test_configure_logging_levels(level, expected):
    root = logging.getLogger()
    handlers = root.handlers[:]
    previous = root.level
    try:
        configure_logging(level)
        assert root.level == expected
        assert logging.getLogger("web3").level >= logging.WARNING
    finally:
        root.handlers[:] = handlers
        root.setLevel(previous)

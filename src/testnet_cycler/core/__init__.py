"""Core types, errors and cycle scheduling"""

from .error_handling import (
    CyclerError,
    ConfigurationError,
    InsufficientBalanceError,
    GasEstimationError,
    TransientTransactionError,
    SubmissionError,
    ConfirmationError,
    ExecutionError,
    ClaimStatusUnavailable,
    CycleAbortedError,
    record_error
)
from .scheduler import CycleScheduler

__all__ = [
    'CyclerError',
    'ConfigurationError',
    'InsufficientBalanceError',
    'GasEstimationError',
    'TransientTransactionError',
    'SubmissionError',
    'ConfirmationError',
    'ExecutionError',
    'ClaimStatusUnavailable',
    'CycleAbortedError',
    'record_error',
    'CycleScheduler'
]

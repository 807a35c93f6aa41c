"""
Error taxonomy for transaction cycles and a small recording helper
"""

import logging
from typing import Optional

from testnet_cycler.monitoring.metrics import ERRORS_TOTAL

logger = logging.getLogger(__name__)

class CyclerError(Exception):
    """Base class for all errors raised by the cycler"""

class ConfigurationError(CyclerError):
    """Missing or invalid configuration (private key, preset, RPC)"""

class InsufficientBalanceError(CyclerError):
    """Precondition failure: the account cannot cover the operation. Never retried."""

    def __init__(self, operation: str, required: int, available: int, asset: str = "native"):
        self.operation = operation
        self.required = required
        self.available = available
        self.asset = asset
        super().__init__(
            f"Insufficient {asset} balance for {operation}. "
            f"Needed: {required} wei, available: {available} wei"
        )

class GasEstimationError(CyclerError):
    """Live gas estimation failed; recovered by the estimator's fallback"""

class TransientTransactionError(CyclerError):
    """Network or chain error worth another attempt"""

class SubmissionError(TransientTransactionError):
    """Signing or broadcasting the transaction failed (nonce, underpriced, RPC)"""

class ConfirmationError(TransientTransactionError):
    """Transaction was not confirmed: receipt timeout or reverted status"""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        self.tx_hash = tx_hash
        super().__init__(message)

class ExecutionError(CyclerError):
    """Terminal failure after the retry budget is spent"""

    def __init__(self, operation: str, attempts: int, last_error: Optional[BaseException] = None):
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        detail = str(last_error) if last_error is not None else "unknown error"
        super().__init__(f"{operation} failed after {attempts} attempt(s): {detail}")

class ClaimStatusUnavailable(CyclerError):
    """Withdrawal status service could not be queried; treated as nothing claimable"""

class CycleAbortedError(CyclerError):
    """A cycle failed and the run was stopped"""

    def __init__(self, cycle_index: int, cause: BaseException):
        self.cycle_index = cycle_index
        self.cause = cause
        super().__init__(f"Cycle {cycle_index} failed: {cause}")

def record_error(component: str, error: BaseException, level: int = logging.ERROR) -> None:
    """Log a human readable diagnostic and count the error"""
    ERRORS_TOTAL.labels(
        component=component,
        error_type=error.__class__.__name__
    ).inc()
    logger.log(level, f"{component}: {error.__class__.__name__}: {error}")

"""
Execution Package - Provides calldata encoding, transaction building and execution
"""

from testnet_cycler.execution.execution_engine import TransactionExecutor
from testnet_cycler.execution.transaction_builder import TransactionBuilder

__all__ = [
    'TransactionExecutor',
    'TransactionBuilder'
]

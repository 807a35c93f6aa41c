import logging
from typing import Optional, List, Callable, Awaitable
from web3 import AsyncWeb3, Web3
from web3.exceptions import TimeExhausted
import asyncio
from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt, wait_fixed, retry_if_exception_type

from testnet_cycler.core.error_handling import (
    ConfirmationError, ExecutionError, InsufficientBalanceError,
    SubmissionError, TransientTransactionError, record_error
)
from testnet_cycler.core.types import (
    AttemptOutcome, BalanceSource, Operation, Receipt, TransactionAttempt
)
from testnet_cycler.execution.calldata import encode_balance_of
from testnet_cycler.execution.transaction_builder import TransactionBuilder
from testnet_cycler.gas.estimator import GasEstimator
from testnet_cycler.monitoring.metrics import (
    TRANSACTIONS_CONFIRMED, TRANSACTIONS_FAILED, TRANSACTIONS_SUBMITTED, TRANSACTION_RETRIES
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 5.0  # seconds, fixed between attempts

class TransactionExecutor:
    """Builds, submits and confirms operations with a bounded retry policy"""

    def __init__(
        self,
        web3: AsyncWeb3,
        builder: TransactionBuilder,
        gas_estimator: GasEstimator,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        receipt_timeout: float = 180.0,
        check_balance: bool = True,
        explorer_link: Optional[Callable[[str], str]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.web3 = web3
        self.builder = builder
        self.gas_estimator = gas_estimator
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.receipt_timeout = receipt_timeout
        self.check_balance = check_balance
        self.explorer_link = explorer_link or (lambda tx_hash: tx_hash)
        self._sleep = sleep

        # Attempts of the most recent execute() call
        self.attempts: List[TransactionAttempt] = []

    @property
    def address(self) -> str:
        return self.builder.address

    async def execute(self, operation: Operation, max_retries: Optional[int] = None) -> Receipt:
        """Submit an operation and wait for its confirmation

        Args:
            operation: Operation to execute
            max_retries: Total attempts allowed, defaults to the executor's setting

        Returns:
            Receipt of the confirmed transaction

        Raises:
            InsufficientBalanceError: Balance precondition failed, nothing was submitted
            ExecutionError: Every attempt failed, or the balance could not be read
        """
        retries = max_retries if max_retries is not None else self.max_retries
        if retries < 1:
            raise ValueError("max_retries must be at least 1")

        self.attempts = []

        if self.check_balance:
            await self.ensure_balance(operation)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(retries),
            wait=wait_fixed(self.retry_delay),
            retry=retry_if_exception_type(TransientTransactionError),
            before_sleep=self._before_retry(operation, retries),
            sleep=self._sleep,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    receipt = await self._attempt(operation, attempt.retry_state.attempt_number)
        except TransientTransactionError as e:
            TRANSACTIONS_FAILED.labels(operation=operation.name).inc()
            error = ExecutionError(operation.name, len(self.attempts), e)
            record_error('executor', error)
            raise error from e

        receipt.attempts = len(self.attempts)
        return receipt

    async def ensure_balance(self, operation: Operation) -> None:
        """Raise InsufficientBalanceError when the account cannot cover the operation"""
        if operation.balance_source == BalanceSource.NONE or operation.required_balance <= 0:
            return

        try:
            available = await self.get_balance(operation)
        except Exception as e:
            error = ExecutionError(operation.name, 0, e)
            record_error('executor', error)
            raise error from e

        if available < operation.required_balance:
            error = InsufficientBalanceError(
                operation.name,
                required=operation.required_balance,
                available=available,
                asset=operation.balance_source.value
            )
            record_error('executor', error)
            raise error

    async def get_balance(self, operation: Operation) -> int:
        """Balance of the asset an operation spends"""
        if operation.balance_source == BalanceSource.TOKEN:
            result = await self.web3.eth.call({
                'to': operation.to,
                'data': encode_balance_of(self.address)
            })
            return int.from_bytes(bytes(result), 'big') if result else 0
        return int(await self.web3.eth.get_balance(self.address))

    async def _attempt(self, operation: Operation, number: int) -> Receipt:
        attempt = TransactionAttempt(number=number, operation=operation.name)
        self.attempts.append(attempt)

        try:
            gas = await self.gas_estimator.estimate(operation)
            nonce = await self._next_nonce()
            tx = self.builder.build(operation, gas, nonce)
            raw = self.builder.sign(tx)

            logger.info(
                f"Attempt {number}: sending {operation.name} "
                f"(value={Web3.from_wei(operation.value, 'ether')}, gas limit={gas.gas_limit})"
            )
            attempt.tx_hash = await self._submit(raw, operation)
            logger.info(f"Transaction sent: {self.explorer_link(attempt.tx_hash)}")

            receipt = await self._confirm(attempt.tx_hash, operation)
        except ConfirmationError as e:
            attempt.outcome = (
                AttemptOutcome.ABANDONED if isinstance(e.__cause__, TimeExhausted)
                else AttemptOutcome.FAILED
            )
            attempt.error = str(e)
            raise
        except TransientTransactionError as e:
            attempt.outcome = AttemptOutcome.FAILED
            attempt.error = str(e)
            raise

        attempt.outcome = AttemptOutcome.CONFIRMED
        TRANSACTIONS_CONFIRMED.labels(operation=operation.name).inc()
        logger.info(
            f"{operation.name} confirmed in block {receipt.block_number} | "
            f"gas used: {receipt.gas_used} | "
            f"effective gas price: {Web3.from_wei(receipt.effective_gas_price, 'gwei')} gwei"
        )
        return receipt

    async def _next_nonce(self) -> int:
        try:
            return int(await self.web3.eth.get_transaction_count(self.address, 'pending'))
        except Exception as e:
            raise SubmissionError(f"Failed to fetch nonce: {str(e)}") from e

    async def _submit(self, raw: bytes, operation: Operation) -> str:
        try:
            tx_hash = await self.web3.eth.send_raw_transaction(raw)
        except Exception as e:
            raise SubmissionError(f"Failed to submit {operation.name}: {str(e)}") from e
        TRANSACTIONS_SUBMITTED.labels(operation=operation.name).inc()
        return tx_hash if isinstance(tx_hash, str) else Web3.to_hex(tx_hash)

    async def _confirm(self, tx_hash: str, operation: Operation) -> Receipt:
        try:
            receipt = await self.web3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.receipt_timeout
            )
        except TimeExhausted as e:
            raise ConfirmationError(
                f"{operation.name} not confirmed within {self.receipt_timeout}s", tx_hash
            ) from e
        except Exception as e:
            raise ConfirmationError(
                f"Error waiting for {operation.name} receipt: {str(e)}", tx_hash
            ) from e

        if receipt.get('status', 0) != 1:
            raise ConfirmationError(f"{operation.name} reverted in transaction {tx_hash}", tx_hash)

        block_hash = receipt.get('blockHash')
        if block_hash is not None and not isinstance(block_hash, str):
            block_hash = Web3.to_hex(block_hash)

        return Receipt(
            tx_hash=tx_hash,
            block_number=int(receipt.get('blockNumber', 0)),
            block_hash=block_hash,
            gas_used=int(receipt.get('gasUsed', 0)),
            effective_gas_price=int(receipt.get('effectiveGasPrice', 0) or 0),
            operation=operation.name,
        )

    def _before_retry(self, operation: Operation, retries: int) -> Callable[[RetryCallState], None]:
        def log_retry(retry_state: RetryCallState) -> None:
            TRANSACTION_RETRIES.labels(operation=operation.name).inc()
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            logger.warning(
                f"Attempt {retry_state.attempt_number}/{retries} for {operation.name} failed: "
                f"{exc}. Retrying in {self.retry_delay:.0f}s..."
            )
        return log_retry


"""Wrap / unwrap cycle: native currency into the wrapped token and back"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

import structlog
from web3 import Web3

from testnet_cycler.core.types import (
    BalanceSource, Cycle, Operation, OperationKind, StepResult, StepStatus
)
from testnet_cycler.execution.calldata import encode_unwrap, encode_wrap
from testnet_cycler.execution.execution_engine import TransactionExecutor
from testnet_cycler.utils.random_params import RandomParameterGenerator

logger = structlog.get_logger(__name__)

class WrapUnwrapService:
    """Runs wrap then unwrap of the same amount against a WETH9-style contract"""

    def __init__(
        self,
        executor: TransactionExecutor,
        contract_address: str,
        step_delay_range: Optional[Tuple[float, float]] = None,
        random_params: Optional[RandomParameterGenerator] = None,
        currency: str = "ETH",
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.executor = executor
        self.contract_address = Web3.to_checksum_address(contract_address)
        self.step_delay_range = step_delay_range
        self.random_params = random_params or RandomParameterGenerator()
        self.currency = currency
        self._sleep = sleep

    def wrap_operation(self, amount: int) -> Operation:
        return Operation(
            name="wrap",
            kind=OperationKind.WRAP,
            to=self.contract_address,
            data=encode_wrap(),
            value=amount,
            required_balance=amount,
            balance_source=BalanceSource.NATIVE
        )

    def unwrap_operation(self, amount: int) -> Operation:
        return Operation(
            name="unwrap",
            kind=OperationKind.UNWRAP,
            to=self.contract_address,
            data=encode_unwrap(amount),
            value=0,
            required_balance=amount,
            balance_source=BalanceSource.TOKEN
        )

    async def __call__(self, cycle: Cycle) -> None:
        log = logger.bind(cycle=cycle.index)

        log.info(f"Wrapping {Web3.from_wei(cycle.amount, 'ether')} {self.currency}")
        receipt = await self.executor.execute(self.wrap_operation(cycle.amount))
        cycle.steps.append(StepResult("wrap", StepStatus.CONFIRMED, receipt=receipt))

        if self.step_delay_range:
            delay = self.random_params.delay_seconds(self.step_delay_range)
            log.info(f"Waiting {delay:.0f} seconds before unwrapping")
            await self._sleep(delay)

        log.info(f"Unwrapping {Web3.from_wei(cycle.amount, 'ether')} W{self.currency}")
        receipt = await self.executor.execute(self.unwrap_operation(cycle.amount))
        cycle.steps.append(StepResult("unwrap", StepStatus.CONFIRMED, receipt=receipt))

        await self.log_balances("Updated balances", cycle=cycle.index)

    async def balances(self) -> Dict[str, int]:
        """Native and wrapped balances of the executing account, in wei"""
        native = await self.executor.get_balance(self.wrap_operation(0))
        wrapped = await self.executor.get_balance(self.unwrap_operation(0))
        return {"native": native, "wrapped": wrapped}

    async def log_balances(self, label: str = "Balances", **context: Any) -> Optional[Dict[str, int]]:
        """Log native and wrapped balances. A failed read is logged and returns None."""
        try:
            balances = await self.balances()
        except Exception as e:
            logger.warning(f"Could not read balances: {str(e)}", **context)
            return None

        logger.info(
            label,
            native=f"{Web3.from_wei(balances['native'], 'ether')} {self.currency}",
            wrapped=f"{Web3.from_wei(balances['wrapped'], 'ether')} W{self.currency}",
            **context
        )
        return balances

"""Staking cycle: stake, request unstake, then claim once the withdrawal is ready"""

import asyncio
from typing import Awaitable, Callable, Tuple

import structlog
from web3 import Web3

from testnet_cycler.core.types import (
    BalanceSource, Cycle, Operation, OperationKind, StepResult, StepStatus
)
from testnet_cycler.execution.calldata import encode_claim, encode_stake, encode_unstake_request
from testnet_cycler.execution.execution_engine import TransactionExecutor
from testnet_cycler.integrations.claim_status import ClaimStatusChecker
from testnet_cycler.utils.random_params import RandomParameterGenerator

logger = structlog.get_logger(__name__)

NO_CLAIMABLE_WITHDRAWAL = "no claimable withdrawal"

class StakingService:
    """Runs stake -> unstake request -> claim against a liquid staking vault"""

    def __init__(
        self,
        executor: TransactionExecutor,
        claim_checker: ClaimStatusChecker,
        contract_address: str,
        random_params: RandomParameterGenerator,
        unstake_delay_range: Tuple[float, float] = (60, 120),
        claim_wait_seconds: float = 660,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.executor = executor
        self.claim_checker = claim_checker
        self.contract_address = Web3.to_checksum_address(contract_address)
        self.random_params = random_params
        self.unstake_delay_range = unstake_delay_range
        self.claim_wait_seconds = claim_wait_seconds
        self._sleep = sleep

    @property
    def account(self) -> str:
        return self.executor.address

    def stake_operation(self, amount: int) -> Operation:
        return Operation(
            name="stake",
            kind=OperationKind.STAKE,
            to=self.contract_address,
            data=encode_stake(amount, self.account),
            value=amount,
            required_balance=amount,
            balance_source=BalanceSource.NATIVE
        )

    def unstake_operation(self, shares: int) -> Operation:
        return Operation(
            name="unstake-request",
            kind=OperationKind.UNSTAKE_REQUEST,
            to=self.contract_address,
            data=encode_unstake_request(shares, self.account, self.account),
            value=0,
            required_balance=shares,
            balance_source=BalanceSource.TOKEN
        )

    def claim_operation(self, request_id: int) -> Operation:
        return Operation(
            name="claim",
            kind=OperationKind.CLAIM,
            to=self.contract_address,
            data=encode_claim([request_id], self.account),
            value=0
        )

    async def __call__(self, cycle: Cycle) -> None:
        log = logger.bind(cycle=cycle.index)

        log.info(f"Staking {Web3.from_wei(cycle.amount, 'ether')}")
        receipt = await self.executor.execute(self.stake_operation(cycle.amount))
        cycle.steps.append(StepResult("stake", StepStatus.CONFIRMED, receipt=receipt))

        delay = self.random_params.delay_seconds(self.unstake_delay_range)
        log.info(f"Waiting {delay:.0f} seconds before requesting unstake")
        await self._sleep(delay)

        receipt = await self.executor.execute(self.unstake_operation(cycle.amount))
        cycle.steps.append(StepResult("unstake-request", StepStatus.CONFIRMED, receipt=receipt))

        log.info(f"Waiting {self.claim_wait_seconds:.0f} seconds before checking claim status")
        await self._sleep(self.claim_wait_seconds)

        cycle.steps.append(await self.claim())

    async def claim(self) -> StepResult:
        """Claim the first claimable withdrawal, or skip when there is none"""
        status = await self.claim_checker.check_claimable(self.account)
        if not status.is_claimable or status.id is None:
            logger.info("No claimable withdrawals found at this time")
            return StepResult("claim", StepStatus.SKIPPED, message=NO_CLAIMABLE_WITHDRAWAL)

        logger.info(f"Claiming withdrawal request ID: {status.id}")
        receipt = await self.executor.execute(self.claim_operation(status.id))
        return StepResult("claim", StepStatus.CONFIRMED, receipt=receipt, message=f"request {status.id}")

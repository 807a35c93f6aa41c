import pytest
from unittest.mock import AsyncMock, MagicMock, call

from web3 import Web3

from testnet_cycler.core.types import (
    BalanceSource, ClaimStatus, Cycle, OperationKind, Receipt, StepStatus
)
from testnet_cycler.execution.calldata import encode_claim, encode_stake, encode_unstake_request
from testnet_cycler.integrations.claim_status import NOT_CLAIMABLE
from testnet_cycler.services.staking_service import NO_CLAIMABLE_WITHDRAWAL, StakingService
from tests.utils.test_utils import STAKING_ADDRESS, TEST_ADDRESS, TX_HASH

def create_mock_executor() -> MagicMock:
    executor = MagicMock()
    executor.address = TEST_ADDRESS
    executor.execute = AsyncMock(return_value=Receipt(
        tx_hash=TX_HASH, block_number=1, gas_used=100000, effective_gas_price=10**9
    ))
    return executor

def create_service(executor, claim_status, random_params, sleep) -> StakingService:
    checker = MagicMock()
    checker.check_claimable = AsyncMock(return_value=claim_status)
    return StakingService(
        executor,
        checker,
        STAKING_ADDRESS,
        random_params,
        unstake_delay_range=(60, 120),
        claim_wait_seconds=660,
        sleep=sleep
    )

def test_operations(random_params, mock_sleep):
    service = create_service(create_mock_executor(), NOT_CLAIMABLE, random_params, mock_sleep)
    amount = Web3.to_wei(0.005, 'ether')

    stake = service.stake_operation(amount)
    unstake = service.unstake_operation(amount)
    claim = service.claim_operation(42)

    assert (stake.kind, stake.value, stake.balance_source) == (OperationKind.STAKE, amount, BalanceSource.NATIVE)
    assert stake.data == encode_stake(amount, TEST_ADDRESS)
    assert (unstake.value, unstake.balance_source) == (0, BalanceSource.TOKEN)
    assert unstake.data == encode_unstake_request(amount, TEST_ADDRESS, TEST_ADDRESS)
    assert claim.data == encode_claim([42], TEST_ADDRESS)
    assert claim.balance_source == BalanceSource.NONE

@pytest.mark.asyncio
async def test_cycle_skips_claim_when_nothing_claimable(random_params, mock_sleep):
    """Test claim is skipped without submitting when no withdrawal is ready"""
    executor = create_mock_executor()
    service = create_service(executor, NOT_CLAIMABLE, random_params, mock_sleep)
    cycle = Cycle(index=1, amount=Web3.to_wei(0.005, 'ether'))

    await service(cycle)

    assert [(s.operation, s.status) for s in cycle.steps] == [
        ("stake", StepStatus.CONFIRMED),
        ("unstake-request", StepStatus.CONFIRMED),
        ("claim", StepStatus.SKIPPED),
    ]
    assert cycle.steps[2].message == NO_CLAIMABLE_WITHDRAWAL
    assert executor.execute.await_count == 2
    executed = [c.args[0].kind for c in executor.execute.await_args_list]
    assert executed == [OperationKind.STAKE, OperationKind.UNSTAKE_REQUEST]

@pytest.mark.asyncio
async def test_cycle_claims_ready_withdrawal(random_params, mock_sleep):
    executor = create_mock_executor()
    service = create_service(executor, ClaimStatus(id=7, is_claimable=True), random_params, mock_sleep)
    cycle = Cycle(index=1, amount=Web3.to_wei(0.005, 'ether'))

    await service(cycle)

    assert cycle.steps[2].status == StepStatus.CONFIRMED
    claim = executor.execute.await_args_list[2].args[0]
    assert claim.data == encode_claim([7], TEST_ADDRESS)
    service.claim_checker.check_claimable.assert_awaited_once_with(TEST_ADDRESS)

@pytest.mark.asyncio
async def test_waits_between_steps(random_params, mock_sleep):
    service = create_service(create_mock_executor(), NOT_CLAIMABLE, random_params, mock_sleep)

    await service(Cycle(index=1, amount=Web3.to_wei(0.001, 'ether')))

    unstake_delay, claim_wait = mock_sleep.await_args_list
    assert 60 <= unstake_delay.args[0] <= 120
    assert claim_wait == call(660)

@pytest.mark.asyncio
async def test_stake_failure_stops_cycle(random_params, mock_sleep):
    executor = create_mock_executor()
    executor.execute.side_effect = RuntimeError("stake failed")
    service = create_service(executor, NOT_CLAIMABLE, random_params, mock_sleep)
    cycle = Cycle(index=1, amount=Web3.to_wei(0.001, 'ether'))

    with pytest.raises(RuntimeError):
        await service(cycle)

    assert cycle.steps == []
    service.claim_checker.check_claimable.assert_not_awaited()

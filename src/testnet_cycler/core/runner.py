"""
Wiring for a script run.

Builds the executor, the cycle sequence and the scheduler for a script preset
against a connected chain, then runs the requested number of cycles.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Union

import structlog

from testnet_cycler.config.chain_specs import get_chain_spec
from testnet_cycler.config.scripts import ScriptConfig
from testnet_cycler.core.chain_connector import RuntimeContext, connect
from testnet_cycler.core.scheduler import CycleScheduler
from testnet_cycler.core.types import RunSummary, SchedulingMode
from testnet_cycler.execution.execution_engine import TransactionExecutor
from testnet_cycler.execution.transaction_builder import TransactionBuilder
from testnet_cycler.gas.estimator import GasEstimator
from testnet_cycler.integrations.claim_status import ClaimStatusChecker
from testnet_cycler.services.staking_service import StakingService
from testnet_cycler.services.wrap_service import WrapUnwrapService
from testnet_cycler.utils.random_params import RandomParameterGenerator

logger = structlog.get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]

@dataclass
class ScriptComponents:
    """Everything a script run needs, wired to one account and chain"""
    config: ScriptConfig
    executor: TransactionExecutor
    service: Union[WrapUnwrapService, StakingService]
    scheduler: CycleScheduler

def build_components(
    config: ScriptConfig,
    context: RuntimeContext,
    random_params: Optional[RandomParameterGenerator] = None,
    sleep: Sleep = asyncio.sleep
) -> ScriptComponents:
    random_params = random_params or RandomParameterGenerator()

    gas_estimator = GasEstimator(
        context.web3, config.gas_policy, context.address, random_params=random_params
    )
    executor = TransactionExecutor(
        context.web3,
        TransactionBuilder(context.account, context.chain.chain_id),
        gas_estimator,
        max_retries=config.max_retries,
        retry_delay=config.retry_delay,
        receipt_timeout=context.chain.receipt_timeout,
        check_balance=config.check_balance,
        explorer_link=context.chain.explorer_link,
        sleep=sleep
    )

    if config.flow == 'staking':
        service = StakingService(
            executor,
            ClaimStatusChecker(config.claim_api_url),
            config.contract_address,
            random_params,
            unstake_delay_range=config.unstake_delay_range,
            claim_wait_seconds=config.claim_wait_seconds,
            sleep=sleep
        )
    else:
        service = WrapUnwrapService(
            executor,
            config.contract_address,
            step_delay_range=config.step_delay_range,
            random_params=random_params,
            currency=context.chain.native_currency,
            sleep=sleep
        )

    scheduler = CycleScheduler(
        random_params,
        config.amount_range,
        config.delay_range,
        name=config.name,
        sleep=sleep
    )
    return ScriptComponents(config=config, executor=executor, service=service, scheduler=scheduler)

async def run_cycles(
    components: ScriptComponents,
    cycle_count: int,
    mode: SchedulingMode = SchedulingMode.SEQUENTIAL,
    interval_seconds: Optional[float] = None
) -> RunSummary:
    wrap_flow = isinstance(components.service, WrapUnwrapService)
    if wrap_flow:
        await components.service.log_balances("Starting balances", script=components.config.name)

    summary = await components.scheduler.run(
        cycle_count, components.service, mode=mode, interval_seconds=interval_seconds
    )

    if wrap_flow:
        await components.service.log_balances("Final balances", script=components.config.name)
    return summary

async def run_script(
    config: ScriptConfig,
    cycle_count: int,
    private_key: str,
    rpc_url: Optional[str] = None,
    mode: SchedulingMode = SchedulingMode.SEQUENTIAL,
    interval_seconds: Optional[float] = None,
    seed: Optional[int] = None
) -> RunSummary:
    """Connect, run ``cycle_count`` cycles of a script and disconnect

    Raises:
        ConfigurationError: If the key is invalid or the RPC serves another chain
        ConnectionError: If the chain is unreachable
    """
    context = await connect(get_chain_spec(config.chain), private_key, rpc_url)
    try:
        components = build_components(config, context, RandomParameterGenerator(seed=seed))
        return await run_cycles(components, cycle_count, mode, interval_seconds)
    finally:
        await context.close()

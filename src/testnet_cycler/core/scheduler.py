"""
Cycle scheduling: runs an operation sequence N times, one cycle at a time.

Two modes are supported:

- sequential-with-random-delay: the next cycle starts after a random delay
  drawn from the configured range once the previous cycle finished
- fixed-interval: cycles start on a fixed cadence measured from the start of
  the previous cycle; an overrunning cycle makes the next one start
  immediately

Only one cycle is ever in flight. Any exception raised by a cycle aborts the
whole run.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional, Tuple

import structlog
from structlog.typing import BindableLogger
from web3 import Web3

from testnet_cycler.core.error_handling import CycleAbortedError, record_error
from testnet_cycler.core.types import (
    Cycle, CycleOutcome, RunSummary, SchedulerState, SchedulingMode
)
from testnet_cycler.monitoring.metrics import CYCLES_COMPLETED, CYCLES_FAILED
from testnet_cycler.utils.random_params import RandomParameterGenerator

logger = structlog.get_logger(__name__)

# A sequence runs the steps of one cycle and appends their results to cycle.steps
CycleSequence = Callable[[Cycle], Awaitable[None]]

class CycleScheduler:
    """Runs repeated cycles of an operation sequence"""

    def __init__(
        self,
        random_params: RandomParameterGenerator,
        amount_range: Tuple[float, float],
        delay_range: Tuple[float, float],
        name: str = "cycle",
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Args:
            random_params: Source of per-cycle amounts and delays
            amount_range: Per-cycle amount bounds in ether
            delay_range: Delay bounds between cycles in seconds (sequential mode)
            name: Label used in logs and metrics
            sleep: Awaitable sleep, replaceable in tests
            clock: Monotonic clock in seconds
        """
        self.random_params = random_params
        self.amount_range = amount_range
        self.delay_range = delay_range
        self.name = name
        self._sleep = sleep
        self._clock = clock
        self._lock = asyncio.Lock()
        self.state = SchedulerState.IDLE
        self.current_cycle: Optional[int] = None

    async def run(
        self,
        cycle_count: int,
        sequence: CycleSequence,
        mode: SchedulingMode = SchedulingMode.SEQUENTIAL,
        interval_seconds: Optional[float] = None
    ) -> RunSummary:
        """Run ``cycle_count`` cycles of ``sequence``

        Returns:
            Summary with state COMPLETED when every cycle succeeded, ABORTED otherwise
        """
        if self.state != SchedulerState.IDLE:
            raise RuntimeError(f"Scheduler is {self.state.value}, expected idle")
        if cycle_count < 1:
            raise ValueError("cycle_count must be a positive number")
        if mode == SchedulingMode.FIXED_INTERVAL and (interval_seconds is None or interval_seconds <= 0):
            raise ValueError("fixed-interval mode requires a positive interval")

        log = logger.bind(sequence=self.name, mode=mode.value, cycles=cycle_count)
        summary = RunSummary(state=SchedulerState.RUNNING, requested_cycles=cycle_count)
        self.state = SchedulerState.RUNNING
        log.info("Starting cycles")

        for index in range(1, cycle_count + 1):
            started_at = self._clock()
            cycle = await self._run_cycle(index, cycle_count, sequence, summary)

            if cycle.outcome == CycleOutcome.FAILED:
                self.state = SchedulerState.ABORTED
                summary.state = SchedulerState.ABORTED
                log.error("Run aborted", cycle=index, error=summary.error)
                return summary

            if index < cycle_count:
                await self._wait_for_next(mode, started_at, interval_seconds, log)

        self.state = SchedulerState.COMPLETED
        self.current_cycle = None
        summary.state = SchedulerState.COMPLETED
        log.info(
            f"All {cycle_count} cycles completed successfully",
            steps=sum(len(c.steps) for c in summary.cycles),
            fee_paid=str(Web3.from_wei(summary.total_fee_paid, 'ether'))
        )
        return summary

    async def _run_cycle(
        self,
        index: int,
        cycle_count: int,
        sequence: CycleSequence,
        summary: RunSummary
    ) -> Cycle:
        async with self._lock:
            self.current_cycle = index
            cycle = Cycle(
                index=index,
                amount=self.random_params.amount(*self.amount_range),
                started_at=self._clock()
            )
            summary.cycles.append(cycle)
            logger.info(
                f"Starting cycle {index} of {cycle_count}",
                sequence=self.name,
                amount=str(Web3.from_wei(cycle.amount, 'ether'))
            )

            try:
                await sequence(cycle)
            except Exception as e:
                cycle.outcome = CycleOutcome.FAILED
                cycle.error = str(e)
                cycle.finished_at = self._clock()
                error = CycleAbortedError(index, e)
                summary.error = str(error)
                CYCLES_FAILED.labels(sequence=self.name).inc()
                record_error('scheduler', error)
                return cycle

            cycle.outcome = CycleOutcome.COMPLETED
            cycle.finished_at = self._clock()
            CYCLES_COMPLETED.labels(sequence=self.name).inc()
            logger.info(
                f"Cycle {index} completed",
                sequence=self.name,
                steps=len(cycle.steps),
                duration=round(cycle.finished_at - cycle.started_at, 2)
            )
            return cycle

    async def _wait_for_next(
        self,
        mode: SchedulingMode,
        started_at: float,
        interval_seconds: Optional[float],
        log: BindableLogger
    ) -> None:
        if mode == SchedulingMode.FIXED_INTERVAL:
            delay = max(0.0, started_at + interval_seconds - self._clock())
            if delay == 0:
                log.warning("Cycle overran the interval, starting next cycle immediately")
                return
        else:
            delay = self.random_params.delay_seconds(self.delay_range)

        log.info(f"Waiting {delay:.0f} seconds before next cycle")
        await self._sleep(delay)

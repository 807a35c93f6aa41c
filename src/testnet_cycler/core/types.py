from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from enum import Enum
import time

# Basic type aliases
Address = str
Wei = int

class OperationKind(Enum):
    """On-chain actions the cycles are built from"""
    WRAP = "wrap"
    UNWRAP = "unwrap"
    STAKE = "stake"
    UNSTAKE_REQUEST = "unstake-request"
    CLAIM = "claim"

class BalanceSource(Enum):
    """Which balance must cover an operation before it is submitted"""
    NATIVE = "native"
    TOKEN = "token"  # balanceOf() on the operation's target contract
    NONE = "none"

@dataclass(frozen=True)
class Operation:
    """A single contract call, immutable for the duration of an attempt"""
    name: str
    kind: OperationKind
    to: Address
    data: str
    value: Wei = 0
    required_balance: Wei = 0
    balance_source: BalanceSource = BalanceSource.NONE

@dataclass
class GasParameters:
    """Gas limit and fee fields attached to a transaction"""
    gas_limit: int
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None
    gas_price: Optional[int] = None  # legacy pricing
    estimated: bool = False

    @property
    def is_eip1559(self) -> bool:
        return self.max_fee_per_gas is not None

    def to_tx_fields(self) -> Dict[str, Any]:
        """Return the TxParams fragment for these parameters"""
        fields: Dict[str, Any] = {'gas': self.gas_limit}
        if self.is_eip1559:
            fields['maxFeePerGas'] = self.max_fee_per_gas
            fields['maxPriorityFeePerGas'] = (
                self.max_priority_fee_per_gas
                if self.max_priority_fee_per_gas is not None
                else self.max_fee_per_gas
            )
            fields['type'] = 2
        elif self.gas_price is not None:
            fields['gasPrice'] = self.gas_price
        return fields

class AttemptOutcome(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    ABANDONED = "abandoned"

@dataclass
class TransactionAttempt:
    """One submission of an operation"""
    number: int
    operation: str
    tx_hash: Optional[str] = None
    outcome: AttemptOutcome = AttemptOutcome.PENDING
    error: Optional[str] = None

@dataclass
class Receipt:
    """Confirmation record for an included transaction"""
    tx_hash: str
    block_number: int
    gas_used: int
    effective_gas_price: int
    attempts: int = 1
    operation: str = ""
    block_hash: Optional[str] = None

    @property
    def fee_paid(self) -> int:
        return self.gas_used * self.effective_gas_price

class StepStatus(Enum):
    CONFIRMED = "confirmed"
    SKIPPED = "skipped"

@dataclass
class StepResult:
    """Result of one step inside a cycle"""
    operation: str
    status: StepStatus
    receipt: Optional[Receipt] = None
    message: Optional[str] = None

class CycleOutcome(Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

@dataclass
class Cycle:
    """One iteration of an operation sequence"""
    index: int
    amount: Wei
    started_at: float = field(default_factory=time.monotonic)
    finished_at: Optional[float] = None
    steps: List[StepResult] = field(default_factory=list)
    outcome: CycleOutcome = CycleOutcome.RUNNING
    error: Optional[str] = None

    @property
    def fee_paid(self) -> int:
        return sum(s.receipt.fee_paid for s in self.steps if s.receipt is not None)

@dataclass(frozen=True)
class ClaimRequest:
    """Withdrawal request record reported by the staking backend"""
    id: int
    claimed: bool
    is_claimable: bool

@dataclass(frozen=True)
class ClaimStatus:
    """First claimable withdrawal, if any"""
    id: Optional[int] = None
    is_claimable: bool = False

class SchedulingMode(Enum):
    SEQUENTIAL = "sequential-with-random-delay"
    FIXED_INTERVAL = "fixed-interval"

class SchedulerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"

@dataclass
class RunSummary:
    """Aggregate outcome of a scheduler run"""
    state: SchedulerState
    requested_cycles: int
    cycles: List[Cycle] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def completed_cycles(self) -> int:
        return sum(1 for c in self.cycles if c.outcome == CycleOutcome.COMPLETED)

    @property
    def succeeded(self) -> bool:
        return self.state == SchedulerState.COMPLETED

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1

    @property
    def total_fee_paid(self) -> int:
        return sum(c.fee_paid for c in self.cycles)

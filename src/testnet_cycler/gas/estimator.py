import logging
from typing import Dict, Any, Optional, Tuple
from dataclasses import dataclass, field

from web3 import AsyncWeb3

from testnet_cycler.core.error_handling import GasEstimationError
from testnet_cycler.core.types import GasParameters, Operation, OperationKind
from testnet_cycler.utils.random_params import RandomParameterGenerator

logger = logging.getLogger(__name__)

GWEI = 10**9
DEFAULT_GAS_LIMIT = 100_000  # Conservative default

LIMIT_MODES = ('estimate', 'random', 'fixed')
FEE_MODES = ('network', 'fixed', 'random')

@dataclass
class GasPolicy:
    """How a script derives gas limits and fees

    Limit modes:
        estimate: live ``eth_estimateGas`` times ``buffer``, static default on failure
        random: uniform draw from ``limit_ranges[kind]``
        fixed: ``default_limits[kind]``

    Fee modes:
        network: base fee from the latest block times ``base_fee_multiplier``
            plus the node's suggested priority fee
        fixed: ``max_fee_per_gas`` / ``max_priority_fee_per_gas`` as configured
        random: max fee drawn from ``fee_range``, priority fee capped by it
    """
    limit_mode: str = 'estimate'
    buffer: float = 1.3
    default_limits: Dict[OperationKind, int] = field(default_factory=dict)
    limit_ranges: Dict[OperationKind, Tuple[int, int]] = field(default_factory=dict)
    fee_mode: str = 'network'
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None
    fee_range: Optional[Tuple[int, int]] = None
    base_fee_multiplier: float = 2.0
    fallback_max_fee_per_gas: int = 50 * GWEI
    fallback_priority_fee: int = 1 * GWEI

    def __post_init__(self):
        if self.limit_mode not in LIMIT_MODES:
            raise ValueError(f"Unknown gas limit mode: {self.limit_mode}")
        if self.fee_mode not in FEE_MODES:
            raise ValueError(f"Unknown fee mode: {self.fee_mode}")
        if self.buffer < 1.0:
            raise ValueError("Gas buffer must be at least 1.0")
        if self.fee_mode == 'fixed' and self.max_fee_per_gas is None:
            raise ValueError("Fixed fee mode requires max_fee_per_gas")
        if self.fee_mode == 'random' and self.fee_range is None:
            raise ValueError("Random fee mode requires fee_range")
        for kind, (low, high) in self.limit_ranges.items():
            if low <= 0 or low > high:
                raise ValueError(f"Invalid gas limit range for {kind.value}: {low}-{high}")
        for kind, limit in self.default_limits.items():
            if limit <= 0:
                raise ValueError(f"Gas limit for {kind.value} must be positive")

    def default_limit(self, kind: OperationKind) -> int:
        return self.default_limits.get(kind, DEFAULT_GAS_LIMIT)

class GasEstimator:
    """Computes gas parameters for an operation, falling back to static values"""

    def __init__(
        self,
        web3: AsyncWeb3,
        policy: GasPolicy,
        address: str,
        random_params: Optional[RandomParameterGenerator] = None
    ):
        self.web3 = web3
        self.policy = policy
        self.address = address
        self.random_params = random_params or RandomParameterGenerator()

    async def estimate(self, operation: Operation) -> GasParameters:
        """Gas parameters for a pending operation

        Never raises for estimation failures; the result always carries a
        positive gas limit.
        """
        gas_limit, estimated = await self._gas_limit(operation)
        fees = await self._fee_fields()

        params = GasParameters(gas_limit=gas_limit, estimated=estimated, **fees)
        logger.debug(
            f"Gas for {operation.name}: limit={params.gas_limit} "
            f"({'estimated' if estimated else self.policy.limit_mode}), "
            f"fees={params.to_tx_fields()}"
        )
        return params

    async def _gas_limit(self, operation: Operation) -> Tuple[int, bool]:
        kind = operation.kind

        if self.policy.limit_mode == 'fixed':
            return self.policy.default_limit(kind), False

        if self.policy.limit_mode == 'random':
            if kind in self.policy.limit_ranges:
                low, high = self.policy.limit_ranges[kind]
                return self.random_params.gas_limit(low, high), False
            return self.policy.default_limit(kind), False

        try:
            gas_estimate = await self._estimate_live(operation)
            gas_limit = int(gas_estimate * self.policy.buffer)
            if gas_limit <= 0:
                raise GasEstimationError(f"Node returned a non-positive estimate: {gas_estimate}")
            return gas_limit, True
        except GasEstimationError as e:
            fallback = self.policy.default_limit(kind)
            logger.warning(
                f"Gas estimation failed for {operation.name}, using fallback limit {fallback}: {str(e)}"
            )
            return fallback, False

    async def _estimate_live(self, operation: Operation) -> int:
        tx = {
            'from': self.address,
            'to': operation.to,
            'value': operation.value,
            'data': operation.data,
        }
        try:
            return int(await self.web3.eth.estimate_gas(tx))
        except Exception as e:
            raise GasEstimationError(str(e)) from e

    async def _fee_fields(self) -> Dict[str, Any]:
        policy = self.policy

        if policy.fee_mode == 'fixed':
            return {
                'max_fee_per_gas': policy.max_fee_per_gas,
                'max_priority_fee_per_gas': (
                    policy.max_priority_fee_per_gas
                    if policy.max_priority_fee_per_gas is not None
                    else policy.max_fee_per_gas
                ),
            }

        if policy.fee_mode == 'random':
            low, high = policy.fee_range
            max_fee = self.random_params.uniform_int(low, high)
            priority = policy.max_priority_fee_per_gas or policy.fallback_priority_fee
            return {
                'max_fee_per_gas': max_fee,
                'max_priority_fee_per_gas': min(priority, max_fee),
            }

        return await self._network_fees()

    async def _network_fees(self) -> Dict[str, Any]:
        """EIP-1559 fees from the latest block, legacy gas price otherwise"""
        policy = self.policy
        try:
            block = await self.web3.eth.get_block('latest')
            base_fee = block.get('baseFeePerGas', 0) or 0

            if base_fee > 0:
                priority_fee = await self.web3.eth.max_priority_fee
                if policy.max_priority_fee_per_gas is not None:
                    priority_fee = min(priority_fee, policy.max_priority_fee_per_gas)
                max_fee = int(base_fee * policy.base_fee_multiplier) + priority_fee
                if policy.max_fee_per_gas is not None:
                    max_fee = min(max_fee, policy.max_fee_per_gas)
                return {
                    'max_fee_per_gas': max_fee,
                    'max_priority_fee_per_gas': min(priority_fee, max_fee),
                }

            # Legacy gas price for chains without a base fee
            return {'gas_price': int(await self.web3.eth.gas_price)}

        except Exception as e:
            logger.warning(f"Error fetching network fees, using configured fallback: {str(e)}")
            return {
                'max_fee_per_gas': policy.fallback_max_fee_per_gas,
                'max_priority_fee_per_gas': min(
                    policy.fallback_priority_fee, policy.fallback_max_fee_per_gas
                ),
            }

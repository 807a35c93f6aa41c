"""
Script presets.

Each preset describes one automation: which chain and contract it targets,
which operation sequence it repeats and the bounds its randomized values are
drawn from. The presets keep the constants of the individual scripts they
replace.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from testnet_cycler.config.chain_specs import CHAIN_SPECS
from testnet_cycler.core.error_handling import ConfigurationError
from testnet_cycler.core.types import OperationKind
from testnet_cycler.gas.estimator import GWEI, GasPolicy

FLOWS = ('wrap', 'staking')

@dataclass
class ScriptConfig:
    """Parameters of a single automation script"""
    name: str
    title: str
    chain: str
    flow: str
    contract_address: str
    amount_range: Tuple[float, float]  # ether
    delay_range: Tuple[float, float]  # seconds between cycles
    gas_policy: GasPolicy = field(default_factory=GasPolicy)
    max_retries: int = 3
    retry_delay: float = 5.0  # seconds
    check_balance: bool = True
    step_delay_range: Optional[Tuple[float, float]] = None  # seconds between wrap and unwrap
    claim_api_url: Optional[str] = None
    claim_wait_seconds: float = 660
    unstake_delay_range: Tuple[float, float] = (60, 120)

    def __post_init__(self):
        if self.chain not in CHAIN_SPECS:
            raise ConfigurationError(f"{self.name}: unknown chain {self.chain}")
        if self.flow not in FLOWS:
            raise ConfigurationError(f"{self.name}: unknown flow {self.flow}")
        if self.flow == 'staking' and not self.claim_api_url:
            raise ConfigurationError(f"{self.name}: staking flow requires claim_api_url")
        for label, (low, high) in (("amount", self.amount_range), ("delay", self.delay_range)):
            if low < 0 or low > high:
                raise ConfigurationError(f"{self.name}: invalid {label} range {low}-{high}")
        if self.max_retries < 1:
            raise ConfigurationError(f"{self.name}: max_retries must be at least 1")

SCRIPTS: Dict[str, ScriptConfig] = {
    "rubic": ScriptConfig(
        name="rubic",
        title="Rubic Swap Script",
        chain="monad-testnet",
        flow="wrap",
        contract_address="0x760AfE86e5de5fa0Ee542fc7B7B713e1c5425701",
        amount_range=(0.005, 0.01),
        delay_range=(60, 120),
        gas_policy=GasPolicy(
            limit_mode='random',
            limit_ranges={
                OperationKind.WRAP: (50_000, 102_000),
                OperationKind.UNWRAP: (50_000, 102_000),
            },
        ),
    ),

    "zkfinance": ScriptConfig(
        name="zkfinance",
        title="zkFinance Swap Script",
        chain="monad-testnet",
        flow="wrap",
        contract_address="0x760AfE86e5de5fa0Ee542fc7B7B713e1c5425701",
        amount_range=(0.005, 0.015),
        delay_range=(5, 25),
        gas_policy=GasPolicy(
            limit_mode='random',
            limit_ranges={
                OperationKind.WRAP: (28_000, 30_000),
                OperationKind.UNWRAP: (39_000, 40_000),
            },
            fee_mode='fixed',
            max_fee_per_gas=66_500_000_000,  # 66.5 gwei
            max_priority_fee_per_gas=1 * GWEI,
            fallback_max_fee_per_gas=50 * GWEI,
        ),
    ),

    "bebop": ScriptConfig(
        name="bebop",
        title="Bebop Swap Script",
        chain="megaeth-testnet",
        flow="wrap",
        contract_address="0x4200000000000000000000000000000000000006",
        amount_range=(0.001, 0.002),
        delay_range=(60, 120),
        gas_policy=GasPolicy(
            limit_mode='random',
            limit_ranges={
                OperationKind.WRAP: (21_000, 30_000),
                OperationKind.UNWRAP: (21_000, 30_000),
            },
        ),
    ),

    "megaeth-bebop": ScriptConfig(
        name="megaeth-bebop",
        title="MegaETH Bebop Swap Script",
        chain="megaeth-testnet",
        flow="wrap",
        contract_address="0x4eB2Bd7beE16F38B1F4a0A5796Fffd028b6040e9",
        amount_range=(0.0001, 0.002),
        delay_range=(60, 120),
        gas_policy=GasPolicy(
            limit_mode='estimate',
            buffer=1.3,
            default_limits={
                OperationKind.WRAP: 25_000,
                OperationKind.UNWRAP: 30_000,
            },
            fee_mode='fixed',
            max_fee_per_gas=1_000_000,  # 0.001 gwei
            max_priority_fee_per_gas=1_000_000,
        ),
    ),

    "apriori": ScriptConfig(
        name="apriori",
        title="aPriori Staking Script",
        chain="monad-testnet",
        flow="staking",
        contract_address="0xb2f82D0f38dc453D596Ad40A37799446Cc89274A",
        amount_range=(0.001, 0.01),
        delay_range=(60, 120),
        gas_policy=GasPolicy(
            limit_mode='fixed',
            default_limits={
                OperationKind.STAKE: 100_000,
                OperationKind.UNSTAKE_REQUEST: 100_000,
                OperationKind.CLAIM: 100_000,
            },
        ),
        claim_api_url="https://liquid-staking-backend-prod-b332fbe9ccfe.herokuapp.com/withdrawal_requests",
        claim_wait_seconds=660,
        unstake_delay_range=(60, 120),
    ),
}

def get_script(name: str) -> ScriptConfig:
    """Get a script preset by name

    Raises:
        ConfigurationError: If no preset has that name
    """
    try:
        return SCRIPTS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown script {name!r}. Available: {', '.join(SCRIPTS)}"
        ) from None

def get_all_scripts() -> List[ScriptConfig]:
    return list(SCRIPTS.values())

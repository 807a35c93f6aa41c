import pytest

from testnet_cycler.config.chain_specs import CHAIN_SPECS, get_chain_spec
from testnet_cycler.config.scripts import SCRIPTS, ScriptConfig, get_all_scripts, get_script
from testnet_cycler.core.error_handling import ConfigurationError
from testnet_cycler.core.types import OperationKind
from testnet_cycler.gas.estimator import GWEI

def test_presets_available():
    assert set(SCRIPTS) == {"rubic", "zkfinance", "bebop", "megaeth-bebop", "apriori"}
    assert [s.name for s in get_all_scripts()] == list(SCRIPTS)

@pytest.mark.parametrize("name", list(SCRIPTS))
def test_presets_target_known_chains(name):
    script = get_script(name)
    assert script.chain in CHAIN_SPECS
    assert script.amount_range[0] <= script.amount_range[1]
    assert script.max_retries == 3
    assert script.retry_delay == 5.0

def test_unknown_preset():
    with pytest.raises(ConfigurationError):
        get_script("magma")

def test_zkfinance_fixed_fees():
    policy = get_script("zkfinance").gas_policy
    assert policy.fee_mode == 'fixed'
    assert policy.max_fee_per_gas == 66_500_000_000
    assert policy.max_priority_fee_per_gas == 1 * GWEI
    assert policy.limit_ranges[OperationKind.UNWRAP] == (39_000, 40_000)

def test_megaeth_bebop_estimates_with_fallbacks():
    policy = get_script("megaeth-bebop").gas_policy
    assert policy.limit_mode == 'estimate'
    assert policy.buffer == 1.3
    assert policy.default_limit(OperationKind.WRAP) == 25_000
    assert policy.default_limit(OperationKind.UNWRAP) == 30_000

def test_apriori_staking_preset():
    script = get_script("apriori")
    assert script.flow == 'staking'
    assert script.claim_wait_seconds == 660
    assert script.claim_api_url.startswith("https://")
    assert script.gas_policy.default_limit(OperationKind.CLAIM) == 100_000

@pytest.mark.parametrize("overrides", [
    {'chain': 'goerli'},
    {'flow': 'swap'},
    {'flow': 'staking'},
    {'amount_range': (0.02, 0.01)},
    {'delay_range': (-1, 5)},
    {'max_retries': 0},
])
def test_invalid_script_config(overrides):
    kwargs = dict(
        name="custom",
        title="Custom",
        chain="monad-testnet",
        flow="wrap",
        contract_address="0x760AfE86e5de5fa0Ee542fc7B7B713e1c5425701",
        amount_range=(0.001, 0.002),
        delay_range=(1, 2),
    )
    kwargs.update(overrides)
    with pytest.raises(ConfigurationError):
        ScriptConfig(**kwargs)

def test_chain_specs():
    monad = get_chain_spec("monad-testnet")
    assert monad.chain_id == 10143
    assert monad.explorer_link("0xabc") == "https://testnet.monadexplorer.com/tx/0xabc"
    assert get_chain_spec("megaeth-testnet").chain_id == 6342

    with pytest.raises(KeyError):
        get_chain_spec("mainnet")

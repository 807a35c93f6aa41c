from dataclasses import dataclass
from typing import Optional, Dict, List

@dataclass
class ChainSpec:
    """Connection details for a test network"""
    name: str
    chain_id: int
    native_currency: str
    rpc_urls: List[str]  # Multiple URLs for fallback
    explorer_tx_url: Optional[str] = None
    rpc_timeout: float = 30.0  # seconds
    receipt_timeout: float = 180.0  # seconds

    def explorer_link(self, tx_hash: str) -> str:
        if not self.explorer_tx_url:
            return tx_hash
        return f"{self.explorer_tx_url}{tx_hash}"

CHAIN_SPECS: Dict[str, ChainSpec] = {
    # Monad testnet
    "monad-testnet": ChainSpec(
        name="Monad Testnet",
        chain_id=10143,
        native_currency="MON",
        rpc_urls=[
            "https://testnet-rpc.monad.xyz/",
        ],
        explorer_tx_url="https://testnet.monadexplorer.com/tx/",
    ),

    # MegaETH testnet
    "megaeth-testnet": ChainSpec(
        name="MegaETH Testnet",
        chain_id=6342,
        native_currency="ETH",
        rpc_urls=[
            "https://carrot.megaeth.com/rpc",
        ],
        explorer_tx_url="https://megaexplorer.xyz/tx/",
    ),
}

def get_chain_spec(chain_name: str) -> ChainSpec:
    """Get chain specification by name

    Raises:
        KeyError: If the chain is not configured
    """
    try:
        return CHAIN_SPECS[chain_name]
    except KeyError:
        raise KeyError(f"Chain configuration for {chain_name} not found") from None

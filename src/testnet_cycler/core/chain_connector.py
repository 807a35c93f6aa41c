from dataclasses import dataclass
from typing import Optional
import logging

import aiohttp
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3
from web3.providers.rpc import AsyncHTTPProvider

from testnet_cycler.config.chain_specs import ChainSpec
from testnet_cycler.core.error_handling import ConfigurationError

logger = logging.getLogger(__name__)

@dataclass
class RuntimeContext:
    """Connected web3 client plus the account that signs for it"""
    web3: AsyncWeb3
    account: LocalAccount
    chain: ChainSpec
    rpc_url: str

    @property
    def address(self) -> str:
        return self.account.address

    async def close(self) -> None:
        """Release the provider's HTTP session"""
        await disconnect(self.web3)

def load_account(private_key: str) -> LocalAccount:
    """Account for a hex private key

    Raises:
        ConfigurationError: If the key is not a valid private key
    """
    try:
        return Account.from_key(private_key)
    except Exception as e:
        # Never include the key itself in the message
        raise ConfigurationError(f"Invalid private key: {type(e).__name__}") from None

async def disconnect(web3: AsyncWeb3) -> None:
    provider_disconnect = getattr(web3.provider, 'disconnect', None)
    if provider_disconnect is not None:
        await provider_disconnect()

def create_async_web3(rpc_url: str, timeout: float) -> AsyncWeb3:
    provider = AsyncHTTPProvider(
        rpc_url,
        request_kwargs={'timeout': aiohttp.ClientTimeout(total=timeout)}
    )
    return AsyncWeb3(provider)

async def connect(chain_spec: ChainSpec, private_key: str, rpc_url: Optional[str] = None) -> RuntimeContext:
    """Connect to a chain and load the signing account

    Args:
        chain_spec: Chain to connect to
        private_key: Hex private key of the signing account
        rpc_url: Endpoint overriding the chain's configured RPC URLs

    Returns:
        RuntimeContext: Connected web3 client and account

    Raises:
        ConfigurationError: If the key is invalid or the endpoint serves another chain
        ConnectionError: If no RPC endpoint is reachable
    """
    account = load_account(private_key)
    urls = [rpc_url] if rpc_url else list(chain_spec.rpc_urls)

    last_error: Optional[BaseException] = None
    for url in urls:
        web3 = create_async_web3(url, chain_spec.rpc_timeout)
        try:
            if not await web3.is_connected():
                raise ConnectionError("endpoint did not respond")
            chain_id = await web3.eth.chain_id
        except Exception as e:
            last_error = e
            await disconnect(web3)
            logger.warning(f"Failed to connect to {chain_spec.name} using {url}: {str(e)}")
            continue

        if chain_id != chain_spec.chain_id:
            await disconnect(web3)
            raise ConfigurationError(
                f"Chain ID mismatch on {url}. Expected {chain_spec.chain_id}, got {chain_id}"
            )

        logger.info(f"Connected to {chain_spec.name} ({url}) as {account.address}")
        return RuntimeContext(web3=web3, account=account, chain=chain_spec, rpc_url=url)

    raise ConnectionError(
        f"Failed to connect to {chain_spec.name} using any RPC URL. Last error: {last_error}"
    )

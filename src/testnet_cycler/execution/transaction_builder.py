import logging
from typing import Any, Dict

from eth_account.signers.local import LocalAccount
from web3.types import TxParams
from eth_utils import to_checksum_address

from testnet_cycler.core.error_handling import SubmissionError
from testnet_cycler.core.types import GasParameters, Operation

logger = logging.getLogger(__name__)

class TransactionBuilder:
    """Builds and signs transactions for operations from a single account"""

    def __init__(self, account: LocalAccount, chain_id: int):
        self.account = account
        self.chain_id = chain_id

    @property
    def address(self) -> str:
        return self.account.address

    def build(self, operation: Operation, gas: GasParameters, nonce: int) -> TxParams:
        """Transaction dict for an operation

        Args:
            operation: Operation to submit
            gas: Gas limit and fee fields for this attempt
            nonce: Account nonce to use

        Returns:
            Unsigned transaction parameters
        """
        tx: Dict[str, Any] = {
            'from': self.address,
            'to': to_checksum_address(operation.to),
            'value': operation.value,
            'data': operation.data,
            'nonce': nonce,
            'chainId': self.chain_id,
        }
        tx.update(gas.to_tx_fields())
        return tx  # type: ignore[return-value]

    def sign(self, tx: TxParams) -> bytes:
        """Sign a transaction and return the raw bytes to broadcast

        Raises:
            SubmissionError: If the transaction cannot be signed
        """
        try:
            signed = self.account.sign_transaction(tx)
        except Exception as e:
            raise SubmissionError(f"Failed to sign transaction: {str(e)}") from e
        return signed.raw_transaction

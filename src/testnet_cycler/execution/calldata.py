"""
Calldata for the fixed contract methods the cycles call.

Selectors are the first four bytes of the keccak hash of each signature;
arguments are standard ABI words (left-padded, 32 bytes, big-endian).
"""

from typing import Dict, Sequence

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

# Wrapped native token (WETH9 style)
WRAP_SIGNATURE = "deposit()"
UNWRAP_SIGNATURE = "withdraw(uint256)"
BALANCE_OF_SIGNATURE = "balanceOf(address)"

# Liquid staking vault
STAKE_SIGNATURE = "deposit(uint256,address)"
UNSTAKE_REQUEST_SIGNATURE = "requestRedeem(uint256,address,address)"
CLAIM_SIGNATURE = "redeem(uint256[],address)"

METHOD_IDS: Dict[str, str] = {
    WRAP_SIGNATURE: "0xd0e30db0",
    UNWRAP_SIGNATURE: "0x2e1a7d4d",
    BALANCE_OF_SIGNATURE: "0x70a08231",
    STAKE_SIGNATURE: "0x6e553f65",
    UNSTAKE_REQUEST_SIGNATURE: "0x7d41c86e",
    CLAIM_SIGNATURE: "0x492e47d2",
}

def selector(signature: str) -> str:
    """Hex method id for a function signature"""
    return "0x" + function_signature_to_4byte_selector(signature).hex()

def _call(signature: str, types: Sequence[str], args: Sequence) -> str:
    return METHOD_IDS[signature] + encode(list(types), list(args)).hex()

def encode_wrap() -> str:
    return METHOD_IDS[WRAP_SIGNATURE]

def encode_unwrap(amount: int) -> str:
    return _call(UNWRAP_SIGNATURE, ["uint256"], [amount])

def encode_balance_of(owner: str) -> str:
    return _call(BALANCE_OF_SIGNATURE, ["address"], [to_checksum_address(owner)])

def encode_stake(amount: int, receiver: str) -> str:
    return _call(STAKE_SIGNATURE, ["uint256", "address"], [amount, to_checksum_address(receiver)])

def encode_unstake_request(shares: int, controller: str, owner: str) -> str:
    return _call(
        UNSTAKE_REQUEST_SIGNATURE,
        ["uint256", "address", "address"],
        [shares, to_checksum_address(controller), to_checksum_address(owner)]
    )

def encode_claim(request_ids: Sequence[int], receiver: str) -> str:
    """redeem(uint256[] requestIds, address receiver)

    The dynamic array is encoded as an offset word (0x40), the receiver
    word, then the array length and elements.
    """
    return _call(
        CLAIM_SIGNATURE,
        ["uint256[]", "address"],
        [list(request_ids), to_checksum_address(receiver)]
    )

"""
testnet-cycler - repeats wrap/unwrap and staking transaction cycles
against fixed contracts on EVM test networks.
"""

__version__ = "0.1.0"

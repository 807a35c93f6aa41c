"""
Randomized amount, delay and gas limit values within configured bounds.

All draws are inclusive of both bounds. Amounts are rounded to a fixed number
of decimal places before conversion to wei, so the on-chain values look like
hand-typed amounts (0.0073 rather than 0.007318842...).
"""

import random
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple, Union

from web3 import Web3

Number = Union[int, float, str, Decimal]

class RandomParameterGenerator:
    """Produces uniformly distributed values within closed ranges"""

    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None):
        """
        Args:
            rng: Entropy source to draw from; a fresh ``random.Random`` otherwise
            seed: Seed for the fresh generator, ignored when ``rng`` is given
        """
        self.rng = rng or random.Random(seed)

    def reseed(self, seed: int) -> None:
        self.rng.seed(seed)

    def uniform_int(self, minimum: int, maximum: int) -> int:
        """Integer in [minimum, maximum]"""
        _check_bounds(minimum, maximum)
        return self.rng.randint(int(minimum), int(maximum))

    def amount(self, minimum: Number, maximum: Number, decimals: int = 4) -> int:
        """Amount in wei, drawn in ether units and rounded to ``decimals`` places

        Args:
            minimum: Lower bound in ether
            maximum: Upper bound in ether
            decimals: Decimal places kept before the wei conversion

        Returns:
            Amount in wei within [to_wei(minimum), to_wei(maximum)]
        """
        low, high = Decimal(str(minimum)), Decimal(str(maximum))
        _check_bounds(low, high)

        drawn = low + (high - low) * Decimal(repr(self.rng.random()))
        quantum = Decimal(1).scaleb(-decimals)
        rounded = drawn.quantize(quantum, rounding=ROUND_HALF_UP)

        # Rounding can step outside a range narrower than the quantum
        rounded = min(max(rounded, low), high)
        return int(Web3.to_wei(rounded, 'ether'))

    def delay_ms(self, minimum_ms: int, maximum_ms: int) -> int:
        """Delay in milliseconds"""
        return self.uniform_int(minimum_ms, maximum_ms)

    def delay_seconds(self, bounds: Tuple[float, float]) -> float:
        """Delay in seconds with millisecond resolution"""
        minimum, maximum = bounds
        return self.delay_ms(int(minimum * 1000), int(maximum * 1000)) / 1000

    def gas_limit(self, minimum: int, maximum: int) -> int:
        return self.uniform_int(minimum, maximum)

def _check_bounds(minimum, maximum) -> None:
    if minimum > maximum:
        raise ValueError(f"Invalid range: min {minimum} is greater than max {maximum}")

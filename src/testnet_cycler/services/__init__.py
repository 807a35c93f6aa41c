"""
Cycle sequences run by the scheduler.
"""

from .wrap_service import WrapUnwrapService
from .staking_service import StakingService, NO_CLAIMABLE_WITHDRAWAL

__all__ = [
    'WrapUnwrapService',
    'StakingService',
    'NO_CLAIMABLE_WITHDRAWAL'
]

"""External HTTP services"""

from .claim_status import ClaimStatusChecker, NOT_CLAIMABLE

__all__ = ['ClaimStatusChecker', 'NOT_CLAIMABLE']

"""Gas limit and fee selection for transactions"""

from .estimator import GasEstimator, GasPolicy

__all__ = ['GasEstimator', 'GasPolicy']

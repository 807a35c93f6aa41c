from .random_params import RandomParameterGenerator

__all__ = ['RandomParameterGenerator']

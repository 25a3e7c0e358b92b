from .account import AccountMetric
from .base import Metric

__all__ = ['Metric', 'AccountMetric']

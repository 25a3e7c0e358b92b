"""
optiback - backtesting and hyperparameter optimization of trading strategies.
"""

__version__ = "0.1.0"

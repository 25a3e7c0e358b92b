"""
Scoring functions that reduce the metrics of a completed run to a single value.
"""

import abc
import math
from typing import Callable, Optional

import pandas as pd

from optiback.common.timeframe import Timeframe
from optiback.loggers.base import MetricsLogger
from utils.logger import get_logger

logger = get_logger(__name__)

Reducer = Callable[[pd.Series, Timeframe], float]


class Score(abc.ABC):
    """
    Calculates the score of a completed run. A higher score is better.
    """

    @abc.abstractmethod
    def calculate(self, metrics_logger: MetricsLogger, run: str, timeframe: Timeframe) -> float:
        """
        Args:
            metrics_logger: The logger the run recorded its metrics in.
            run: Name of the run.
            timeframe: The timeframe the run was scored on.
        """
        pass


class MetricScore(Score):
    """
    Score based on the recorded values of a single metric.

    Args:
        metric_name: The metric to use, for example "account.equity".
        reduce: Function reducing the recorded values to a single number, by default the last value.

    Example:
        MetricScore("account.equity")
        MetricScore("account.equity", MetricScore.annualized)
    """

    def __init__(self, metric_name: str, reduce: Optional[Reducer] = None):
        self.metric_name = metric_name
        self.reduce = reduce or MetricScore.last

    @staticmethod
    def last(series: pd.Series, timeframe: Timeframe) -> float:
        return float(series.iloc[-1])

    @staticmethod
    def mean(series: pd.Series, timeframe: Timeframe) -> float:
        return float(series.mean())

    @staticmethod
    def annualized(series: pd.Series, timeframe: Timeframe) -> float:
        """Annualized growth between the first and last value, e.g. for an equity curve"""
        first, last = float(series.iloc[0]), float(series.iloc[-1])
        if first == 0.0 or len(series) < 2:
            return math.nan
        period = Timeframe(series.index[0], series.index[-1])
        if period.duration.total_seconds() <= 0:
            return math.nan
        return period.annualize(last / first - 1.0)

    def calculate(self, metrics_logger: MetricsLogger, run: str, timeframe: Timeframe) -> float:
        series = metrics_logger.get_metric(self.metric_name, run)
        if series.empty:
            logger.warning(f"No values recorded for metric '{self.metric_name}' in run {run}")
            return math.nan
        return self.reduce(series, timeframe)

    def __repr__(self) -> str:
        return f"MetricScore({self.metric_name!r})"

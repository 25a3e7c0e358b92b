import abc
from typing import Dict, List, Optional, Set

import pandas as pd

from optiback.common.timeframe import Timeframe


class MetricsLogger(abc.ABC):
    """
    Stores the metrics of runs. Several runs may log to the same logger concurrently, so
    implementations must be thread-safe.
    """

    def start(self, run: str, timeframe: Timeframe) -> None:
        """Called at the start of a run"""
        pass

    @abc.abstractmethod
    def log(self, results: Dict[str, float], time: pd.Timestamp, run: str) -> None:
        """Record the metric `results` of `run` at `time`"""
        pass

    def end(self, run: str) -> None:
        """Called at the end of a run"""
        pass

    def get_runs(self) -> Set[str]:
        return set()

    def get_metric_names(self, run: Optional[str] = None) -> List[str]:
        """Sorted names of the metrics recorded for `run`, or for all runs if no run is given"""
        return []

    def get_metric(self, metric_name: str, run: str) -> pd.Series:
        """
        Recorded values of a metric for a run, as a Series indexed by time. The Series is empty if
        nothing was recorded.
        """
        return pd.Series(dtype=float, name=metric_name)

    def get_metric_runs(self, metric_name: str) -> Dict[str, pd.Series]:
        """Recorded values of a metric for every run that has them"""
        result = {}
        for run in sorted(self.get_runs()):
            series = self.get_metric(metric_name, run)
            if not series.empty:
                result[run] = series
        return result

    def reset(self) -> None:
        """Remove all recorded data"""
        pass


def to_series(metric_name: str, times: List[pd.Timestamp], values: List[float]) -> pd.Series:
    return pd.Series(values, index=pd.DatetimeIndex(times), name=metric_name, dtype=float)

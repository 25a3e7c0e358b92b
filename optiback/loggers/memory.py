import threading
from typing import Dict, List, Optional, Set, Tuple

import pandas as pd

from optiback.common.timeframe import Timeframe
from optiback.loggers.base import MetricsLogger, to_series


class MemoryLogger(MetricsLogger):
    """
    Keeps every logged value of every run in memory.

    If only the last value of each metric is of interest, the LastEntryLogger uses far less memory.
    """

    def __init__(self):
        self._history: Dict[str, List[Tuple[pd.Timestamp, Dict[str, float]]]] = {}
        self._lock = threading.Lock()

    def start(self, run: str, timeframe: Timeframe) -> None:
        with self._lock:
            self._history[run] = []

    def log(self, results: Dict[str, float], time: pd.Timestamp, run: str) -> None:
        if not results:
            return
        with self._lock:
            self._history.setdefault(run, []).append((time, dict(results)))

    def get_runs(self) -> Set[str]:
        with self._lock:
            return set(self._history)

    def get_metric_names(self, run: Optional[str] = None) -> List[str]:
        with self._lock:
            runs = [run] if run is not None else list(self._history)
            names = set()
            for r in runs:
                for _, results in self._history.get(r, []):
                    names.update(results)
        return sorted(names)

    def get_metric(self, metric_name: str, run: str) -> pd.Series:
        with self._lock:
            entries = list(self._history.get(run, []))
        times, values = [], []
        for time, results in entries:
            if metric_name in results:
                times.append(time)
                values.append(results[metric_name])
        return to_series(metric_name, times, values)

    def reset(self) -> None:
        with self._lock:
            self._history.clear()

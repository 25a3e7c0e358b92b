import threading
from typing import Dict, List, Optional, Set, Tuple

import pandas as pd

from optiback.common.timeframe import Timeframe
from optiback.loggers.base import MetricsLogger, to_series


class LastEntryLogger(MetricsLogger):
    """
    Keeps only the last value of every metric per run. Use the MemoryLogger if the values at each step
    are needed.
    """

    def __init__(self):
        self._history: Dict[str, Dict[str, Tuple[pd.Timestamp, float]]] = {}
        self._lock = threading.Lock()

    def start(self, run: str, timeframe: Timeframe) -> None:
        with self._lock:
            self._history[run] = {}

    def log(self, results: Dict[str, float], time: pd.Timestamp, run: str) -> None:
        if not results:
            return
        with self._lock:
            entries = self._history.setdefault(run, {})
            for name, value in results.items():
                entries[name] = (time, value)

    def get_runs(self) -> Set[str]:
        with self._lock:
            return set(self._history)

    def get_metric_names(self, run: Optional[str] = None) -> List[str]:
        with self._lock:
            runs = [run] if run is not None else list(self._history)
            names = set()
            for r in runs:
                names.update(self._history.get(r, {}))
        return sorted(names)

    def get_metric(self, metric_name: str, run: str) -> pd.Series:
        with self._lock:
            entry = self._history.get(run, {}).get(metric_name)
        if entry is None:
            return to_series(metric_name, [], [])
        return to_series(metric_name, [entry[0]], [entry[1]])

    def reset(self) -> None:
        with self._lock:
            self._history.clear()

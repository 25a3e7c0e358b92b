import threading
from typing import Dict

import pandas as pd

from optiback.loggers.base import MetricsLogger


class SilentLogger(MetricsLogger):
    """Discards all metrics, only counts how often something was logged"""

    def __init__(self):
        self.events = 0
        self._lock = threading.Lock()

    def log(self, results: Dict[str, float], time: pd.Timestamp, run: str) -> None:
        with self._lock:
            self.events += 1

    def reset(self) -> None:
        with self._lock:
            self.events = 0

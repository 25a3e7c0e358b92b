import logging
from typing import Dict

import pandas as pd

from optiback.loggers.base import MetricsLogger
from utils.logger import get_logger

logger = get_logger(__name__)


class InfoLogger(MetricsLogger):
    """
    Writes metrics to the application log instead of storing them, so nothing can be retrieved
    afterwards.

    Args:
        split_metrics: Write one log line per metric instead of one line per step.
        level: Log level of the metric lines.
    """

    def __init__(self, split_metrics: bool = False, level: int = logging.INFO):
        self.split_metrics = split_metrics
        self.level = level

    def log(self, results: Dict[str, float], time: pd.Timestamp, run: str) -> None:
        if not results or not logger.isEnabledFor(self.level):
            return
        if self.split_metrics:
            for name, value in results.items():
                logger.log(self.level, f"run={run} time={time} metric={name} value={value}")
        else:
            values = ", ".join(f"{name}={value}" for name, value in results.items())
            logger.log(self.level, f"run={run} time={time} {values}")

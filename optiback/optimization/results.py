"""
Helpers to analyse the RunResults of an optimization.
"""

import math
from typing import Dict, List

import pandas as pd
from pydantic import BaseModel

from optiback.common.timeframe import Timeframe
from .search_space.parameter import Params


class RunResult(BaseModel):
    """
    Result of a single training or validation run.

    Attributes:
        params: The parameters the run was created with.
        score: The score of the run, higher is better.
        timeframe: The timeframe the run was scored on (excluding warmup).
        name: Unique name of the run, "train-<n>" or "validate-<n>".
    """
    params: Params
    score: float
    timeframe: Timeframe
    name: str

    @property
    def phase(self) -> str:
        """"training" or "validation", derived from the run name"""
        return "validation" if self.name.startswith("validate") else "training"

    class Config:
        arbitrary_types_allowed = True
        frozen = True


def _rank(result: RunResult) -> float:
    return -math.inf if math.isnan(result.score) else result.score


def best(results: List[RunResult]) -> RunResult:
    """
    The result with the highest score. NaN scores rank lowest and ties go to the result that comes
    first in `results`.
    """
    if not results:
        raise ValueError("Cannot select the best of an empty list of results")
    return max(results, key=_rank)


def clean(results: List[RunResult]) -> List[RunResult]:
    """Only the results with a finite score"""
    return [r for r in results if math.isfinite(r.score)]


def to_dataframe(results: List[RunResult]) -> pd.DataFrame:
    """
    One row per result with the columns name, phase, score, start and end, plus a column per parameter.
    """
    rows = []
    for r in results:
        row = {
            'name': r.name,
            'phase': r.phase,
            'score': r.score,
            'start': r.timeframe.start,
            'end': r.timeframe.end,
        }
        row.update(r.params.to_dict())
        rows.append(row)
    return pd.DataFrame(rows, columns=None if rows else ['name', 'phase', 'score', 'start', 'end'])


def summary(results: List[RunResult]) -> Dict[str, Dict[str, float]]:
    """Minimum, maximum and mean score per phase, e.g. {"training": {"min": .., "max": .., "mean": ..}}"""
    df = to_dataframe(clean(results))
    if df.empty:
        return {}
    stats = df.groupby('phase')['score'].agg(['min', 'max', 'mean'])
    return {phase: {k: float(v) for k, v in row.items()} for phase, row in stats.iterrows()}


def correlation(results: List[RunResult]) -> float:
    """
    Correlation between the best training score and the validation score of the walk forward windows.
    A training window is matched with the validation run that starts where the training ends.
    NaN if fewer than two windows are available.
    """
    validations = {r.timeframe.start: r.score for r in results if r.phase == "validation"}
    pairs: Dict[pd.Timestamp, List[float]] = {}
    for r in clean(results):
        if r.phase != "training" or r.timeframe.end not in validations:
            continue
        current = pairs.get(r.timeframe.end)
        if current is None or r.score > current[0]:
            pairs[r.timeframe.end] = [r.score, validations[r.timeframe.end]]

    if len(pairs) < 2:
        return math.nan
    df = pd.DataFrame(list(pairs.values()), columns=['training', 'validation'])
    return float(df['training'].corr(df['validation']))

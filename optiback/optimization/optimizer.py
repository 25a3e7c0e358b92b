"""
Optimizer - finds the parameters that give the best score for a strategy.

The optimizer evaluates every Params of a search space by creating a backtester for it, running that
backtester over a timeframe of a feed and scoring the run. On top of this single training step it
offers the usual ways to judge how robust the result is:

- train: score every Params over one timeframe
- validate: score a single Params over a (later) timeframe
- walk_forward: train on consecutive windows, optionally validating the best Params of each window
  on the period right after it
- monte_carlo: train on randomly sampled windows
"""

import threading
from typing import Callable, List, Optional, Union

import numpy as np

from optiback.backtester.backtester import Backtester
from optiback.common.errors import ConfigurationError
from optiback.common.parallel import ParallelJobs
from optiback.common.timeframe import Timeframe
from optiback.common.timespan import TimeSpan
from optiback.configs.optimization.optimizer import OptimizerConfig
from optiback.feeds.feed import Feed
from optiback.loggers.base import MetricsLogger
from optiback.loggers.memory import MemoryLogger
from utils.logger import get_logger
from .results import RunResult, best
from .score import MetricScore, Score
from .search_space.parameter import Params
from .search_space.space import SearchSpace

logger = get_logger(__name__)

BacktesterFactory = Callable[[Params], Backtester]


class Optimizer:
    """
    Runs the backtesters created from a search space and scores them.

    Every run gets a unique name ("train-<n>" or "validate-<n>") from a counter owned by the optimizer,
    and every training run logs to its own MetricsLogger, so the runs of one training step can be
    executed in parallel.

    Args:
        space: The Params to evaluate.
        score: How to score a run. A string is the name of a metric whose last value is the score.
        get_backtester: Creates the backtester for a Params. The backtester must use a SimBroker.
        config: Optimizer settings, see OptimizerConfig.

    Example:
        space = GridSearch().add("fast", range(5, 15)).add("slow", [20, 30, 50])

        def get_backtester(params):
            strategy = EMAStrategy(params.get_int("fast"), params.get_int("slow"))
            return Backtester(strategy, AccountMetric())

        opt = Optimizer(space, "account.equity", get_backtester)
        results = opt.walk_forward(feed, TimeSpan(years=2), TimeSpan(months=6))
    """

    def __init__(
        self,
        space: SearchSpace,
        score: Union[Score, str],
        get_backtester: BacktesterFactory,
        config: Optional[OptimizerConfig] = None
    ):
        self.space = space
        self.score = MetricScore(score) if isinstance(score, str) else score
        self.get_backtester = get_backtester
        self.config = config or OptimizerConfig()
        self._run = 0
        self._run_lock = threading.Lock()
        self._random_state = np.random.RandomState(self.config.seed) if self.config.seed is not None else None

    def _next_name(self, phase: str) -> str:
        with self._run_lock:
            name = f"{phase}-{self._run}"
            self._run += 1
        return name

    def create_train_logger(self) -> MetricsLogger:
        """The logger of a single training run. Override to use another logger, e.g. a LastEntryLogger."""
        return MemoryLogger()

    def _create_backtester(self, params: Params) -> Backtester:
        backtester = self.get_backtester(params)
        if not backtester.is_simulated:
            logger.error(f"Backtester for {params} uses {type(backtester.broker).__name__}, optimization requires a SimBroker")
            raise ConfigurationError("Optimization requires a backtester with a SimBroker")
        return backtester

    @staticmethod
    def _finite_timeframe(feed: Feed, operation: str) -> Timeframe:
        timeframe = feed.timeframe
        if not timeframe.is_finite():
            logger.error(f"Cannot run {operation} on a feed with an unbounded timeframe {timeframe}")
            raise ConfigurationError(f"{operation} requires a feed with a finite timeframe")
        return timeframe

    def train(
        self,
        feed: Feed,
        timeframe: Timeframe = Timeframe.INFINITE,
        warmup: TimeSpan = TimeSpan.ZERO
    ) -> List[RunResult]:
        """
        Run and score every Params of the search space over `timeframe`.

        The runs are executed in parallel, on a private pool of `config.max_workers` threads if set.
        All backtesters are created before the first run starts, so a backtester without a SimBroker
        is reported before any work is done.

        Returns:
            One result per Params, in the order the search space produced them.

        Raises:
            ConfigurationError: If a backtester doesn't use a SimBroker.
            Exception: The first failure of a run, raised after all other runs have finished.
        """
        trials = [(params, self._create_backtester(params)) for params in self.space]
        results: List[Optional[RunResult]] = [None] * len(trials)
        lock = threading.Lock()

        def run_trial(index: int, params: Params, backtester: Backtester) -> None:
            run_logger = self.create_train_logger()
            bt = backtester.copy(logger=run_logger)
            name = self._next_name("train")
            bt.run(feed, timeframe, warmup, name)
            score = self.score.calculate(run_logger, name, timeframe)
            result = RunResult(params=params, score=score, timeframe=timeframe, name=name)
            with lock:
                results[index] = result

        jobs = ParallelJobs(self.config.max_workers)
        for index, (params, backtester) in enumerate(trials):
            jobs.add(lambda i=index, p=params, b=backtester: run_trial(i, p, b))
        jobs.join_all_blocking()

        logger.info(f"Trained {len(results)} parameter sets over {timeframe}")
        return list(results)

    def validate(
        self,
        feed: Feed,
        timeframe: Timeframe,
        params: Params,
        warmup: TimeSpan = TimeSpan.ZERO
    ) -> RunResult:
        """Run and score a single Params over `timeframe`"""
        backtester = self._create_backtester(params)
        run_logger = backtester.logger
        name = self._next_name("validate")
        backtester.run(feed, timeframe, warmup, name)
        score = self.score.calculate(run_logger, name, timeframe)
        logger.info(f"Validated {params} over {timeframe}: score={score}")
        return RunResult(params=params, score=score, timeframe=timeframe, name=name)

    def walk_forward(
        self,
        feed: Feed,
        period: TimeSpan,
        validation: Optional[TimeSpan] = None,
        warmup: TimeSpan = TimeSpan.ZERO,
        anchored: bool = False
    ) -> List[RunResult]:
        """
        Walk forward optimization over the timeframe of `feed`.

        Without `validation`, the feed timeframe is split into consecutive windows of `period` and the
        search space is trained on every window.

        With `validation`, the feed timeframe after the first `period` is split into consecutive
        validation windows of `validation`, each starting where the previous one ended. The search
        space is trained on the `period` right before a validation window, after which the best Params
        is validated on that window. Only complete validation windows are used.

        Args:
            feed: Feed with a finite timeframe.
            period: Length of a training window.
            validation: Length of a validation window, or None to only train.
            warmup: Warmup before every training and validation run.
            anchored: Let every training window start at the start of the feed.

        Returns:
            The results of all training and validation runs, window by window.

        Raises:
            ConfigurationError: If the feed timeframe isn't finite.
        """
        feed_timeframe = self._finite_timeframe(feed, "walk forward")
        if validation is None:
            return self._walk_forward_train(feed, feed_timeframe, period, warmup, anchored)
        return self._walk_forward_validate(feed, feed_timeframe, period, validation, warmup, anchored)

    def _walk_forward_train(
        self,
        feed: Feed,
        feed_timeframe: Timeframe,
        period: TimeSpan,
        warmup: TimeSpan,
        anchored: bool
    ) -> List[RunResult]:
        results = []
        windows = feed_timeframe.split(period)
        for window in windows:
            timeframe = Timeframe(feed_timeframe.start, window.end, window.inclusive) if anchored else window
            results.extend(self.train(feed, timeframe, warmup))
        logger.info(f"Walk forward over {len(windows)} windows finished with {len(results)} runs")
        return results

    def _walk_forward_validate(
        self,
        feed: Feed,
        feed_timeframe: Timeframe,
        period: TimeSpan,
        validation: TimeSpan,
        warmup: TimeSpan,
        anchored: bool
    ) -> List[RunResult]:
        validations = self._validation_windows(feed_timeframe, period, validation)
        if not validations:
            logger.warning(f"Feed timeframe {feed_timeframe} is shorter than {period + validation}, nothing to run")

        results = []
        for i, validation_timeframe in enumerate(validations):
            if anchored or i == 0:
                train_start = feed_timeframe.start
            else:
                train_start = max(feed_timeframe.start, period.subtract_from(validation_timeframe.start))
            training = self.train(feed, Timeframe(train_start, validation_timeframe.start), warmup)
            results.extend(training)

            best_run = best(training)
            validation_run = self.validate(feed, validation_timeframe, best_run.params, warmup)
            results.append(validation_run)
            logger.info(
                f"Window {i + 1}/{len(validations)}: best training score {best_run.score} with {best_run.params}, "
                f"validation score {validation_run.score}"
            )
        return results

    @staticmethod
    def _validation_windows(feed_timeframe: Timeframe, period: TimeSpan, validation: TimeSpan) -> List[Timeframe]:
        """
        Consecutive validation timeframes, the first starting `period` after the feed start. Every
        window starts where the previous one ended and only complete windows are returned.
        """
        start = period.add_to(feed_timeframe.start)
        if start <= feed_timeframe.start:
            raise ConfigurationError(f"period {period} should be positive")

        windows = []
        while start < feed_timeframe.end:
            end = validation.add_to(start)
            if end <= start:
                raise ConfigurationError(f"validation {validation} should be positive")
            if end > feed_timeframe.end:
                break
            if end == feed_timeframe.end:
                windows.append(Timeframe(start, end, feed_timeframe.inclusive))
                break
            windows.append(Timeframe(start, end))
            start = end
        return windows

    def monte_carlo(
        self,
        feed: Feed,
        period: TimeSpan,
        samples: int,
        warmup: TimeSpan = TimeSpan.ZERO
    ) -> List[RunResult]:
        """
        Train the search space on `samples` randomly drawn windows of length `period` from the feed
        timeframe. How the windows are drawn is set by `config.sampling_policy`.

        Raises:
            ConfigurationError: If the feed timeframe isn't finite.
        """
        feed_timeframe = self._finite_timeframe(feed, "monte carlo")
        windows = feed_timeframe.sample(
            period,
            samples,
            resolution=self.config.sampling_resolution,
            random_state=self._random_state,
            policy=self.config.sampling_policy
        )
        results = []
        for window in windows:
            results.extend(self.train(feed, window, warmup))
        logger.info(f"Monte Carlo over {len(windows)} windows finished with {len(results)} runs")
        return results

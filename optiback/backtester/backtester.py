"""
Runs a strategy against a feed.
"""

import copy
import itertools
import threading
from concurrent.futures import Executor, Future
from typing import List, Optional

from optiback.backtester.broker import Broker
from optiback.backtester.sim_broker import SimBroker
from optiback.common.parallel import shared_executor
from optiback.common.timeframe import Timeframe
from optiback.common.timespan import TimeSpan
from optiback.feeds.feed import Feed
from optiback.loggers.base import MetricsLogger
from optiback.loggers.memory import MemoryLogger
from optiback.metrics.base import Metric
from optiback.policies.base import Policy
from optiback.policies.flex_policy import FlexPolicy
from optiback.strategy.base import Strategy
from utils.logger import get_logger

logger = get_logger(__name__)

_run_counter = itertools.count()
_run_counter_lock = threading.Lock()


def _next_run_name() -> str:
    with _run_counter_lock:
        return f"run-{next(_run_counter)}"


class Backtester:
    """
    Combines a strategy, metrics, a policy, a broker and a metrics logger into something that can be
    run against a feed.

    Every step of a run:
        1. The broker is synced with the event, which executes pending orders and updates prices
        2. The strategy generates signals from the event
        3. The policy turns the signals into orders, which are placed at the broker
        4. The metrics are calculated and logged, together with those recorded by the strategy and the policy

    During the warmup period only steps 1 and 2 happen, so strategies can load the data they need
    without trading and without anything being logged.

    Attributes:
        strategy (Strategy): The strategy to run.
        metrics (List[Metric]): Metrics to calculate at every step.
        policy (Policy): Turns signals into orders, defaults to a FlexPolicy.
        broker (Broker): Executes the orders, defaults to a SimBroker.
        logger (MetricsLogger): Stores the metrics, defaults to a MemoryLogger.
    """

    def __init__(
        self,
        strategy: Strategy,
        *metrics: Metric,
        policy: Optional[Policy] = None,
        broker: Optional[Broker] = None,
        logger: Optional[MetricsLogger] = None
    ):
        if not isinstance(strategy, Strategy):
            raise TypeError(f"'strategy' must be an instance of Strategy, not '{type(strategy).__name__}'")
        self.strategy = strategy
        self.metrics: List[Metric] = list(metrics)
        self.policy = policy or FlexPolicy()
        self.broker = broker or SimBroker()
        self.logger = logger or MemoryLogger()

    @property
    def is_simulated(self) -> bool:
        """Whether the broker is the deterministic simulated broker"""
        return isinstance(self.broker, SimBroker)

    def copy(self, **changes) -> "Backtester":
        """Shallow copy with some of the attributes replaced, for example `bt.copy(logger=MemoryLogger())`"""
        result = copy.copy(self)
        for name, value in changes.items():
            if not hasattr(result, name):
                raise AttributeError(f"Backtester has no attribute '{name}'")
            setattr(result, name, value)
        result.metrics = list(result.metrics)
        return result

    def reset(self) -> None:
        """Reset all components to their initial state"""
        self.strategy.reset()
        self.policy.reset()
        self.broker.reset()
        self.logger.reset()
        for metric in self.metrics:
            metric.reset()

    def run(
        self,
        feed: Feed,
        timeframe: Timeframe = Timeframe.INFINITE,
        warmup: TimeSpan = TimeSpan.ZERO,
        name: Optional[str] = None
    ) -> str:
        """
        Run against `feed`, blocking until done.

        Args:
            feed: The feed to replay.
            timeframe: Timeframe to trade and log metrics in.
            warmup: Extra period before the start of `timeframe` during which only the strategy runs.
            name: Name of the run in the logger, generated if not provided.

        Returns:
            The name of the run.
        """
        name = name or _next_run_name()
        run_timeframe = timeframe.extend(before=warmup)

        self.logger.start(name, timeframe)
        self.strategy.start(name, timeframe)

        steps = 0
        for event in feed.play(run_timeframe):
            account = self.broker.sync(event)
            signals = self.strategy.generate(event)
            if event.time < timeframe.start:
                continue

            orders = self.policy.act(signals, account, event)
            self.broker.place(orders)

            results = {}
            for metric in self.metrics:
                results.update(metric.calculate(account, event))
            results.update(self.strategy.get_metrics())
            results.update(self.policy.get_metrics())
            self.logger.log(results, event.time, name)
            steps += 1

        self.strategy.end(name)
        self.logger.end(name)
        logger.debug(f"Finished run {name} over {timeframe} with {steps} steps")
        return name

    def run_async(
        self,
        feed: Feed,
        timeframe: Timeframe = Timeframe.INFINITE,
        warmup: TimeSpan = TimeSpan.ZERO,
        name: Optional[str] = None,
        executor: Optional[Executor] = None
    ) -> Future:
        """
        Same as `run`, but executed on `executor` (the shared worker pool by default). The returned
        future resolves to the name of the run.
        """
        name = name or _next_run_name()
        return (executor or shared_executor()).submit(self.run, feed, timeframe, warmup, name)

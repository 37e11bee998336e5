"""Rolling per-strategy success rate and latency."""

import logging
import threading
import time
from dataclasses import replace
from typing import Optional

from swapengine.swap.models import StrategyPerformance

logger = logging.getLogger(__name__)

EMA_ALPHA = 0.1
PRIOR_SUCCESS_RATE = 0.9
PRIOR_AVERAGE_TIME = 30.0


def ema(current: float, sample: float, alpha: float = EMA_ALPHA) -> float:
    """value * (1 - alpha) + sample * alpha"""
    return current * (1 - alpha) + sample * alpha


class PerformanceTracker:
    """Thread-safe store of StrategyPerformance records.

    Records are created from the prior on first update and never removed.
    """

    def __init__(self, alpha: float = EMA_ALPHA):
        self.alpha = alpha
        self._records: dict[str, StrategyPerformance] = {}
        self._lock = threading.Lock()

    def update(self, name: str, success: bool, duration: float) -> StrategyPerformance:
        with self._lock:
            record = self._records.get(name)
            if record is None:
                record = StrategyPerformance(
                    success_rate=PRIOR_SUCCESS_RATE, average_time=PRIOR_AVERAGE_TIME
                )
                self._records[name] = record

            record.success_rate = ema(record.success_rate, 1.0 if success else 0.0, self.alpha)
            record.average_time = ema(record.average_time, duration, self.alpha)
            record.last_updated = time.time()

            logger.debug(
                f"Performance {name}: success_rate={record.success_rate:.3f} "
                f"average_time={record.average_time:.1f}s"
            )
            return replace(record)

    def get(self, name: str) -> Optional[StrategyPerformance]:
        with self._lock:
            record = self._records.get(name)
            return replace(record) if record else None

    def get_or_prior(self, name: str) -> StrategyPerformance:
        """Record for name, or the prior if the strategy has not run yet."""
        record = self.get(name)
        if record is None:
            return StrategyPerformance(success_rate=PRIOR_SUCCESS_RATE, average_time=PRIOR_AVERAGE_TIME)
        return record

    def snapshot(self) -> dict[str, StrategyPerformance]:
        with self._lock:
            return {name: replace(record) for name, record in self._records.items()}

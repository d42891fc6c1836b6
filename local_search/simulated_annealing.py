"""
Simulated Annealing as a gain adaptor for the local search engine.

The adaptor turns a deterministic gain into a probabilistic accept/reject
decision without touching the engine: improving moves keep their gain,
worsening moves come back as a tiny positive gain with probability
exp(gain / T) and as 0 otherwise. The engine's ``gain > 0`` rule then
accepts exactly the moves annealing wants to accept.

Cooling schedules are stateful callables returning the current temperature:
- ExponentialCoolingSchema: T0 * alpha^k, k = number of queries so far
- ExponentialCoolingSchemaDependantOnTime: T0 * alpha^t, t = elapsed seconds,
  alpha chosen so that T reaches end_temperature after ``duration`` seconds

Both are floored at a positive ``min_temperature``.

Note that the schedule advances once per gain evaluation, not once per
round, so larger neighborhoods cool faster.
"""

import math
import sys
import time
from typing import Any, Callable, Optional, Union

import numpy as np

from utils.log import get_logger

logger = get_logger(__name__)

# Gain reported for an accepted worsening move; it is positive, but smaller
# than any real improvement a best improving round could compare it with.
ACCEPTED_GAIN = sys.float_info.min
REJECTED_GAIN = 0

DEFAULT_MIN_TEMPERATURE = 1e-9


def _check_temperature(name: str, value: float) -> None:
    if not value > 0 or math.isinf(value):
        raise ValueError(f"{name} must be a positive finite temperature, got {value}")


class ExponentialCoolingSchema:
    """
    Geometric cooling keyed on the number of temperature queries.

    Args:
        start_temperature: Initial temperature T0 (> 0)
        alpha: Decay factor per query, 0 < alpha < 1
        min_temperature: Floor the temperature never goes below (> 0)
    """

    def __init__(
        self,
        start_temperature: float,
        alpha: float,
        min_temperature: float = DEFAULT_MIN_TEMPERATURE
    ):
        _check_temperature('start_temperature', start_temperature)
        _check_temperature('min_temperature', min_temperature)
        if not 0 < alpha < 1:
            raise ValueError(f"alpha must be in (0, 1), got {alpha}")

        self.start_temperature = start_temperature
        self.alpha = alpha
        self.min_temperature = min_temperature
        self.iteration = 0

    def temperature_at(self, t: float) -> float:
        return max(self.start_temperature * self.alpha ** t, self.min_temperature)

    def __call__(self) -> float:
        temperature = self.temperature_at(self.iteration)
        self.iteration += 1
        return temperature

    def reset(self) -> None:
        self.iteration = 0


class ExponentialCoolingSchemaDependantOnTime(ExponentialCoolingSchema):
    """
    Geometric cooling keyed on elapsed wall-clock time.

    The temperature starts at ``start_temperature`` and reaches
    ``end_temperature`` after ``duration`` seconds; it keeps decaying
    afterwards down to ``min_temperature``. Time is advisory only: it
    shapes the acceptance probability, it never stops the search.

    Args:
        duration: Seconds to go from start to end temperature (> 0)
        start_temperature: Initial temperature (> 0)
        end_temperature: Temperature after ``duration`` seconds (> 0, < start)
        min_temperature: Floor (> 0)
        clock: Clock returning seconds (default: time.perf_counter)
    """

    def __init__(
        self,
        duration: float,
        start_temperature: float,
        end_temperature: float,
        min_temperature: float = DEFAULT_MIN_TEMPERATURE,
        clock: Callable[[], float] = time.perf_counter
    ):
        if not duration > 0:
            raise ValueError(f"duration must be positive, got {duration}")
        _check_temperature('end_temperature', end_temperature)
        _check_temperature('start_temperature', start_temperature)
        if end_temperature >= start_temperature:
            raise ValueError(
                f"end_temperature ({end_temperature}) must be lower than "
                f"start_temperature ({start_temperature})"
            )

        alpha = (end_temperature / start_temperature) ** (1.0 / duration)
        super().__init__(start_temperature, alpha, min_temperature)

        self.duration = duration
        self.end_temperature = end_temperature
        self.clock = clock
        self.start_time = clock()

    def elapsed(self) -> float:
        return self.clock() - self.start_time

    def __call__(self) -> float:
        self.iteration += 1
        return self.temperature_at(self.elapsed())

    def reset(self) -> None:
        super().reset()
        self.start_time = self.clock()


class SimulatedAnnealingGainAdaptor:
    """
    Wrap a gain so the engine accepts moves like simulated annealing.

    Unlike ordinary gains this one has side effects: every call advances
    the cooling schedule and may draw from the random generator.

    Args:
        gain: Base gain callable (positive means improvement)
        cooling_schedule: Callable returning the current temperature
        rng: numpy Generator or seed for the acceptance draws
    """

    def __init__(
        self,
        gain: Callable[..., Any],
        cooling_schedule: Callable[[], float],
        rng: Union[np.random.Generator, int, None] = None
    ):
        self.gain = gain
        self.cooling_schedule = cooling_schedule
        self.rng = rng if isinstance(rng, np.random.Generator) else np.random.default_rng(rng)

        self.evaluations = 0
        self.accepted_worse = 0
        self.last_temperature: Optional[float] = None

    def __call__(self, *args: Any) -> Any:
        delta = self.gain(*args)
        temperature = self.cooling_schedule()
        self.evaluations += 1
        self.last_temperature = temperature

        if delta > 0:
            return delta

        if not temperature > 0:
            # A schedule outside this module may not floor its temperature
            raise ValueError(f"Cooling schedule returned non-positive temperature {temperature}")

        probability = math.exp(delta / temperature)
        if self.rng.random() < probability:
            self.accepted_worse += 1
            logger.debug(
                "Accepted worsening move (gain=%s, T=%.6g, p=%.4f)",
                delta, temperature, probability
            )
            return ACCEPTED_GAIN
        return REJECTED_GAIN

    def acceptance_rate(self) -> float:
        """Fraction of evaluations that accepted a worsening move."""
        if self.evaluations == 0:
            return 0.0
        return self.accepted_worse / self.evaluations

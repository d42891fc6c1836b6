"""
Search strategies: which candidate move a round of local search commits.

- FirstImprovingStrategy: commit the first candidate with positive gain
- BestImprovingStrategy: scan every candidate, commit the one with the
  largest gain if it is positive (steepest ascent)

A strategy drives one round through the step object it is given; the step
exposes ``components``, ``candidates()``, ``gain()``, ``commit()`` and
``stop()``. Both strategies accept a move only when ``gain > 0``.
"""

from abc import ABC, abstractmethod
from typing import Any


class SearchStrategy(ABC):
    """Base class for local search strategies."""

    name: str = 'base'

    @abstractmethod
    def search(self, step: Any) -> bool:
        """
        Run one round on ``step``.

        Args:
            step: Local search step (single or multi solution)

        Returns:
            True if a move was committed, False if the round terminated
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class FirstImprovingStrategy(SearchStrategy):
    """
    Commit the first candidate with strictly positive gain.

    Candidates are scanned in components order, then element order, then
    the order of the neighborhood generator. The stop condition is asked
    after every candidate that was not accepted.
    """

    name = 'first_improving'

    def search(self, step: Any) -> bool:
        for components in step.components:
            for element, move in step.candidates(components):
                if step.gain(components, element, move) > 0:
                    step.commit(components, element, move)
                    return True
                if step.stop(components, element, move):
                    return False
        return False


class BestImprovingStrategy(SearchStrategy):
    """
    Steepest ascent: commit the candidate with the maximum gain of the round.

    Every candidate of every element (and of every components bundle) is
    evaluated before anything is committed. Ties go to the first candidate
    reaching the maximum in scan order. The stop condition is asked once
    per round, after the full scan, with the best candidate (or the
    last one scanned when nothing improves); when it fires the round
    ends with nothing committed.
    """

    name = 'best_improving'

    def search(self, step: Any) -> bool:
        best = None
        best_gain = None
        last = None

        for components in step.components:
            for element, move in step.candidates(components):
                gain = step.gain(components, element, move)
                if best_gain is None or gain > best_gain:
                    best = (components, element, move)
                    best_gain = gain
                last = (components, element, move)

        if last is None:
            return False

        improving = best_gain > 0
        if step.stop(*(best if improving else last)):
            return False
        if not improving:
            return False

        step.commit(*best)
        return True


STRATEGIES = {
    FirstImprovingStrategy.name: FirstImprovingStrategy,
    BestImprovingStrategy.name: BestImprovingStrategy,
}


def make_strategy(name: str) -> SearchStrategy:
    """Build a strategy from its name ('first_improving' or 'best_improving')."""
    try:
        return STRATEGIES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown search strategy '{name}', expected one of {sorted(STRATEGIES)}"
        ) from None

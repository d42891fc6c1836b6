"""
Local search engine.

Drives a solution through neighborhood exploration, gain evaluation and
commit steps. One call to ``search()`` runs exactly one round under the
configured strategy and reports whether a move was committed; callers (or
the ``local_search`` driver) repeat it until it returns False.

Two step flavours:
- LocalSearchStepMultiSolution: the solution is iterable, every element
  gets its own neighborhood (facility sets, tours, queen positions)
- LocalSearchStep: one opaque solution, handled internally as a
  multi solution of size one
"""

from enum import Enum
from typing import Any, Callable, Iterator, Optional, Tuple

from utils.functors import always_false, always_true
from utils.log import get_logger

from .components import SearchComponents
from .strategies import BestImprovingStrategy, FirstImprovingStrategy, SearchStrategy

logger = get_logger(__name__)


class SearchState(Enum):
    RUNNING = 'running'
    TERMINATED = 'terminated'


class LocalSearchStepMultiSolution:
    """
    One-round local search over a multi-element solution.

    Elements are taken from ``iter(solution)`` at the start of every round,
    and each components bundle is asked for the moves of each element.

    Args:
        solution: Mutable, iterable solution; owned by the caller
        *components: One or more SearchComponents bundles
        strategy: Search strategy (default: FirstImprovingStrategy)
    """

    def __init__(
        self,
        solution: Any,
        *components: SearchComponents,
        strategy: Optional[SearchStrategy] = None
    ):
        if not components:
            raise ValueError("At least one SearchComponents bundle is required")
        for bundle in components:
            if not isinstance(bundle, SearchComponents):
                raise TypeError(
                    f"Expected SearchComponents, got {type(bundle).__name__}"
                )

        self.solution = solution
        self.components: Tuple[SearchComponents, ...] = components
        self.strategy = strategy if strategy is not None else FirstImprovingStrategy()

        self.state = SearchState.RUNNING
        self.rounds = 0
        self.commits = 0

    def elements(self) -> Iterator[Any]:
        return iter(self.solution)

    def moves(self, components: SearchComponents, element: Any):
        return components.get_moves(self.solution, element)

    def candidates(self, components: SearchComponents) -> Iterator[Tuple[Any, Any]]:
        """Yield (element, move) pairs of one components bundle in scan order."""
        for element in self.elements():
            for move in self.moves(components, element):
                yield element, move

    def gain(self, components: SearchComponents, element: Any, move: Any) -> Any:
        return components.gain(self.solution, element, move)

    def commit(self, components: SearchComponents, element: Any, move: Any) -> bool:
        logger.debug("Committing move %r on element %r", move, element)
        self.commits += 1
        return components.commit(self.solution, element, move)

    def stop(self, components: SearchComponents, element: Any, move: Any) -> bool:
        return components.stop_condition(self.solution, element, move)

    def search(self) -> bool:
        """
        Run one round.

        Returns:
            True if a move was committed, False when no improving move
            exists or the stop condition fired (TERMINATED)
        """
        self.rounds += 1
        improved = self.strategy.search(self)
        self.state = SearchState.RUNNING if improved else SearchState.TERMINATED
        return improved

    @property
    def terminated(self) -> bool:
        return self.state is SearchState.TERMINATED


class LocalSearchStep(LocalSearchStepMultiSolution):
    """
    One-round local search over a single solution.

    The solution is its own (only) element, and the components are
    called without the element argument: ``get_moves(solution)``,
    ``gain(solution, move)``, ``commit(solution, move)`` and
    ``stop_condition(solution, move)``.
    """

    def elements(self) -> Iterator[Any]:
        return iter((self.solution,))

    def moves(self, components: SearchComponents, element: Any):
        return components.get_moves(self.solution)

    def gain(self, components: SearchComponents, element: Any, move: Any) -> Any:
        return components.gain(self.solution, move)

    def commit(self, components: SearchComponents, element: Any, move: Any) -> bool:
        logger.debug("Committing move %r", move)
        self.commits += 1
        return components.commit(self.solution, move)

    def stop(self, components: SearchComponents, element: Any, move: Any) -> bool:
        return components.stop_condition(self.solution, move)


def run_local_search(
    step: LocalSearchStepMultiSolution,
    on_success: Callable[[Any], Any] = always_true,
    on_fail: Callable[[Any], Any] = always_false
) -> bool:
    """
    Repeat ``step.search()`` under continuation callbacks.

    After a committed round the search goes on while ``on_success(solution)``
    is truthy. After a failed round it goes on only if ``on_fail(solution)``
    is truthy, which lets a caller perturb the solution and restart.

    Returns:
        True if at least one round committed a move
    """
    improved = False

    while True:
        if step.search():
            improved = True
            if not on_success(step.solution):
                break
        elif not on_fail(step.solution):
            break

    logger.info(
        "Local search (%s) finished after %d rounds, %d commits",
        step.strategy.name, step.rounds, step.commits
    )
    return improved


def local_search(
    solution: Any,
    *components: SearchComponents,
    strategy: Optional[SearchStrategy] = None,
    on_success: Callable[[Any], Any] = always_true,
    on_fail: Callable[[Any], Any] = always_false,
    multi_solution: bool = False
) -> bool:
    """
    Run local search on ``solution`` in place.

    Args:
        solution: Mutable solution owned by the caller
        *components: One or more SearchComponents bundles
        strategy: Search strategy (default: first improving)
        on_success: Called with the solution after each committed round,
            falsy result stops the search
        on_fail: Called with the solution after a round without commit,
            truthy result continues the search
        multi_solution: Treat the solution as a collection of elements

    Returns:
        True if the solution was improved at least once
    """
    step_class = LocalSearchStepMultiSolution if multi_solution else LocalSearchStep
    step = step_class(solution, *components, strategy=strategy)
    return run_local_search(step, on_success, on_fail)


def first_improving(solution: Any, *components: SearchComponents, **kwargs: Any) -> bool:
    """Local search with the first improving strategy until a local optimum."""
    return local_search(solution, *components, strategy=FirstImprovingStrategy(), **kwargs)


def best_improving(solution: Any, *components: SearchComponents, **kwargs: Any) -> bool:
    """Local search with the best improving strategy until a local optimum."""
    return local_search(solution, *components, strategy=BestImprovingStrategy(), **kwargs)

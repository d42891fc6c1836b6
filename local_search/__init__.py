"""
Local search module.

Contains the generic local search machinery:
- SearchComponents: bundle of neighborhood, gain, commit and stop condition
- FirstImprovingStrategy / BestImprovingStrategy: which move a round commits
- LocalSearchStep / LocalSearchStepMultiSolution: one-round search engines
- local_search, first_improving, best_improving: drivers looping to an optimum
- SimulatedAnnealingGainAdaptor + cooling schedules: probabilistic acceptance
- RecordSolutionCommitAdapter: keeps the best solution under annealing
- StopConditionCountLimit / StopConditionTimeLimit: stop conditions
"""

from .components import ObjectiveFunctionComponents, ObjectiveGain, SearchComponents
from .engine import (
    LocalSearchStep,
    LocalSearchStepMultiSolution,
    SearchState,
    best_improving,
    first_improving,
    local_search,
    run_local_search,
)
from .recorder import FunctorToComparator, RecordSolutionCommitAdapter
from .simulated_annealing import (
    ExponentialCoolingSchema,
    ExponentialCoolingSchemaDependantOnTime,
    SimulatedAnnealingGainAdaptor,
)
from .stop_conditions import StopConditionCountLimit, StopConditionTimeLimit, never_stop
from .strategies import (
    BestImprovingStrategy,
    FirstImprovingStrategy,
    SearchStrategy,
    make_strategy,
)

__all__ = [
    'SearchComponents',
    'ObjectiveFunctionComponents',
    'ObjectiveGain',
    'SearchStrategy',
    'FirstImprovingStrategy',
    'BestImprovingStrategy',
    'make_strategy',
    'LocalSearchStep',
    'LocalSearchStepMultiSolution',
    'SearchState',
    'local_search',
    'run_local_search',
    'first_improving',
    'best_improving',
    'SimulatedAnnealingGainAdaptor',
    'ExponentialCoolingSchema',
    'ExponentialCoolingSchemaDependantOnTime',
    'RecordSolutionCommitAdapter',
    'FunctorToComparator',
    'StopConditionCountLimit',
    'StopConditionTimeLimit',
    'never_stop',
]

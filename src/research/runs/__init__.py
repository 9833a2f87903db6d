"""Research run orchestration and queries."""

from .controller import RunController, ResearchOutcome
from .ladder import detect_with_relaxation, build_attempts, LadderAttempt, LadderResult
from .queries import ResearchQueries, TopicFilters, RunFilters
from .recorder import RunRecorder

__all__ = [
    'RunController',
    'ResearchOutcome',
    'detect_with_relaxation',
    'build_attempts',
    'LadderAttempt',
    'LadderResult',
    'ResearchQueries',
    'TopicFilters',
    'RunFilters',
    'RunRecorder'
]

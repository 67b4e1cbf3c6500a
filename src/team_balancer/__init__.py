"""Balanced two-team splits for a weekly football game.

Three strategies share one result shape:

- ``fast``: position-stratified snake draft plus swap refinement
- ``annealed``: simulated annealing seeded from the draft
- ``binary-program``: PuLP binary program, falling back to annealing
"""

from .data import (
    Algorithm,
    AlgorithmConfig,
    FairnessMetrics,
    GenerationMetadata,
    MatchSize,
    MetricWeights,
    Player,
    Position,
    TeamGenerationResult,
    TeamPlayer,
    calculate_ovr,
)
from .errors import InsufficientPlayersError, SolverError, SolverInfeasibleError
from .fairness import score_split
from .main import generate_teams

__all__ = [
    "Algorithm",
    "AlgorithmConfig",
    "FairnessMetrics",
    "GenerationMetadata",
    "MatchSize",
    "MetricWeights",
    "Player",
    "Position",
    "TeamGenerationResult",
    "TeamPlayer",
    "calculate_ovr",
    "InsufficientPlayersError",
    "SolverError",
    "SolverInfeasibleError",
    "score_split",
    "generate_teams",
]

"""Binary-program optimiser with an annealing fallback.

Best-effort rather than certified optimal: infeasible models and solver
failures are recovered here by annealing the full pool, and the caller sees
the substitution only through the result's ``algorithm`` and
``fallback_reason`` metadata.
"""

from __future__ import annotations

import logging
import random
import time
from typing import List, Optional, Sequence

from team_balancer.annealing import anneal
from team_balancer.data import Algorithm, AlgorithmConfig, ModelInputData, Player, TeamGenerationResult
from team_balancer.draft import build_generation_result, select_candidates
from team_balancer.errors import SolverError, SolverInfeasibleError
from team_balancer.formulation import DecisionVariables, formulate_problem
from team_balancer.solver import BinaryProgramSolver, PulpSolver, SolverOutcome

logger = logging.getLogger(__name__)

ALGORITHM_TAG = "ilp-solver"


def build_model_input_data(players: Sequence[Player], team_size: int, config: AlgorithmConfig) -> ModelInputData:
    """Truncate the pool to the top ``2 * team_size`` and wrap it for the formulation."""

    return ModelInputData(candidates=tuple(select_candidates(players, team_size)), team_size=team_size, config=config)


def split_by_assignment(
    model_input_data: ModelInputData,
    decision_variables: DecisionVariables,
    outcome: SolverOutcome,
) -> tuple[List[Player], List[Player]]:
    """Rank candidates by raw assignment value and take exactly ``team_size`` as Red.

    Never thresholds the values, so solver rounding noise cannot unbalance the
    team sizes.
    """

    def _value(index: int) -> float:
        return float(outcome.assignment.get(decision_variables.assign_red[index].name, 0.0))

    ranked = sorted(model_input_data.candidate_indices, key=_value, reverse=True)
    red_indices = set(ranked[: model_input_data.team_size])

    red = [model_input_data.candidates[i] for i in model_input_data.candidate_indices if i in red_indices]
    white = [model_input_data.candidates[i] for i in model_input_data.candidate_indices if i not in red_indices]
    return red, white


def _solve(
    model_input_data: ModelInputData,
    solver: BinaryProgramSolver,
) -> tuple[DecisionVariables, SolverOutcome]:
    problem, decision_variables = formulate_problem(model_input_data)
    logger.info("Problem built: variables=%d constraints=%d", len(problem.variables()), len(problem.constraints))

    outcome = solver.solve(problem, time_limit_seconds=model_input_data.config.solver_time_limit_seconds)
    if not outcome.feasible:
        raise SolverInfeasibleError(f"Solver returned status {outcome.status!r}")
    return decision_variables, outcome


def optimize(
    players: Sequence[Player],
    team_size: int,
    config: Optional[AlgorithmConfig] = None,
    *,
    solver: Optional[BinaryProgramSolver] = None,
    rng: Optional[random.Random] = None,
) -> TeamGenerationResult:
    """Solve the split as a binary program; anneal the full pool if that fails.

    Raises
    ------
    InsufficientPlayersError
        If fewer than ``2 * team_size`` players are supplied. Solver errors and
        infeasibility never propagate.
    """

    started = time.perf_counter()
    if config is None:
        config = AlgorithmConfig()
    if rng is None:
        rng = random.Random()
    if solver is None:
        solver = PulpSolver()

    model_input_data = build_model_input_data(players, team_size, config)

    try:
        decision_variables, outcome = _solve(model_input_data, solver)
    except SolverError as e:
        logger.warning("Binary program failed (%s); falling back to annealing on %d players", e, len(players))
        return anneal(
            players,
            team_size,
            config,
            rng=rng,
            requested_algorithm=Algorithm.BINARY_PROGRAM,
            fallback_reason=str(e),
        )

    red, white = split_by_assignment(model_input_data, decision_variables, outcome)
    result = build_generation_result(
        red,
        white,
        algorithm=ALGORITHM_TAG,
        config=config,
        rng=rng,
        started=started,
        iterations=None,
        requested_algorithm=Algorithm.BINARY_PROGRAM,
    )

    logger.info(
        "Binary program complete: status=%s solver_objective=%.3f fairness=%.3f time_ms=%d",
        outcome.status,
        outcome.objective_value,
        result.metadata.fairness_score,
        result.metadata.time_ms,
    )
    return result

from __future__ import annotations

import random
from typing import Optional

import pulp
import pytest

from team_balancer.data import Algorithm, AlgorithmConfig, Player, Position
from team_balancer.errors import InsufficientPlayersError, SolverError
from team_balancer.main import generate_teams, parse_algorithm, resolve_config
from team_balancer.solver import SolverOutcome


def _make_pool(size: int) -> list[Player]:
    rng = random.Random(size)
    positions = list(Position.__members__.values())
    return [
        Player(
            player_id=f"p{i:02d}",
            name=f"Player {i}",
            fitness=rng.randint(2, 10),
            defence=rng.randint(2, 10),
            attack=rng.randint(2, 10),
            ball_use=rng.randint(2, 10),
            position=positions[i % len(positions)],
        )
        for i in range(size)
    ]


class _FailingSolver:
    def solve(self, problem: pulp.LpProblem, *, time_limit_seconds: Optional[int] = None) -> SolverOutcome:
        raise SolverError("boom")


@pytest.mark.parametrize(
    ("algorithm", "tag"),
    [
        (Algorithm.FAST, "snake-draft"),
        (Algorithm.ANNEALED, "constraint-opt"),
        (Algorithm.ANNEALED_THOROUGH, "constraint-opt-thorough"),
        (Algorithm.BINARY_PROGRAM, "ilp-solver"),
    ],
)
def test_generate_teams_dispatches_each_algorithm(algorithm: Algorithm, tag: str) -> None:
    result = generate_teams(_make_pool(14), 6, algorithm, rng=random.Random(0))

    assert result.metadata.algorithm == tag
    assert result.metadata.requested_algorithm is algorithm
    assert len(result.red_team) == 6
    assert len(result.white_team) == 6


def test_generate_teams_accepts_algorithm_names() -> None:
    result = generate_teams(_make_pool(10), 5, "annealed", {"max_iterations": 10}, rng=random.Random(0))

    assert result.metadata.algorithm == "constraint-opt"
    assert result.metadata.iterations == 10


def test_generate_teams_defaults_to_fast() -> None:
    result = generate_teams(_make_pool(10), 5, rng=random.Random(0))
    assert result.metadata.requested_algorithm is Algorithm.FAST


def test_generate_teams_passes_solver_through_to_binary_program() -> None:
    result = generate_teams(
        _make_pool(12),
        6,
        Algorithm.BINARY_PROGRAM,
        rng=random.Random(0),
        solver=_FailingSolver(),
    )

    assert result.metadata.algorithm == "constraint-opt"
    assert result.metadata.requested_algorithm is Algorithm.BINARY_PROGRAM
    assert result.metadata.fallback_reason == "boom"


@pytest.mark.parametrize("algorithm", list(Algorithm.__members__.values()))
def test_generate_teams_raises_insufficient_players_for_every_algorithm(algorithm: Algorithm) -> None:
    with pytest.raises(InsufficientPlayersError) as excinfo:
        generate_teams(_make_pool(11), 6, algorithm, solver=_FailingSolver())

    assert excinfo.value.shortfall == 1


def test_parse_algorithm_raises_on_unknown_name() -> None:
    with pytest.raises(ValueError, match="Unknown algorithm"):
        parse_algorithm("ilp")


def test_generate_teams_raises_on_unknown_algorithm() -> None:
    with pytest.raises(ValueError):
        generate_teams(_make_pool(10), 5, "greedy")


def test_resolve_config() -> None:
    assert resolve_config(None) == AlgorithmConfig()

    config = AlgorithmConfig(max_iterations=7)
    assert resolve_config(config) is config

    merged = resolve_config({"temperature": 3.0, "weights": {"ovr": 2.0}})
    assert merged.temperature == 3.0
    assert merged.weights.ovr == 2.0
    assert merged.weights.fitness == 0.8

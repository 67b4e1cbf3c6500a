from __future__ import annotations

import logging
import random
from typing import Any, Mapping, Optional, Sequence, Union

from team_balancer.annealing import anneal, anneal_thorough
from team_balancer.binary_program import optimize
from team_balancer.data import Algorithm, AlgorithmConfig, Player, TeamGenerationResult
from team_balancer.draft import generate_draft_teams
from team_balancer.solver import BinaryProgramSolver


def configure_logging(*, level: int = logging.INFO) -> None:
    """Configure a simple root logger that writes to stdout.

    This is safe to call multiple times.
    """

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        )
    else:
        root.setLevel(level)


logger = logging.getLogger(__name__)


def parse_algorithm(value: Union[str, Algorithm]) -> Algorithm:
    try:
        return Algorithm(value)
    except ValueError as e:
        choices = ", ".join(a.value for a in Algorithm)
        raise ValueError(f"Unknown algorithm {value!r}; expected one of: {choices}") from e


def resolve_config(config: Union[AlgorithmConfig, Mapping[str, Any], None]) -> AlgorithmConfig:
    """Accept a full config, a mapping of overrides, or nothing (defaults)."""

    if config is None:
        return AlgorithmConfig()
    if isinstance(config, AlgorithmConfig):
        return config
    return AlgorithmConfig().with_overrides(**dict(config))


def generate_teams(
    players: Sequence[Player],
    team_size: int,
    algorithm: Union[str, Algorithm] = Algorithm.FAST,
    config: Union[AlgorithmConfig, Mapping[str, Any], None] = None,
    *,
    rng: Optional[random.Random] = None,
    solver: Optional[BinaryProgramSolver] = None,
    log_level: int | None = None,
) -> TeamGenerationResult:
    """Top-level entrypoint: split ``players`` into two teams of ``team_size``.

    Notes
    -----
    ``binary-program`` may silently fall back to annealing; inspect
    ``result.metadata.algorithm`` (or ``result.is_fallback``) to tell.

    Raises
    ------
    InsufficientPlayersError
        If fewer than ``2 * team_size`` players are supplied.
    """

    if log_level is not None:
        configure_logging(level=log_level)

    selected = parse_algorithm(algorithm)
    resolved = resolve_config(config)

    logger.info(
        "Generating teams: algorithm=%s team_size=%d pool=%d",
        selected.value,
        team_size,
        len(players),
    )

    if selected is Algorithm.FAST:
        return generate_draft_teams(players, team_size, resolved, rng=rng)
    if selected is Algorithm.ANNEALED:
        return anneal(players, team_size, resolved, rng=rng)
    if selected is Algorithm.ANNEALED_THOROUGH:
        return anneal_thorough(players, team_size, resolved, rng=rng)
    return optimize(players, team_size, resolved, solver=solver, rng=rng)

"""Draft allocator: position-stratified snake draft plus pairwise-swap refinement.

This is the fast path, and the seed for both optimisers.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

from team_balancer.data import (
    Algorithm,
    AlgorithmConfig,
    GenerationMetadata,
    Player,
    Position,
    TeamGenerationResult,
    TeamPlayer,
    team_total_ovr,
)
from team_balancer.errors import InsufficientPlayersError
from team_balancer.fairness import score_split

logger = logging.getLogger(__name__)

ALGORITHM_TAG = "snake-draft"

MAX_REFINEMENT_PASSES = 100

# Buckets are drafted in this order.
DRAFT_POSITION_ORDER: tuple[Position, ...] = (Position.DEF, Position.ATT, Position.ALR)


@dataclass(frozen=True, slots=True)
class DraftResult:
    red_team: tuple[TeamPlayer, ...]
    white_team: tuple[TeamPlayer, ...]
    refinement_passes: int

    # Total-OVR gap before each refinement pass, plus the final gap.
    gap_history: tuple[float, ...]


def select_candidates(players: Sequence[Player], team_size: int) -> List[Player]:
    """Top ``2 * team_size`` players by OVR; the rest sit this match out."""

    if team_size < 1:
        raise ValueError("team_size must be >= 1")
    if len(players) < team_size * 2:
        raise InsufficientPlayersError(team_size=team_size, available=len(players))

    # sorted() is stable, so equal OVRs keep their input order.
    return sorted(players, key=lambda p: p.ovr, reverse=True)[: team_size * 2]


def _snake_draft(candidates: Sequence[Player], team_size: int) -> tuple[List[Player], List[Player]]:
    red: List[Player] = []
    white: List[Player] = []

    for position in DRAFT_POSITION_ORDER:
        bucket = sorted((p for p in candidates if p.position == position), key=lambda p: p.ovr, reverse=True)
        for index, player in enumerate(bucket):
            if index % 2 == 0:
                (red if len(red) < team_size else white).append(player)
            else:
                (white if len(white) < team_size else red).append(player)

    # Move the most recently drafted (lowest priority) surplus players across.
    while len(red) > team_size:
        white.append(red.pop())
    while len(white) > team_size:
        red.append(white.pop())

    return red, white


def _refine_by_swaps(red: List[Player], white: List[Player], *, max_passes: int = MAX_REFINEMENT_PASSES) -> List[float]:
    """First-improvement swap search on the total-OVR gap. Mutates both lists.

    Returns the gap measured at the start of each pass plus the final gap.
    """

    gaps: List[float] = [abs(team_total_ovr(red) - team_total_ovr(white))]

    for _ in range(max_passes):
        red_ovr = team_total_ovr(red)
        white_ovr = team_total_ovr(white)
        current_gap = abs(red_ovr - white_ovr)
        improved = False

        for i in range(len(red)):
            for j in range(len(white)):
                delta = white[j].ovr - red[i].ovr
                if abs((red_ovr + delta) - (white_ovr - delta)) < current_gap:
                    red[i], white[j] = white[j], red[i]
                    improved = True
                    break
            if improved:
                break

        if not improved:
            break
        gaps.append(abs(team_total_ovr(red) - team_total_ovr(white)))

    return gaps


def draft_lineup(players: Sequence[Player], team_size: int) -> tuple[List[Player], List[Player], List[float]]:
    """Deterministic draft line-up without captains: (red, white, gap_history)."""

    candidates = select_candidates(players, team_size)
    red, white = _snake_draft(candidates, team_size)
    gaps = _refine_by_swaps(red, white)
    return red, white, gaps


def assign_random_captains(
    red: Sequence[Player],
    white: Sequence[Player],
    rng: random.Random,
) -> tuple[tuple[TeamPlayer, ...], tuple[TeamPlayer, ...]]:
    """Wrap both rosters as TeamPlayers with exactly one captain per team."""

    def _with_captain(team: Sequence[Player]) -> tuple[TeamPlayer, ...]:
        if not team:
            return ()
        captain_index = rng.randrange(len(team))
        return tuple(TeamPlayer(player=p, is_captain=i == captain_index) for i, p in enumerate(team))

    return _with_captain(red), _with_captain(white)


def elapsed_ms(started: float) -> int:
    return int(round((time.perf_counter() - started) * 1000))


def build_generation_result(
    red: Sequence[Player],
    white: Sequence[Player],
    *,
    algorithm: str,
    config: AlgorithmConfig,
    rng: random.Random,
    started: float,
    iterations: Optional[int],
    requested_algorithm: Algorithm,
    fallback_reason: Optional[str] = None,
) -> TeamGenerationResult:
    """Assign captains, score the final split and attach metadata."""

    red_team, white_team = assign_random_captains(red, white, rng)
    fairness = score_split(red_team, white_team, config)

    metadata = GenerationMetadata(
        algorithm=algorithm,
        fairness_score=fairness.score,
        iterations=iterations,
        time_ms=elapsed_ms(started),
        requested_algorithm=requested_algorithm,
        fallback_reason=fallback_reason,
    )
    return TeamGenerationResult(red_team=red_team, white_team=white_team, metadata=metadata, metrics=fairness.metrics)


def draft_teams(players: Sequence[Player], team_size: int, *, rng: Optional[random.Random] = None) -> DraftResult:
    """Split ``players`` into two balanced teams of ``team_size``.

    Raises
    ------
    InsufficientPlayersError
        If fewer than ``2 * team_size`` players are supplied.
    """

    if rng is None:
        rng = random.Random()

    red, white, gaps = draft_lineup(players, team_size)
    red_team, white_team = assign_random_captains(red, white, rng)

    return DraftResult(
        red_team=red_team,
        white_team=white_team,
        refinement_passes=len(gaps) - 1,
        gap_history=tuple(gaps),
    )


def generate_draft_teams(
    players: Sequence[Player],
    team_size: int,
    config: Optional[AlgorithmConfig] = None,
    *,
    rng: Optional[random.Random] = None,
) -> TeamGenerationResult:
    """Fast path: draft only, scored with the full fairness model."""

    started = time.perf_counter()
    if config is None:
        config = AlgorithmConfig()
    if rng is None:
        rng = random.Random()

    red, white, gaps = draft_lineup(players, team_size)
    result = build_generation_result(
        red,
        white,
        algorithm=ALGORITHM_TAG,
        config=config,
        rng=rng,
        started=started,
        iterations=len(gaps) - 1,
        requested_algorithm=Algorithm.FAST,
    )

    logger.info(
        "Draft complete: team_size=%d gap=%.2f passes=%d score=%.3f",
        team_size,
        gaps[-1],
        len(gaps) - 1,
        result.metadata.fairness_score,
    )
    return result

"""Simulated-annealing optimiser over swap neighbourhoods.

Starts from the draft line-up and minimises the full weighted fairness score,
not just the OVR gap.
"""

from __future__ import annotations

import logging
import math
import random
import time
from typing import List, Optional, Sequence

from team_balancer.data import THOROUGH_ANNEALING, Algorithm, AlgorithmConfig, Player, TeamGenerationResult
from team_balancer.draft import build_generation_result, draft_lineup
from team_balancer.fairness import score_split

logger = logging.getLogger(__name__)

ALGORITHM_TAG = "constraint-opt"
THOROUGH_ALGORITHM_TAG = "constraint-opt-thorough"

MIN_TEMPERATURE = 0.01

# Probability that a move is a 1-for-1 swap; otherwise 2-for-2.
SINGLE_SWAP_PROBABILITY = 0.8


def _distinct_pair(rng: random.Random, size: int) -> tuple[int, int]:
    first = rng.randrange(size)
    second = rng.randrange(size)
    while second == first:
        second = rng.randrange(size)
    return first, second


def generate_neighbour(
    red: Sequence[Player],
    white: Sequence[Player],
    rng: random.Random,
) -> tuple[List[Player], List[Player]]:
    """Return swapped copies of both rosters; the inputs are left untouched."""

    new_red = list(red)
    new_white = list(white)

    single = rng.random() < SINGLE_SWAP_PROBABILITY
    if single or len(new_red) < 2 or len(new_white) < 2:
        i = rng.randrange(len(new_red))
        j = rng.randrange(len(new_white))
        new_red[i], new_white[j] = new_white[j], new_red[i]
        return new_red, new_white

    red_1, red_2 = _distinct_pair(rng, len(new_red))
    white_1, white_2 = _distinct_pair(rng, len(new_white))
    new_red[red_1], new_white[white_1] = new_white[white_1], new_red[red_1]
    new_red[red_2], new_white[white_2] = new_white[white_2], new_red[red_2]
    return new_red, new_white


def _accept(delta: float, temperature: float, rng: random.Random) -> bool:
    # Metropolis criterion.
    if delta < 0:
        return True
    return rng.random() < math.exp(-delta / temperature)


def run_annealing(
    red: Sequence[Player],
    white: Sequence[Player],
    config: AlgorithmConfig,
    rng: random.Random,
) -> tuple[List[Player], List[Player], float, int]:
    """Anneal from a starting split. Returns (best_red, best_white, best_score, iterations)."""

    current_red = list(red)
    current_white = list(white)
    current_score = score_split(current_red, current_white, config).score

    best_red, best_white, best_score = list(current_red), list(current_white), current_score

    temperature = config.temperature
    iterations = 0

    while iterations < config.max_iterations and temperature > MIN_TEMPERATURE:
        iterations += 1

        new_red, new_white = generate_neighbour(current_red, current_white, rng)
        new_score = score_split(new_red, new_white, config).score
        delta = new_score - current_score

        if _accept(delta, temperature, rng):
            current_red, current_white, current_score = new_red, new_white, new_score

            if current_score < best_score:
                best_red, best_white, best_score = list(current_red), list(current_white), current_score
                logger.debug("New best at iteration %d: score=%.3f temperature=%.4f", iterations, best_score, temperature)

        temperature *= config.cooling_rate

    return best_red, best_white, best_score, iterations


def anneal(
    players: Sequence[Player],
    team_size: int,
    config: Optional[AlgorithmConfig] = None,
    *,
    rng: Optional[random.Random] = None,
    algorithm: str = ALGORITHM_TAG,
    requested_algorithm: Algorithm = Algorithm.ANNEALED,
    fallback_reason: Optional[str] = None,
) -> TeamGenerationResult:
    """Seed with the draft line-up, then anneal on the weighted fairness score.

    The returned split is never worse than the seed.
    """

    started = time.perf_counter()
    if config is None:
        config = AlgorithmConfig()
    if rng is None:
        rng = random.Random()

    seed_red, seed_white, _gaps = draft_lineup(players, team_size)
    best_red, best_white, best_score, iterations = run_annealing(seed_red, seed_white, config, rng)

    result = build_generation_result(
        best_red,
        best_white,
        algorithm=algorithm,
        config=config,
        rng=rng,
        started=started,
        iterations=iterations,
        requested_algorithm=requested_algorithm,
        fallback_reason=fallback_reason,
    )

    logger.info(
        "Annealing complete (%s): score=%.3f iterations=%d time_ms=%d",
        algorithm,
        best_score,
        iterations,
        result.metadata.time_ms,
    )
    return result


def anneal_thorough(
    players: Sequence[Player],
    team_size: int,
    config: Optional[AlgorithmConfig] = None,
    *,
    rng: Optional[random.Random] = None,
) -> TeamGenerationResult:
    """Higher-effort annealing (1000 iterations, T0=15, cooling 0.99)."""

    base = config if config is not None else AlgorithmConfig()
    return anneal(
        players,
        team_size,
        base.with_overrides(**THOROUGH_ANNEALING),
        rng=rng,
        algorithm=THOROUGH_ALGORITHM_TAG,
        requested_algorithm=Algorithm.ANNEALED_THOROUGH,
    )

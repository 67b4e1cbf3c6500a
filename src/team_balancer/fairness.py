"""Fairness scoring for a two-team split.

Lower scores are more balanced. Everything here is a pure function of its
inputs; rosters are never reordered or mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from team_balancer.data import AlgorithmConfig, FairnessMetrics, MetricWeights, Position, Rated

# Upper bound on how many top players per team feed the top-heaviness metric.
TOP_HEAVINESS_MAX_PLAYERS = 3


@dataclass(frozen=True, slots=True)
class FairnessScore:
    score: float
    metrics: FairnessMetrics


def attribute_total(team: Sequence[Rated], attr: str) -> float:
    return sum(getattr(p, attr) for p in team)


def attribute_diff(red: Sequence[Rated], white: Sequence[Rated], attr: str) -> float:
    return abs(attribute_total(red, attr) - attribute_total(white, attr))


def top_heaviness(red: Sequence[Rated], white: Sequence[Rated]) -> float:
    """Difference between the summed OVR of each team's best players.

    Catches one side stacking its stars even when total OVR is level.
    """

    top_count = min(TOP_HEAVINESS_MAX_PLAYERS, len(red) // 2)

    def _top_sum(team: Sequence[Rated]) -> float:
        return sum(sorted((p.ovr for p in team), reverse=True)[:top_count])

    return abs(_top_sum(red) - _top_sum(white))


def count_position_violations(
    red: Sequence[Rated],
    white: Sequence[Rated],
    min_positions: Mapping[Position, int],
) -> int:
    """Total positional shortfall across both teams and all positions."""

    violations = 0
    for team in (red, white):
        counts = {pos: 0 for pos in Position.__members__.values()}
        for p in team:
            counts[p.position] += 1
        for pos in Position.__members__.values():
            violations += max(0, int(min_positions[pos]) - counts[pos])
    return violations


def weighted_score(metrics: FairnessMetrics, weights: MetricWeights) -> float:
    return (
        metrics.ovr_diff * weights.ovr
        + metrics.fitness_diff * weights.fitness
        + metrics.attack_diff * weights.attack
        + metrics.defence_diff * weights.defence
        + metrics.ball_use_diff * weights.ball_use
        + metrics.top_heaviness_diff * weights.top_heaviness
        + metrics.position_violations * weights.position_violation
    )


def compute_metrics(
    red: Sequence[Rated],
    white: Sequence[Rated],
    min_positions: Mapping[Position, int],
) -> FairnessMetrics:
    return FairnessMetrics(
        ovr_diff=attribute_diff(red, white, "ovr"),
        fitness_diff=attribute_diff(red, white, "fitness"),
        attack_diff=attribute_diff(red, white, "attack"),
        defence_diff=attribute_diff(red, white, "defence"),
        ball_use_diff=attribute_diff(red, white, "ball_use"),
        top_heaviness_diff=top_heaviness(red, white),
        position_violations=count_position_violations(red, white, min_positions),
    )


def score_split(
    red: Sequence[Rated],
    white: Sequence[Rated],
    config: Optional[AlgorithmConfig] = None,
) -> FairnessScore:
    """Score a split under the config's weights and position minimums."""

    if config is None:
        config = AlgorithmConfig()

    metrics = compute_metrics(red, white, config.min_positions)
    return FairnessScore(score=weighted_score(metrics, config.weights), metrics=metrics)

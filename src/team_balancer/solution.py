from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence

from team_balancer.data import Position, TeamGenerationResult, TeamPlayer, team_average_ovr, team_total_ovr


@dataclass(frozen=True, slots=True)
class TeamEntry:
    player_id: str
    player_name: str
    position: str
    ovr: float
    is_captain: bool


@dataclass(frozen=True, slots=True)
class TeamSummary:
    colour: str
    player_count: int
    total_ovr: float
    average_ovr: float
    captain_player_name: str
    players: List[TeamEntry]


@dataclass(frozen=True, slots=True)
class ResultSummary:
    algorithm: str
    requested_algorithm: str
    fairness_score: float
    iterations: Optional[int]
    time_ms: int
    fallback_reason: Optional[str]
    metrics: Dict[str, float]
    red: TeamSummary
    white: TeamSummary


def _team_summary(colour: str, team: Sequence[TeamPlayer]) -> TeamSummary:
    position_order: dict[str, int] = {pos.value: i for i, pos in enumerate(Position.__members__.values())}

    entries = [
        TeamEntry(
            player_id=p.player_id,
            player_name=p.name,
            position=p.position.value,
            ovr=p.ovr,
            is_captain=p.is_captain,
        )
        for p in team
    ]
    entries.sort(key=lambda e: (position_order.get(e.position, 999), -e.ovr, e.player_name))

    captain = next((p.name for p in team if p.is_captain), "")

    return TeamSummary(
        colour=colour,
        player_count=len(team),
        total_ovr=round(team_total_ovr(team), 1),
        average_ovr=team_average_ovr(team),
        captain_player_name=captain,
        players=entries,
    )


def build_result_summary(result: TeamGenerationResult) -> ResultSummary:
    """Build a JSON-serialisable summary of a generation result."""

    metadata = result.metadata
    return ResultSummary(
        algorithm=metadata.algorithm,
        requested_algorithm=metadata.requested_algorithm.value,
        fairness_score=round(metadata.fairness_score, 4),
        iterations=metadata.iterations,
        time_ms=metadata.time_ms,
        fallback_reason=metadata.fallback_reason,
        metrics={k: round(float(v), 4) for k, v in asdict(result.metrics).items()},
        red=_team_summary("red", result.red_team),
        white=_team_summary("white", result.white_team),
    )


def result_summary_to_json_dict(summary: ResultSummary) -> Dict[str, Any]:
    return asdict(summary)


def dumps_result_summary_pretty(summary: ResultSummary) -> str:
    return json.dumps(result_summary_to_json_dict(summary), indent=2, sort_keys=False)

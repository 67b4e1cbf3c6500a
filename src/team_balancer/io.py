"""I/O utilities for building the balancer's domain objects.

This module owns:
- file format knowledge (JSON)
- parsing and validation
- construction of domain objects from :mod:`team_balancer.data`

Keeping this separate from :mod:`team_balancer.data` makes the core model easy
to test and reuse.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Mapping

from team_balancer.data import AlgorithmConfig, Player, Position

# Aliases seen in hand-edited player files.
_POSITION_ALIASES: Mapping[str, Position] = {
    "DEFENDER": Position.DEF,
    "ATTACKER": Position.ATT,
    "ALL-ROUNDER": Position.ALR,
    "ALLROUNDER": Position.ALR,
    "ALL ROUNDER": Position.ALR,
}

# JSON config key -> AlgorithmConfig field. snake_case keys map to themselves.
_CONFIG_KEY_MAP: Mapping[str, str] = {
    "maxIterations": "max_iterations",
    "temperature": "temperature",
    "coolingRate": "cooling_rate",
    "minPositions": "min_positions",
    "weights": "weights",
    "solverTimeLimitSeconds": "solver_time_limit_seconds",
}

_WEIGHT_KEY_MAP: Mapping[str, str] = {
    "ballUse": "ball_use",
    "topHeaviness": "top_heaviness",
    "positionViolation": "position_violation",
}


def parse_position_str(value: str) -> Position:
    """Parse position strings case-insensitively, accepting common aliases."""

    v = value.strip().upper()
    if v in _POSITION_ALIASES:
        return _POSITION_ALIASES[v]

    try:
        return Position(v)
    except ValueError as e:
        raise ValueError(f"Unknown position string: {value!r}") from e


def _attribute(rec: Mapping[str, Any], *keys: str) -> int:
    for key in keys:
        if key in rec:
            return int(rec[key])
    raise ValueError(f"Player record {rec.get('id')!r} missing attribute {keys[0]!r}")


def player_from_record(rec: Mapping[str, Any]) -> Player:
    """Build a :class:`Player` from one JSON record.

    A stored ``ovr`` is ignored: OVR is always derived from the raw attributes.
    """

    try:
        player_id = str(rec["id"])
    except KeyError as e:
        raise ValueError(f"Player record missing 'id': {dict(rec)!r}") from e

    return Player(
        player_id=player_id,
        name=str(rec.get("name", "")).strip(),
        fitness=_attribute(rec, "fitness"),
        defence=_attribute(rec, "defence"),
        attack=_attribute(rec, "attack"),
        ball_use=_attribute(rec, "ballUse", "ball_use"),
        position=parse_position_str(str(rec.get("position", ""))),
    )


def load_players_from_json(path: str | Path, *, player_id_filter: FrozenSet[str] | None = None) -> List[Player]:
    """Load players from a JSON list of records.

    Parameters
    ----------
    player_id_filter:
        If provided, only players whose id is in this set are returned (e.g.
        the players available this week).
    """

    path = Path(path)
    raw = json.loads(path.read_text(encoding="utf-8-sig"))
    if not isinstance(raw, list):
        raise ValueError(f"{path.name} must contain a JSON list of player records")

    players: List[Player] = []
    seen: set[str] = set()
    for index, rec in enumerate(raw):
        if not isinstance(rec, dict):
            raise ValueError(f"{path.name}: player record {index} must be a JSON object (got {type(rec).__name__})")
        player = player_from_record(rec)
        if player.player_id in seen:
            raise ValueError(f"Duplicate player id {player.player_id!r} in {path.name}")
        seen.add(player.player_id)

        if player_id_filter is not None and player.player_id not in player_id_filter:
            continue
        players.append(player)

    return players


def load_available_player_ids(path: str | Path) -> FrozenSet[str]:
    """Load the ids of players available for this match (a JSON list)."""

    path = Path(path)
    raw = json.loads(path.read_text(encoding="utf-8-sig"))
    if not isinstance(raw, list):
        raise ValueError(f"{path.name} must contain a JSON list of player ids")
    return frozenset(str(x) for x in raw)


def _normalise_weights(raw: Mapping[str, Any]) -> Dict[str, float]:
    return {_WEIGHT_KEY_MAP.get(k, k): float(v) for k, v in raw.items()}


def _normalise_min_positions(raw: Mapping[str, Any]) -> Dict[Position, int]:
    return {parse_position_str(k): int(v) for k, v in raw.items()}


def algorithm_config_overrides(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Translate a JSON config object into :meth:`AlgorithmConfig.with_overrides` kwargs."""

    overrides: Dict[str, Any] = {}
    for key, value in raw.items():
        field_name = _CONFIG_KEY_MAP.get(key, key)
        if field_name == "weights":
            value = _normalise_weights(value)
        elif field_name == "min_positions":
            value = _normalise_min_positions(value)
        overrides[field_name] = value
    return overrides


def load_algorithm_config_from_json(path: str | Path, *, base: AlgorithmConfig | None = None) -> AlgorithmConfig:
    """Load :class:`~team_balancer.data.AlgorithmConfig` overrides from JSON.

    Expected format: an object with any of ``maxIterations``, ``temperature``,
    ``coolingRate``, ``minPositions``, ``weights``, ``solverTimeLimitSeconds``
    (snake_case also accepted). Missing keys keep their defaults.
    """

    path = Path(path)
    raw = json.loads(path.read_text(encoding="utf-8-sig"))
    if not isinstance(raw, dict):
        raise ValueError(f"{path.name} must contain a JSON object")

    if base is None:
        base = AlgorithmConfig()
    return base.with_overrides(**algorithm_config_overrides(raw))

from __future__ import annotations

import json
from pathlib import Path

import pytest

from team_balancer.data import Position, calculate_ovr
from team_balancer.io import (
    load_algorithm_config_from_json,
    load_available_player_ids,
    load_players_from_json,
    parse_position_str,
)


def _write(tmp_path: Path, name: str, payload: object) -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def _record(pid: str, position: str = "DEF", **overrides: object) -> dict:
    rec = {"id": pid, "name": f" {pid} ", "fitness": 7, "defence": 8, "attack": 5, "ballUse": 6, "position": position}
    rec.update(overrides)
    return rec


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("DEF", Position.DEF),
        ("att", Position.ATT),
        (" alr ", Position.ALR),
        ("Defender", Position.DEF),
        ("All-Rounder", Position.ALR),
    ],
)
def test_parse_position_str(raw: str, expected: Position) -> None:
    assert parse_position_str(raw) is expected


def test_parse_position_str_raises_on_unknown() -> None:
    with pytest.raises(ValueError):
        parse_position_str("GK")


def test_load_players_ignores_stored_ovr(tmp_path: Path) -> None:
    path = _write(tmp_path, "players.json", [_record("p1", ovr=9.9)])

    (player,) = load_players_from_json(path)

    assert player.player_id == "p1"
    assert player.name == "p1"
    assert player.ball_use == 6
    assert player.position is Position.DEF
    assert player.ovr == calculate_ovr(7, 8, 5, 6, Position.DEF)


def test_load_players_accepts_snake_case_ball_use(tmp_path: Path) -> None:
    rec = _record("p1")
    del rec["ballUse"]
    rec["ball_use"] = 3
    path = _write(tmp_path, "players.json", [rec])

    (player,) = load_players_from_json(path)
    assert player.ball_use == 3


def test_load_players_applies_availability_filter(tmp_path: Path) -> None:
    path = _write(tmp_path, "players.json", [_record("p1"), _record("p2", "ATT"), _record("p3", "ALR")])
    available = load_available_player_ids(_write(tmp_path, "available.json", ["p1", "p3", 99]))

    players = load_players_from_json(path, player_id_filter=available)

    assert available == frozenset({"p1", "p3", "99"})
    assert [p.player_id for p in players] == ["p1", "p3"]


def test_load_players_raises_on_duplicate_ids(tmp_path: Path) -> None:
    path = _write(tmp_path, "players.json", [_record("p1"), _record("p1", "ATT")])
    with pytest.raises(ValueError, match="Duplicate"):
        load_players_from_json(path)


def test_load_players_raises_on_non_list(tmp_path: Path) -> None:
    path = _write(tmp_path, "players.json", {"p1": _record("p1")})
    with pytest.raises(ValueError):
        load_players_from_json(path)


def test_load_players_raises_on_out_of_range_attribute(tmp_path: Path) -> None:
    path = _write(tmp_path, "players.json", [_record("p1", fitness=12)])
    with pytest.raises(ValueError):
        load_players_from_json(path)


def test_load_algorithm_config_maps_camel_case_keys(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "config.json",
        {
            "maxIterations": 250,
            "coolingRate": 0.95,
            "minPositions": {"DEF": 2},
            "weights": {"ballUse": 0.9, "positionViolation": 5},
            "solverTimeLimitSeconds": 4,
        },
    )

    config = load_algorithm_config_from_json(path)

    assert config.max_iterations == 250
    assert config.cooling_rate == 0.95
    assert config.temperature == 10.0
    assert config.min_positions[Position.DEF] == 2
    assert config.min_positions[Position.ATT] == 1
    assert config.weights.ball_use == 0.9
    assert config.weights.position_violation == 5.0
    assert config.weights.ovr == 1.0
    assert config.solver_time_limit_seconds == 4


def test_load_algorithm_config_raises_on_unknown_key(tmp_path: Path) -> None:
    path = _write(tmp_path, "config.json", {"iterations": 10})
    with pytest.raises(ValueError):
        load_algorithm_config_from_json(path)


def test_load_algorithm_config_raises_on_non_object(tmp_path: Path) -> None:
    path = _write(tmp_path, "config.json", [1, 2, 3])
    with pytest.raises(ValueError):
        load_algorithm_config_from_json(path)


def test_load_players_raises_on_non_object_record(tmp_path: Path) -> None:
    path = _write(tmp_path, "players.json", [_record("p1"), "p2"])
    with pytest.raises(ValueError, match="record 1"):
        load_players_from_json(path)

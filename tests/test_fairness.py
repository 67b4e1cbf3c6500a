from __future__ import annotations

import pytest

from team_balancer.data import AlgorithmConfig, Player, Position, TeamPlayer
from team_balancer.fairness import count_position_violations, score_split, top_heaviness


def _player(pid: str, value: int, position: Position = Position.ALR) -> Player:
    # All-rounders with equal attributes have OVR == value.
    return Player(
        player_id=pid,
        name=pid,
        fitness=value,
        defence=value,
        attack=value,
        ball_use=value,
        position=position,
    )


def test_score_split_weights_every_metric() -> None:
    red = [_player("r1", 8), _player("r2", 6)]
    white = [_player("w1", 7), _player("w2", 5)]

    fairness = score_split(red, white)
    metrics = fairness.metrics

    assert metrics.ovr_diff == pytest.approx(2.0)
    assert metrics.fitness_diff == pytest.approx(2.0)
    assert metrics.attack_diff == pytest.approx(2.0)
    assert metrics.defence_diff == pytest.approx(2.0)
    assert metrics.ball_use_diff == pytest.approx(2.0)
    # Top 1 per team: 8 vs 7.
    assert metrics.top_heaviness_diff == pytest.approx(1.0)
    # Both teams lack a DEF and an ATT.
    assert metrics.position_violations == 4

    expected = 2 * 1.0 + 2 * 0.8 + 2 * 0.6 + 2 * 0.6 + 2 * 0.5 + 1 * 0.7 + 4 * 10.0
    assert fairness.score == pytest.approx(expected)


def test_score_split_is_zero_for_identical_teams_meeting_quotas() -> None:
    red = [_player("r1", 6, Position.DEF), _player("r2", 7, Position.ATT)]
    white = [_player("w1", 6, Position.DEF), _player("w2", 7, Position.ATT)]

    fairness = score_split(red, white)
    assert fairness.score == pytest.approx(0.0)
    assert fairness.metrics.position_violations == 0


def test_score_split_is_idempotent_and_does_not_reorder_inputs() -> None:
    red = [_player("r1", 3), _player("r2", 9), _player("r3", 5)]
    white = [_player("w1", 7), _player("w2", 4), _player("w3", 6)]
    red_before, white_before = list(red), list(white)

    first = score_split(red, white)
    second = score_split(red, white)

    assert first == second
    assert red == red_before
    assert white == white_before


def test_score_split_accepts_team_players() -> None:
    red = [_player("r1", 8), _player("r2", 6)]
    white = [_player("w1", 7), _player("w2", 5)]

    plain = score_split(red, white)
    wrapped = score_split(
        [TeamPlayer(player=p, is_captain=i == 0) for i, p in enumerate(red)],
        [TeamPlayer(player=p) for p in white],
    )
    assert plain == wrapped


def test_top_heaviness_catches_stacked_stars_when_totals_are_level() -> None:
    red = [_player(f"r{i}", v) for i, v in enumerate([9, 9, 9, 1, 1, 1])]
    white = [_player(f"w{i}", 5) for i in range(6)]

    fairness = score_split(red, white)
    assert fairness.metrics.ovr_diff == pytest.approx(0.0)
    # Top 3 per team: 27 vs 15.
    assert top_heaviness(red, white) == pytest.approx(12.0)
    assert fairness.metrics.top_heaviness_diff == pytest.approx(12.0)


def test_top_heaviness_uses_at_most_three_players() -> None:
    red = [_player(f"r{i}", v) for i, v in enumerate([9, 8, 7, 6, 2, 2, 2, 2])]
    white = [_player(f"w{i}", v) for i, v in enumerate([9, 8, 7, 1, 5, 5, 5, 5])]

    # 24 vs 24; the fourth-best players differ but are not counted.
    assert top_heaviness(red, white) == pytest.approx(0.0)


def test_count_position_violations_for_a_ten_player_split() -> None:
    minimums = {Position.DEF: 1, Position.ATT: 1, Position.ALR: 0}

    red = [
        _player("r1", 6, Position.DEF),
        _player("r2", 6, Position.DEF),
        _player("r3", 6, Position.ATT),
        _player("r4", 6, Position.ALR),
        _player("r5", 6, Position.ALR),
    ]
    white = [
        _player("w1", 6, Position.DEF),
        _player("w2", 6, Position.ATT),
        _player("w3", 6, Position.ATT),
        _player("w4", 6, Position.ALR),
        _player("w5", 6, Position.ALR),
    ]
    assert count_position_violations(red, white, minimums) == 0

    # Red loses its only attacker.
    red_without_att = red[:2] + [_player("r3", 6, Position.ALR)] + red[3:]
    assert count_position_violations(red_without_att, white, minimums) == 1


def test_count_position_violations_counts_shortfall_not_positions() -> None:
    minimums = {Position.DEF: 3, Position.ATT: 0, Position.ALR: 0}
    red = [_player("r1", 5, Position.DEF), _player("r2", 5)]
    white = [_player("w1", 5), _player("w2", 5)]

    # Red is 2 short, White is 3 short.
    assert count_position_violations(red, white, minimums) == 5


def test_score_split_uses_config_weights() -> None:
    red = [_player("r1", 8), _player("r2", 6)]
    white = [_player("w1", 7), _player("w2", 5)]

    config = AlgorithmConfig().with_overrides(
        weights={
            "ovr": 0.0,
            "fitness": 0.0,
            "attack": 0.0,
            "defence": 0.0,
            "ball_use": 0.0,
            "top_heaviness": 0.0,
            "position_violation": 1.0,
        }
    )
    assert score_split(red, white, config).score == pytest.approx(4.0)

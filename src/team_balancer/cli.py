"""Command-line entry point for :mod:`team_balancer`.

Example
-------
python -m team_balancer.cli --players ./data/players.json --match-size 8v8 --algorithm annealed
"""

from __future__ import annotations

import argparse
import logging
import random
from pathlib import Path
from typing import Sequence

from team_balancer.data import Algorithm, MatchSize, Player, TeamGenerationResult, TeamPlayer, team_average_ovr
from team_balancer.errors import InsufficientPlayersError
from team_balancer.io import load_algorithm_config_from_json, load_available_player_ids, load_players_from_json
from team_balancer.main import configure_logging, generate_teams
from team_balancer.solution import build_result_summary, dumps_result_summary_pretty


def _print_team(label: str, team: Sequence[TeamPlayer]) -> None:
    print(f"\n{label} (avg OVR {team_average_ovr(team):.1f})")
    print("-" * 50)
    for p in sorted(team, key=lambda x: (x.position.value, -x.ovr)):
        captain = " (C)" if p.is_captain else ""
        print(f"  {p.position.value:<4} {p.name + captain:<30s} OVR {p.ovr:>4.1f}")


def _print_result(result: TeamGenerationResult) -> None:
    _print_team("RED", result.red_team)
    _print_team("WHITE", result.white_team)

    metadata = result.metadata
    print("\n" + "=" * 50)
    print(f"Algorithm: {metadata.algorithm} (requested: {metadata.requested_algorithm.value})")
    if metadata.fallback_reason:
        print(f"Fallback reason: {metadata.fallback_reason}")
    print(f"Fairness score: {metadata.fairness_score:.3f}")
    if metadata.iterations is not None:
        print(f"Iterations: {metadata.iterations}")
    print(f"Time: {metadata.time_ms} ms")
    print(f"Position violations: {result.metrics.position_violations}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="team_balancer")
    parser.add_argument(
        "--players",
        type=Path,
        default=Path("data") / "players.json",
        help="JSON list of player records (default: ./data/players.json)",
    )
    parser.add_argument(
        "--available",
        type=Path,
        default=None,
        help="JSON list of player ids available for this match (optional)",
    )
    size_group = parser.add_mutually_exclusive_group()
    size_group.add_argument(
        "--match-size",
        choices=[m.value for m in MatchSize],
        default=None,
        help="Match format (default: 8v8)",
    )
    size_group.add_argument(
        "--team-size",
        type=int,
        default=None,
        help="Players per team (alternative to --match-size)",
    )
    parser.add_argument(
        "--algorithm",
        choices=[a.value for a in Algorithm],
        default=Algorithm.FAST.value,
        help="Balancing strategy (default: fast)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON object of algorithm config overrides (optional)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible swaps and captains (optional)",
    )
    parser.add_argument(
        "--out-json",
        type=Path,
        default=None,
        help="Write the result summary JSON to this path (optional)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def _team_size(args: argparse.Namespace) -> int:
    if args.team_size is not None:
        return int(args.team_size)
    return MatchSize(args.match_size or MatchSize.EIGHT.value).team_size


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    configure_logging(level=logging.DEBUG if args.verbose else logging.WARNING)

    available = load_available_player_ids(args.available) if args.available is not None else None
    players: list[Player] = load_players_from_json(args.players, player_id_filter=available)
    config = load_algorithm_config_from_json(args.config) if args.config is not None else None
    team_size = _team_size(args)

    rng = random.Random(args.seed) if args.seed is not None else None

    try:
        result = generate_teams(players, team_size, args.algorithm, config, rng=rng)
    except InsufficientPlayersError as e:
        print(f"Error: {e}. Need {e.shortfall} more player(s).")
        return 1

    _print_result(result)

    out_json: Path | None = args.out_json
    if out_json is not None:
        out_json.parent.mkdir(parents=True, exist_ok=True)
        out_json.write_text(dumps_result_summary_pretty(build_result_summary(result)), encoding="utf-8")
        print(f"\nWrote result to {out_json}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

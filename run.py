from __future__ import annotations

import json
from pathlib import Path

from team_balancer.data import MatchSize
from team_balancer.io import load_algorithm_config_from_json, load_available_player_ids, load_players_from_json
from team_balancer.main import generate_teams
from team_balancer.solution import build_result_summary, dumps_result_summary_pretty


def main() -> None:
    repo_root = Path(__file__).resolve().parent
    data_dir = repo_root / "data"
    output_dir = repo_root / "output"
    output_dir.mkdir(parents=True, exist_ok=True)

    # Optional match settings.
    # match.json format:
    #   {"match_size": "8v8", "algorithm": "binary-program"}
    match_path = data_dir / "match.json"
    match_size = MatchSize.EIGHT
    algorithm = "fast"
    if match_path.exists():
        raw_match = json.loads(match_path.read_text(encoding="utf-8-sig"))
        match_size = MatchSize(raw_match.get("match_size", match_size.value))
        algorithm = str(raw_match.get("algorithm", algorithm))

    available_path = data_dir / "available.json"
    available = load_available_player_ids(available_path) if available_path.exists() else None

    config_path = data_dir / "algorithm_config.json"
    config = load_algorithm_config_from_json(config_path) if config_path.exists() else None

    players = load_players_from_json(data_dir / "players.json", player_id_filter=available)

    result = generate_teams(players, match_size.team_size, algorithm, config)

    summary = build_result_summary(result)

    # Write to output file.
    out_path = output_dir / "result.json"
    out_path.write_text(dumps_result_summary_pretty(summary), encoding="utf-8")

    # Pretty JSON to stdout.
    print(dumps_result_summary_pretty(summary))


if __name__ == "__main__":
    main()

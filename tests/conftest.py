from __future__ import annotations

import sys
from pathlib import Path

import pytest


# Ensure src/ is importable without an editable install.
_SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-perf",
        action="store_true",
        default=False,
        help="Run performance tests (skipped by default).",
    )
    parser.addoption(
        "--perf-max-seconds",
        action="store",
        type=float,
        default=5.0,
        help="Max allowed wall-clock seconds for a single perf scenario.",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "perf: performance tests (opt-in with --run-perf)",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-perf"):
        return

    skip_perf = pytest.mark.skip(reason="need --run-perf option to run")
    for item in items:
        if "perf" in item.keywords:
            item.add_marker(skip_perf)

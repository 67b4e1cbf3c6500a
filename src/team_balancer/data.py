"""Domain data model for the team balancer.

This module is intentionally *pure*: it defines the core enums and dataclasses
used throughout the project, with no dependency on input file formats.

I/O, parsing, and dataset construction live in :mod:`team_balancer.io`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from functools import cached_property
from typing import Any, Mapping, Optional, Sequence, Union


class Position(str, Enum):
    """Playing positions used by the balancer."""

    DEF = "DEF"
    ATT = "ATT"
    ALR = "ALR"


class MatchSize(str, Enum):
    """Supported match formats."""

    FIVE = "5v5"
    SIX = "6v6"
    SEVEN = "7v7"
    EIGHT = "8v8"
    NINE = "9v9"

    @property
    def team_size(self) -> int:
        return int(self.value.split("v", 1)[0])


class Algorithm(str, Enum):
    """Balancing strategies selectable by the caller."""

    FAST = "fast"
    ANNEALED = "annealed"
    ANNEALED_THOROUGH = "annealed-thorough"
    BINARY_PROGRAM = "binary-program"


# Position modifiers applied to (defence, attack) before weighting.
_POSITION_MODIFIERS: Mapping[Position, tuple[float, float]] = {
    Position.DEF: (1.15, 0.85),
    Position.ATT: (0.85, 1.15),
    Position.ALR: (1.0, 1.0),
}

ATTRIBUTE_MIN = 1
ATTRIBUTE_MAX = 10


def round1(value: float) -> float:
    """Round half away from zero to one decimal place."""

    if value < 0:
        return -round1(-value)
    return math.floor(value * 10 + 0.5) / 10


def calculate_ovr(fitness: int, defence: int, attack: int, ball_use: int, position: Position) -> float:
    """Overall rating derived from the four raw attributes and the position.

    DEF boosts defence by 15% and discounts attack by 15%; ATT is the mirror;
    ALR applies no adjustment.
    """

    defence_mod, attack_mod = _POSITION_MODIFIERS[Position(position)]
    ovr = fitness * 0.35 + defence * defence_mod * 0.25 + attack * attack_mod * 0.20 + ball_use * 0.20
    return round1(ovr)


@dataclass(frozen=True, slots=True)
class Player:
    """A rated player. Immutable input to every balancing algorithm."""

    player_id: str
    name: str
    fitness: int
    defence: int
    attack: int
    ball_use: int
    position: Position

    def __post_init__(self) -> None:
        if not self.player_id:
            raise ValueError("Player.player_id must be non-empty")
        for attr in ("fitness", "defence", "attack", "ball_use"):
            value = getattr(self, attr)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"Player.{attr} must be an integer (got {value!r})")
            if not ATTRIBUTE_MIN <= value <= ATTRIBUTE_MAX:
                raise ValueError(f"Player.{attr} must be in [{ATTRIBUTE_MIN}, {ATTRIBUTE_MAX}] (got {value!r})")
        if not isinstance(self.position, Position):
            object.__setattr__(self, "position", Position(self.position))

    @property
    def ovr(self) -> float:
        return calculate_ovr(self.fitness, self.defence, self.attack, self.ball_use, self.position)


@dataclass(frozen=True, slots=True)
class TeamPlayer:
    """A player placed on a team for one generation run."""

    player: Player
    is_captain: bool = False

    @property
    def player_id(self) -> str:
        return self.player.player_id

    @property
    def name(self) -> str:
        return self.player.name

    @property
    def position(self) -> Position:
        return self.player.position

    @property
    def ovr(self) -> float:
        return self.player.ovr

    @property
    def fitness(self) -> int:
        return self.player.fitness

    @property
    def defence(self) -> int:
        return self.player.defence

    @property
    def attack(self) -> int:
        return self.player.attack

    @property
    def ball_use(self) -> int:
        return self.player.ball_use


# Anything carrying the rating attributes (Player or TeamPlayer).
Rated = Union[Player, TeamPlayer]

# Attributes summed by the scorer and balanced by the binary program.
BALANCED_ATTRIBUTES: tuple[str, ...] = ("ovr", "fitness", "attack", "defence", "ball_use")


def team_total_ovr(team: Sequence[Rated]) -> float:
    return sum(p.ovr for p in team)


def team_average_ovr(team: Sequence[Rated]) -> float:
    """Average team OVR, rounded to one decimal. An empty team rates 0."""

    if not team:
        return 0.0
    return round1(team_total_ovr(team) / len(team))


@dataclass(frozen=True, slots=True)
class MetricWeights:
    """Importance of each fairness metric in the weighted score."""

    ovr: float = 1.0
    fitness: float = 0.8
    attack: float = 0.6
    defence: float = 0.6
    ball_use: float = 0.5
    top_heaviness: float = 0.7
    position_violation: float = 10.0

    def __post_init__(self) -> None:
        for f in fields(self):
            if getattr(self, f.name) < 0:
                raise ValueError(f"MetricWeights.{f.name} must be >= 0")

    def merged(self, overrides: Mapping[str, float]) -> MetricWeights:
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown metric weights: {sorted(unknown)}")
        return replace(self, **{k: float(v) for k, v in overrides.items()})


@dataclass(frozen=True, slots=True)
class FairnessMetrics:
    """Per-metric imbalance between two rosters. All values are >= 0."""

    ovr_diff: float
    fitness_diff: float
    attack_diff: float
    defence_diff: float
    ball_use_diff: float
    top_heaviness_diff: float
    position_violations: int


def _default_min_positions() -> dict[Position, int]:
    return {Position.DEF: 1, Position.ATT: 1, Position.ALR: 0}


@dataclass(frozen=True, slots=True)
class AlgorithmConfig:
    """Tunable parameters shared by all balancing algorithms."""

    max_iterations: int = 500
    temperature: float = 10.0
    cooling_rate: float = 0.98
    min_positions: Mapping[Position, int] = field(default_factory=_default_min_positions)
    weights: MetricWeights = field(default_factory=MetricWeights)

    # External timeout for the binary-program solver.
    solver_time_limit_seconds: Optional[int] = 10

    def __post_init__(self) -> None:
        if self.max_iterations < 0:
            raise ValueError("AlgorithmConfig.max_iterations must be >= 0")
        if self.temperature <= 0:
            raise ValueError("AlgorithmConfig.temperature must be > 0")
        if not 0 < self.cooling_rate < 1:
            raise ValueError("AlgorithmConfig.cooling_rate must be in (0, 1)")
        if self.solver_time_limit_seconds is not None and self.solver_time_limit_seconds <= 0:
            raise ValueError("AlgorithmConfig.solver_time_limit_seconds must be > 0")

        # Keys may arrive as plain strings ("DEF").
        object.__setattr__(self, "min_positions", {Position(k): int(v) for k, v in self.min_positions.items()})

        all_positions: set[Position] = set(Position.__members__.values())
        missing = all_positions - set(self.min_positions)
        if missing:
            raise ValueError(f"min_positions missing positions: {sorted(p.value for p in missing)}")
        for pos, count in self.min_positions.items():
            if count < 0:
                raise ValueError(f"min_positions[{pos.value}] must be >= 0")

    def min_required(self, position: Position) -> int:
        return int(self.min_positions[position])

    def with_overrides(self, **overrides: Any) -> AlgorithmConfig:
        """Return a copy with caller-supplied values merged over this config.

        Top-level fields are replaced. ``weights`` and ``min_positions`` may be
        partial mappings; they are merged key by key over the current values.
        """

        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown AlgorithmConfig fields: {sorted(unknown)}")

        changes: dict[str, Any] = dict(overrides)

        weights = changes.get("weights")
        if weights is not None and not isinstance(weights, MetricWeights):
            changes["weights"] = self.weights.merged(weights)

        min_positions = changes.get("min_positions")
        if min_positions is not None:
            merged = dict(self.min_positions)
            merged.update({Position(k): int(v) for k, v in min_positions.items()})
            changes["min_positions"] = merged

        return replace(self, **changes)


# Higher-effort annealing preset: more iterations, hotter start, slower cooling.
THOROUGH_ANNEALING: Mapping[str, Any] = {
    "max_iterations": 1000,
    "temperature": 15.0,
    "cooling_rate": 0.99,
}


@dataclass(frozen=True, slots=True)
class GenerationMetadata:
    """How a split was produced. Displayed to the user, not interpreted."""

    algorithm: str
    fairness_score: float
    iterations: Optional[int]
    time_ms: int

    # Strategy the caller selected. On fallback ``algorithm`` names what actually ran.
    requested_algorithm: Algorithm
    fallback_reason: Optional[str] = None


@dataclass(frozen=True, slots=True)
class TeamGenerationResult:
    red_team: tuple[TeamPlayer, ...]
    white_team: tuple[TeamPlayer, ...]
    metadata: GenerationMetadata
    metrics: FairnessMetrics

    @property
    def is_fallback(self) -> bool:
        return self.metadata.fallback_reason is not None

    @property
    def captains(self) -> tuple[Optional[TeamPlayer], Optional[TeamPlayer]]:
        red = next((p for p in self.red_team if p.is_captain), None)
        white = next((p for p in self.white_team if p.is_captain), None)
        return red, white


@dataclass
class ModelInputData:
    """Everything the binary-program formulation queries.

    ``candidates`` is the truncated pool (top ``2 * team_size`` by OVR); index
    ``i`` in this tuple is the index used in decision-variable names. Derived
    index sets are memoised so the formulation code stays readable.
    """

    candidates: tuple[Player, ...]
    team_size: int
    config: AlgorithmConfig

    def __post_init__(self) -> None:
        if self.team_size < 1:
            raise ValueError("ModelInputData.team_size must be >= 1")
        if len(self.candidates) != self.team_size * 2:
            raise ValueError("ModelInputData.candidates must hold exactly 2 * team_size players")

    # --- Core index sets (memoised) ---

    @cached_property
    def candidate_indices(self) -> Sequence[int]:
        return tuple(range(len(self.candidates)))

    @cached_property
    def positions(self) -> Sequence[Position]:
        return tuple(Position)

    @cached_property
    def indices_by_position(self) -> Mapping[Position, Sequence[int]]:
        return {
            pos: tuple(i for i in self.candidate_indices if self.candidates[i].position == pos)
            for pos in self.positions
        }

    # --- Parameter lookups ---

    def value(self, index: int, attr: str) -> float:
        return float(getattr(self.candidates[index], attr))

    def attribute_total(self, attr: str) -> float:
        return sum(self.value(i, attr) for i in self.candidate_indices)

    def attribute_target(self, attr: str) -> float:
        """Red's target sum for an attribute: half the pool's total."""

        return self.attribute_total(attr) / 2.0

    def available(self, position: Position) -> int:
        return len(self.indices_by_position[position])

    def adjusted_min_required(self, position: Position) -> int:
        """Per-team minimum for a position, halved to what the pool can supply."""

        return min(self.config.min_required(position), self.available(position) // 2)

    # --- Elite split ---

    @property
    def elite_count(self) -> int:
        return min(4, 2 * (self.team_size // 2))

    @cached_property
    def elite_indices(self) -> Sequence[int]:
        """Indices of the top-OVR players that must be split evenly."""

        ranked = sorted(self.candidate_indices, key=lambda i: self.candidates[i].ovr, reverse=True)
        return tuple(ranked[: self.elite_count])

    @property
    def has_elite_split(self) -> bool:
        return self.team_size >= 5 and len(self.elite_indices) >= 2

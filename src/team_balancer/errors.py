"""Exceptions raised by the balancing algorithms."""

from __future__ import annotations


class InsufficientPlayersError(ValueError):
    """Fewer than ``2 * team_size`` players were supplied.

    There is no valid fallback for this, so it always reaches the caller.
    """

    def __init__(self, *, team_size: int, available: int) -> None:
        self.team_size = team_size
        self.required = team_size * 2
        self.available = available
        super().__init__(
            f"Need at least {self.required} players for {team_size}v{team_size} (got {available})"
        )

    @property
    def shortfall(self) -> int:
        return max(0, self.required - self.available)


class SolverError(RuntimeError):
    """The binary-program solver failed to run."""


class SolverInfeasibleError(SolverError):
    """The binary program has no feasible assignment (or none was found)."""

"""Solver capability for the binary-program optimiser.

The optimiser only depends on :class:`BinaryProgramSolver`, so tests can plug
in a stub and other backends can be added without touching the formulation.
:class:`PulpSolver` is the default backend (CBC, or Gurobi via PuLP).
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Protocol

import pulp

from team_balancer.errors import SolverError

logger = logging.getLogger(__name__)

# Optional Gurobi parameters, e.g. {"MIPGap": 0.02}. Overridable via env var.
GUROBI_OPTIONS_ENV_VAR = "TEAM_BALANCER_GUROBI_OPTIONS"


@dataclass(frozen=True, slots=True)
class SolverOutcome:
    status: str
    feasible: bool
    objective_value: float

    # Variable name -> solved value.
    assignment: Mapping[str, float] = field(default_factory=dict)


class BinaryProgramSolver(Protocol):
    def solve(self, problem: pulp.LpProblem, *, time_limit_seconds: Optional[int] = None) -> SolverOutcome:
        """Solve ``problem``. Raise :class:`SolverError` if the backend fails."""
        ...


def summarise_problem(problem: pulp.LpProblem, *, max_name_examples: int = 5) -> None:
    """Log a short diagnostic summary of a PuLP problem."""

    vars_list = problem.variables()

    cat_counts: dict[str, int] = {"Binary": 0, "Integer": 0, "Continuous": 0, "Other": 0}
    for v in vars_list:
        # PuLP reports binaries as Integer with 0/1 bounds.
        cat = getattr(v, "cat", None)
        if cat == pulp.LpInteger and v.lowBound == 0 and v.upBound == 1:
            cat_counts["Binary"] += 1
        elif cat in cat_counts:
            cat_counts[cat] += 1
        else:
            cat_counts["Other"] += 1

    # Constraint sense counts: -1 (<=), 0 (=), 1 (>=)
    sense_counts: dict[str, int] = {"<=": 0, "=": 0, ">=": 0, "other": 0}
    for c in problem.constraints.values():
        s = getattr(c, "sense", None)
        if s == pulp.LpConstraintLE:
            sense_counts["<="] += 1
        elif s == pulp.LpConstraintEQ:
            sense_counts["="] += 1
        elif s == pulp.LpConstraintGE:
            sense_counts[">="] += 1
        else:
            sense_counts["other"] += 1

    logger.debug("PuLP problem summary:")
    logger.debug("  name=%s sense=%s", problem.name, "Maximize" if problem.sense == pulp.LpMaximize else "Minimize")
    logger.debug("  variables=%d constraints=%d", len(vars_list), len(problem.constraints))
    logger.debug("  variable categories=%s", cat_counts)
    logger.debug("  constraint senses=%s", sense_counts)

    if problem.constraints:
        logger.debug("  first_constraints=%s", list(problem.constraints.keys())[:max_name_examples])


def _load_gurobi_options() -> list[tuple[str, object]]:
    options_path = os.environ.get(GUROBI_OPTIONS_ENV_VAR)
    if not options_path:
        return []

    path = Path(options_path)
    try:
        parsed = json.loads(path.read_text(encoding="utf-8-sig"))
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"Invalid Gurobi options file {path}: {e}") from e
    if not isinstance(parsed, dict):
        raise ValueError(f"Invalid Gurobi options file {path}: must contain a JSON object")

    # GUROBI_CMD expects (key, value) pairs; sorted for a stable command line.
    return sorted(parsed.items(), key=lambda kv: str(kv[0]))


def _build_cbc_solver(*, time_limit_seconds: int | None, enable_solver_output: bool) -> pulp.LpSolver:
    """Create a CBC (COIN-OR) solver instance for PuLP."""

    if time_limit_seconds is not None:
        return pulp.PULP_CBC_CMD(msg=enable_solver_output, timeLimit=time_limit_seconds)

    return pulp.PULP_CBC_CMD(msg=enable_solver_output)


def _build_gurobi_solver(*, time_limit_seconds: int | None, enable_solver_output: bool) -> pulp.LpSolver:
    """Create a Gurobi solver instance for PuLP.

    PuLP expects Gurobi to be installed and licensed; if it isn't usable, the
    solve raises and the optimiser falls back to annealing.
    """

    kwargs: dict[str, object] = {"msg": enable_solver_output}
    if time_limit_seconds is not None:
        kwargs["timeLimit"] = time_limit_seconds

    options = _load_gurobi_options()
    if options:
        kwargs["options"] = options

    return pulp.GUROBI_CMD(**kwargs)


@dataclass(slots=True)
class PulpSolver:
    """Default :class:`BinaryProgramSolver` backed by PuLP.

    Uses Gurobi when ``GUROBI_HOME`` is set (or ``use_gurobi=True``), else the
    CBC binary bundled with PuLP.
    """

    use_gurobi: Optional[bool] = None
    enable_solver_output: bool = False

    def _build(self, time_limit_seconds: int | None) -> pulp.LpSolver:
        use_gurobi = self.use_gurobi if self.use_gurobi is not None else bool(os.environ.get("GUROBI_HOME"))
        if use_gurobi:
            logger.info("Solving with Gurobi (time_limit_seconds=%s)", time_limit_seconds)
            return _build_gurobi_solver(time_limit_seconds=time_limit_seconds, enable_solver_output=self.enable_solver_output)

        logger.info("Solving with CBC (time_limit_seconds=%s)", time_limit_seconds)
        return _build_cbc_solver(time_limit_seconds=time_limit_seconds, enable_solver_output=self.enable_solver_output)

    def solve(self, problem: pulp.LpProblem, *, time_limit_seconds: Optional[int] = None) -> SolverOutcome:
        summarise_problem(problem)
        backend = self._build(time_limit_seconds)

        try:
            status_code = problem.solve(backend)
        except pulp.PulpSolverError as e:
            raise SolverError(f"PuLP solver failed: {e}") from e

        status = pulp.LpStatus[status_code]

        # A time-limited solve may stop with an integer-feasible incumbent.
        feasible = status_code == pulp.LpStatusOptimal or problem.sol_status in (
            pulp.LpSolutionOptimal,
            pulp.LpSolutionIntegerFeasible,
        )

        assignment = {v.name: float(v.varValue) for v in problem.variables() if v.varValue is not None}
        objective_value = float(pulp.value(problem.objective) or 0.0) if feasible else 0.0

        logger.info("Solve complete: status=%s objective=%s", status, objective_value)
        return SolverOutcome(status=status, feasible=feasible, objective_value=objective_value, assignment=assignment)

"""Binary-program formulation of the two-team split.

One binary variable per candidate (1 = Red). Absolute attribute differences
are linearised with a pair of non-negative slack variables per attribute,
whose weighted sum is the objective.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

import pulp

from team_balancer.data import BALANCED_ATTRIBUTES, ModelInputData

PROBLEM_NAME = "team_balance"


# ============================================================================
# Data structures
# ============================================================================


@dataclass(slots=True)
class DecisionVariables:
    """Container for all PuLP decision variables."""

    # Team assignment: assign_red[i] ∈ {0,1}, 1 = candidate i plays for Red.
    assign_red: Dict[int, pulp.LpVariable] = field(default_factory=dict)

    # Attribute balance slacks, keyed by attribute name:
    # red_sum[a] + minus[a] - plus[a] = target[a], plus[a], minus[a] ≥ 0
    slack_plus: Dict[str, pulp.LpVariable] = field(default_factory=dict)
    slack_minus: Dict[str, pulp.LpVariable] = field(default_factory=dict)


# ============================================================================
# Top-level orchestrator
# ============================================================================


def formulate_problem(model_input_data: ModelInputData) -> tuple[pulp.LpProblem, DecisionVariables]:
    """Create the PuLP problem for a truncated candidate pool.

    Returns
    -------
    (problem, decision_variables)
    """

    problem = pulp.LpProblem(name=PROBLEM_NAME, sense=pulp.LpMinimize)

    decision_variables = create_decision_variables(problem, model_input_data)
    add_objective(problem, model_input_data, decision_variables)
    add_constraints(problem, model_input_data, decision_variables)

    return problem, decision_variables


# ============================================================================
# Second-level orchestrator: Decision variables
# ============================================================================


def create_decision_variables(problem: pulp.LpProblem, model_input_data: ModelInputData) -> DecisionVariables:
    """Create and register all decision variables."""

    _ = problem

    assign_red = {
        i: pulp.LpVariable(f"assign_red_{i}", lowBound=0, upBound=1, cat=pulp.LpBinary)
        for i in model_input_data.candidate_indices
    }

    slack_plus = {
        attr: pulp.LpVariable(f"slack_plus_{attr}", lowBound=0, cat=pulp.LpContinuous) for attr in BALANCED_ATTRIBUTES
    }
    slack_minus = {
        attr: pulp.LpVariable(f"slack_minus_{attr}", lowBound=0, cat=pulp.LpContinuous) for attr in BALANCED_ATTRIBUTES
    }

    return DecisionVariables(assign_red=assign_red, slack_plus=slack_plus, slack_minus=slack_minus)


# ============================================================================
# Second-level orchestrator: Objective
# ============================================================================


def add_objective(
    problem: pulp.LpProblem,
    model_input_data: ModelInputData,
    decision_variables: DecisionVariables,
) -> None:
    """Minimise the weighted slack: sum_a w[a] * (plus[a] + minus[a])."""

    weights = model_input_data.config.weights

    terms: list[pulp.LpAffineExpression] = []
    for attr in BALANCED_ATTRIBUTES:
        weight = float(getattr(weights, attr))
        terms.append(weight * decision_variables.slack_plus[attr])
        terms.append(weight * decision_variables.slack_minus[attr])

    problem += pulp.lpSum(terms)


# ============================================================================
# Second-level orchestrator: Constraints
# ============================================================================


def add_constraints(
    problem: pulp.LpProblem,
    model_input_data: ModelInputData,
    decision_variables: DecisionVariables,
) -> None:
    """Add all constraints to the problem."""

    _add_team_size_constraint(problem, model_input_data, decision_variables)
    _add_position_quota_constraints(problem, model_input_data, decision_variables)
    _add_attribute_balance_constraints(problem, model_input_data, decision_variables)
    _add_elite_split_constraint(problem, model_input_data, decision_variables)


def _add_team_size_constraint(
    problem: pulp.LpProblem,
    model_input_data: ModelInputData,
    decision_variables: DecisionVariables,
) -> None:
    """Team size: sum_i x[i] = team_size."""

    problem += (
        pulp.lpSum(decision_variables.assign_red.values()) == model_input_data.team_size,
        "red_team_size",
    )


def _add_position_quota_constraints(
    problem: pulp.LpProblem,
    model_input_data: ModelInputData,
    decision_variables: DecisionVariables,
) -> None:
    """Position quotas for both teams, expressed on Red.

    Red takes at least m[k] players of position k and leaves at least m[k]
    for White, where m[k] is the configured minimum halved to what the pool
    can supply.
    """

    for position in model_input_data.positions:
        required = model_input_data.adjusted_min_required(position)
        if required <= 0:
            continue

        red_count = pulp.lpSum(decision_variables.assign_red[i] for i in model_input_data.indices_by_position[position])
        available = model_input_data.available(position)

        problem += red_count >= required, f"min_red_{position.value}"
        problem += red_count <= available - required, f"max_red_{position.value}"


def _add_attribute_balance_constraints(
    problem: pulp.LpProblem,
    model_input_data: ModelInputData,
    decision_variables: DecisionVariables,
) -> None:
    """Attribute targets: sum_i a[i] x[i] + minus[a] - plus[a] = total[a] / 2."""

    for attr in BALANCED_ATTRIBUTES:
        red_sum = pulp.lpSum(
            model_input_data.value(i, attr) * decision_variables.assign_red[i] for i in model_input_data.candidate_indices
        )
        problem += (
            red_sum + decision_variables.slack_minus[attr] - decision_variables.slack_plus[attr]
            == model_input_data.attribute_target(attr),
            f"balance_{attr}",
        )


def _add_elite_split_constraint(
    problem: pulp.LpProblem,
    model_input_data: ModelInputData,
    decision_variables: DecisionVariables,
) -> None:
    """Elite split: exactly half of the top-OVR players go to Red."""

    if not model_input_data.has_elite_split:
        return

    elite = model_input_data.elite_indices
    problem += (
        pulp.lpSum(decision_variables.assign_red[i] for i in elite) == len(elite) // 2,
        "elite_split",
    )

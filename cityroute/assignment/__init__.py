"""Optimal unit-to-task assignment."""

from .hungarian import (
    Assignment,
    hungarian,
    solve_assignment,
    as_cost_matrix,
    total_cost,
    DEFAULT_DUMMY_COST_FACTOR,
)

from .greedy import greedy_assignment

from .dispatch import (
    TaskPriority,
    DispatchPlan,
    priority_weight,
    build_cost_matrix,
    assign_units_to_tasks,
)

__all__ = [
    # Hungarian solver
    "Assignment",
    "hungarian",
    "solve_assignment",
    "as_cost_matrix",
    "total_cost",
    "DEFAULT_DUMMY_COST_FACTOR",

    # Greedy fallback
    "greedy_assignment",

    # Dispatch
    "TaskPriority",
    "DispatchPlan",
    "priority_weight",
    "build_cost_matrix",
    "assign_units_to_tasks",
]

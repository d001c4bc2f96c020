"""
Greedy assignment fallback.

Tasks are taken one at a time (in the given order, usually by priority) and
each gets the cheapest agent not yet used. Fast and adequate when there is
only one agent or one task, where it matches the optimal result; with
several of each it can be arbitrarily worse than the Hungarian solver.
"""

from __future__ import annotations

from typing import Hashable, List, Optional, Sequence

import numpy as np

from .hungarian import Assignment, as_cost_matrix


def greedy_assignment(
    cost_matrix,
    agent_ids: Sequence[Hashable],
    task_ids: Sequence[Hashable],
    task_order: Optional[Sequence[int]] = None,
    max_cost: Optional[float] = None,
) -> List[Assignment]:
    """
    Assign each task, in order, to the cheapest free agent.

    Args:
        cost_matrix: (agents, tasks) array-like of non-negative costs
        agent_ids: Identifier for each row
        task_ids: Identifier for each column
        task_order: Column indices in processing order (default: left to right)
        max_cost: Optional cut-off; tasks whose best free agent costs at least
            this much stay unassigned

    Returns:
        Assignments in task processing order
    """
    matrix = as_cost_matrix(cost_matrix)
    if matrix.size == 0:
        return []

    n_agents, n_tasks = matrix.shape
    if len(agent_ids) != n_agents or len(task_ids) != n_tasks:
        raise ValueError(
            f"Cost matrix is {n_agents}x{n_tasks} but got {len(agent_ids)} agent ids "
            f"and {len(task_ids)} task ids"
        )

    order = list(task_order) if task_order is not None else list(range(n_tasks))
    free = np.ones(n_agents, dtype=bool)
    assignments: List[Assignment] = []

    for col in order:
        if not free.any():
            break
        column = np.where(free, matrix[:, col], np.inf)
        row = int(np.argmin(column))
        cost = float(column[row])
        if max_cost is not None and cost >= max_cost:
            continue
        free[row] = False
        assignments.append(Assignment(agent_ids[row], task_ids[col], cost))

    return assignments

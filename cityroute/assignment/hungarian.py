"""
Hungarian algorithm for minimum-cost one-to-one assignment.

Procedure on a square matrix:
1. Subtract each row's minimum, then each column's minimum
2. Seed a matching greedily on zero cells
3. Extend it with augmenting paths through zero cells (Kuhn)
4. If some row is still unmatched, take a minimum cover of the zeros,
   subtract the smallest uncovered entry from uncovered rows and add it to
   covered columns, and go back to 3

Rectangular inputs are padded to square with a dummy cost of twice the
largest real cost; pairings landing on padding are dropped from the result.

Zero tests use exact equality after reduction. Integral or well-scaled costs
reduce exactly; costs carrying accumulated floating error may produce a
slightly suboptimal matching.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, Hashable, List, Optional, Sequence

import numpy as np


logger = logging.getLogger(__name__)

UNMATCHED = -1
DEFAULT_DUMMY_COST_FACTOR = 2.0


@dataclass(frozen=True)
class Assignment:
    """One agent matched to one task."""
    agent_id: Hashable
    task_id: Hashable
    cost: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def total_cost(assignments: Sequence[Assignment]) -> float:
    return float(sum(a.cost for a in assignments))


# -----------------------------
# Square solver
# -----------------------------

def hungarian(cost) -> np.ndarray:
    """
    Solve a square assignment problem.

    Args:
        cost: (n, n) array-like of non-negative costs

    Returns:
        Array of length n; entry i is the column assigned to row i
    """
    matrix = np.array(cost, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise ValueError(f"hungarian() needs a square matrix, got shape {matrix.shape}")

    n = matrix.shape[0]
    if n == 0:
        return np.empty(0, dtype=np.int64)

    matrix -= matrix.min(axis=1, keepdims=True)
    matrix -= matrix.min(axis=0, keepdims=True)

    row_to_col = [UNMATCHED] * n
    col_to_row = [UNMATCHED] * n

    for row in range(n):
        for col in np.flatnonzero(matrix[row] == 0):
            if col_to_row[col] == UNMATCHED:
                row_to_col[row] = int(col)
                col_to_row[col] = row
                break

    adjustments = 0
    while True:
        for row in range(n):
            if row_to_col[row] == UNMATCHED:
                visited = [False] * n
                _augment(matrix, row, row_to_col, col_to_row, visited)

        if UNMATCHED not in row_to_col:
            break
        _adjust_reduction(matrix, row_to_col, col_to_row)
        adjustments += 1

    logger.debug("Hungarian solved %dx%d with %d cover adjustment(s)", n, n, adjustments)
    return np.array(row_to_col, dtype=np.int64)


def _augment(
    matrix: np.ndarray,
    row: int,
    row_to_col: List[int],
    col_to_row: List[int],
    visited: List[bool],
) -> bool:
    """Search for an augmenting path from ``row`` through zero cells; depth is at most n."""
    for col in np.flatnonzero(matrix[row] == 0):
        col = int(col)
        if visited[col]:
            continue
        visited[col] = True

        owner = col_to_row[col]
        if owner == UNMATCHED or _augment(matrix, owner, row_to_col, col_to_row, visited):
            row_to_col[row] = col
            col_to_row[col] = row
            return True
    return False


def _adjust_reduction(matrix: np.ndarray, row_to_col: List[int], col_to_row: List[int]) -> None:
    """Create new zeros from a minimum vertex cover of the current zeros (König)."""
    n = matrix.shape[0]
    marked_rows = np.zeros(n, dtype=bool)
    marked_cols = np.zeros(n, dtype=bool)

    stack = [row for row in range(n) if row_to_col[row] == UNMATCHED]
    for row in stack:
        marked_rows[row] = True
    while stack:
        row = stack.pop()
        for col in np.flatnonzero(matrix[row] == 0):
            if marked_cols[col]:
                continue
            marked_cols[col] = True
            owner = col_to_row[col]
            if owner != UNMATCHED and not marked_rows[owner]:
                marked_rows[owner] = True
                stack.append(owner)

    # Cover = unmarked rows + marked columns
    uncovered = matrix[np.ix_(marked_rows, ~marked_cols)]
    delta = uncovered.min()
    matrix[marked_rows, :] -= delta
    matrix[:, marked_cols] += delta


# -----------------------------
# Rectangular entry point
# -----------------------------

def as_cost_matrix(cost_matrix) -> np.ndarray:
    """
    Validate and convert a cost matrix.

    Raises:
        ValueError: If ragged, not 2-D, negative or non-finite
    """
    try:
        matrix = np.array(cost_matrix, dtype=np.float64)
    except ValueError as exc:
        raise ValueError(f"Cost matrix is ragged or not numeric: {exc}") from exc

    if matrix.size == 0:
        return matrix.reshape(0, 0) if matrix.ndim != 2 else matrix
    if matrix.ndim != 2:
        raise ValueError(f"Cost matrix must be 2-D, got {matrix.ndim}-D")
    if not np.isfinite(matrix).all():
        raise ValueError("Cost matrix contains non-finite entries")
    if (matrix < 0).any():
        raise ValueError("Cost matrix contains negative entries")
    return matrix


def solve_assignment(
    cost_matrix,
    agent_ids: Sequence[Hashable],
    task_ids: Sequence[Hashable],
    dummy_cost_factor: float = DEFAULT_DUMMY_COST_FACTOR,
    max_cost: Optional[float] = None,
) -> List[Assignment]:
    """
    Minimum-total-cost assignment of agents (rows) to tasks (columns).

    Args:
        cost_matrix: (agents, tasks) array-like of non-negative costs
        agent_ids: Identifier for each row
        task_ids: Identifier for each column
        dummy_cost_factor: Padding cost as a multiple of the largest real cost
        max_cost: Optional cut-off; pairings at or above it are dropped

    Returns:
        Assignments ordered by agent row; empty for empty input

    Raises:
        ValueError: If the matrix is malformed or the id sequences do not
            match its dimensions
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

    true_max = float(matrix.max())
    dummy_cost = dummy_cost_factor * true_max if true_max > 0 else 1.0

    size = max(n_agents, n_tasks)
    square = np.full((size, size), dummy_cost, dtype=np.float64)
    square[:n_agents, :n_tasks] = matrix

    columns = hungarian(square)

    assignments: List[Assignment] = []
    for row in range(n_agents):
        col = int(columns[row])
        if col >= n_tasks:
            continue
        cost = float(matrix[row, col])
        if cost >= dummy_cost:
            continue
        if max_cost is not None and cost >= max_cost:
            continue
        assignments.append(Assignment(agent_ids[row], task_ids[col], cost))

    logger.info(
        "Assignment solved: %d of %d agents matched to %d tasks (total cost %.2f)",
        len(assignments), n_agents, n_tasks, total_cost(assignments),
    )
    return assignments

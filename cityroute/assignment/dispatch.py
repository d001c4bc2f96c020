"""
Dispatch planning: derive assignment costs from routing distances and match
units to pending tasks.

Cost of sending a unit to a task is its route distance divided by the task's
priority weight, so urgent tasks look cheaper and win contested units. Pairs
with no route get a fixed unreachable cost and are normally filtered out by
the plan's cost ceiling.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Hashable, List, Mapping, Optional, Protocol, Sequence

import numpy as np
import pandas as pd

from ..tools.config_loader import AssignmentConfig
from .greedy import greedy_assignment
from .hungarian import Assignment, solve_assignment, total_cost


logger = logging.getLogger(__name__)


class TaskPriority(Enum):
    """Task urgency and its cost weight."""
    CRITICAL = 4.0
    HIGH = 3.0
    MEDIUM = 2.0
    LOW = 1.0

    @property
    def weight(self) -> float:
        return self.value


class DistanceSource(Protocol):
    """Anything that can answer ``distance(a, b)`` (routing service, all-pairs handle)."""

    def distance(self, a: int, b: int) -> float: ...


def priority_weight(priority) -> float:
    """Weight for a priority given as enum, name, or None (LOW)."""
    if priority is None:
        return TaskPriority.LOW.weight
    if isinstance(priority, TaskPriority):
        return priority.weight
    try:
        return TaskPriority[str(priority).upper()].weight
    except KeyError:
        return TaskPriority.LOW.weight


@dataclass
class DispatchPlan:
    """
    Result of matching units to tasks.

    Attributes:
        assignments: Chosen (unit, task, cost) pairings
        total_cost: Sum of assignment costs
        method: "hungarian" or "greedy"
        unassigned_agents: Units left idle
        unassigned_tasks: Tasks left pending
    """
    assignments: List[Assignment]
    total_cost: float
    method: str
    unassigned_agents: List[Hashable] = field(default_factory=list)
    unassigned_tasks: List[Hashable] = field(default_factory=list)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [a.to_dict() for a in self.assignments],
            columns=["agent_id", "task_id", "cost"],
        )


def build_cost_matrix(
    router: DistanceSource,
    agent_nodes: Sequence[int],
    task_nodes: Sequence[int],
    priorities: Optional[Sequence] = None,
    unreachable_cost: float = 10000.0,
) -> np.ndarray:
    """
    Build an (agents x tasks) cost matrix from routing distances.

    Args:
        router: Distance source queried for every agent x task pair
        agent_nodes: Current node of each agent
        task_nodes: Location node of each task
        priorities: Optional priority per task (TaskPriority or name)
        unreachable_cost: Cost used when no route exists

    Returns:
        float64 matrix of shape (len(agent_nodes), len(task_nodes))
    """
    if priorities is not None and len(priorities) != len(task_nodes):
        raise ValueError("priorities must have one entry per task")

    weights = [priority_weight(p) for p in priorities] if priorities is not None else [1.0] * len(task_nodes)
    matrix = np.empty((len(agent_nodes), len(task_nodes)), dtype=np.float64)

    for i, agent_node in enumerate(agent_nodes):
        for j, task_node in enumerate(task_nodes):
            distance = router.distance(agent_node, task_node)
            matrix[i, j] = distance / weights[j] if math.isfinite(distance) else unreachable_cost
    return matrix


def assign_units_to_tasks(
    router: DistanceSource,
    units: Mapping[Hashable, int],
    tasks: Mapping[Hashable, int],
    priorities: Optional[Mapping[Hashable, object]] = None,
    config: Optional[AssignmentConfig] = None,
    force_greedy: bool = False,
) -> DispatchPlan:
    """
    Match available units to pending tasks at minimum total cost.

    Uses the Hungarian solver, or greedy matching (urgent tasks first) when
    there is a single unit or a single task, or when ``force_greedy`` is set.

    Args:
        router: Distance source (e.g. RoutingService)
        units: Unit id -> current node
        tasks: Task id -> location node
        priorities: Task id -> priority (default LOW)
        config: Assignment configuration (defaults if None)
        force_greedy: Skip the Hungarian solver

    Returns:
        DispatchPlan; pairs at or above ``max_assignment_cost`` are dropped
    """
    config = config or AssignmentConfig()
    priorities = priorities or {}

    agent_ids = list(units)
    task_ids = list(tasks)
    if not agent_ids or not task_ids:
        return DispatchPlan([], 0.0, "none", agent_ids, task_ids)

    task_priorities = [priorities.get(t) for t in task_ids]
    matrix = build_cost_matrix(
        router,
        [units[a] for a in agent_ids],
        [tasks[t] for t in task_ids],
        task_priorities,
        unreachable_cost=config.unreachable_cost,
    )

    single = len(agent_ids) == 1 or len(task_ids) == 1
    if force_greedy or (single and config.greedy_when_single):
        # Most urgent first; stable so ties keep caller order
        order = sorted(range(len(task_ids)), key=lambda j: -priority_weight(task_priorities[j]))
        assignments = greedy_assignment(
            matrix, agent_ids, task_ids, task_order=order, max_cost=config.max_assignment_cost
        )
        method = "greedy"
    else:
        assignments = solve_assignment(
            matrix,
            agent_ids,
            task_ids,
            dummy_cost_factor=config.dummy_cost_factor,
            max_cost=config.max_assignment_cost,
        )
        method = "hungarian"

    used_agents = {a.agent_id for a in assignments}
    used_tasks = {a.task_id for a in assignments}
    plan = DispatchPlan(
        assignments=assignments,
        total_cost=total_cost(assignments),
        method=method,
        unassigned_agents=[a for a in agent_ids if a not in used_agents],
        unassigned_tasks=[t for t in task_ids if t not in used_tasks],
    )
    logger.info(
        "Dispatch plan (%s): %d assignment(s), %d task(s) pending, total cost %.2f",
        method, len(assignments), len(plan.unassigned_tasks), plan.total_cost,
    )
    return plan

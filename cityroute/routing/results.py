"""Result containers shared by the search engines and the routing service."""

from __future__ import annotations

import math
from dataclasses import dataclass, asdict
from typing import Any, Dict, Mapping, Tuple


@dataclass(frozen=True)
class SearchResult:
    """
    Outcome of a single-pair route query.

    Attributes:
        path: Node ids from source to destination inclusive; empty when no
              route exists or an id is unknown
        distance: Sum of dynamic edge weights along the path (inf if no path)
        algorithm: Engine that produced the result
        nodes_explored: Heap pops performed (diagnostic only)
        compute_time_ns: Wall-clock time spent computing
    """
    path: Tuple[int, ...]
    distance: float
    algorithm: str
    nodes_explored: int = 0
    compute_time_ns: int = 0

    @property
    def found(self) -> bool:
        return len(self.path) > 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["path"] = list(self.path)
        return data


def no_path(algorithm: str, nodes_explored: int = 0, compute_time_ns: int = 0) -> SearchResult:
    return SearchResult(
        path=(),
        distance=math.inf,
        algorithm=algorithm,
        nodes_explored=nodes_explored,
        compute_time_ns=compute_time_ns,
    )


def reconstruct_path(predecessors: Mapping[int, int], source: int, target: int) -> Tuple[int, ...]:
    """Walk the predecessor chain back from ``target``; empty if it never reaches ``source``."""
    path = [target]
    current = target
    while current != source:
        current = predecessors.get(current)
        if current is None:
            return ()
        path.append(current)
    path.reverse()
    return tuple(path)

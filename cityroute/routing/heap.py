"""
Indexed binary min-heap with decrease-key.

A node-id -> heap-position map is kept in step with every swap so that
``decrease_key`` and ``contains`` do not need a linear scan. Ties between
equal priorities are broken arbitrarily.
"""

from __future__ import annotations

from typing import Dict, List, Tuple


class IndexedMinHeap:
    """Min-priority queue keyed by integer node id."""

    def __init__(self):
        self._heap: List[Tuple[float, int]] = []
        self._position: Dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._position

    def contains(self, node_id: int) -> bool:
        return node_id in self._position

    def priority(self, node_id: int) -> float:
        """Current priority of a queued node (KeyError if absent)."""
        return self._heap[self._position[node_id]][0]

    def insert(self, node_id: int, priority: float) -> None:
        """
        Add a node.

        Raises:
            ValueError: If the node is already queued
        """
        if node_id in self._position:
            raise ValueError(f"Node {node_id} is already in the heap")
        self._heap.append((priority, node_id))
        index = len(self._heap) - 1
        self._position[node_id] = index
        self._sift_up(index)

    def extract_min(self) -> Tuple[int, float]:
        """
        Remove and return ``(node_id, priority)`` with the lowest priority.

        Raises:
            IndexError: If the heap is empty
        """
        if not self._heap:
            raise IndexError("extract_min from an empty heap")

        priority, node_id = self._heap[0]
        last = self._heap.pop()
        del self._position[node_id]

        if self._heap:
            self._heap[0] = last
            self._position[last[1]] = 0
            self._sift_down(0)
        return node_id, priority

    def peek(self) -> Tuple[int, float]:
        if not self._heap:
            raise IndexError("peek at an empty heap")
        priority, node_id = self._heap[0]
        return node_id, priority

    def decrease_key(self, node_id: int, priority: float) -> bool:
        """
        Lower a queued node's priority.

        Returns:
            True if the priority changed; False when the node is absent or
            ``priority`` is not lower than the current one
        """
        index = self._position.get(node_id)
        if index is None or priority >= self._heap[index][0]:
            return False
        self._heap[index] = (priority, node_id)
        self._sift_up(index)
        return True

    def _sift_up(self, index: int) -> None:
        while index > 0:
            parent = (index - 1) // 2
            if self._heap[index][0] >= self._heap[parent][0]:
                break
            self._swap(index, parent)
            index = parent

    def _sift_down(self, index: int) -> None:
        size = len(self._heap)
        while True:
            smallest = index
            left = 2 * index + 1
            right = left + 1
            if left < size and self._heap[left][0] < self._heap[smallest][0]:
                smallest = left
            if right < size and self._heap[right][0] < self._heap[smallest][0]:
                smallest = right
            if smallest == index:
                return
            self._swap(index, smallest)
            index = smallest

    def _swap(self, i: int, j: int) -> None:
        heap = self._heap
        heap[i], heap[j] = heap[j], heap[i]
        self._position[heap[i][1]] = i
        self._position[heap[j][1]] = j

"""Optimal partition of a sequence of byte blocks into run and mixed segments.

Each block is a run of zeros, a run of ones or mixed. A segment made only
of run blocks of one kind is cheap; any other segment pays for its bytes.
Costs are in bits. The search keeps a set of sliding windows, one per
approximation level, as in the classic approximate partitioning scheme.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Callable, Iterable

from runvec.math_util import hi


class BlockType(enum.IntEnum):
    RUN0 = 0
    RUN1 = 1
    MIXED = 2


@dataclass(frozen=True)
class Partition:
    """Segment end positions (exclusive, increasing) and their total cost in bits."""

    partition: list[int] = field(default_factory=list)
    cost: int = 0


class _Window:
    def __init__(self, blocks: list[BlockType], bound: int) -> None:
        self.blocks = blocks
        self.bound = bound
        self.beg = 0
        self.end = 0
        self.counts = {kind: 0 for kind in BlockType}

    def __len__(self) -> int:
        return self.end - self.beg

    @property
    def is_mixed(self) -> bool:
        counts = self.counts
        return counts[BlockType.MIXED] > 0 or (
            counts[BlockType.RUN1] > 0 and counts[BlockType.RUN0] > 0
        )

    @property
    def is_run1(self) -> bool:
        counts = self.counts
        return (
            counts[BlockType.MIXED] == 0
            and counts[BlockType.RUN0] == 0
            and counts[BlockType.RUN1] > 0
        )

    def advance_start(self) -> None:
        self.counts[self.blocks[self.beg]] -= 1
        self.beg += 1

    def advance_end(self) -> None:
        self.counts[self.blocks[self.end]] += 1
        self.end += 1


_CostFn = Callable[[_Window, int], int]


def _variable_cost(window: _Window, cost_length: int) -> int:
    if window.is_mixed:
        return 2 + 2 * cost_length + len(window) * 8
    return 2 + cost_length


def _sparse_cost(window: _Window, cost_length: int) -> int:
    if window.is_mixed:
        return 2 + 2 * cost_length + len(window) * 8
    if window.is_run1:
        return 2 + cost_length
    return 1 + cost_length


def _optimal(
    blocks: Iterable[object], size: int, eps1: float, eps2: float, cost_of: _CostFn
) -> Partition:
    types = [BlockType(b) for b in blocks]
    n = len(types)
    single_block_cost = size
    min_cost = [single_block_cost] * (n + 1)
    min_cost[0] = 0
    cost_length = hi(n) + 1

    windows: list[_Window] = []
    cost_lb = 2 + cost_length
    cost_bound = cost_lb
    while eps1 == 0 or cost_bound < cost_lb / eps1:
        windows.append(_Window(types, cost_bound))
        if cost_bound >= single_block_cost:
            break
        # Bounds are integral; always make progress so small bounds cannot stall.
        cost_bound = max(int(cost_bound * (1 + eps2)), cost_bound + 1)

    path = [0] * (n + 1)
    for i in range(n):
        last_end = i + 1
        for window in windows:
            while window.end < last_end:
                window.advance_end()
            while True:
                window_cost = cost_of(window, cost_length)
                if min_cost[i] + window_cost < min_cost[window.end]:
                    min_cost[window.end] = min_cost[i] + window_cost
                    path[window.end] = i
                last_end = window.end
                if window.end == n or window_cost >= window.bound:
                    break
                window.advance_end()
            window.advance_start()

    ends = []
    pos = n
    while pos != 0:
        ends.append(pos)
        pos = path[pos]
    ends.reverse()
    return Partition(partition=ends, cost=min_cost[n])


def optimal_variable(
    blocks: Iterable[object], size: int, eps1: float = 0.03, eps2: float = 0.3
) -> Partition:
    """Partition where runs of zeros and runs of ones cost the same."""
    return _optimal(blocks, size, eps1, eps2, _variable_cost)


def optimal_sparse_variable(
    blocks: Iterable[object], size: int, eps1: float = 0.03, eps2: float = 0.3
) -> Partition:
    """Partition where runs of zeros are one bit cheaper than runs of ones."""
    return _optimal(blocks, size, eps1, eps2, _sparse_cost)
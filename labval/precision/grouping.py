"""Ordered factor groupings for precision-study designs.

A grouping is built once per analysis: an arena of groups in first-seen
order plus an index from level to arena position. Numeric levels are
compared by value (``1``, ``1.0`` and ``numpy.int64(1)`` are the same day)
while strings are compared as text, so ``1`` and ``"1"`` stay distinct.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Sequence, Tuple

import numpy as np

from labval.exceptions import InputValidationError


def level_key(level: Hashable) -> Tuple[str, Hashable]:
    """Return a lookup key that keeps numeric and text levels apart."""
    if isinstance(level, (bool, np.bool_)):
        return ("bool", bool(level))
    if isinstance(level, numbers.Real):
        return ("num", float(level))
    if isinstance(level, str):
        return ("str", level)
    return (type(level).__name__, level)


@dataclass
class FactorGrouping:
    """Values grouped by the levels of one factor, in first-seen order."""

    levels: List[Hashable] = field(default_factory=list)
    groups: List[List[float]] = field(default_factory=list)
    _index: Dict[Tuple[str, Hashable], int] = field(default_factory=dict, repr=False)

    @classmethod
    def build(cls, levels: Sequence[Hashable], values: Sequence[float]) -> "FactorGrouping":
        if len(levels) != len(values):
            raise InputValidationError("Factor levels and values must have the same length.")
        grouping = cls()
        for level, value in zip(levels, values):
            grouping.add(level, float(value))
        return grouping

    def add(self, level: Hashable, value: float) -> None:
        key = level_key(level)
        pos = self._index.get(key)
        if pos is None:
            pos = len(self.groups)
            self._index[key] = pos
            self.levels.append(level)
            self.groups.append([])
        self.groups[pos].append(value)

    def group(self, level: Hashable) -> List[float]:
        return self.groups[self._index[level_key(level)]]

    def __len__(self) -> int:
        return len(self.groups)

    def __contains__(self, level: Hashable) -> bool:
        return level_key(level) in self._index

    @property
    def sizes(self) -> np.ndarray:
        return np.array([len(g) for g in self.groups], dtype=int)

    @property
    def sums(self) -> np.ndarray:
        return np.array([float(np.sum(g)) for g in self.groups], dtype=float)

    @property
    def means(self) -> np.ndarray:
        return np.array([float(np.mean(g)) for g in self.groups], dtype=float)


@dataclass
class NestedGrouping:
    """Two-level grouping: factor A (day) containing factor B (run) groups."""

    outer: List[Hashable] = field(default_factory=list)
    inner: List[FactorGrouping] = field(default_factory=list)
    _index: Dict[Tuple[str, Hashable], int] = field(default_factory=dict, repr=False)

    @classmethod
    def build(
        cls,
        factor_a: Sequence[Hashable],
        factor_b: Sequence[Hashable],
        values: Sequence[float],
    ) -> "NestedGrouping":
        if not (len(factor_a) == len(factor_b) == len(values)):
            raise InputValidationError("Factor A, B and values must have the same length.")
        grouping = cls()
        for a, b, value in zip(factor_a, factor_b, values):
            key = level_key(a)
            pos = grouping._index.get(key)
            if pos is None:
                pos = len(grouping.inner)
                grouping._index[key] = pos
                grouping.outer.append(a)
                grouping.inner.append(FactorGrouping())
            grouping.inner[pos].add(b, float(value))
        return grouping

    def __len__(self) -> int:
        return len(self.inner)

    def cells(self) -> List[List[float]]:
        """All (A, B) cells in order, flattened across factor A."""
        return [cell for sub in self.inner for cell in sub.groups]

    def outer_values(self, pos: int) -> List[float]:
        """Every value recorded at the ``pos``-th level of factor A."""
        return [v for cell in self.inner[pos].groups for v in cell]

    @property
    def max_inner_levels(self) -> int:
        return max((len(sub) for sub in self.inner), default=0)

    @property
    def max_cell_size(self) -> int:
        return max((len(cell) for cell in self.cells()), default=0)

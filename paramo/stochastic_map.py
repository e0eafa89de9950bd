"""Stochastic character map value types.

A map stores, for every edge of a tree (pre-order edge index, see
``Node.edges``), the ordered (state, duration) segments from the
root-proximal to the tip-distal end of the edge. Maps never mutate their
tree; every transformation returns a new map.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Hashable, Iterable, List, Optional, Sequence, Set, Tuple

import numpy as np
from numpy.typing import NDArray

from paramo.elements.composite_state import CompositeState
from paramo.elements.segment import (
    EdgeSegments,
    Segment,
    segments_from_pairs,
    state_at,
    total_duration,
)
from paramo.exceptions import InvalidMapError
from paramo.tree import Node

DURATION_REL_TOLERANCE = 1e-9
DURATION_ABS_TOLERANCE = 1e-9


def durations_match(total: float, length: float) -> bool:
    return math.isclose(
        total, length, rel_tol=DURATION_REL_TOLERANCE, abs_tol=DURATION_ABS_TOLERANCE
    )


@dataclass(frozen=True)
class StochasticMap:
    """Raw stochastic character map: one segment sequence per edge."""

    tree: Node
    edge_maps: Tuple[EdgeSegments, ...]

    def __post_init__(self) -> None:
        edge_maps = tuple(segments_from_pairs(segments) for segments in self.edge_maps)
        object.__setattr__(self, "edge_maps", edge_maps)
        self._validate()

    def _validate(self) -> None:
        edges = self.tree.edges()
        if len(edges) != len(self.edge_maps):
            raise InvalidMapError(
                f"Map has {len(self.edge_maps)} edge entries but the tree has "
                f"{len(edges)} edges"
            )
        for i, (node, segments) in enumerate(zip(edges, self.edge_maps)):
            if not segments:
                raise InvalidMapError("Segment list is empty", edge_index=i)
            if any(segment.duration < 0 for segment in segments):
                raise InvalidMapError("Segment durations must be non-negative", i)
            total = total_duration(segments)
            if not durations_match(total, node.length):
                raise InvalidMapError(
                    f"Segment durations sum to {total} but the edge length is "
                    f"{node.length}",
                    edge_index=i,
                )

    @classmethod
    def from_pairs(
        cls,
        tree: Node,
        edge_maps: Iterable[Iterable[Tuple[Hashable, float]]],
        **kwargs,
    ):
        """Build a map from nested ``(state, duration)`` pairs, one list per edge."""
        return cls(tree, tuple(segments_from_pairs(pairs) for pairs in edge_maps), **kwargs)

    # ------------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------------
    @property
    def edge_count(self) -> int:
        return len(self.edge_maps)

    def edge_totals(self) -> NDArray[np.float64]:
        return np.array([total_duration(s) for s in self.edge_maps], dtype=np.float64)

    def state_labels(self) -> List[Tuple[Hashable, ...]]:
        """State sequence of every edge, without durations."""
        return [tuple(segment.state for segment in segments) for segments in self.edge_maps]

    def durations(self) -> List[Tuple[float, ...]]:
        return [
            tuple(segment.duration for segment in segments) for segments in self.edge_maps
        ]

    def slice_counts(self) -> Tuple[int, ...]:
        return tuple(len(segments) for segments in self.edge_maps)

    def states(self) -> Set[Hashable]:
        return {segment.state for segments in self.edge_maps for segment in segments}

    def state_at(self, edge_index: int, t: float) -> Hashable:
        """State held on ``edge_index`` at edge-relative time ``t``."""
        return state_at(self.edge_maps[edge_index], t)

    def with_edge_maps(self, edge_maps: Sequence[EdgeSegments]):
        """Copy of this map, same type and metadata, with new segments."""
        return replace(self, edge_maps=tuple(edge_maps))


@dataclass(frozen=True)
class DiscretizedMap(StochasticMap):
    """
    Map whose segment boundaries all fall on a tree-global time grid.

    ``checkpoints`` holds the grid ``{0, L/res, ..., L}`` where ``L`` is the
    maximum root-to-tip height of ``tree``.
    """

    resolution: int = 1
    checkpoints: Tuple[float, ...] = field(default=())


@dataclass(frozen=True)
class AmalgamatedMap(StochasticMap):
    """
    Joint history of several characters.

    Every state is a ``CompositeState`` whose components follow the order
    of ``characters``.
    """

    characters: Tuple[str, ...] = ()
    resolution: Optional[int] = None
    checkpoints: Tuple[float, ...] = field(default=())
    label_delimiter: str = ""

    def render_labels(
        self, delimiter: Optional[str] = None
    ) -> List[List[Tuple[str, float]]]:
        """Per-edge ``(label, duration)`` lists with composite states rendered as text."""
        if delimiter is None:
            delimiter = self.label_delimiter
        return [
            [
                (CompositeState.wrap(segment.state).render(delimiter), segment.duration)
                for segment in segments
            ]
            for segments in self.edge_maps
        ]

    def component_map(self, character: str) -> StochasticMap:
        """
        Project the joint history back onto a single character.

        The result keeps the amalgamated time slices; merge it to recover
        the minimal form.
        """
        position = self.characters.index(character)
        return StochasticMap(
            self.tree,
            tuple(
                tuple(
                    Segment(CompositeState.wrap(s.state)[position], s.duration)
                    for s in segments
                )
                for segments in self.edge_maps
            ),
        )

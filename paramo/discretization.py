"""Discretization of stochastic character maps onto a shared time grid."""

import logging
from typing import Iterable, List, Sequence

import numpy as np
from numpy.typing import NDArray

from paramo.elements.segment import EdgeSegments, Segment
from paramo.exceptions import InvalidResolutionError
from paramo.logger import paramo_logger
from paramo.stochastic_map import DiscretizedMap, StochasticMap
from paramo.tree import Node

logger = logging.getLogger(__name__)

# Relative to the tree height
GRID_TOLERANCE = 1e-9


def validate_resolution(res: object) -> int:
    """Return ``res`` as an int, or raise InvalidResolutionError."""
    if isinstance(res, bool) or not isinstance(res, (int, np.integer)):
        raise InvalidResolutionError(res)
    if res <= 0:
        raise InvalidResolutionError(res)
    return int(res)


def checkpoints(tree: Node, res: int) -> NDArray[np.float64]:
    """
    Evenly spaced grid ``k / res * L`` for ``k = 0..res``.

    ``L`` is the maximum root-to-tip height of ``tree``.
    """
    res = validate_resolution(res)
    height = tree.max_height()
    return np.arange(res + 1, dtype=np.float64) / res * height


def discretize_edge(
    segments: Sequence[Segment],
    h_start: float,
    h_end: float,
    steps: NDArray[np.float64],
    tolerance: float = 0.0,
) -> EdgeSegments:
    """
    Cut one edge's segments at every grid point strictly inside the edge.

    Each refined interval ``(a, b]`` (edge-relative) takes the state of
    the source segment covering ``b``: the first source segment whose
    cumulative end is >= ``b``. Grid points equal to an edge endpoint add
    no boundary. Grid points and segment ends closer than ``tolerance``
    count as equal.

    Args:
        segments: Source (state, duration) segments of the edge
        h_start: Height of the edge's parent node
        h_end: Height of the edge's child node
        steps: Tree-global checkpoint grid
        tolerance: Absolute tolerance for grid point comparisons

    Returns:
        The refined segments; their durations sum to ``h_end - h_start``.
    """
    inner = steps[(steps > h_start + tolerance) & (steps < h_end - tolerance)]
    bounds = np.concatenate(([h_start], inner, [h_end])) - h_start
    starts = bounds[:-1]
    stops = bounds[1:]

    ends = np.cumsum([segment.duration for segment in segments])
    # Left-open lookup; stops beyond the last end (rounding) stay on the last segment
    covering = np.searchsorted(ends, stops - tolerance, side="left")
    covering = np.clip(covering, 0, len(segments) - 1)

    return tuple(
        Segment(segments[j].state, float(b - a))
        for j, a, b in zip(covering, starts, stops)
    )


def discretize(smap: StochasticMap, res: int) -> DiscretizedMap:
    """
    Refine every edge of ``smap`` so that segment boundaries fall on the grid.

    Total duration per edge is unchanged. Each slice takes the state
    ``smap`` holds at the slice's tip-ward end, so maps whose transitions
    already lie on the grid keep every instant's state.

    Raises:
        InvalidResolutionError: If ``res`` is not a positive integer
    """
    res = validate_resolution(res)
    tree = smap.tree
    steps = checkpoints(tree, res)
    heights = tree.edge_heights()
    tolerance = GRID_TOLERANCE * max(1.0, float(steps[-1]))

    if not paramo_logger.disabled:
        paramo_logger.section(f"Discretization (res={res})")
        paramo_logger.info(
            f"Tree height {steps[-1]:.6g}, grid spacing {steps[-1] / res:.6g}, "
            f"{smap.edge_count} edges"
        )
        paramo_logger.info(f"Tree {tree.to_newick()}")

    edge_maps: List[EdgeSegments] = []
    for i, segments in enumerate(smap.edge_maps):
        h_start, h_end = heights[i]
        refined = discretize_edge(segments, h_start, h_end, steps, tolerance)
        edge_maps.append(refined)
        if not paramo_logger.disabled:
            paramo_logger.segment_table(refined, title=f"Edge {i}")

    logger.debug(
        "Discretized %d edges into %d slices at res=%d",
        smap.edge_count,
        sum(len(s) for s in edge_maps),
        res,
    )
    return DiscretizedMap(
        tree,
        tuple(edge_maps),
        resolution=res,
        checkpoints=tuple(float(step) for step in steps),
    )


def discretize_batch(maps: Iterable[StochasticMap], res: int) -> List[DiscretizedMap]:
    """Discretize each map independently at one shared resolution."""
    res = validate_resolution(res)
    result = [discretize(smap, res) for smap in maps]
    logger.info("Discretized %d trees at res=%d", len(result), res)
    return result

"""Run-length merging of identical adjacent state segments."""

import logging
from typing import Iterable, List, Sequence, TypeVar

from paramo.elements.segment import EdgeSegments, Segment
from paramo.stochastic_map import StochasticMap

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=StochasticMap)


def merge_branch(segments: Sequence[Segment]) -> EdgeSegments:
    """
    Collapse adjacent segments that share a state into one segment.

    The scan stays on the current position after a merge, so runs of any
    length collapse into a single entry. Order and total duration are
    preserved and no two adjacent entries of the result share a state.

    Example:
        >>> merge_branch([Segment("a", 1), Segment("a", 2), Segment("b", 1)])
        (Segment(state='a', duration=3), Segment(state='b', duration=1))
    """
    merged: List[Segment] = list(segments)
    i = 1
    while i < len(merged):
        previous, current = merged[i - 1], merged[i]
        if current.state == previous.state:
            merged[i - 1] = Segment(previous.state, previous.duration + current.duration)
            del merged[i]
        else:
            i += 1
    return tuple(merged)


def merge_tree(smap: M) -> M:
    """Apply ``merge_branch`` to every edge; the map keeps its type and metadata."""
    return smap.with_edge_maps([merge_branch(segments) for segments in smap.edge_maps])


def merge_tree_collection(maps: Iterable[M]) -> List[M]:
    """Merge every map of a collection and return them as one flat list, in order."""
    result: List[M] = [merge_tree(smap) for smap in maps]
    logger.debug("Merged %d maps", len(result))
    return result

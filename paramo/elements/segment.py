from typing import Hashable, Iterable, List, NamedTuple, Sequence, Tuple


class Segment(NamedTuple):
    """One (state, duration) entry of an edge's stochastic map."""

    state: Hashable
    duration: float


EdgeSegments = Tuple[Segment, ...]


def segments_from_pairs(pairs: Iterable[Tuple[Hashable, float]]) -> EdgeSegments:
    """Build an immutable segment sequence from ``(state, duration)`` pairs."""
    return tuple(Segment(state, float(duration)) for state, duration in pairs)


def total_duration(segments: Sequence[Segment]) -> float:
    return float(sum(segment.duration for segment in segments))


def segment_ends(segments: Sequence[Segment]) -> List[float]:
    """Cumulative end time of every segment, edge-relative."""
    ends: List[float] = []
    elapsed = 0.0
    for segment in segments:
        elapsed += segment.duration
        ends.append(elapsed)
    return ends


def state_at(segments: Sequence[Segment], t: float) -> Hashable:
    """
    Return the state held at edge-relative time ``t``.

    Segments are left-open: the state of ``(start, end]`` is reported at
    ``end``, so a boundary point belongs to the segment it closes. Times
    outside the edge are clamped to the first or last segment.
    """
    if not segments:
        raise ValueError("Cannot look up a state in an empty segment list")
    for segment, end in zip(segments, segment_ends(segments)):
        if t <= end:
            return segment.state
    return segments[-1].state

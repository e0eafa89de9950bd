from paramo.elements.segment import (
    Segment,
    EdgeSegments,
    segments_from_pairs,
    total_duration,
    segment_ends,
    state_at,
)
from paramo.elements.composite_state import CompositeState

__all__ = [
    "Segment",
    "EdgeSegments",
    "segments_from_pairs",
    "total_duration",
    "segment_ends",
    "state_at",
    "CompositeState",
]

import pytest

from paramo.elements import (
    CompositeState,
    Segment,
    segment_ends,
    segments_from_pairs,
    state_at,
    total_duration,
)


def test_segments_from_pairs():
    segments = segments_from_pairs([("0", 4), ("1", 2)])
    assert segments == (Segment("0", 4.0), Segment("1", 2.0))
    assert isinstance(segments[0].duration, float)


def test_total_duration_and_ends():
    segments = segments_from_pairs([("a", 1.0), ("b", 2.5), ("a", 0.5)])
    assert total_duration(segments) == pytest.approx(4.0)
    assert segment_ends(segments) == pytest.approx([1.0, 3.5, 4.0])


def test_state_at_is_left_open():
    segments = segments_from_pairs([("0", 4.0), ("1", 2.0)])
    assert state_at(segments, 0.0) == "0"
    assert state_at(segments, 3.9) == "0"
    assert state_at(segments, 4.0) == "0", "A boundary belongs to the segment it closes"
    assert state_at(segments, 4.1) == "1"
    assert state_at(segments, 6.0) == "1"
    assert state_at(segments, 7.0) == "1"


def test_state_at_empty_raises():
    with pytest.raises(ValueError):
        state_at((), 1.0)


def test_composite_wrap_and_concat():
    a = CompositeState.wrap("0")
    assert a.components == ("0",)
    assert CompositeState.wrap(a) is a
    ab = a.concat("x")
    assert ab.components == ("0", "x")
    abc = CompositeState.wrap("1").concat(ab)
    assert abc.components == ("1", "0", "x"), "Composite operands are flattened"


def test_composite_render():
    state = CompositeState(("0", "x"))
    assert state.render() == "0x"
    assert state.render("|") == "0|x"
    assert str(state) == "0x"


def test_composite_equality_is_component_wise():
    # Plain concatenation would collide here
    left = CompositeState(("0", "1x"))
    right = CompositeState(("01", "x"))
    assert left.render() == right.render()
    assert left != right
    assert len({left, right}) == 2
    assert CompositeState(("0", "x")) == CompositeState(("0", "x"))
    assert hash(CompositeState(("0", "x"))) == hash(CompositeState(("0", "x")))


def test_composite_sequence_protocol():
    state = CompositeState(("a", "b", "c"))
    assert len(state) == 3
    assert state[1] == "b"
    assert list(state) == ["a", "b", "c"]
    assert sorted([CompositeState(("b",)), CompositeState(("a",))])[0] == CompositeState(("a",))

import pytest

from paramo.elements import CompositeState, Segment
from paramo.exceptions import InvalidMapError
from paramo.stochastic_map import AmalgamatedMap, DiscretizedMap, StochasticMap
from paramo.tree import Node


def create_two_taxon_tree(length=6.0):
    return Node(
        name="root",
        children=[Node(name="A", length=length), Node(name="B", length=length)],
    )


def test_from_pairs_builds_segments():
    tree = create_two_taxon_tree()
    smap = StochasticMap.from_pairs(tree, [[("0", 4), ("1", 2)], [("0", 6)]])
    assert smap.edge_count == 2
    assert smap.edge_maps[0] == (Segment("0", 4.0), Segment("1", 2.0))
    assert smap.state_labels() == [("0", "1"), ("0",)]
    assert smap.durations() == [(4.0, 2.0), (6.0,)]
    assert smap.slice_counts() == (2, 1)
    assert smap.states() == {"0", "1"}


def test_state_at_on_edge():
    tree = create_two_taxon_tree()
    smap = StochasticMap.from_pairs(tree, [[("0", 4), ("1", 2)], [("0", 6)]])
    assert smap.state_at(0, 2.0) == "0"
    assert smap.state_at(0, 5.0) == "1"
    assert smap.state_at(1, 5.0) == "0"


def test_edge_count_must_match_tree():
    tree = create_two_taxon_tree()
    with pytest.raises(InvalidMapError):
        StochasticMap.from_pairs(tree, [[("0", 6)]])


def test_durations_must_sum_to_edge_length():
    tree = create_two_taxon_tree()
    with pytest.raises(InvalidMapError) as excinfo:
        StochasticMap.from_pairs(tree, [[("0", 4), ("1", 1)], [("0", 6)]])
    assert excinfo.value.edge_index == 0
    assert "Edge 0" in str(excinfo.value)


def test_empty_and_negative_segments_rejected():
    tree = create_two_taxon_tree()
    with pytest.raises(InvalidMapError):
        StochasticMap.from_pairs(tree, [[], [("0", 6)]])
    with pytest.raises(InvalidMapError):
        StochasticMap.from_pairs(tree, [[("0", 7), ("1", -1)], [("0", 6)]])


def test_rounding_within_tolerance_is_accepted():
    tree = create_two_taxon_tree(0.3)
    smap = StochasticMap.from_pairs(tree, [[("0", 0.1), ("1", 0.2)], [("0", 0.3)]])
    assert smap.edge_totals() == pytest.approx([0.3, 0.3])


def test_with_edge_maps_keeps_type_and_metadata():
    tree = create_two_taxon_tree()
    dmap = DiscretizedMap.from_pairs(
        tree,
        [[("0", 3), ("0", 3)], [("1", 6)]],
        resolution=2,
        checkpoints=(0.0, 3.0, 6.0),
    )
    copy = dmap.with_edge_maps([(Segment("0", 6.0),), (Segment("1", 6.0),)])
    assert isinstance(copy, DiscretizedMap)
    assert copy.resolution == 2
    assert copy.checkpoints == (0.0, 3.0, 6.0)
    assert copy.tree is tree


def test_amalgamated_render_and_projection():
    tree = create_two_taxon_tree()
    amap = AmalgamatedMap.from_pairs(
        tree,
        [
            [(CompositeState(("0", "x")), 3), (CompositeState(("1", "x")), 3)],
            [(CompositeState(("0", "y")), 6)],
        ],
        characters=("A", "B"),
    )
    assert amap.render_labels() == [[("0x", 3.0), ("1x", 3.0)], [("0y", 6.0)]]
    assert amap.render_labels("-")[0][0] == ("0-x", 3.0)

    projected = amap.component_map("B")
    assert projected.state_labels() == [("x", "x"), ("y",)]
    assert projected.durations() == amap.durations()

import numpy as np
import pytest

from paramo.tree import Node


def create_two_taxon_tree(length=6.0):
    r"""
    Create a cherry:
        root
        /  \
       A    B
    """
    return Node(
        name="root",
        children=[Node(name="A", length=length), Node(name="B", length=length)],
    )


def create_balanced_tree():
    r"""
    Create a tree with one internal edge:
            root
           /    \
        I1(1.5)  C(3.5)
        /    \
     A(2.0)  B(2.0)
    """
    inner = Node(
        name="I1",
        length=1.5,
        children=[Node(name="A", length=2.0), Node(name="B", length=2.0)],
    )
    return Node(name="root", children=[inner, Node(name="C", length=3.5)])


def test_edges_are_preorder_children():
    tree = create_balanced_tree()
    assert [node.name for node in tree.edges()] == ["I1", "A", "B", "C"]
    assert tree.edge_count() == 4


def test_edge_lengths():
    tree = create_balanced_tree()
    np.testing.assert_allclose(tree.edge_lengths(), [1.5, 2.0, 2.0, 3.5])


def test_edge_heights_follow_parent_heights():
    tree = create_balanced_tree()
    heights = tree.edge_heights()
    assert heights.shape == (4, 2)
    np.testing.assert_allclose(heights[:, 0], [0.0, 1.5, 1.5, 0.0])
    np.testing.assert_allclose(heights[:, 1], [1.5, 3.5, 3.5, 3.5])
    # child height = parent height + edge length
    np.testing.assert_allclose(heights[:, 1] - heights[:, 0], tree.edge_lengths())


def test_max_height():
    assert create_balanced_tree().max_height() == pytest.approx(3.5)
    assert create_two_taxon_tree(6.0).max_height() == pytest.approx(6.0)
    assert Node(name="single").max_height() == 0.0


def test_edge_parents():
    tree = create_balanced_tree()
    assert tree.edge_parents() == (-1, 0, 0, -1)


def test_negative_length_rejected():
    with pytest.raises(ValueError):
        Node(name="bad", length=-1.0)


def test_to_newick():
    tree = create_two_taxon_tree(6.0)
    assert tree.to_newick() == "(A:6.000000,B:6.000000)root;"
    assert tree.to_newick(lengths=False) == "(A,B)root;"


def test_node_stores_edge_data_only():
    assert set(Node.__slots__) == {
        "children",
        "parent",
        "name",
        "length",
        "_traverse_cache",
        "_edges_cache",
    }
    leaf = create_two_taxon_tree().edges()[0]
    assert leaf.parent.name == "root"
    assert not leaf.children

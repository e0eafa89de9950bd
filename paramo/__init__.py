"""PARAMO: amalgamation of stochastic character maps over ontology regions."""

__all__ = [
    "Node",
    "StochasticMap",
    "DiscretizedMap",
    "AmalgamatedMap",
    "AmalgamationConfig",
    "discretize",
    "discretize_batch",
    "discretize_edge",
    "checkpoints",
    "merge_branch",
    "merge_tree",
    "merge_tree_collection",
    "combine_labels",
    "stack",
    "iter_amalgamated_samples",
    "amalgamate_samples",
    "amalgamate_by_region",
    "normalize_character_id",
    "Ontology",
    "term_to_characters",
    "region_query",
    "normalize_term_id",
    "annotation_edges",
]

_EXPORTS = {
    "Node": "paramo.tree",
    "StochasticMap": "paramo.stochastic_map",
    "DiscretizedMap": "paramo.stochastic_map",
    "AmalgamatedMap": "paramo.stochastic_map",
    "AmalgamationConfig": "paramo.config",
    "discretize": "paramo.discretization",
    "discretize_batch": "paramo.discretization",
    "discretize_edge": "paramo.discretization",
    "checkpoints": "paramo.discretization",
    "merge_branch": "paramo.merge",
    "merge_tree": "paramo.merge",
    "merge_tree_collection": "paramo.merge",
    "combine_labels": "paramo.amalgamation",
    "stack": "paramo.amalgamation",
    "iter_amalgamated_samples": "paramo.amalgamation",
    "amalgamate_samples": "paramo.amalgamation",
    "amalgamate_by_region": "paramo.amalgamation",
    "normalize_character_id": "paramo.amalgamation",
    "Ontology": "paramo.ontology",
    "term_to_characters": "paramo.ontology",
    "region_query": "paramo.ontology",
    "normalize_term_id": "paramo.ontology",
    "annotation_edges": "paramo.ontology",
}


def __getattr__(name):
    if name in _EXPORTS:
        from importlib import import_module

        return getattr(import_module(_EXPORTS[name]), name)
    raise AttributeError(name)

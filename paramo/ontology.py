"""
Ontology-based aggregation of characters into anatomical regions.

Characters are annotated with ontology terms; a region groups every
character annotated with the region's term or any of its descendants.
"""

import logging
from collections import deque
from typing import (
    Deque,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
    Tuple,
    Union,
)

import pandas as pd

from paramo.exceptions import AmbiguousOrMissingTermError, UnknownTermError

logger = logging.getLogger(__name__)

TERM_SEPARATORS = ("_", ":")

Annotations = Union[Mapping[str, Iterable[str]], Iterable[Tuple[str, str]]]


class Ontology:
    """
    Directed acyclic graph of ontology terms.

    Holds a name table (term id to human-readable name) and the parent
    relation (term id to its direct parents, ``is_a``/``part_of`` alike).
    Children are indexed once at construction for descendant queries.
    """

    def __init__(
        self,
        names: Mapping[str, str],
        parents: Optional[Mapping[str, Iterable[str]]] = None,
    ):
        self.names: Dict[str, str] = dict(names)
        parents = parents or {}
        self.parents: Dict[str, Tuple[str, ...]] = {
            term: tuple(parents.get(term, ())) for term in self.names
        }
        for term in parents:
            if term not in self.names:
                raise UnknownTermError(term)

        self.children: Dict[str, List[str]] = {term: [] for term in self.names}
        for term, term_parents in self.parents.items():
            for parent in term_parents:
                if parent not in self.names:
                    raise UnknownTermError(parent)
                self.children[parent].append(term)

    @classmethod
    def from_records(
        cls, records: Iterable[Tuple[str, str, Iterable[str]]]
    ) -> "Ontology":
        """Build an ontology from ``(term_id, name, parent_ids)`` rows."""
        names: Dict[str, str] = {}
        parents: Dict[str, Tuple[str, ...]] = {}
        for term, name, term_parents in records:
            names[term] = name
            parents[term] = tuple(term_parents)
        return cls(names, parents)

    def __contains__(self, term: object) -> bool:
        return term in self.names

    def __len__(self) -> int:
        return len(self.names)

    def __repr__(self) -> str:
        return f"Ontology({len(self)} terms)"

    def name(self, term: str) -> str:
        if term not in self.names:
            raise UnknownTermError(term)
        return self.names[term]

    def terms_named(self, name: str) -> Tuple[str, ...]:
        """All term ids whose name equals ``name`` exactly."""
        return tuple(term for term, term_name in self.names.items() if term_name == name)

    def get_descendants(self, roots: Union[str, Iterable[str]]) -> Set[str]:
        """
        Transitive descendant closure of ``roots``, roots included.

        Raises:
            UnknownTermError: If a root is not a term of this ontology
        """
        if isinstance(roots, str):
            roots = [roots]
        queue: Deque[str] = deque()
        for root in roots:
            if root not in self.names:
                raise UnknownTermError(root)
            queue.append(root)

        closure: Set[str] = set(queue)
        while queue:
            term = queue.popleft()
            for child in self.children[term]:
                if child not in closure:
                    closure.add(child)
                    queue.append(child)
        return closure


def normalize_term_id(term_id: object, separator: str = ":") -> str:
    """
    Rewrite a term id to the ontology's separator convention.

    Annotation tables often write ``HAO_0000653`` where the ontology uses
    ``HAO:0000653``.
    """
    term_id = str(term_id)
    for sep in TERM_SEPARATORS:
        if sep != separator:
            term_id = term_id.replace(sep, separator)
    return term_id


def annotation_edges(
    annotations: Annotations, inverse: bool = False
) -> List[Tuple[str, str]]:
    """
    Flatten character annotations into ``(character, term)`` rows.

    ``annotations`` is either a mapping from character id to its terms or
    an iterable of ``(character, term)`` pairs. With ``inverse=True`` the
    rows are ``(term, character)``.
    """
    if isinstance(annotations, Mapping):
        rows = [
            (str(character), str(term))
            for character, terms in annotations.items()
            for term in ([terms] if isinstance(terms, str) else terms)
        ]
    else:
        rows = [(str(character), str(term)) for character, term in annotations]
    if inverse:
        return [(term, character) for character, term in rows]
    return rows


def term_to_characters(
    ontology: Ontology,
    annotation_mapping: Annotations,
    root_terms: Union[str, Iterable[str]],
) -> Tuple[str, ...]:
    """
    Characters annotated with any term in the descendant closure of ``root_terms``.

    Each character appears once, in the order of its first matching
    annotation. This order is the canonical component order used when the
    group is stacked.

    Raises:
        UnknownTermError: If a root term is absent from the ontology
    """
    closure = ontology.get_descendants(root_terms)
    seen: Set[str] = set()
    characters: List[str] = []
    for character, term in annotation_edges(annotation_mapping):
        if term in closure and character not in seen:
            seen.add(character)
            characters.append(character)
    return tuple(characters)


def _annotation_table(
    char_table: Union[pd.DataFrame, Iterable[Sequence[object]]],
) -> pd.DataFrame:
    table = char_table if isinstance(char_table, pd.DataFrame) else pd.DataFrame(list(char_table))
    if table.shape[1] < 2:
        raise ValueError(
            "Annotation table needs a character id column and a term id column, "
            f"got {table.shape[1]} column(s)"
        )
    return table


def region_query(
    char_table: Union[pd.DataFrame, Iterable[Sequence[object]]],
    ontology: Ontology,
    region_labels: Iterable[str],
    separator: str = ":",
) -> Dict[str, Tuple[str, ...]]:
    """
    Group characters under anatomical regions named by ontology term names.

    Args:
        char_table: Flat annotation table; the first column holds character
            ids and the second term ids. A DataFrame or an iterable of rows.
        ontology: Ontology providing names and descendant closure
        region_labels: Region names, looked up exactly in the name table
        separator: Separator convention of the ontology's term ids

    Returns:
        Region label to the tuple of its character ids.

    Raises:
        AmbiguousOrMissingTermError: If a label names zero or several terms
    """
    table = _annotation_table(char_table)
    characters = table.iloc[:, 0].astype(str)
    terms = table.iloc[:, 1].astype(str).map(lambda t: normalize_term_id(t, separator))
    # Row order decides the component order of each region
    annotations = list(zip(characters.tolist(), terms.tolist()))

    result: Dict[str, Tuple[str, ...]] = {}
    for label in region_labels:
        matches = ontology.terms_named(label)
        if len(matches) != 1:
            raise AmbiguousOrMissingTermError(label, matches)
        result[label] = term_to_characters(ontology, annotations, matches[0])
        logger.info(
            "Region %r (%s): %d characters", label, matches[0], len(result[label])
        )
    return result

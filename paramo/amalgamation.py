"""
Amalgamation (stacking) of discretized stochastic character maps.

Characters are stacked slice by slice on every edge; the joint state of a
slice is a ``CompositeState`` whose components follow the order in which
the characters were supplied. Posterior samples are always combined by
index: sample ``i`` of every character forms amalgamated sample ``i``.
"""

import logging
from concurrent.futures import ProcessPoolExecutor
from functools import reduce
from typing import (
    Dict,
    Hashable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
)

import numpy as np
from tqdm import tqdm

from paramo.config import AmalgamationConfig
from paramo.discretization import discretize, validate_resolution
from paramo.elements.composite_state import CompositeState
from paramo.elements.segment import EdgeSegments, Segment
from paramo.exceptions import (
    AmalgamationError,
    ComponentCountError,
    EmptyGroupError,
    GridMismatchError,
    InsufficientSamplesError,
    MissingCharacterError,
    TopologyMismatchError,
)
from paramo.logger import format_character_set, paramo_logger
from paramo.merge import merge_tree
from paramo.stochastic_map import AmalgamatedMap, StochasticMap

logger = logging.getLogger(__name__)

SampleTrees = Mapping[str, Sequence[StochasticMap]]


def normalize_character_id(character_id: object) -> str:
    """Character identifiers use underscores where annotation tables have spaces."""
    return str(character_id).replace(" ", "_")


# ----------------------------------------------------------------------------
# Label algebra
# ----------------------------------------------------------------------------
def _concat_labels(
    left: Sequence[CompositeState], right: Sequence[Hashable]
) -> List[CompositeState]:
    return [a.concat(b) for a, b in zip(left, right)]


def combine_labels(*label_seqs: Sequence[Hashable]) -> List[CompositeState]:
    """
    Fold label sequences position-wise into composite states.

    ``combine_labels(["0", "1"], ["x", "y"])`` gives the composites
    ``("0", "x")`` and ``("1", "y")``. Composite inputs are flattened, so
    stacking already stacked labels is associative.

    Raises:
        EmptyGroupError: If no sequence is given
        GridMismatchError: If the sequences differ in length
    """
    if not label_seqs:
        raise EmptyGroupError("Cannot combine labels of zero characters")
    expected = len(label_seqs[0])
    for position, seq in enumerate(label_seqs[1:], start=1):
        if len(seq) != expected:
            raise GridMismatchError(
                f"Label sequence {position} has {len(seq)} slices where the first "
                f"has {expected}"
            )
    first = [CompositeState.wrap(label) for label in label_seqs[0]]
    return reduce(_concat_labels, label_seqs[1:], first)


# ----------------------------------------------------------------------------
# Stacking one sample
# ----------------------------------------------------------------------------
def _validate_stackable(maps: Sequence[StochasticMap], tolerance: float) -> None:
    """Check topology and grid agreement of all maps against the first one."""
    first = maps[0]
    first_lengths = first.tree.edge_lengths()
    first_parents = first.tree.edge_parents()
    first_counts = first.slice_counts()
    first_durations = first.durations()
    first_resolution = getattr(first, "resolution", None)

    for position, other in enumerate(maps[1:], start=1):
        if other.tree is not first.tree:
            if other.edge_count != first.edge_count:
                raise TopologyMismatchError(
                    f"Map {position} has {other.edge_count} edges where the first "
                    f"map has {first.edge_count}"
                )
            if other.tree.edge_parents() != first_parents:
                raise TopologyMismatchError(
                    f"Map {position} does not share the branching structure of the "
                    f"first map"
                )
            other_lengths = other.tree.edge_lengths()
            close = np.isclose(other_lengths, first_lengths, rtol=0.0, atol=tolerance)
            if not close.all():
                i = int(np.argmin(close))
                TopologyMismatchError.raise_for_edge(
                    i, float(first_lengths[i]), float(other_lengths[i]), position
                )

        other_resolution = getattr(other, "resolution", None)
        if (
            first_resolution is not None
            and other_resolution is not None
            and other_resolution != first_resolution
        ):
            raise GridMismatchError(
                f"Map {position} was discretized at res={other_resolution} where "
                f"the first map uses res={first_resolution}"
            )

        other_counts = other.slice_counts()
        for i, (expected, found) in enumerate(zip(first_counts, other_counts)):
            if expected != found:
                GridMismatchError.raise_for_edge(i, expected, found, position)

        for i, (expected, found) in enumerate(zip(first_durations, other.durations())):
            if not np.allclose(found, expected, rtol=0.0, atol=tolerance):
                raise GridMismatchError(
                    f"Map {position} has slice boundaries that differ from the "
                    f"first map",
                    edge_index=i,
                )


def _component_count(smap: StochasticMap) -> int:
    """Number of characters held in each state of ``smap``."""
    if smap.edge_maps:
        return len(CompositeState.wrap(smap.edge_maps[0][0].state))
    if isinstance(smap, AmalgamatedMap) and smap.characters:
        return len(smap.characters)
    return 1


def _characters_of(maps: Sequence[StochasticMap]) -> Tuple[str, ...]:
    characters: List[str] = []
    for position, smap in enumerate(maps):
        if isinstance(smap, AmalgamatedMap) and smap.characters:
            characters.extend(smap.characters)
        else:
            characters.append(str(position))
    return tuple(characters)


def stack(
    maps: Sequence[StochasticMap],
    characters: Optional[Sequence[str]] = None,
    tolerance: float = 1e-9,
    label_delimiter: str = "",
) -> AmalgamatedMap:
    """
    Amalgamate N maps of the same tree and grid into one joint map.

    The first map's slice durations are used for the result; the other maps
    must agree with them. All maps are validated before any composite is
    built, so a failure never leaves a partial result.

    Args:
        maps: Discretized maps, one per character, in canonical order
        characters: Character identifiers for the components; defaults to
            the maps' own characters or their positions
        tolerance: Absolute tolerance for edge length and duration checks
        label_delimiter: Default delimiter of the result's ``render_labels``

    Returns:
        An AmalgamatedMap on the first map's tree.

    Raises:
        EmptyGroupError: If ``maps`` is empty
        TopologyMismatchError: If edge counts, structure or lengths disagree
        GridMismatchError: If per-edge slice counts or boundaries disagree
        ComponentCountError: If ``characters`` does not name every component
    """
    maps = list(maps)
    if not maps:
        raise EmptyGroupError("Cannot stack zero maps")
    _validate_stackable(maps, tolerance)

    if characters is None:
        characters = _characters_of(maps)
    characters = tuple(characters)
    width = sum(_component_count(smap) for smap in maps)
    if len(characters) != width:
        raise ComponentCountError(
            f"Got {len(characters)} character names for {width} stacked components"
        )

    first = maps[0]
    label_tables = [smap.state_labels() for smap in maps]
    edge_maps: List[EdgeSegments] = []
    for i, segments in enumerate(first.edge_maps):
        labels = combine_labels(*(table[i] for table in label_tables))
        edge_maps.append(
            tuple(
                Segment(label, segment.duration)
                for label, segment in zip(labels, segments)
            )
        )

    if not paramo_logger.disabled:
        paramo_logger.section(f"Stacking {format_character_set(characters)}")
        for i, segments in enumerate(edge_maps):
            paramo_logger.segment_table(segments, title=f"Edge {i}")

    return AmalgamatedMap(
        first.tree,
        tuple(edge_maps),
        characters=characters,
        resolution=getattr(first, "resolution", None),
        checkpoints=getattr(first, "checkpoints", ()),
        label_delimiter=label_delimiter,
    )


# ----------------------------------------------------------------------------
# Posterior samples
# ----------------------------------------------------------------------------
def _resolve_samples(
    character_ids: Sequence[str],
    per_character_sample_trees: SampleTrees,
    ntrees: int,
) -> Tuple[Tuple[str, ...], List[Sequence[StochasticMap]]]:
    """Look up the sample list of every character and check it is long enough."""
    if isinstance(ntrees, bool) or not isinstance(ntrees, (int, np.integer)) or ntrees < 1:
        raise ValueError(f"ntrees must be a positive integer, got {ntrees!r}")
    characters = tuple(normalize_character_id(c) for c in character_ids)
    if not characters:
        raise EmptyGroupError("Cannot amalgamate zero characters")

    lookup = {
        normalize_character_id(key): samples
        for key, samples in per_character_sample_trees.items()
    }
    sample_lists: List[Sequence[StochasticMap]] = []
    for character in characters:
        if character not in lookup:
            raise MissingCharacterError(
                f"No posterior samples for character {character!r}"
            )
        samples = lookup[character]
        if len(samples) < ntrees:
            raise InsufficientSamplesError(
                f"Character {character!r} has {len(samples)} samples, "
                f"{ntrees} requested"
            )
        sample_lists.append(samples)
    return characters, sample_lists


def _amalgamate_sample(
    sample_index: int,
    maps: Sequence[StochasticMap],
    characters: Tuple[str, ...],
    resolution: Optional[int],
    tolerance: float,
    merge_output: bool,
    label_delimiter: str = "",
) -> AmalgamatedMap:
    """Stack one posterior sample; ``sample_index`` is 1-based."""
    try:
        if resolution is not None:
            maps = [discretize(smap, resolution) for smap in maps]
        result = stack(
            maps,
            characters=characters,
            tolerance=tolerance,
            label_delimiter=label_delimiter,
        )
    except AmalgamationError as e:
        if e.sample_index is None:
            e.sample_index = sample_index
        raise
    if merge_output:
        result = merge_tree(result)
    return result


def iter_amalgamated_samples(
    character_ids: Sequence[str],
    per_character_sample_trees: SampleTrees,
    ntrees: int,
    config: Optional[AmalgamationConfig] = None,
) -> Iterator[AmalgamatedMap]:
    """
    Yield one amalgamated map per sample index, in index order.

    Character lookups are validated before the first sample is produced.
    Only one sample of each character is discretized at a time when
    ``config.resolution`` is set.
    """
    config = config or AmalgamationConfig()
    if config.resolution is not None:
        validate_resolution(config.resolution)
    characters, sample_lists = _resolve_samples(
        character_ids, per_character_sample_trees, ntrees
    )

    def _generate() -> Iterator[AmalgamatedMap]:
        indices = range(ntrees)
        if config.show_progress:
            indices = tqdm(indices, desc=f"Stacking {len(characters)} characters")
        for i in indices:
            yield _amalgamate_sample(
                i + 1,
                [samples[i] for samples in sample_lists],
                characters,
                config.resolution,
                config.tolerance,
                config.merge_output,
                config.label_delimiter,
            )

    return _generate()


def amalgamate_samples(
    character_ids: Sequence[str],
    per_character_sample_trees: SampleTrees,
    ntrees: int,
    config: Optional[AmalgamationConfig] = None,
) -> List[AmalgamatedMap]:
    """
    Stack the characters' posterior samples index by index.

    Sample ``i`` of every character in ``character_ids`` is stacked into
    amalgamated sample ``i``; indices are never mixed.

    Args:
        character_ids: Characters to stack, in canonical component order
        per_character_sample_trees: Character identifier to its sample maps
        ntrees: Number of sample indices to stack (the first ``ntrees``)
        config: Execution options; defaults to ``AmalgamationConfig()``

    Returns:
        One AmalgamatedMap per sample index, in index order.
    """
    config = config or AmalgamationConfig()
    log = logging.getLogger(config.logger_name)

    if config.max_workers <= 1:
        result = list(
            iter_amalgamated_samples(
                character_ids, per_character_sample_trees, ntrees, config
            )
        )
    else:
        if config.resolution is not None:
            validate_resolution(config.resolution)
        characters, sample_lists = _resolve_samples(
            character_ids, per_character_sample_trees, ntrees
        )
        with ProcessPoolExecutor(max_workers=config.max_workers) as executor:
            # executor.map keeps submission order
            results = executor.map(
                _amalgamate_sample,
                range(1, ntrees + 1),
                [[samples[i] for samples in sample_lists] for i in range(ntrees)],
                [characters] * ntrees,
                [config.resolution] * ntrees,
                [config.tolerance] * ntrees,
                [config.merge_output] * ntrees,
                [config.label_delimiter] * ntrees,
            )
            if config.show_progress:
                results = tqdm(results, total=ntrees, desc="Stacking samples")
            result = list(results)

    log.debug(
        "Amalgamated %d samples of %s",
        len(result),
        format_character_set(normalize_character_id(c) for c in character_ids),
    )
    return result


def amalgamate_by_region(
    region_to_characters: Mapping[str, Sequence[str]],
    per_character_sample_trees: SampleTrees,
    ntrees: int,
    config: Optional[AmalgamationConfig] = None,
) -> Dict[str, List[AmalgamatedMap]]:
    """
    Run ``amalgamate_samples`` for every region of a region query.

    Every region is checked (non-empty group, characters present, enough
    samples) before any stacking starts.

    Raises:
        EmptyGroupError: If a region has no characters
    """
    config = config or AmalgamationConfig()
    log = logging.getLogger(config.logger_name)

    for region, characters in region_to_characters.items():
        try:
            _resolve_samples(characters, per_character_sample_trees, ntrees)
        except AmalgamationError as e:
            e.region = region
            raise

    result: Dict[str, List[AmalgamatedMap]] = {}
    for region, characters in region_to_characters.items():
        log.info("Amalgamating region %r (%d characters)", region, len(characters))
        try:
            result[region] = amalgamate_samples(
                characters, per_character_sample_trees, ntrees, config
            )
        except AmalgamationError as e:
            e.region = region
            raise
    return result

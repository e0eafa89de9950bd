"""
Custom exceptions for the PARAMO amalgamation engine.
"""

from __future__ import annotations
from typing import NoReturn, Optional


class ParamoError(Exception):
    """Base exception for all PARAMO errors."""

    pass


# ----------------------------------------------------------------------------
# Ontology
# ----------------------------------------------------------------------------
class OntologyError(ParamoError):
    """Base exception for ontology lookups."""

    pass


class UnknownTermError(OntologyError):
    """Raised when a requested ontology term does not exist."""

    def __init__(self, term_id: str):
        self.term_id = term_id
        super().__init__(f"Unknown ontology term: {term_id!r}")


class AmbiguousOrMissingTermError(OntologyError):
    """Raised when a region label resolves to zero or several ontology terms."""

    def __init__(self, label: str, matches: tuple[str, ...] = ()):
        self.label = label
        self.matches = matches
        if matches:
            message = (
                f"Region label {label!r} is ambiguous: "
                f"{len(matches)} terms share this name ({', '.join(matches)})"
            )
        else:
            message = f"Region label {label!r} matches no ontology term name"
        super().__init__(message)


# ----------------------------------------------------------------------------
# Maps
# ----------------------------------------------------------------------------
class DiscretizationError(ParamoError):
    pass


class InvalidResolutionError(DiscretizationError):
    """Raised when the discretization resolution is not a positive integer."""

    def __init__(self, res: object):
        self.res = res
        super().__init__(
            f"Resolution must be a positive integer, got {res!r} ({type(res).__name__})"
        )


class MapValidationError(ParamoError):
    pass


class InvalidMapError(MapValidationError):
    """Raised when a stochastic map is inconsistent with its tree."""

    def __init__(self, message: str, edge_index: Optional[int] = None):
        self.edge_index = edge_index
        if edge_index is not None:
            message = f"Edge {edge_index}: {message}"
        super().__init__(message)


# ----------------------------------------------------------------------------
# Amalgamation
# ----------------------------------------------------------------------------
class AmalgamationError(ParamoError):
    """
    Base exception for stacking errors.

    Carries the context needed to locate the failure. The drivers attach
    ``sample_index`` and ``region`` while the error propagates upwards.
    """

    def __init__(
        self,
        message: str,
        edge_index: Optional[int] = None,
        sample_index: Optional[int] = None,
        region: Optional[str] = None,
    ):
        self.message = message
        self.edge_index = edge_index
        self.sample_index = sample_index
        self.region = region
        super().__init__(message)

    def __str__(self) -> str:
        context: list[str] = []
        if self.region is not None:
            context.append(f"region={self.region!r}")
        if self.sample_index is not None:
            context.append(f"sample={self.sample_index}")
        if self.edge_index is not None:
            context.append(f"edge={self.edge_index}")
        if not context:
            return self.message
        return f"{self.message} [{', '.join(context)}]"


class TopologyMismatchError(AmalgamationError):
    """Raised when maps being stacked do not share the same edge structure."""

    @staticmethod
    def raise_for_edge(
        edge_index: int, expected_length: float, found_length: float, map_position: int
    ) -> NoReturn:
        """
        Raises a TopologyMismatchError for an edge whose length differs between maps.

        Args:
            edge_index: Position of the edge in pre-order edge order
            expected_length: Edge length in the first map
            found_length: Edge length in the disagreeing map
            map_position: Position of the disagreeing map in the stacked sequence

        Raises:
            TopologyMismatchError: Always raised with detailed error information
        """
        from paramo.logger import paramo_logger

        message = (
            f"Edge length {found_length} of map {map_position} does not match "
            f"edge length {expected_length} of the first map"
        )
        paramo_logger.error(f"Edge {edge_index}: {message}")
        raise TopologyMismatchError(message, edge_index=edge_index)


class GridMismatchError(AmalgamationError):
    """Raised when maps being stacked were not discretized on the same grid."""

    @staticmethod
    def raise_for_edge(
        edge_index: int, expected_slices: int, found_slices: int, map_position: int
    ) -> NoReturn:
        """
        Raises a GridMismatchError for an edge whose slice count differs between maps.

        Args:
            edge_index: Position of the edge in pre-order edge order
            expected_slices: Number of time slices in the first map
            found_slices: Number of time slices in the disagreeing map
            map_position: Position of the disagreeing map in the stacked sequence

        Raises:
            GridMismatchError: Always raised with detailed error information
        """
        from paramo.logger import paramo_logger

        message = (
            f"Map {map_position} has {found_slices} time slices where the first "
            f"map has {expected_slices}; maps must share one discretization grid"
        )
        paramo_logger.error(f"Edge {edge_index}: {message}")
        raise GridMismatchError(message, edge_index=edge_index)


class ComponentCountError(AmalgamationError):
    """Raised when the character names do not match the components being stacked."""

    pass


class EmptyGroupError(AmalgamationError):
    """Raised when amalgamation is requested over zero characters."""

    pass


class MissingCharacterError(AmalgamationError):
    """Raised when a requested character has no posterior samples."""

    pass


class InsufficientSamplesError(AmalgamationError):
    """Raised when a character has fewer samples than requested."""

    pass

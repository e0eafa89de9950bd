from functools import total_ordering
from typing import Any, Hashable, Iterator, Tuple


@total_ordering
class CompositeState:
    """
    Joint state of several characters during one time slice.

    Stored as an ordered tuple of component states, one per character, in
    the order the characters were stacked. Text labels are produced on
    demand by ``render`` so that a delimiter occurring inside a component
    state name never makes two different composites compare equal.
    """

    __slots__ = ("components",)

    def __init__(self, components: Tuple[Hashable, ...]):
        self.components: Tuple[Hashable, ...] = tuple(components)

    @classmethod
    def wrap(cls, state: Hashable) -> "CompositeState":
        """Lift a plain state into a one-component composite; composites pass through."""
        if isinstance(state, CompositeState):
            return state
        return cls((state,))

    def concat(self, other: Hashable) -> "CompositeState":
        """Append the components of ``other`` (plain or composite) after ours."""
        return CompositeState(self.components + CompositeState.wrap(other).components)

    def render(self, delimiter: str = "") -> str:
        """Human-readable label; with the default delimiter ``("0", "x")`` renders ``"0x"``."""
        return delimiter.join(str(component) for component in self.components)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self.components)

    def __len__(self) -> int:
        return len(self.components)

    def __getitem__(self, index: int) -> Hashable:
        return self.components[index]

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, CompositeState):
            return self.components == other.components
        return NotImplemented

    def __lt__(self, other: Any) -> bool:
        if isinstance(other, CompositeState):
            return tuple(map(str, self.components)) < tuple(
                map(str, other.components)
            )
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.components)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"CompositeState({self.components!r})"

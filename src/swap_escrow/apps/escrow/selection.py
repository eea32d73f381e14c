"""Choosing one item out of several candidates.

``Candidates`` is the capability set a flow hands to a ``SelectionPolicy``:
the policy can list the items and select one by its 1-based position.
Policies decide how the choice is made (a fixed index, a prompt, ...), so
the lifecycle flows never branch on how many candidates there are.
"""

from collections.abc import Sequence
from typing import Generic, Protocol, TypeVar

from swap_escrow.core.exceptions import InvalidInputError

T = TypeVar("T")


class Candidates(Generic[T]):
    """Immutable, 1-indexed list of items to choose from.

    Args:
        items: Items in display order.

    """

    def __init__(self, items: Sequence[T]) -> None:
        """Initialize the candidate set.

        Args:
            items: Items in display order.

        """
        self._items = tuple(items)

    def list(self) -> Sequence[T]:
        """Return every candidate in display order."""
        return self._items

    def select(self, index: int) -> T:
        """Return the candidate at 1-based ``index``.

        Raises:
            InvalidInputError: When ``index`` is outside ``[1, len(self)]``.

        """
        if not 1 <= index <= len(self._items):
            msg = f"Choice must be between 1 and {len(self._items)}"
            raise InvalidInputError(msg)
        return self._items[index - 1]

    def __len__(self) -> int:
        """Return the number of candidates."""
        return len(self._items)


class SelectionPolicy(Protocol[T]):
    """Strategy that picks one candidate, or ``None`` when the user declines."""

    def choose(self, candidates: Candidates[T]) -> T | None:
        """Pick a candidate."""
        ...


class FixedChoicePolicy(Generic[T]):
    """Always pick the candidate at a preset 1-based index.

    Args:
        index: Position to select.

    """

    def __init__(self, index: int = 1) -> None:
        """Initialize the policy.

        Args:
            index: Position to select.

        """
        self.index = index

    def choose(self, candidates: Candidates[T]) -> T | None:
        """Pick the preset candidate."""
        return candidates.select(self.index)

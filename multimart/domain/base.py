"""Base classes for domain layer.

Provides foundational abstractions for catalog entities and value objects.
Catalog data is a read-only snapshot for the engines, so everything here
is frozen once constructed.
"""

from abc import ABC
from dataclasses import dataclass
from typing import Generic, TypeVar


# ============================================================================
# Value Object Base
# ============================================================================


@dataclass(frozen=True)
class ValueObject(ABC):
    """Base class for value objects.

    Value objects are immutable and compared by their attributes,
    not by identity. They are interchangeable when their values are equal.

    Example:
        @dataclass(frozen=True)
        class VariantAxis(ValueObject):
            key: str
            label: str
            values: tuple[str, ...]
    """

    pass


# ============================================================================
# Entity Base
# ============================================================================


T = TypeVar("T")


@dataclass(frozen=True)
class Entity(ABC, Generic[T]):
    """Base class for catalog entities.

    Entities have identity. Two entities are equal if they have the same
    identity, regardless of their other attributes, so a re-published
    product with edited fields still compares equal to its old record.

    Attributes:
        id: Unique identifier for this entity.
    """

    id: T

    def __eq__(self, other: object) -> bool:
        """Compare entities by identity.

        Args:
            other: Object to compare with.

        Returns:
            True if other is same type with same id.
        """
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash entity by identity.

        Returns:
            Hash of the entity id.
        """
        return hash(self.id)

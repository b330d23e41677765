"""Value Objects for the domain layer.

Value objects are immutable objects that are defined by their attributes
rather than identity. The variant system lives here: axes, the matrix a
subcategory owns, and the combos that identify purchasable variants.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from multimart.domain.base import ValueObject
from multimart.domain.exceptions import (
    DuplicateAxisKeyError,
    FlashSaleOversoldError,
    IncompleteComboError,
    InvalidAxisError,
    InvalidFlashSaleWindowError,
    InvalidSelectionError,
)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC.

    Args:
        value: Datetime that may lack tzinfo.

    Returns:
        Timezone-aware datetime.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ============================================================================
# Variant Combo
# ============================================================================


@dataclass(frozen=True, eq=False)
class VariantCombo(ValueObject, Mapping[str, str]):
    """An assignment of values to variant axes.

    Behaves as a read-only mapping of axis key to value. A combo may be
    complete (one value per axis of its matrix) or partial (a buyer's
    selection in progress). Complete combos should be obtained through
    ``VariantMatrix.combo`` so the matrix can validate them.

    Attributes:
        pairs: (axis key, value) pairs in matrix axis order.
    """

    pairs: tuple[tuple[str, str], ...] = ()
    _lookup: dict[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Build the key index."""
        object.__setattr__(self, "_lookup", dict(self.pairs))

    def __getitem__(self, key: str) -> str:
        return self._lookup[key]

    def __iter__(self) -> Iterator[str]:
        return (key for key, _ in self.pairs)

    def __len__(self) -> int:
        return len(self.pairs)

    def __eq__(self, other: object) -> bool:
        """Compare with any mapping by content, ignoring order."""
        if not isinstance(other, Mapping):
            return NotImplemented
        return self._lookup == dict(other.items())

    def __hash__(self) -> int:
        return hash(frozenset(self.pairs))

    def as_dict(self) -> dict[str, str]:
        """Convert to a plain dictionary.

        Returns:
            Axis key -> value mapping.
        """
        return dict(self.pairs)

    def agrees_with(self, selection: Mapping[str, str]) -> bool:
        """Check that this combo carries every value of a selection.

        Args:
            selection: Partial or complete axis assignment.

        Returns:
            True if each selected key maps to the same value here.
        """
        return all(self._lookup.get(key) == value for key, value in selection.items())

    def with_value(self, key: str, value: str) -> "VariantCombo":
        """Return a copy with one axis forced to a value.

        Args:
            key: Axis key.
            value: Value for the axis.

        Returns:
            New combo; the key keeps its position if already present.
        """
        if key in self._lookup:
            pairs = tuple((k, value if k == key else v) for k, v in self.pairs)
        else:
            pairs = self.pairs + ((key, value),)
        return VariantCombo(pairs=pairs)

    @property
    def label(self) -> str:
        """Display label, values joined in axis order (e.g. "128GB / Black")."""
        return " / ".join(value for _, value in self.pairs)


# ============================================================================
# Variant Axis and Matrix
# ============================================================================


@dataclass(frozen=True)
class VariantAxis(ValueObject):
    """One selectable product dimension.

    Attributes:
        key: Stable identifier (e.g., "color").
        label: Display label (e.g., "Color").
        values: Admissible values in display order.
    """

    key: str
    label: str
    values: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate axis definition."""
        if not self.key or not self.key.strip():
            raise InvalidAxisError(self.key, "axis key cannot be empty")
        object.__setattr__(self, "values", tuple(self.values))
        if len(set(self.values)) != len(self.values):
            raise InvalidAxisError(self.key, "axis values must be unique")

    def __contains__(self, value: object) -> bool:
        return value in self.values


@dataclass(frozen=True)
class VariantMatrix(ValueObject):
    """The ordered set of variant axes a subcategory defines.

    An empty matrix means products of the subcategory are simple
    (sold as a single SKU).

    Attributes:
        axes: Variant axes in display order.
    """

    axes: tuple[VariantAxis, ...] = ()

    def __post_init__(self) -> None:
        """Validate that axis keys are unique."""
        object.__setattr__(self, "axes", tuple(self.axes))
        seen: set[str] = set()
        for axis in self.axes:
            if axis.key in seen:
                raise DuplicateAxisKeyError(axis.key)
            seen.add(axis.key)

    @property
    def is_empty(self) -> bool:
        """Check if the matrix has no axes."""
        return not self.axes

    @property
    def axis_keys(self) -> tuple[str, ...]:
        """Get axis keys in matrix order."""
        return tuple(axis.key for axis in self.axes)

    def get_axis(self, key: str) -> VariantAxis | None:
        """Get an axis by key.

        Args:
            key: Axis key.

        Returns:
            The axis, or None if the matrix has no such axis.
        """
        for axis in self.axes:
            if axis.key == key:
                return axis
        return None

    def check_combo(self, combo: Mapping[str, str]) -> None:
        """Verify a combo is complete and within the axis domains.

        Args:
            combo: Mapping to check.

        Raises:
            IncompleteComboError: If an axis is missing, a key is not an
                axis, or a value is outside its axis domain.
        """
        missing = [axis.key for axis in self.axes if not combo.get(axis.key)]
        unknown = [key for key in combo if self.get_axis(key) is None]
        invalid = {
            axis.key: combo[axis.key]
            for axis in self.axes
            if combo.get(axis.key) and combo[axis.key] not in axis
        }
        if missing or unknown or invalid:
            raise IncompleteComboError(
                dict(combo), missing=missing, unknown=unknown, invalid=invalid
            )

    def combo(self, values: Mapping[str, str]) -> VariantCombo:
        """Build a complete, validated combo.

        Args:
            values: Axis key -> value mapping.

        Returns:
            VariantCombo ordered by matrix axes.

        Raises:
            IncompleteComboError: If the mapping does not fit the matrix.
        """
        self.check_combo(values)
        return VariantCombo(pairs=tuple((axis.key, values[axis.key]) for axis in self.axes))

    def selection(self, values: Mapping[str, str] | None) -> VariantCombo:
        """Build a partial selection against this matrix.

        Keys that are not axes of the matrix are dropped as stale input,
        and blank values count as "not selected".

        Args:
            values: Buyer's axis key -> value choices.

        Returns:
            Partial VariantCombo ordered by matrix axes.

        Raises:
            InvalidSelectionError: If a value is outside its axis domain.
        """
        values = values or {}
        pairs = []
        for axis in self.axes:
            value = values.get(axis.key)
            if not value:
                continue
            if value not in axis:
                raise InvalidSelectionError(axis.key, value, list(axis.values))
            pairs.append((axis.key, value))
        return VariantCombo(pairs=tuple(pairs))

    def is_complete(self, selection: Mapping[str, str]) -> bool:
        """Check whether every axis has a selected value."""
        return all(selection.get(axis.key) for axis in self.axes)


# ============================================================================
# Attributes (specifications)
# ============================================================================


class AttributeType(str, Enum):
    """Input type of a specification field."""

    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"


@dataclass(frozen=True)
class AttributeTemplate(ValueObject):
    """A specification field a subcategory asks vendors to fill in.

    Attributes:
        key: Field key (e.g., "screen_size").
        label: Display label.
        type: Input type.
        options: Predefined options for select fields.
        required: Whether vendors must provide a value.
        unit: Optional unit (e.g., "inches").
    """

    key: str
    label: str
    type: AttributeType = AttributeType.TEXT
    options: tuple[str, ...] = ()
    required: bool = False
    unit: str | None = None


@dataclass(frozen=True)
class ProductAttribute(ValueObject):
    """A specification value on a product."""

    key: str
    value: str


@dataclass(frozen=True)
class ProductSEO(ValueObject):
    """Search engine metadata for a product page."""

    title: str = ""
    description: str = ""
    keywords: tuple[str, ...] = ()


# ============================================================================
# Flash Sale
# ============================================================================


class DiscountType(str, Enum):
    """How a flash sale discount is applied."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class FlashSale(ValueObject):
    """A time-boxed, optionally stock-capped discount on a product.

    Naive datetimes are treated as UTC.

    Attributes:
        discount_type: Percentage off or fixed amount off.
        discount_value: Percent (0-100) or amount in currency units.
        start_date: First instant the sale applies (inclusive).
        end_date: Last instant the sale applies (inclusive).
        stock_limit: Units available at the sale price (None = unbounded).
        sold_count: Units already sold at the sale price.
        is_enabled: Vendor/admin switch; a disabled sale never applies.
    """

    discount_type: DiscountType
    discount_value: Decimal
    start_date: datetime
    end_date: datetime
    stock_limit: int | None = None
    sold_count: int = 0
    is_enabled: bool = True

    def __post_init__(self) -> None:
        """Normalize field types."""
        object.__setattr__(self, "discount_type", DiscountType(self.discount_type))
        object.__setattr__(self, "discount_value", Decimal(str(self.discount_value)))
        object.__setattr__(self, "start_date", ensure_utc(self.start_date))
        object.__setattr__(self, "end_date", ensure_utc(self.end_date))

    @property
    def is_bounded(self) -> bool:
        """Check if the sale has a stock limit."""
        return self.stock_limit is not None

    def validate(self) -> None:
        """Check the sale's integrity invariants.

        Raises:
            FlashSaleOversoldError: If sold_count exceeds stock_limit.
            InvalidFlashSaleWindowError: If the sale ends before it starts.
        """
        if self.stock_limit is not None and self.sold_count > self.stock_limit:
            raise FlashSaleOversoldError(self.sold_count, self.stock_limit)
        if self.end_date < self.start_date:
            raise InvalidFlashSaleWindowError(
                self.start_date.isoformat(), self.end_date.isoformat()
            )

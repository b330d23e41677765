"""Variant compatibility resolver.

Given a subcategory's variant matrix, a product's variants and a buyer's
partial selection, works out which variant (if any) the selection names
and which axis values can no longer lead to an in-stock variant.

Each (axis, value) pair is checked on its own against the rest of the
selection rather than solving the whole selection at once, so results
update cheaply as the buyer picks one axis at a time.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from itertools import product as cartesian_product

from multimart.domain.entities import Variant
from multimart.domain.value_objects import VariantCombo, VariantMatrix


@dataclass(frozen=True)
class VariantResolution:
    """Outcome of resolving a selection against a variant matrix.

    Attributes:
        selection: The selection after stale keys and blanks were dropped.
        is_complete: Whether every axis has a selected value.
        matched_variant: The variant the selection names (complete only).
        disabled_values: Axis key -> values with no in-stock variant.
        enabled_values: Axis key -> selectable values, in axis order.
    """

    selection: VariantCombo
    is_complete: bool
    matched_variant: Variant | None = None
    disabled_values: dict[str, frozenset[str]] = field(default_factory=dict)
    enabled_values: dict[str, tuple[str, ...]] = field(default_factory=dict)

    def is_disabled(self, axis_key: str, value: str) -> bool:
        """Check whether a value of an axis is disabled."""
        return value in self.disabled_values.get(axis_key, frozenset())


def _has_stocked_match(stocked: Sequence[Variant], trial: Mapping[str, str]) -> bool:
    return any(variant.combo.agrees_with(trial) for variant in stocked)


def resolve(
    matrix: VariantMatrix,
    variants: Iterable[Variant],
    selection: Mapping[str, str] | None = None,
) -> VariantResolution:
    """Resolve a partial selection against a product's variants.

    A value v of axis A is disabled iff no variant with stock > 0 agrees
    with the selection once A is forced to v. The currently selected value
    of A is checked the same way, so each axis reflects only the other
    selected axes.

    Args:
        matrix: The subcategory's variant matrix.
        variants: The product's variants.
        selection: Buyer's axis key -> value choices. Keys that are not
            axes of the matrix are ignored.

    Returns:
        VariantResolution. An empty matrix resolves vacuously complete with
        no match and nothing disabled.

    Raises:
        IncompleteComboError: If a variant's combo does not fit the matrix.
        InvalidSelectionError: If a selected value is outside its axis domain.
    """
    if matrix.is_empty:
        return VariantResolution(selection=VariantCombo(), is_complete=True)

    variants = list(variants)
    for variant in variants:
        matrix.check_combo(variant.combo)

    current = matrix.selection(selection)
    is_complete = matrix.is_complete(current)

    matched: Variant | None = None
    if is_complete:
        matched = next((v for v in variants if v.combo == current), None)

    stocked = [variant for variant in variants if variant.in_stock]
    disabled: dict[str, frozenset[str]] = {}
    enabled: dict[str, tuple[str, ...]] = {}
    for axis in matrix.axes:
        off: set[str] = set()
        on: list[str] = []
        for value in axis.values:
            if _has_stocked_match(stocked, current.with_value(axis.key, value)):
                on.append(value)
            else:
                off.add(value)
        disabled[axis.key] = frozenset(off)
        enabled[axis.key] = tuple(on)

    return VariantResolution(
        selection=current,
        is_complete=is_complete,
        matched_variant=matched,
        disabled_values=disabled,
        enabled_values=enabled,
    )


def expand_combos(matrix: VariantMatrix) -> list[VariantCombo]:
    """List every combo of a matrix (cartesian product of axis domains).

    Used to seed one variant row per combo when a vendor lists a product.
    Axes with an empty domain are skipped.

    Args:
        matrix: Variant matrix.

    Returns:
        Combos in matrix order, last axis varying fastest.
    """
    axes = [axis for axis in matrix.axes if axis.values]
    if not axes:
        return []
    return [
        VariantCombo(pairs=tuple(zip((axis.key for axis in axes), values)))
        for values in cartesian_product(*(axis.values for axis in axes))
    ]

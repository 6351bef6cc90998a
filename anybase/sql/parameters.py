"""
Parameter Builder

Turns value sets into named parameters. This sits one level below the type
catalog's semantic conversions: it only widens values a driver cannot bind
for a column type, such as SQL Server's 8-bit signed integers.

    targets = widening_targets(DatabaseProvider.SQLSERVER, ["int8", "str"], catalog)
    # ["int32", None]
    build_parameters(DatabaseProvider.SQLSERVER, ["a", "b"], [5, "x"], "@", targets)
    # [Parameter("@a", 5), Parameter("@b", "x")]
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Sequence

from anybase.connection.descriptor import DatabaseProvider
from anybase.mapping.catalog import TypeCatalog

# Value bound for SQL NULL
NULL = None

CASTS: Dict[str, Callable[[Any], Any]] = {
    "int32": int,
    "int64": int,
    "decimal": lambda value: value if isinstance(value, Decimal) else Decimal(str(value)),
    "str": str,
    "float64": float,
}


@dataclass(frozen=True)
class Parameter:
    """A named statement parameter. ``name`` includes its prefix (``@Setx``)."""
    name: str
    value: Any

    @property
    def key(self) -> str:
        """Name without the leading ``@``."""
        return self.name.lstrip("@")


ParameterSet = List[Parameter]


def widening_targets(
    provider: DatabaseProvider,
    core_types: Sequence[str],
    types: TypeCatalog,
) -> List[Optional[str]]:
    """Cast target per field, or None where the driver binds the value as is."""
    return [types.widening_target(provider, core_type) for core_type in core_types]


def build_parameters(
    provider: DatabaseProvider,
    field_names: Sequence[str],
    values: Sequence[Any],
    prefix: str,
    cast_targets: Optional[Sequence[Optional[str]]] = None,
) -> ParameterSet:
    """
    One parameter per field.

    Raises:
        ValueError: If names, values and cast targets are misaligned
    """
    if len(field_names) != len(values):
        raise ValueError(f"{len(field_names)} field names but {len(values)} values")
    if cast_targets is not None and len(cast_targets) != len(field_names):
        raise ValueError(f"{len(field_names)} field names but {len(cast_targets)} cast targets")

    parameters = []
    for index, (name, value) in enumerate(zip(field_names, values)):
        target = cast_targets[index] if cast_targets is not None else None
        if value is None:
            bound = NULL
        elif target is not None:
            bound = CASTS[target](value)
        else:
            bound = value
        parameters.append(Parameter(f"{prefix}{name}", bound))
    return parameters


def build_parameter_sets(
    provider: DatabaseProvider,
    field_names: Sequence[str],
    value_sets: Sequence[Sequence[Any]],
    prefix: str,
    cast_targets: Optional[Sequence[Optional[str]]] = None,
) -> List[ParameterSet]:
    return [
        build_parameters(provider, field_names, values, prefix, cast_targets)
        for values in value_sets
    ]


def merge_parameter_sets(*groups: Sequence[ParameterSet]) -> List[ParameterSet]:
    """Zip parallel lists of parameter sets, e.g. SET and WHERE sets of an UPDATE."""
    lengths = {len(group) for group in groups}
    if len(lengths) > 1:
        raise ValueError(f"Parameter set lists differ in length: {sorted(lengths)}")
    return [[p for part in parts for p in part] for parts in zip(*groups)]

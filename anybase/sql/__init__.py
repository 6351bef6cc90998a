"""
SQL Construction

Statement text and statement parameters.
"""

from anybase.sql.parameters import (
    Parameter,
    ParameterSet,
    build_parameters,
    build_parameter_sets,
    merge_parameter_sets,
    widening_targets,
)
from anybase.sql.statements import (
    SET_PREFIX,
    WHERE_PREFIX,
    VALUE_PREFIX,
    build_where,
    build_insert,
    build_update,
    build_delete,
    build_select,
    build_create_table,
    build_drop_table,
    build_add_column,
    build_column_definition,
    use_clause,
)

__all__ = [
    "Parameter",
    "ParameterSet",
    "build_parameters",
    "build_parameter_sets",
    "merge_parameter_sets",
    "widening_targets",
    "SET_PREFIX",
    "WHERE_PREFIX",
    "VALUE_PREFIX",
    "build_where",
    "build_insert",
    "build_update",
    "build_delete",
    "build_select",
    "build_create_table",
    "build_drop_table",
    "build_add_column",
    "build_column_definition",
    "use_clause",
]

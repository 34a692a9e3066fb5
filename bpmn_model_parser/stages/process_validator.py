"""
Process Validator

Semantic checks on an assembled process. Unlike structural errors, which
abort on the first offending node, violations are collected over every
conditioned transition and reported together in one
``ProcessValidationError``.
"""

import logging
from typing import Any, Iterable, List, Optional, Tuple

from bpmn_model_parser.core.config import ParserConfig
from bpmn_model_parser.core.errors import ProcessValidationError
from bpmn_model_parser.models.process_model import (
    ComparisonOperator,
    Condition,
    DataStoreField,
    DataType,
    Process,
    Transition,
)
from bpmn_model_parser.stages.extension_reader import get_boolean_from_string

logger = logging.getLogger(__name__)

INTEGER_DATA_TYPES = (DataType.UINT, DataType.INT)


def coerce_rh_value(value: Any, data_type: Optional[DataType]) -> Any:
    """Convert a condition's right-hand constant to its runtime type.

    Raises:
        ValueError: If an integer type is expected and the value is not one
    """
    if data_type == DataType.BOOLEAN:
        return get_boolean_from_string(value)
    if data_type in INTEGER_DATA_TYPES:
        if isinstance(value, bool):
            raise ValueError(f"{value!r} is not an integer")
        return int(str(value).strip(), 10)
    return value


def _normalize_operator(raw: Any) -> Tuple[Any, bool]:
    try:
        code = int(raw)
    except (TypeError, ValueError):
        return raw, False
    try:
        return ComparisonOperator(code), True
    except ValueError:
        return code, False


def _find_field(
    data_store_fields: Iterable[DataStoreField], data_path: str
) -> Optional[DataStoreField]:
    return next((f for f in data_store_fields if f.data_path == data_path), None)


def _validate_transition(
    transition: Transition,
    process: Process,
    data_store_fields: List[DataStoreField],
    config: ParserConfig,
    violations: List[str],
) -> Transition:
    condition = transition.condition
    update = {}

    data_type = condition.data_type
    field = _find_field(data_store_fields, condition.lh_data_path)
    if field is None:
        violations.append(
            f"No matching dataStore field found for transition {transition.id} "
            f"and its condition lhDataPath {condition.lh_data_path}"
        )
    else:
        data_type = config.parameter_data_types.get(field.parameter_type)
        if data_type is None:
            violations.append(
                f"No data type mapped for parameter type {int(field.parameter_type)} "
                f"of field {field.data_path} used in transition {transition.id}"
            )
        else:
            update["data_type"] = data_type

    try:
        update["rh_value"] = coerce_rh_value(condition.rh_value, data_type)
    except (TypeError, ValueError):
        violations.append(
            f"Invalid value {condition.rh_value!r} for {data_type.name} condition "
            f"in transition {transition.id} in process {process.id}"
        )

    operator, valid = _normalize_operator(condition.operator)
    if not valid or int(operator) not in config.comparison_operators:
        violations.append(
            f"Invalid operator {condition.operator} for transition condition "
            f"in transition {transition.id} in process {process.id}"
        )
    else:
        update["operator"] = int(operator)

    xor_sources = [gw for gw in process.xor_gateways if gw.id == transition.source]
    and_sources = [gw for gw in process.and_gateways if gw.id == transition.source]
    if len(xor_sources) != 1 or and_sources:
        violations.append(
            f"Transition {transition.id} in process {process.id} has a transition condition "
            f"but is not an outgoing transition of an XOR gateway"
        )

    coerced: Condition = condition.model_copy(update=update)
    return transition.model_copy(update={"condition": coerced})


def validate_process(
    process: Process,
    data_store_fields: Iterable[DataStoreField],
    config: Optional[ParserConfig] = None,
) -> Process:
    """Validate every conditioned transition of a process.

    Args:
        process: Assembled process
        data_store_fields: Fields declared by the owning model
        config: Parser configuration

    Returns:
        A copy of the process whose conditions carry the resolved
        ``dataType``, the coerced ``rhValue`` and an integer ``operator``

    Raises:
        ProcessValidationError: With every violation found in the process
    """
    config = config or ParserConfig()
    fields = list(data_store_fields)
    violations: List[str] = []

    transitions = [
        _validate_transition(t, process, fields, config, violations) if t.condition else t
        for t in process.transitions
    ]

    if violations:
        logger.warning(f"Process {process.id} failed validation with {len(violations)} violations")
        raise ProcessValidationError(process.id, violations)

    logger.debug(f"Process {process.id} passed validation")
    return process.model_copy(update={"transitions": transitions})


__all__ = ["coerce_rh_value", "validate_process"]

"""Compiled process model records."""

from bpmn_model_parser.models.process_model import (
    Activity,
    ActivityType,
    ComparisonOperator,
    Condition,
    DataMapping,
    DataStoreField,
    DataType,
    DefaultTransition,
    Direction,
    Gateway,
    GatewayType,
    Model,
    ParameterType,
    ParseResult,
    Participant,
    Process,
    ProcessModelRecord,
    TaskBehavior,
    TaskType,
    Transition,
)

__all__ = [
    "Activity",
    "ActivityType",
    "ComparisonOperator",
    "Condition",
    "DataMapping",
    "DataStoreField",
    "DataType",
    "DefaultTransition",
    "Direction",
    "Gateway",
    "GatewayType",
    "Model",
    "ParameterType",
    "ParseResult",
    "Participant",
    "Process",
    "ProcessModelRecord",
    "TaskBehavior",
    "TaskType",
    "Transition",
]

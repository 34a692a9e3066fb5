"""
Core infrastructure module for the BPMN model parser.

Provides configuration, errors, the XML element tree and observability.
"""

from .config import ParserConfig
from .errors import (
    BadDataError,
    BpmnParseError,
    DanglingDefaultTransition,
    DegenerateGateway,
    DocumentParseError,
    GatewayMissingTransitions,
    IncompleteCondition,
    InternalParserError,
    InvalidAgreementField,
    InvalidParameterType,
    InvalidTaskBehavior,
    InvalidVersion,
    MalformedDocument,
    MalformedExtension,
    MissingApplication,
    MissingDataStore,
    MissingProcessId,
    NoAssigneeFound,
    NoModelDetails,
    ProcessValidationError,
)
from .observability import (
    LogLevel,
    ObservabilityConfig,
    ObservabilityManager,
    Timer,
    span,
)
from .xml_tree import BpmnNode, parse_xml

__all__ = [
    # Configuration
    "ParserConfig",
    # Errors
    "BpmnParseError",
    "BadDataError",
    "InternalParserError",
    "DocumentParseError",
    "MalformedDocument",
    "MalformedExtension",
    "InvalidTaskBehavior",
    "NoAssigneeFound",
    "MissingApplication",
    "MissingProcessId",
    "GatewayMissingTransitions",
    "DegenerateGateway",
    "IncompleteCondition",
    "DanglingDefaultTransition",
    "MissingDataStore",
    "InvalidAgreementField",
    "InvalidParameterType",
    "NoModelDetails",
    "InvalidVersion",
    "ProcessValidationError",
    # Observability
    "LogLevel",
    "ObservabilityConfig",
    "ObservabilityManager",
    "Timer",
    "span",
    # Element tree
    "BpmnNode",
    "parse_xml",
]

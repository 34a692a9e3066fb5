"""
BPMN Model Parser: Compile BPMN 2.0 Collaborations into Process Models

Parses BPMN 2.0 XML carrying Camunda-style extension properties and compiles
it into a validated, strongly structured process model: data-store fields,
participants, activities, gateways and conditioned transitions.
"""

# Core components
from bpmn_model_parser.core.config import ParserConfig
from bpmn_model_parser.core.errors import (
    BadDataError,
    BpmnParseError,
    InternalParserError,
    ProcessValidationError,
)
from bpmn_model_parser.core.observability import ObservabilityConfig, ObservabilityManager
from bpmn_model_parser.core.xml_tree import BpmnNode, parse_xml

# Parser
from bpmn_model_parser.parser import BpmnParser, get_new_parser, parse_bpmn

# Models
from bpmn_model_parser.models import (
    Activity,
    Condition,
    DataMapping,
    DataStoreField,
    DefaultTransition,
    Gateway,
    Model,
    ParseResult,
    Participant,
    Process,
    Transition,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "ParserConfig",
    "BpmnParseError",
    "BadDataError",
    "InternalParserError",
    "ProcessValidationError",
    "ObservabilityConfig",
    "ObservabilityManager",
    "BpmnNode",
    "parse_xml",
    # Parser
    "BpmnParser",
    "get_new_parser",
    "parse_bpmn",
    # Models
    "Activity",
    "Condition",
    "DataMapping",
    "DataStoreField",
    "DefaultTransition",
    "Gateway",
    "Model",
    "ParseResult",
    "Participant",
    "Process",
    "Transition",
]

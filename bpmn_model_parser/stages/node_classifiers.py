"""
Node Classifiers

One pure function per supported BPMN flow element kind, turning a
``BpmnNode`` into a typed record. The classifiers are registered in
``NODE_HANDLERS`` keyed by node kind; the flow-graph assembler dispatches
through that table.

Every activity classifier follows the same three steps:
1. seed a full record with the defaults of its kind
2. overlay the node's extension properties
3. re-apply the fields that are fixed for the kind
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, NamedTuple, Optional, Tuple, Union

from bpmn_model_parser.core.config import ParserConfig
from bpmn_model_parser.core.errors import (
    DegenerateGateway,
    GatewayMissingTransitions,
    IncompleteCondition,
    InvalidTaskBehavior,
    MalformedDocument,
    MissingApplication,
    MissingProcessId,
    NoAssigneeFound,
)
from bpmn_model_parser.core.xml_tree import BpmnNode
from bpmn_model_parser.models.process_model import (
    Activity,
    ActivityType,
    Condition,
    DefaultTransition,
    Gateway,
    GatewayType,
    Participant,
    TaskBehavior,
    TaskType,
    Transition,
)
from bpmn_model_parser.stages.extension_reader import (
    ExtensionProperties,
    build_record,
    get_boolean_from_string,
    normalize_storage_id,
    read_extension_properties,
)

logger = logging.getLogger(__name__)


class NodeKind(str, Enum):
    """Flow element kinds the parser understands."""

    TASK = "task"
    USER_TASK = "userTask"
    SEND_TASK = "sendTask"
    SERVICE_TASK = "serviceTask"
    SUB_PROCESS = "subProcess"
    EXCLUSIVE_GATEWAY = "exclusiveGateway"
    PARALLEL_GATEWAY = "parallelGateway"
    SEQUENCE_FLOW = "sequenceFlow"


@dataclass(frozen=True)
class ClassifierContext:
    """What classifiers may know beyond the node itself."""

    config: ParserConfig
    participants: Tuple[Participant, ...] = ()


class Classified(NamedTuple):
    """Outcome of classifying one node."""

    record: Union[Activity, Gateway, Transition]
    default_transition: Optional[DefaultTransition] = None


Classifier = Callable[[BpmnNode, ClassifierContext], Classified]

CONDITION_FIELDS = ("lhDataPath", "lhDataStorageId", "operator", "rhValue")


# ===========================
# Activity helpers
# ===========================


def _activity_defaults(node: BpmnNode, **overrides: Any) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "id": node.id,
        "name": node.name,
        "assignee": "",
        "activityType": ActivityType.TASK,
        "taskType": TaskType.NONE,
        "behavior": TaskBehavior.SEND,
        "multiInstance": False,
        "application": "",
        "subProcessModelId": "",
        "subProcessDefinitionId": "",
    }
    record.update(overrides)
    return record


def _overlay(record: Dict[str, Any], properties: Optional[ExtensionProperties]) -> Dict[str, Any]:
    if properties is None:
        return record
    overlay = properties.as_record()
    if "multiInstance" in overlay:
        overlay["multiInstance"] = get_boolean_from_string(overlay["multiInstance"])
    record.update(overlay)
    return record


def _parse_behavior(value: Any, node: BpmnNode, config: ParserConfig) -> TaskBehavior:
    try:
        behavior = int(value)
    except (TypeError, ValueError):
        behavior = None
    if behavior not in config.task_behaviors:
        raise InvalidTaskBehavior(
            f"Valid BpmnModel TaskBehavior required for task {node.name or node.id}, got {value!r}",
            element_id=node.id,
        )
    return TaskBehavior(behavior)


# ===========================
# Activity classifiers
# ===========================


def classify_task(node: BpmnNode, context: ClassifierContext) -> Classified:
    """Plain task; behavior may be customized but must be a known code."""
    record = _activity_defaults(node)
    _overlay(record, read_extension_properties(node, context.config))
    record.update(
        id=node.id,
        name=node.name,
        activityType=ActivityType.TASK,
        taskType=TaskType.NONE,
    )
    record["behavior"] = _parse_behavior(record["behavior"], node, context.config)
    return Classified(build_record(Activity, record, node))


def classify_user_task(node: BpmnNode, context: ClassifierContext) -> Classified:
    """User task assigned to the first participant whose lane holds it."""
    assignee = next((p.id for p in context.participants if node.id in p.tasks), None)
    if assignee is None:
        raise NoAssigneeFound(f"No assignee found for task with id {node.id}", element_id=node.id)

    record = _activity_defaults(node)
    _overlay(record, read_extension_properties(node, context.config))
    record.update(
        id=node.id,
        name=node.name,
        assignee=assignee,
        activityType=ActivityType.TASK,
        taskType=TaskType.USER,
        behavior=TaskBehavior.SENDRECEIVE,
        multiInstance=node.has_loop_characteristics,
        subProcessModelId="",
        subProcessDefinitionId="",
    )
    return Classified(build_record(Activity, record, node))


def classify_send_task(node: BpmnNode, context: ClassifierContext) -> Classified:
    record = _activity_defaults(
        node, taskType=TaskType.EVENT, behavior=TaskBehavior.SENDRECEIVE
    )
    _overlay(record, read_extension_properties(node, context.config))
    record.update(
        id=node.id,
        name=node.name,
        assignee="",
        activityType=ActivityType.TASK,
        taskType=TaskType.EVENT,
        multiInstance=False,
        subProcessModelId="",
        subProcessDefinitionId="",
    )
    record["behavior"] = _parse_behavior(record["behavior"], node, context.config)
    return Classified(build_record(Activity, record, node))


def classify_service_task(node: BpmnNode, context: ClassifierContext) -> Classified:
    properties = read_extension_properties(node, context.config)
    if properties is None or not properties.get("application"):
        raise MissingApplication(
            f"application is a required extension element for serviceTask activity {node.id}",
            element_id=node.id,
        )

    record = _activity_defaults(node, taskType=TaskType.SERVICE)
    _overlay(record, properties)
    record.update(
        id=node.id,
        name=node.name,
        activityType=ActivityType.TASK,
        taskType=TaskType.SERVICE,
        behavior=TaskBehavior.SEND,
    )
    return Classified(build_record(Activity, record, node))


def classify_sub_process(node: BpmnNode, context: ClassifierContext) -> Classified:
    """Sub-process calling the process definition named by ``processId``."""
    properties = read_extension_properties(node, context.config)
    if properties is None or not properties.get("processId"):
        raise MissingProcessId(
            f"processId is a required extension element for subProcess activity {node.id}",
            element_id=node.id,
        )

    overlay = ExtensionProperties(
        values={k: v for k, v in properties.values.items() if k not in ("processId", "modelId")},
        data_mappings=properties.data_mappings,
    )
    record = _activity_defaults(node, activityType=ActivityType.SUBPROCESS)
    _overlay(record, overlay)
    record.update(
        id=node.id,
        name=node.name,
        assignee="",
        activityType=ActivityType.SUBPROCESS,
        taskType=TaskType.NONE,
        behavior=TaskBehavior.SEND,
        subProcessModelId=properties.get("modelId") or "",
        subProcessDefinitionId=properties.get("processId"),
    )
    return Classified(build_record(Activity, record, node))


# ===========================
# Gateway classifiers
# ===========================


def _classify_gateway(node: BpmnNode, gateway_type: GatewayType) -> Classified:
    incoming = node.incoming
    outgoing = node.outgoing
    label = gateway_type.name

    if not incoming:
        raise GatewayMissingTransitions(
            f"{label} gateway {node.id} needs at least 1 incoming transition", element_id=node.id
        )
    if not outgoing:
        raise GatewayMissingTransitions(
            f"{label} gateway {node.id} needs at least 1 outgoing transition", element_id=node.id
        )
    if len(incoming) == 1 and len(outgoing) == 1:
        raise DegenerateGateway(
            f"{label} gateway {node.id} must have multiple incoming and/or outgoing transitions",
            element_id=node.id,
        )

    gateway = Gateway(id=node.id, type=gateway_type, incoming=incoming, outgoing=outgoing)
    default_transition = None
    if gateway_type == GatewayType.XOR and node.default:
        # target activity is resolved once all transitions are known
        default_transition = DefaultTransition(gateway=node.id, transition=node.default)
    return Classified(gateway, default_transition)


def classify_exclusive_gateway(node: BpmnNode, context: ClassifierContext) -> Classified:
    return _classify_gateway(node, GatewayType.XOR)


def classify_parallel_gateway(node: BpmnNode, context: ClassifierContext) -> Classified:
    return _classify_gateway(node, GatewayType.AND)


# ===========================
# Sequence flow classifier
# ===========================


def classify_sequence_flow(node: BpmnNode, context: ClassifierContext) -> Classified:
    """Transition, with a condition when the flow carries extension properties."""
    if not node.source_ref or not node.target_ref:
        raise MalformedDocument(
            f"Sequence flow {node.id} requires both sourceRef and targetRef", element_id=node.id
        )

    config = context.config
    condition = None
    properties = read_extension_properties(node, config)
    if properties is not None and properties.values:
        values = properties.values
        if (
            not values.get("lhDataPath")
            or not values.get("lhDataStorageId")
            or "operator" not in values
            or "rhValue" not in values
        ):
            raise IncompleteCondition(
                f"Invalid expression for transition {node.id}. "
                + ", ".join(f'"{name}"' for name in CONDITION_FIELDS)
                + " are required fields.",
                element_id=node.id,
            )
        condition_data: Dict[str, Any] = dict(values)
        condition_data["lhDataStorageId"] = normalize_storage_id(values["lhDataStorageId"], config)
        if "rhDataStorageId" in values:
            condition_data["rhDataStorageId"] = normalize_storage_id(
                values["rhDataStorageId"], config
            )
        condition = build_record(Condition, condition_data, node)

    return Classified(
        Transition(id=node.id, source=node.source_ref, target=node.target_ref, condition=condition)
    )


# ===========================
# Registry
# ===========================


@dataclass(frozen=True)
class NodeHandler:
    """Registry entry: how to classify a kind and where its records go."""

    kind: NodeKind
    collection: str
    classify: Classifier
    is_activity: bool = False


NODE_HANDLERS: Dict[str, NodeHandler] = {
    handler.kind.value: handler
    for handler in (
        NodeHandler(NodeKind.TASK, "tasks", classify_task, is_activity=True),
        NodeHandler(NodeKind.USER_TASK, "user_tasks", classify_user_task, is_activity=True),
        NodeHandler(NodeKind.SEND_TASK, "send_tasks", classify_send_task, is_activity=True),
        NodeHandler(
            NodeKind.SERVICE_TASK, "service_tasks", classify_service_task, is_activity=True
        ),
        NodeHandler(NodeKind.SUB_PROCESS, "sub_processes", classify_sub_process, is_activity=True),
        NodeHandler(NodeKind.EXCLUSIVE_GATEWAY, "xor_gateways", classify_exclusive_gateway),
        NodeHandler(NodeKind.PARALLEL_GATEWAY, "and_gateways", classify_parallel_gateway),
        NodeHandler(NodeKind.SEQUENCE_FLOW, "transitions", classify_sequence_flow),
    )
}


def get_handler(node_type: str) -> Optional[NodeHandler]:
    return NODE_HANDLERS.get(node_type)


__all__ = [
    "NodeKind",
    "ClassifierContext",
    "Classified",
    "NodeHandler",
    "NODE_HANDLERS",
    "get_handler",
    "classify_task",
    "classify_user_task",
    "classify_send_task",
    "classify_service_task",
    "classify_sub_process",
    "classify_exclusive_gateway",
    "classify_parallel_gateway",
    "classify_sequence_flow",
]

"""
Flow-Graph Assembler

Walks a process's flow elements once, in document order, classifying each
one and sorting the records into per-kind collections. Gateway defaults are
resolved after the pass, when every transition is known.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from bpmn_model_parser.core.config import ParserConfig
from bpmn_model_parser.core.errors import DanglingDefaultTransition
from bpmn_model_parser.core.xml_tree import BpmnNode
from bpmn_model_parser.models.process_model import (
    Activity,
    DefaultTransition,
    Gateway,
    Participant,
    Transition,
)
from bpmn_model_parser.stages.node_classifiers import ClassifierContext, get_handler

logger = logging.getLogger(__name__)


@dataclass
class FlowGraph:
    """Classified flow elements of one process."""

    tasks: List[Activity] = field(default_factory=list)
    user_tasks: List[Activity] = field(default_factory=list)
    send_tasks: List[Activity] = field(default_factory=list)
    service_tasks: List[Activity] = field(default_factory=list)
    sub_processes: List[Activity] = field(default_factory=list)
    xor_gateways: List[Gateway] = field(default_factory=list)
    and_gateways: List[Gateway] = field(default_factory=list)
    transitions: List[Transition] = field(default_factory=list)
    activity_map: Dict[str, str] = field(default_factory=dict)
    default_transitions: Optional[List[DefaultTransition]] = None

    def as_process_fields(self) -> Dict[str, Any]:
        return {
            "tasks": self.tasks,
            "user_tasks": self.user_tasks,
            "send_tasks": self.send_tasks,
            "service_tasks": self.service_tasks,
            "sub_processes": self.sub_processes,
            "xor_gateways": self.xor_gateways,
            "and_gateways": self.and_gateways,
            "transitions": self.transitions,
            "activity_map": self.activity_map,
            "default_transitions": self.default_transitions,
        }


def resolve_default_transitions(
    pending: Iterable[DefaultTransition], transitions: Iterable[Transition]
) -> List[DefaultTransition]:
    """Set each default's target activity from the transition it names.

    Raises:
        DanglingDefaultTransition: If a default names an unknown transition
    """
    targets: Dict[str, str] = {}
    for transition in transitions:
        targets.setdefault(transition.id, transition.target)

    resolved = []
    for stub in pending:
        target = targets.get(stub.transition)
        if not target:
            raise DanglingDefaultTransition(
                f"No matching target activity found for default transition {stub.transition} "
                f"of gateway {stub.gateway}",
                element_id=stub.gateway,
            )
        resolved.append(stub.model_copy(update={"activity": target}))
    return resolved


def assemble_flow_graph(
    flow_elements: Iterable[BpmnNode],
    participants: Iterable[Participant],
    config: Optional[ParserConfig] = None,
) -> FlowGraph:
    """Classify a process's flow elements.

    Args:
        flow_elements: Children of a process node, in document order
        participants: Participants already extracted from the process lanes
        config: Parser configuration

    Returns:
        FlowGraph with every supported element classified exactly once

    Raises:
        BpmnParseError: On the first element that cannot be classified
    """
    context = ClassifierContext(config=config or ParserConfig(), participants=tuple(participants))
    graph = FlowGraph()
    pending: List[DefaultTransition] = []

    for node in flow_elements:
        handler = get_handler(node.type)
        if handler is None:
            logger.debug(f"Skipping unsupported flow element {node.type} {node.id}")
            continue

        classified = handler.classify(node, context)
        getattr(graph, handler.collection).append(classified.record)
        if handler.is_activity:
            # last write wins when ids collide
            graph.activity_map[classified.record.id] = classified.record.name
        if classified.default_transition is not None:
            pending.append(classified.default_transition)

    if pending:
        graph.default_transitions = resolve_default_transitions(pending, graph.transitions)

    logger.debug(
        f"Assembled flow graph: {len(graph.activity_map)} activities, "
        f"{len(graph.xor_gateways) + len(graph.and_gateways)} gateways, "
        f"{len(graph.transitions)} transitions"
    )
    return graph


__all__ = ["FlowGraph", "assemble_flow_graph", "resolve_default_transitions"]

"""
Tests for the flow-graph assembler.

Tests:
- Collection sorting and the activity map
- Default transition resolution
- Unsupported elements are skipped
"""

import pytest

from bpmn_model_parser.core.errors import DanglingDefaultTransition, NoAssigneeFound
from bpmn_model_parser.models import DefaultTransition, Participant, Transition
from bpmn_model_parser.stages.model_extractor import extract_participants
from bpmn_model_parser.stages.flow_graph_assembler import (
    assemble_flow_graph,
    resolve_default_transitions,
)

from conftest import gateway, parse_element, render_properties, sequence_flow


def _flow_elements(body):
    return parse_element(f'<bpmn:process id="P">{body}</bpmn:process>').children


@pytest.fixture
def participants():
    return [Participant(id="Lane_1", tasks=["Task_User"])]


def test_assembles_every_kind(approval_definitions):
    process_node = approval_definitions.find("process")
    graph = assemble_flow_graph(process_node.children, extract_participants(process_node))

    assert [a.id for a in graph.user_tasks] == ["Task_Apply", "Task_Approve"]
    assert [a.id for a in graph.send_tasks] == ["Task_Notify"]
    assert [a.id for a in graph.service_tasks] == ["Task_Archive"]
    assert [a.id for a in graph.sub_processes] == ["SubProcess_Review"]
    assert [a.id for a in graph.tasks] == ["Task_Close"]
    assert [g.id for g in graph.xor_gateways] == ["Gateway_Split", "Gateway_Merge"]
    assert [g.id for g in graph.and_gateways] == ["Gateway_Fork", "Gateway_Join"]
    assert len(graph.transitions) == 13
    assert graph.activity_map == {
        "Task_Apply": "Apply",
        "Task_Approve": "Approve",
        "Task_Notify": "Notify Applicant",
        "Task_Archive": "Archive",
        "SubProcess_Review": "Review",
        "Task_Close": "Close",
    }
    assert graph.default_transitions == [
        DefaultTransition(gateway="Gateway_Split", transition="Flow_Reject", activity="Task_Notify")
    ]


def test_no_default_transitions_is_none(participants):
    elements = _flow_elements(
        '<bpmn:task id="Task_A" name="A" />' + sequence_flow("F1", "Task_A", "Task_B")
    )
    graph = assemble_flow_graph(elements, participants)
    assert graph.default_transitions is None
    assert graph.as_process_fields()["default_transitions"] is None


def test_unsupported_elements_are_skipped(participants):
    elements = _flow_elements(
        '<bpmn:startEvent id="S" />'
        '<bpmn:dataObjectReference id="D" />'
        '<bpmn:textAnnotation id="N"><bpmn:text>note</bpmn:text></bpmn:textAnnotation>'
        '<bpmn:task id="Task_A" name="A" />'
    )
    graph = assemble_flow_graph(elements, participants)
    assert graph.activity_map == {"Task_A": "A"}
    assert graph.transitions == []


def test_activity_map_last_write_wins(participants):
    elements = _flow_elements(
        '<bpmn:task id="Dup" name="First" />'
        f'<bpmn:serviceTask id="Dup" name="Second">{render_properties({"application": "X"})}'
        "</bpmn:serviceTask>"
    )
    graph = assemble_flow_graph(elements, participants)
    assert graph.activity_map == {"Dup": "Second"}
    assert len(graph.tasks) == 1
    assert len(graph.service_tasks) == 1


def test_dangling_default_transition(participants):
    elements = _flow_elements(
        gateway("exclusiveGateway", "G", ["F1"], ["F2", "F3"], default="F_missing")
        + sequence_flow("F2", "G", "A")
        + sequence_flow("F3", "G", "B")
    )
    with pytest.raises(DanglingDefaultTransition, match="F_missing"):
        assemble_flow_graph(elements, participants)


def test_classifier_errors_propagate(participants):
    elements = _flow_elements('<bpmn:userTask id="Task_Orphan" />')
    with pytest.raises(NoAssigneeFound):
        assemble_flow_graph(elements, participants)


def test_resolve_uses_first_transition_with_id():
    transitions = [
        Transition(id="F1", source="G", target="A"),
        Transition(id="F1", source="G", target="B"),
    ]
    [resolved] = resolve_default_transitions(
        [DefaultTransition(gateway="G", transition="F1")], transitions
    )
    assert resolved.activity == "A"

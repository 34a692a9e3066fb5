"""Pytest configuration for bpmn-model-parser tests."""

import logging
from typing import Dict, Iterable, Optional, Tuple, Union

import pytest
from loguru import logger

from bpmn_model_parser.core.observability import ObservabilityManager
from bpmn_model_parser.core.xml_tree import BpmnNode, parse_xml

BPMN_NS = "http://www.omg.org/spec/BPMN/20100524/MODEL"
CAMUNDA_NS = "http://camunda.org/schema/1.0/bpmn"

Properties = Union[Dict[str, str], Iterable[Tuple[str, str]]]


# ===========================
# XML builders
# ===========================


def render_properties(properties: Optional[Properties]) -> str:
    """Render a Camunda extension block; ``None`` renders nothing."""
    if properties is None:
        return ""
    items = properties.items() if isinstance(properties, dict) else properties
    rendered = "".join(
        f'<camunda:property name="{name}" value="{value}" />' for name, value in items
    )
    return (
        "<bpmn:extensionElements><camunda:properties>"
        f"{rendered}"
        "</camunda:properties></bpmn:extensionElements>"
    )


def wrap_definitions(body: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<bpmn:definitions xmlns:bpmn="{BPMN_NS}" xmlns:camunda="{CAMUNDA_NS}" '
        'id="Definitions_1" targetNamespace="http://bpmn.io/schema/bpmn">'
        f"{body}"
        "</bpmn:definitions>"
    )


DEFAULT_MODEL_PROPERTIES = {
    "id": "Hiring",
    "version": "1.2.3",
    "private": "false",
    "author": "0xAUTHOR",
}

DEFAULT_PROCESS_INSTANCE_FIELDS = {"agreement": "7", "Approved": "0", "Age": "2"}

DEFAULT_AGREEMENT_FIELDS = {"Name": "1", "Buyer": "8"}


def build_document(
    process_body: str = "",
    *,
    process_id: str = "Process_1",
    process_name: str = "Hiring Process",
    process_properties: Optional[Properties] = None,
    model_properties: Optional[Properties] = DEFAULT_MODEL_PROPERTIES,
    process_instance_fields: Optional[Properties] = DEFAULT_PROCESS_INSTANCE_FIELDS,
    agreement_fields: Optional[Properties] = DEFAULT_AGREEMENT_FIELDS,
    with_collaboration: bool = True,
    extra_root_elements: str = "",
) -> str:
    """Assemble a complete BPMN document around one process body."""
    collaboration = ""
    if with_collaboration:
        collaboration = (
            '<bpmn:collaboration id="Hiring_Collaboration">'
            f"{render_properties(model_properties)}"
            f'<bpmn:participant id="Participant_1" processRef="{process_id}" />'
            "</bpmn:collaboration>"
        )
    data_stores = ""
    if process_instance_fields is not None:
        data_stores += (
            '<bpmn:dataStore id="PROCESS_INSTANCE" name="Process Instance">'
            f"{render_properties(process_instance_fields)}</bpmn:dataStore>"
        )
    if agreement_fields is not None:
        data_stores += (
            '<bpmn:dataStore id="agreement" name="Agreement">'
            f"{render_properties(agreement_fields)}</bpmn:dataStore>"
        )
    return wrap_definitions(
        f"{collaboration}"
        f'<bpmn:process id="{process_id}" name="{process_name}" isExecutable="false">'
        f"{render_properties(process_properties)}"
        f"{process_body}"
        "</bpmn:process>"
        f"{extra_root_elements}"
        f"{data_stores}"
    )


def sequence_flow(flow_id: str, source: str, target: str, properties: Optional[Properties] = None) -> str:
    return (
        f'<bpmn:sequenceFlow id="{flow_id}" sourceRef="{source}" targetRef="{target}">'
        f"{render_properties(properties)}</bpmn:sequenceFlow>"
    )


def gateway(
    kind: str,
    gateway_id: str,
    incoming: Iterable[str],
    outgoing: Iterable[str],
    default: Optional[str] = None,
) -> str:
    default_attr = f' default="{default}"' if default else ""
    refs = "".join(f"<bpmn:incoming>{ref}</bpmn:incoming>" for ref in incoming)
    refs += "".join(f"<bpmn:outgoing>{ref}</bpmn:outgoing>" for ref in outgoing)
    return f'<bpmn:{kind} id="{gateway_id}"{default_attr}>{refs}</bpmn:{kind}>'


def lane(lane_id: str, name: str, refs: Iterable[str], properties: Optional[Properties] = None) -> str:
    node_refs = "".join(f"<bpmn:flowNodeRef>{ref}</bpmn:flowNodeRef>" for ref in refs)
    return f'<bpmn:lane id="{lane_id}" name="{name}">{render_properties(properties)}{node_refs}</bpmn:lane>'


def parse_element(snippet: str) -> BpmnNode:
    """Parse one element snippet and return its node."""
    return parse_xml(wrap_definitions(snippet)).children[0]


APPROVAL_CONDITION = {
    "lhDataPath": "Approved",
    "lhDataStorageId": "PROCESS_INSTANCE",
    "operator": "0",
    "rhValue": "true",
}

APPROVAL_PROCESS_BODY = (
    '<bpmn:laneSet id="LaneSet_1">'
    + lane(
        "Lane_Applicant",
        "Applicant",
        ["StartEvent_1", "Task_Apply"],
        {"account": "0x1234", "conditionalPerformer": "false"},
    )
    + lane(
        "Lane_Manager",
        "Manager",
        [
            "Gateway_Split",
            "Task_Approve",
            "Task_Notify",
            "Gateway_Merge",
            "Gateway_Fork",
            "Task_Archive",
            "SubProcess_Review",
            "Gateway_Join",
            "Task_Close",
        ],
        {"dataPath": "Manager", "dataStorageId": "agreement", "conditionalPerformer": "true"},
    )
    + lane("Lane_Unassigned", "Unassigned", ["EndEvent_1"])
    + "</bpmn:laneSet>"
    + '<bpmn:startEvent id="StartEvent_1"><bpmn:outgoing>Flow_Start</bpmn:outgoing></bpmn:startEvent>'
    + '<bpmn:userTask id="Task_Apply" name="Apply">'
    + render_properties(
        [
            ("application", "WebAppApprovalForm"),
            ("INDATAID_1", "Age"),
            ("INDATA_Age_dataPath", "Age"),
            ("INDATA_Age_dataStorageId", "PROCESS_INSTANCE"),
            ("OUTDATAID_1", "Decision"),
            ("OUTDATA_Decision_dataPath", "Approved"),
            ("OUTDATA_Decision_dataStorageId", "agreement"),
        ]
    )
    + "<bpmn:incoming>Flow_Start</bpmn:incoming><bpmn:outgoing>Flow_Apply</bpmn:outgoing>"
    + "</bpmn:userTask>"
    + gateway(
        "exclusiveGateway", "Gateway_Split", ["Flow_Apply"], ["Flow_Approve", "Flow_Reject"],
        default="Flow_Reject",
    )
    + '<bpmn:userTask id="Task_Approve" name="Approve">'
    + "<bpmn:incoming>Flow_Approve</bpmn:incoming><bpmn:outgoing>Flow_Approved</bpmn:outgoing>"
    + '<bpmn:multiInstanceLoopCharacteristics isSequential="true" />'
    + "</bpmn:userTask>"
    + '<bpmn:sendTask id="Task_Notify" name="Notify Applicant">'
    + "<bpmn:incoming>Flow_Reject</bpmn:incoming><bpmn:outgoing>Flow_Notified</bpmn:outgoing>"
    + "</bpmn:sendTask>"
    + gateway("exclusiveGateway", "Gateway_Merge", ["Flow_Approved", "Flow_Notified"], ["Flow_Merged"])
    + gateway("parallelGateway", "Gateway_Fork", ["Flow_Merged"], ["Flow_ToArchive", "Flow_ToReview"])
    + '<bpmn:serviceTask id="Task_Archive" name="Archive">'
    + render_properties({"application": "Archiver"})
    + "<bpmn:incoming>Flow_ToArchive</bpmn:incoming><bpmn:outgoing>Flow_Archived</bpmn:outgoing>"
    + "</bpmn:serviceTask>"
    + '<bpmn:subProcess id="SubProcess_Review" name="Review">'
    + render_properties({"processId": "Review_Process", "modelId": "ReviewModel"})
    + "<bpmn:incoming>Flow_ToReview</bpmn:incoming><bpmn:outgoing>Flow_Reviewed</bpmn:outgoing>"
    + "</bpmn:subProcess>"
    + gateway("parallelGateway", "Gateway_Join", ["Flow_Archived", "Flow_Reviewed"], ["Flow_End"])
    + '<bpmn:task id="Task_Close" name="Close">'
    + "<bpmn:incoming>Flow_End</bpmn:incoming><bpmn:outgoing>Flow_Closed</bpmn:outgoing>"
    + "</bpmn:task>"
    + '<bpmn:endEvent id="EndEvent_1"><bpmn:incoming>Flow_Closed</bpmn:incoming></bpmn:endEvent>'
    + sequence_flow("Flow_Start", "StartEvent_1", "Task_Apply")
    + sequence_flow("Flow_Apply", "Task_Apply", "Gateway_Split")
    + sequence_flow("Flow_Approve", "Gateway_Split", "Task_Approve", APPROVAL_CONDITION)
    + sequence_flow("Flow_Reject", "Gateway_Split", "Task_Notify")
    + sequence_flow("Flow_Approved", "Task_Approve", "Gateway_Merge")
    + sequence_flow("Flow_Notified", "Task_Notify", "Gateway_Merge")
    + sequence_flow("Flow_Merged", "Gateway_Merge", "Gateway_Fork")
    + sequence_flow("Flow_ToArchive", "Gateway_Fork", "Task_Archive")
    + sequence_flow("Flow_ToReview", "Gateway_Fork", "SubProcess_Review")
    + sequence_flow("Flow_Archived", "Task_Archive", "Gateway_Join")
    + sequence_flow("Flow_Reviewed", "SubProcess_Review", "Gateway_Join")
    + sequence_flow("Flow_End", "Gateway_Join", "Task_Close")
    + sequence_flow("Flow_Closed", "Task_Close", "EndEvent_1")
)


# ===========================
# Fixtures
# ===========================


@pytest.fixture
def approval_xml():
    """Hiring process exercising every supported element kind."""
    return build_document(
        APPROVAL_PROCESS_BODY,
        process_properties={"processInterface": "Agreement Formation"},
    )


@pytest.fixture
def approval_definitions(approval_xml):
    return parse_xml(approval_xml)


@pytest.fixture
def approval_file(tmp_path, approval_xml):
    path = tmp_path / "hiring.bpmn"
    path.write_text(approval_xml, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def reset_observability():
    """Drop logging sinks installed by a test."""
    yield
    if ObservabilityManager.get_instance() is not None:
        ObservabilityManager._instance = None
        logger.remove()
        root = logging.getLogger()
        root.handlers.clear()
        root.setLevel(logging.WARNING)

"""
Model and Process Extraction

Reads collaboration-level metadata (model id, semantic version, visibility,
data-store fields) and, for every process, its interface tag and lane
participants before handing the flow elements to the assembler.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from bpmn_model_parser.core.config import ParserConfig
from bpmn_model_parser.core.errors import (
    InvalidAgreementField,
    InvalidParameterType,
    InvalidVersion,
    MissingDataStore,
    NoModelDetails,
)
from bpmn_model_parser.core.xml_tree import BpmnNode
from bpmn_model_parser.models.process_model import (
    DataStoreField,
    Model,
    ParameterType,
    Participant,
    Process,
)
from bpmn_model_parser.stages.extension_reader import (
    build_record,
    get_boolean_from_string,
    read_extension_properties,
)
from bpmn_model_parser.stages.flow_graph_assembler import assemble_flow_graph

logger = logging.getLogger(__name__)

DATA_STORE_TAG = "dataStore"
COLLABORATION_TAG = "collaboration"
PROCESS_TAG = "process"
LANE_SET_TAG = "laneSet"
LANE_TAG = "lane"

PROCESS_INTERFACE_PROPERTY = "processInterface"
MODEL_PROPERTIES = ("id", "name", "version", "private")


# ===========================
# Model details
# ===========================


def _parse_parameter_type(raw: str, data_store_id: str, data_path: str) -> ParameterType:
    try:
        return ParameterType(int(raw))
    except ValueError as e:
        raise InvalidParameterType(
            f"Data store {data_store_id} field {data_path} has invalid parameter type {raw!r}",
            element_id=data_store_id,
        ) from e


def parse_version(raw: Optional[str]) -> Tuple[int, int, int]:
    """Parse a ``major.minor.patch`` version string.

    Raises:
        InvalidVersion: Unless exactly three numeric components are given
    """
    parts = (raw or "").split(".")
    if len(parts) != 3 or not all(part.isdecimal() for part in parts):
        raise InvalidVersion(
            f"Model version should follow Semantic Versioning, e.g. 1.0.0, got {raw!r}"
        )
    major, minor, patch = (int(part) for part in parts)
    return major, minor, patch


def extract_data_store_fields(
    definitions: BpmnNode, config: Optional[ParserConfig] = None
) -> List[DataStoreField]:
    """Fields declared on the two reserved data stores.

    Raises:
        MissingDataStore: If a reserved data store is absent
        InvalidAgreementField: If the process-instance store lacks a
            contract-address ``agreement`` field
    """
    config = config or ParserConfig()
    fields: List[DataStoreField] = []

    for data_store_id in config.data_store_ids:
        data_store = next(
            (
                node
                for node in definitions.iter_children(DATA_STORE_TAG)
                if node.id == data_store_id
            ),
            None,
        )
        if data_store is None:
            raise MissingDataStore(
                f"Data store with id {data_store_id} required but not found",
                element_id=data_store_id,
            )

        properties = read_extension_properties(data_store, config)
        parameters = properties.values if properties is not None else {}

        if data_store_id == config.process_instance_storage_id:
            agreement_type = parameters.get(config.agreement_field, "")
            if agreement_type.strip() != str(int(config.agreement_field_type)):
                raise InvalidAgreementField(
                    f"Process Instance data store requires {config.agreement_field} field "
                    f"of type contract address ({int(config.agreement_field_type)})",
                    element_id=data_store_id,
                )

        for data_path, raw_type in parameters.items():
            fields.append(
                DataStoreField(
                    data_storage_id=data_store_id,
                    data_path=data_path,
                    parameter_type=_parse_parameter_type(raw_type, data_store_id, data_path),
                )
            )

    return fields


def extract_model(definitions: BpmnNode, config: Optional[ParserConfig] = None) -> Model:
    """Build the model record from the data stores and the collaboration.

    Raises:
        NoModelDetails: If there is no collaboration with model properties
        InvalidVersion: If the version is not semantic
    """
    config = config or ParserConfig()
    data_store_fields = extract_data_store_fields(definitions, config)

    collaboration = definitions.find(COLLABORATION_TAG)
    if collaboration is None or not collaboration.has_extension_elements:
        raise NoModelDetails("No model details found")

    properties = read_extension_properties(collaboration, config)
    values = properties.values if properties is not None else {}
    model_id = values.get("id")
    if not model_id:
        raise NoModelDetails(
            f"Model id is required on collaboration {collaboration.id}",
            element_id=collaboration.id,
        )

    record: Dict[str, Any] = {k: v for k, v in values.items() if k not in MODEL_PROPERTIES}
    record.update(
        id=model_id,
        name=collaboration.id,
        version=parse_version(values.get("version")),
        private=get_boolean_from_string(values.get("private")),
        dataStoreFields=data_store_fields,
    )
    model = build_record(Model, record, collaboration)
    logger.info(
        f"Extracted model {model.id} v{'.'.join(map(str, model.version))} "
        f"with {len(data_store_fields)} data store fields"
    )
    return model


# ===========================
# Processes
# ===========================


def extract_process_interface(process_node: BpmnNode, config: Optional[ParserConfig] = None) -> str:
    properties = read_extension_properties(process_node, config)
    if properties is None:
        return ""
    return properties.get(PROCESS_INTERFACE_PROPERTY, "") or ""


def extract_participants(
    process_node: BpmnNode, config: Optional[ParserConfig] = None
) -> List[Participant]:
    """Participants from the lanes of every lane set of a process.

    Lanes without an extension block carry no performer and are skipped.
    """
    config = config or ParserConfig()
    participants: List[Participant] = []

    for lane_set in process_node.iter_children(LANE_SET_TAG):
        for lane in lane_set.iter_children(LANE_TAG):
            if not lane.has_extension_elements:
                logger.debug(f"Lane {lane.id} has no extension block, not a participant")
                continue

            properties = read_extension_properties(lane, config)
            record: Dict[str, Any] = dict(properties.values) if properties is not None else {}
            record.update(id=lane.id, name=lane.name, tasks=lane.flow_node_refs)
            if "conditionalPerformer" in record:
                record["conditionalPerformer"] = get_boolean_from_string(
                    record["conditionalPerformer"]
                )
            participants.append(build_record(Participant, record, lane))

    return participants


def extract_processes(
    definitions: BpmnNode, config: Optional[ParserConfig] = None
) -> List[Process]:
    """Compile every process of the document (without semantic validation)."""
    config = config or ParserConfig()
    processes: List[Process] = []

    for process_node in definitions.iter_children(PROCESS_TAG):
        interface = extract_process_interface(process_node, config)
        # user task assignment needs the participants first
        participants = extract_participants(process_node, config)
        graph = assemble_flow_graph(process_node.children, participants, config)
        processes.append(
            Process(
                id=process_node.id,
                name=process_node.name,
                interface=interface,
                participants=participants,
                **graph.as_process_fields(),
            )
        )
        logger.debug(f"Extracted process {process_node.id} with {len(participants)} participants")

    return processes


__all__ = [
    "parse_version",
    "extract_data_store_fields",
    "extract_model",
    "extract_process_interface",
    "extract_participants",
    "extract_processes",
]

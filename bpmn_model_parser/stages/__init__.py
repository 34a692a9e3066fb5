"""
BPMN Compilation Stages

Implements the compilation passes run for every document:
1. Extension Property Reader: decode key/value extension blocks
2. Node Classifiers: turn one flow element into a typed record
3. Flow-Graph Assembler: classify a process's flow elements in one pass
4. Model/Process Extractor: collaboration metadata, lanes and processes
5. Process Validator: batch semantic checks per process
"""

from bpmn_model_parser.stages.extension_reader import (
    ExtensionProperties,
    build_record,
    decode_data_mappings,
    encode_data_mappings,
    get_boolean_from_string,
    normalize_storage_id,
    read_extension_properties,
)

from bpmn_model_parser.stages.node_classifiers import (
    NODE_HANDLERS,
    Classified,
    ClassifierContext,
    NodeHandler,
    NodeKind,
    get_handler,
)

from bpmn_model_parser.stages.flow_graph_assembler import (
    FlowGraph,
    assemble_flow_graph,
    resolve_default_transitions,
)

from bpmn_model_parser.stages.model_extractor import (
    extract_data_store_fields,
    extract_model,
    extract_participants,
    extract_process_interface,
    extract_processes,
    parse_version,
)

from bpmn_model_parser.stages.process_validator import (
    coerce_rh_value,
    validate_process,
)

__all__ = [
    # Stage 1: Extension properties
    "ExtensionProperties",
    "build_record",
    "decode_data_mappings",
    "encode_data_mappings",
    "get_boolean_from_string",
    "normalize_storage_id",
    "read_extension_properties",
    # Stage 2: Node classifiers
    "NODE_HANDLERS",
    "Classified",
    "ClassifierContext",
    "NodeHandler",
    "NodeKind",
    "get_handler",
    # Stage 3: Flow graph
    "FlowGraph",
    "assemble_flow_graph",
    "resolve_default_transitions",
    # Stage 4: Extraction
    "extract_data_store_fields",
    "extract_model",
    "extract_participants",
    "extract_process_interface",
    "extract_processes",
    "parse_version",
    # Stage 5: Validation
    "coerce_rh_value",
    "validate_process",
]

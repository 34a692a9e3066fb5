"""
Extension Property Reader

Reads the key/value properties a modeler attaches to any BPMN element
through an extension block::

    <bpmn:extensionElements>
      <camunda:properties>
        <camunda:property name="application" value="WebAppApprovalForm" />
        <camunda:property name="INDATAID_1" value="Age" />
        <camunda:property name="INDATA_Age_dataPath" value="Age" />
        <camunda:property name="INDATA_Age_dataStorageId" value="agreement" />
      </camunda:properties>
    </bpmn:extensionElements>

Keys with the ``INDATA``/``OUTDATA`` prefixes are not copied through; they
are collected first and then decoded into ``DataMapping`` records.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from bpmn_model_parser.core.config import ParserConfig
from bpmn_model_parser.core.errors import BpmnParseError, MalformedExtension
from bpmn_model_parser.core.xml_tree import BpmnNode
from bpmn_model_parser.models.process_model import DataMapping, Direction

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


@dataclass(frozen=True)
class ExtensionProperties:
    """Properties read from one element's extension block."""

    values: Dict[str, str] = field(default_factory=dict)
    data_mappings: Optional[List[DataMapping]] = None

    @property
    def is_empty(self) -> bool:
        return not self.values and self.data_mappings is None

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.values.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self.values

    def as_record(self) -> Dict[str, Any]:
        """Properties as record fields, ready to overlay onto a record."""
        record: Dict[str, Any] = dict(self.values)
        if self.data_mappings is not None:
            record["dataMappings"] = list(self.data_mappings)
        return record


def get_boolean_from_string(value: Any) -> bool:
    """Parse the ``"true"`` keyword; anything but ``True``/``"true"`` is false."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value == "true"
    return False


def normalize_storage_id(storage_id: Optional[str], config: ParserConfig) -> Optional[str]:
    """Map the reserved process-instance storage id to the empty string."""
    if storage_id == config.process_instance_storage_id:
        return ""
    return storage_id


def _accumulate(
    containers: Iterable[BpmnNode], config: ParserConfig
) -> Tuple[Dict[str, str], Dict[str, str]]:
    values: Dict[str, str] = {}
    mapping_entries: Dict[str, str] = {}
    for container in containers:
        for prop in container.iter_children(config.property_tag):
            name = prop.get("name")
            if not name:
                continue
            value = prop.get("value") or ""
            if name.startswith((config.in_data_prefix, config.out_data_prefix)):
                mapping_entries[name] = value
            else:
                values[name] = value
    return values, mapping_entries


def decode_data_mappings(
    entries: Mapping[str, str], config: Optional[ParserConfig] = None
) -> List[DataMapping]:
    """Decode indexed ``INDATA``/``OUTDATA`` entries into data mappings.

    Every ``INDATAID*``/``OUTDATAID*`` key names one mapping; its value is the
    mapping id used to find the ``<DIR>_<id>_dataPath`` and
    ``<DIR>_<id>_dataStorageId`` companions.

    Raises:
        KeyError: If a companion key is missing
    """
    config = config or ParserConfig()
    mappings: List[DataMapping] = []
    for key, mapping_id in entries.items():
        if key.startswith(config.in_data_id_prefix):
            direction, prefix = Direction.IN, config.in_data_prefix
        elif key.startswith(config.out_data_id_prefix):
            direction, prefix = Direction.OUT, config.out_data_prefix
        else:
            continue

        data_path = entries[f"{prefix}_{mapping_id}_dataPath"]
        data_storage_id = entries[f"{prefix}_{mapping_id}_dataStorageId"]
        mappings.append(
            DataMapping(
                id=mapping_id,
                direction=direction,
                data_path=data_path,
                data_storage_id=normalize_storage_id(data_storage_id, config),
            )
        )
    return mappings


def encode_data_mappings(
    mappings: Iterable[DataMapping], config: Optional[ParserConfig] = None
) -> Dict[str, str]:
    """Encode data mappings as indexed extension properties.

    Inverse of ``decode_data_mappings``.
    """
    config = config or ParserConfig()
    entries: Dict[str, str] = {}
    for mapping in mappings:
        prefix = config.in_data_prefix if mapping.direction == Direction.IN else config.out_data_prefix
        entries[f"{prefix}ID_{mapping.id}"] = mapping.id
        entries[f"{prefix}_{mapping.id}_dataPath"] = mapping.data_path
        entries[f"{prefix}_{mapping.id}_dataStorageId"] = (
            mapping.data_storage_id or config.process_instance_storage_id
        )
    return entries


def read_extension_properties(
    node: BpmnNode, config: Optional[ParserConfig] = None
) -> Optional[ExtensionProperties]:
    """Read the extension properties attached to a node.

    Args:
        node: Any BPMN element
        config: Parser configuration

    Returns:
        ``None`` if the node has no extension block or the block holds no
        properties container. ``data_mappings`` is ``None`` unless indexed
        data-mapping keys were present.

    Raises:
        MalformedExtension: If the data-mapping entries cannot be decoded
    """
    config = config or ParserConfig()
    extension = node.find(config.extension_container_tag)
    if extension is None:
        return None
    containers = extension.find_all(config.properties_tag)
    if not containers:
        return None

    try:
        values, mapping_entries = _accumulate(containers, config)
        data_mappings = (
            decode_data_mappings(mapping_entries, config) if mapping_entries else None
        )
    except BpmnParseError:
        raise
    except KeyError as e:
        raise MalformedExtension(
            f"Failed to parse extensions of element {node.id}: missing data mapping property {e}",
            element_id=node.id,
            line=node.line,
        ) from e
    except Exception as e:
        raise MalformedExtension(
            f"Failed to parse extensions of element {node.id}: {e}",
            element_id=node.id,
            line=node.line,
        ) from e

    logger.debug(
        f"Read {len(values)} extension properties from {node.id} "
        f"({len(data_mappings or [])} data mappings)"
    )
    return ExtensionProperties(values=values, data_mappings=data_mappings)


def build_record(record_type: Type[RecordT], data: Mapping[str, Any], node: BpmnNode) -> RecordT:
    """Validate a record whose fields come from a node's extension properties.

    Raises:
        MalformedExtension: If a property value does not fit its field
    """
    try:
        return record_type.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(map(str, error['loc']))}: {error['msg']}" for error in e.errors()
        )
        raise MalformedExtension(
            f"Invalid extension properties on element {node.id or node.type} "
            f"(line {node.line}): {problems}",
            element_id=node.id,
            line=node.line,
        ) from e


__all__ = [
    "build_record",
    "ExtensionProperties",
    "get_boolean_from_string",
    "normalize_storage_id",
    "decode_data_mappings",
    "encode_data_mappings",
    "read_extension_properties",
]

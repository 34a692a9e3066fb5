"""
BPMN Element Tree

Turns BPMN 2.0 XML text into a read-only tree of ``BpmnNode`` records.
Tags and attributes are addressed by local name, so documents produced by
different modelers (``bpmn:``/``bpmn2:``/default namespace, ``camunda:``
extension properties) read the same way.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple, Union

from lxml import etree

from bpmn_model_parser.core.errors import DocumentParseError

logger = logging.getLogger(__name__)

DEFINITIONS_TAG = "definitions"


@dataclass(frozen=True)
class BpmnNode:
    """Immutable view of one XML element."""

    type: str
    attributes: Dict[str, str] = field(default_factory=dict)
    children: Tuple["BpmnNode", ...] = ()
    text: str = ""
    line: Optional[int] = None

    @property
    def id(self) -> str:
        return self.attributes.get("id", "")

    @property
    def name(self) -> str:
        return self.attributes.get("name", "")

    def get(self, attribute: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(attribute, default)

    def find(self, node_type: str) -> Optional["BpmnNode"]:
        """First direct child of the given type."""
        return next(self.iter_children(node_type), None)

    def find_all(self, node_type: str) -> List["BpmnNode"]:
        return list(self.iter_children(node_type))

    def iter_children(self, node_type: str) -> Iterator["BpmnNode"]:
        return (child for child in self.children if child.type == node_type)

    def child_texts(self, node_type: str) -> List[str]:
        return [child.text for child in self.iter_children(node_type) if child.text]

    # Flow node references

    @property
    def incoming(self) -> List[str]:
        return self.child_texts("incoming")

    @property
    def outgoing(self) -> List[str]:
        return self.child_texts("outgoing")

    @property
    def source_ref(self) -> str:
        return self.attributes.get("sourceRef", "")

    @property
    def target_ref(self) -> str:
        return self.attributes.get("targetRef", "")

    @property
    def default(self) -> str:
        return self.attributes.get("default", "")

    @property
    def flow_node_refs(self) -> List[str]:
        return self.child_texts("flowNodeRef")

    @property
    def has_loop_characteristics(self) -> bool:
        # standardLoopCharacteristics or multiInstanceLoopCharacteristics
        return any(child.type.endswith("LoopCharacteristics") for child in self.children)

    @property
    def extension_elements(self) -> Optional["BpmnNode"]:
        return self.find("extensionElements")

    @property
    def has_extension_elements(self) -> bool:
        return self.extension_elements is not None


def _local_name(tag: str) -> str:
    return etree.QName(tag).localname


def _to_node(element: etree._Element) -> BpmnNode:
    children = tuple(
        _to_node(child) for child in element if isinstance(child.tag, str)
    )
    return BpmnNode(
        type=_local_name(element.tag),
        attributes={_local_name(key): value for key, value in element.attrib.items()},
        children=children,
        text=(element.text or "").strip(),
        line=element.sourceline,
    )


def parse_xml(source: Union[str, bytes]) -> BpmnNode:
    """Parse BPMN XML into a ``BpmnNode`` tree rooted at ``definitions``.

    Entity expansion and network access are disabled.

    Args:
        source: XML document as text or UTF-8 bytes

    Returns:
        Root ``definitions`` node

    Raises:
        DocumentParseError: If the text is not well-formed XML or the root is
            not a BPMN definitions element
    """
    if isinstance(source, str):
        source = source.encode("utf-8")
    if not source.strip():
        raise DocumentParseError("Failed to parse xml: document is empty")

    parser = etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
    )
    try:
        root = etree.fromstring(source, parser=parser)
    except etree.XMLSyntaxError as e:
        raise DocumentParseError(f"Failed to parse xml: {e}") from e

    root_type = _local_name(root.tag)
    if root_type != DEFINITIONS_TAG:
        raise DocumentParseError(
            f"Failed to parse xml: expected root element '{DEFINITIONS_TAG}', found '{root_type}'"
        )

    tree = _to_node(root)
    logger.debug(f"Parsed BPMN document with {len(tree.children)} root elements")
    return tree


__all__ = ["BpmnNode", "parse_xml"]

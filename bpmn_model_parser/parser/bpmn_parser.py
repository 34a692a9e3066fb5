"""
BPMN Parser Façade

Coordinates the compilation stages behind one object:

1. XML parsing (lxml, off the event loop)
2. Model extraction
3. Process extraction (participants, then the flow graph)
4. Per-process semantic validation

A parser holds the outcome of its last ``parse`` call. The outcome is
replaced all at once: after a failure every accessor reports nothing rather
than a partially compiled model.
"""

import asyncio
import logging
from typing import List, Optional, Union

from bpmn_model_parser.core.config import ParserConfig
from bpmn_model_parser.core.errors import BpmnParseError, InternalParserError
from bpmn_model_parser.core.observability import Timer, span
from bpmn_model_parser.core.xml_tree import BpmnNode, parse_xml
from bpmn_model_parser.models.process_model import Model, ParseResult, Process
from bpmn_model_parser.stages.model_extractor import extract_model, extract_processes
from bpmn_model_parser.stages.process_validator import validate_process

logger = logging.getLogger(__name__)


class BpmnParser:
    """
    Compiles a BPMN 2.0 collaboration document into a process model.

    Usage:
        parser = BpmnParser()
        await parser.parse(xml)
        model = parser.get_model()
        processes = parser.get_processes()
    """

    def __init__(self, config: Optional[ParserConfig] = None):
        """Initialize the parser.

        Args:
            config: Parser configuration, defaults to ``ParserConfig()``
        """
        self.config = config or ParserConfig()
        self._raw_tree: Optional[BpmnNode] = None
        self._result: Optional[ParseResult] = None

    async def parse(self, xml: Union[str, bytes]) -> ParseResult:
        """Parse and compile a BPMN document.

        Args:
            xml: BPMN 2.0 XML text

        Returns:
            ParseResult with the model and its validated processes

        Raises:
            BpmnParseError: If the document is invalid (422) or the parser
                fails unexpectedly (500)
        """
        self._reset()
        try:
            with span("bpmn.parse_xml"), Timer("parse_xml"):
                definitions = await asyncio.to_thread(parse_xml, xml)
        except BpmnParseError:
            raise
        except Exception as e:
            logger.exception("Unexpected failure while parsing XML")
            raise InternalParserError(f"Unexpected parser failure: {e}") from e

        return self.parse_tree(definitions)

    def parse_tree(self, definitions: BpmnNode) -> ParseResult:
        """Compile an already parsed ``definitions`` tree.

        Raises:
            BpmnParseError: On the first structural error, or with every
                semantic violation of the first invalid process
        """
        self._reset()
        try:
            with span("bpmn.compile", {"bpmn.definitions_id": definitions.id}):
                with span("bpmn.extract_model"), Timer("extract_model"):
                    model = extract_model(definitions, self.config)

                with span("bpmn.extract_processes"), Timer("extract_processes"):
                    processes = extract_processes(definitions, self.config)

                validated: List[Process] = []
                for process in processes:
                    with span("bpmn.validate_process", {"bpmn.process_id": process.id}):
                        validated.append(
                            validate_process(process, model.data_store_fields, self.config)
                        )
        except BpmnParseError as e:
            logger.warning(f"BPMN document rejected: {e.message}")
            raise
        except Exception as e:
            logger.exception("Unexpected failure while compiling BPMN document")
            raise InternalParserError(f"Unexpected parser failure: {e}") from e

        self._raw_tree = definitions
        self._result = ParseResult(model=model, processes=validated)
        logger.info(f"Parsed model {model.id} with {len(validated)} processes")
        return self._result

    def _reset(self) -> None:
        self._raw_tree = None
        self._result = None

    def get_model(self) -> Optional[Model]:
        return self._result.model if self._result else None

    def get_processes(self) -> List[Process]:
        return list(self._result.processes) if self._result else []

    def get_raw_tree(self) -> Optional[BpmnNode]:
        """The parsed element tree of the last successful parse."""
        return self._raw_tree

    def result(self) -> Optional[ParseResult]:
        return self._result


def get_new_parser(config: Optional[ParserConfig] = None) -> BpmnParser:
    """Create a fresh parser; parsers are not shared between documents."""
    return BpmnParser(config)


async def parse_bpmn(
    xml: Union[str, bytes], config: Optional[ParserConfig] = None
) -> ParseResult:
    """Parse a document with a throwaway parser."""
    return await get_new_parser(config).parse(xml)


__all__ = ["BpmnParser", "get_new_parser", "parse_bpmn"]

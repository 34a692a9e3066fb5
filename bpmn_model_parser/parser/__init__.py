"""BPMN parser façade."""

from bpmn_model_parser.parser.bpmn_parser import BpmnParser, get_new_parser, parse_bpmn

__all__ = ["BpmnParser", "get_new_parser", "parse_bpmn"]

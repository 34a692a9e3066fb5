"""
BPMN Model Parser Tools

Command-line entry point for the BPMN model parser.
"""

from bpmn_model_parser.tools.cli import cli

__all__ = ["cli"]

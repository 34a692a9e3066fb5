"""
BPMN Model Parser CLI Interface

Command-line tool for compiling BPMN 2.0 collaboration documents into
process models and for checking documents without printing the model.
"""

import asyncio
import json
import logging
import sys
from typing import Optional

import click

from bpmn_model_parser.core.config import ParserConfig
from bpmn_model_parser.core.errors import BpmnParseError, ProcessValidationError
from bpmn_model_parser.core.observability import LogLevel, ObservabilityConfig, ObservabilityManager
from bpmn_model_parser.parser.bpmn_parser import BpmnParser

# Setup logging
logger = logging.getLogger(__name__)


@click.group()
def cli():
    """BPMN Model Parser CLI - Compile BPMN 2.0 documents into process models."""
    pass


@cli.command()
@click.argument("bpmn_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Output file path for the JSON process model",
)
@click.option(
    "--process",
    "process_id",
    type=str,
    help="Only output the process with this id",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--quiet", "-q", is_flag=True, help="Only log warnings and errors")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON lines")
def parse(
    bpmn_file: str,
    output: Optional[str],
    process_id: Optional[str],
    verbose: bool,
    quiet: bool,
    json_logs: bool,
) -> None:
    """
    Compile a BPMN XML file and print the process model as JSON.

    \b
    Examples:
        bpmn-model-parser parse model.bpmn
        bpmn-model-parser parse model.bpmn -o model.json
        bpmn-model-parser parse model.bpmn --process Process_1
    """
    config = _setup(verbose, quiet, json_logs)
    result = _run_parser(bpmn_file, config)

    if process_id:
        process = result.get_process(process_id)
        if process is None:
            click.echo(f"❌ Process {process_id} not found in {bpmn_file}", err=True)
            sys.exit(1)
        payload = process.to_dict()
    else:
        payload = result.to_dict()

    _output_json(payload, output)


@cli.command()
@click.argument("bpmn_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--quiet", "-q", is_flag=True, help="Only log warnings and errors")
def validate(bpmn_file: str, verbose: bool, quiet: bool) -> None:
    """
    Validate a BPMN XML file without printing the model.

    \b
    Examples:
        bpmn-model-parser validate model.bpmn
    """
    config = _setup(verbose, quiet, json_logs=False)
    result = _run_parser(bpmn_file, config)

    click.echo(f"✓ {bpmn_file} is valid")
    click.echo(f"Model: {result.model.id} v{'.'.join(map(str, result.model.version))}")
    for process in result.processes:
        click.echo(
            f"Process: {process.id} ({len(process.activity_map)} activities, "
            f"{len(process.transitions)} transitions)"
        )


# ==================
# Helper Functions
# ==================


def _setup(verbose: bool, quiet: bool, json_logs: bool) -> ParserConfig:
    """Build the parser config and configure logging for one invocation."""
    config = ParserConfig.from_env()
    if verbose:
        log_level = LogLevel.DEBUG
    elif quiet:
        log_level = LogLevel.WARNING
    else:
        log_level = LogLevel(config.log_level)
    config.log_level = log_level.value

    ObservabilityManager.initialize(
        ObservabilityConfig(
            service_name="bpmn-model-parser-cli",
            log_level=log_level,
            json_logs=json_logs,
        ),
        reset=True,
    )
    return config


def _run_parser(bpmn_file: str, config: ParserConfig):
    """Parse a file, exiting with status 1 on any parser error."""
    try:
        with open(bpmn_file, "rb") as f:
            xml = f.read()
    except IOError as e:
        click.echo(f"Error reading input file: {e}", err=True)
        sys.exit(1)

    parser = BpmnParser(config)
    try:
        return asyncio.run(parser.parse(xml))
    except ProcessValidationError as e:
        click.echo(f"❌ Process {e.process_id} is invalid ({e.status_code}):", err=True)
        for violation in e.validation_errors:
            click.echo(f"   - {violation}", err=True)
        sys.exit(1)
    except BpmnParseError as e:
        click.echo(f"❌ {type(e).__name__} ({e.status_code}): {e.message}", err=True)
        sys.exit(1)


def _output_json(payload: dict, output_file: Optional[str]) -> None:
    """Write JSON to a file, or to stdout."""
    text = json.dumps(payload, indent=2)
    if output_file:
        with open(output_file, "w") as f:
            f.write(text)
        click.echo(f"Process model written to: {output_file}")
    else:
        click.echo(text)


if __name__ == "__main__":
    cli()

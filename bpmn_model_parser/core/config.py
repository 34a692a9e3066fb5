"""
Parser Configuration

Value tables handed to every parsing stage: reserved identifiers, extension
key prefixes and the code tables used for validation.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Tuple

from bpmn_model_parser.models.process_model import (
    ComparisonOperator,
    DataType,
    ParameterType,
    TaskBehavior,
)

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _default_parameter_data_types() -> Dict[int, DataType]:
    return {
        ParameterType.BOOLEAN: DataType.BOOLEAN,
        ParameterType.STRING: DataType.STRING,
        ParameterType.NUMBER: DataType.UINT,
        ParameterType.DATE: DataType.UINT,
        ParameterType.DATETIME: DataType.UINT,
        ParameterType.MONETARY_AMOUNT: DataType.UINT,
        ParameterType.USER_ORGANIZATION: DataType.ADDRESS,
        ParameterType.CONTRACT_ADDRESS: DataType.ADDRESS,
        ParameterType.SIGNING_PARTY: DataType.ADDRESS,
    }


@dataclass
class ParserConfig:
    """Configuration for the BPMN parser."""

    # Reserved data stores
    process_instance_storage_id: str = "PROCESS_INSTANCE"
    agreement_storage_id: str = "agreement"
    agreement_field: str = "agreement"
    agreement_field_type: ParameterType = ParameterType.CONTRACT_ADDRESS

    # Extension block layout
    extension_container_tag: str = "extensionElements"
    properties_tag: str = "properties"
    property_tag: str = "property"
    in_data_prefix: str = "INDATA"
    out_data_prefix: str = "OUTDATA"

    # Code tables
    task_behaviors: FrozenSet[int] = frozenset(int(b) for b in TaskBehavior)
    comparison_operators: FrozenSet[int] = frozenset(int(op) for op in ComparisonOperator)
    parameter_data_types: Dict[int, DataType] = field(
        default_factory=_default_parameter_data_types
    )

    log_level: str = "INFO"

    @property
    def in_data_id_prefix(self) -> str:
        return f"{self.in_data_prefix}ID"

    @property
    def out_data_id_prefix(self) -> str:
        return f"{self.out_data_prefix}ID"

    @property
    def data_store_ids(self) -> Tuple[str, str]:
        """Data stores every model must declare, in extraction order."""
        return (self.process_instance_storage_id, self.agreement_storage_id)

    @classmethod
    def from_env(cls) -> "ParserConfig":
        """Create parser config from environment variables.

        An unknown ``BPMN_PARSER_LOG_LEVEL`` falls back to ``INFO``.

        Returns:
            ParserConfig instance
        """
        log_level = os.getenv("BPMN_PARSER_LOG_LEVEL", "INFO").strip().upper()
        if log_level not in LOG_LEVELS:
            logger.warning(f"Unknown log level {log_level!r}, using INFO")
            log_level = "INFO"
        return cls(log_level=log_level)

"""
Parser Errors

Every failure raised while compiling a BPMN document derives from
``BpmnParseError`` and carries an HTTP-style status hint: 422 when the
document itself is at fault, 500 for unexpected internal failures.

Structural errors are raised as soon as they are detected. Semantic
violations of one process are gathered into a single
``ProcessValidationError``.
"""

import json
from typing import Any, Dict, List, Optional


class BpmnParseError(Exception):
    """Base class for all parser failures."""

    status_code: int = 422

    def __init__(
        self, message: str, element_id: Optional[str] = None, line: Optional[int] = None
    ):
        super().__init__(message)
        self.message = message
        self.element_id = element_id
        self.line = line

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "error": type(self).__name__,
            "message": self.message,
            "status_code": self.status_code,
        }
        if self.element_id:
            data["element_id"] = self.element_id
        if self.line is not None:
            data["line"] = self.line
        return data


class BadDataError(BpmnParseError):
    """The document is invalid; the caller must fix it."""

    status_code = 422


class InternalParserError(BpmnParseError):
    """Unexpected failure inside the parser."""

    status_code = 500


# Structural errors


class DocumentParseError(BadDataError):
    """The text is not well-formed BPMN XML."""


class MalformedDocument(BadDataError):
    """A required element or attribute is missing."""


class MalformedExtension(BadDataError):
    """An extension block could not be decoded."""


class InvalidTaskBehavior(BadDataError):
    pass


class NoAssigneeFound(BadDataError):
    pass


class MissingApplication(BadDataError):
    pass


class MissingProcessId(BadDataError):
    pass


class GatewayMissingTransitions(BadDataError):
    """A gateway has no incoming or no outgoing transition."""


class DegenerateGateway(BadDataError):
    """A gateway with one incoming and one outgoing transition neither forks nor joins."""


class IncompleteCondition(BadDataError):
    pass


class DanglingDefaultTransition(BadDataError):
    """A gateway default points at a transition that does not exist."""


class MissingDataStore(BadDataError):
    pass


class InvalidAgreementField(BadDataError):
    pass


class InvalidParameterType(BadDataError):
    pass


class NoModelDetails(BadDataError):
    pass


class InvalidVersion(BadDataError):
    pass


# Semantic errors


class ProcessValidationError(BadDataError):
    """One or more semantic violations found in a process."""

    def __init__(self, process_id: str, validation_errors: List[str]):
        message = (
            f"Process {process_id} has one or more validation errors: "
            f"{json.dumps(validation_errors)}"
        )
        super().__init__(message, element_id=process_id)
        self.process_id = process_id
        self.validation_errors = list(validation_errors)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["validation_errors"] = self.validation_errors
        return data


__all__ = [
    "BpmnParseError",
    "BadDataError",
    "InternalParserError",
    "DocumentParseError",
    "MalformedDocument",
    "MalformedExtension",
    "InvalidTaskBehavior",
    "NoAssigneeFound",
    "MissingApplication",
    "MissingProcessId",
    "GatewayMissingTransitions",
    "DegenerateGateway",
    "IncompleteCondition",
    "DanglingDefaultTransition",
    "MissingDataStore",
    "InvalidAgreementField",
    "InvalidParameterType",
    "NoModelDetails",
    "InvalidVersion",
    "ProcessValidationError",
]

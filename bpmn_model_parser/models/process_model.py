"""
Process Model Domain Records

Pydantic models describing the compiled form of a BPMN 2.0 collaboration:
data-store fields, participants, activities, gateways and transitions.

Attributes are snake_case in Python and camelCase on the wire, so
``to_dict()`` yields the shape consumed by the downstream execution engine
(``activityType``, ``dataMappings``, ``lhDataPath``...). Optional values that
were never set are omitted from ``to_dict()`` output.
"""

from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TaskBehavior(IntEnum):
    """How an activity interacts with the runtime when it is reached."""

    SEND = 0
    SENDRECEIVE = 1
    RECEIVE = 2


class ActivityType(IntEnum):
    """Activity kinds."""

    TASK = 0
    SUBPROCESS = 1


class TaskType(IntEnum):
    """Task kinds."""

    NONE = 0
    USER = 1
    SERVICE = 2
    EVENT = 3


class GatewayType(IntEnum):
    """Gateway kinds."""

    XOR = 0
    OR = 1
    AND = 2


class Direction(IntEnum):
    """Data mapping direction."""

    IN = 0
    OUT = 1


class ComparisonOperator(IntEnum):
    """Comparators usable in a transition condition."""

    EQ = 0
    LT = 1
    GT = 2
    LTE = 3
    GTE = 4
    NEQ = 5


class ParameterType(IntEnum):
    """Parameter types a data-store field may be declared with."""

    BOOLEAN = 0
    STRING = 1
    NUMBER = 2
    DATE = 3
    DATETIME = 4
    MONETARY_AMOUNT = 5
    USER_ORGANIZATION = 6
    CONTRACT_ADDRESS = 7
    SIGNING_PARTY = 8


class DataType(IntEnum):
    """Runtime data types that parameter types are stored as."""

    BOOLEAN = 1
    STRING = 2
    UINT = 8
    INT = 18
    ADDRESS = 40
    BYTES32 = 59


class ProcessModelRecord(BaseModel):
    """Base class for all compiled records."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase wire shape, dropping unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DataMapping(ProcessModelRecord):
    """Binding between an activity's IN/OUT slot and a data-store field."""

    id: str = Field(..., description="Mapping identifier")
    direction: Direction = Field(..., description="IN or OUT")
    data_path: str = Field("", description="Data path inside the storage")
    data_storage_id: str = Field(
        "", description="Storage id; empty string means the process instance itself"
    )


class Activity(ProcessModelRecord):
    """Task, user task, send task, service task or sub-process.

    All kinds share one shape; fields that are irrelevant to a kind hold
    empty-string or false defaults. Extension properties without a dedicated
    field (``completionFunction`` for example) are kept as extra attributes.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Activity id")
    name: str = Field("", description="Display name")
    assignee: str = Field("", description="Participant id performing a user task")
    activity_type: ActivityType = Field(ActivityType.TASK)
    task_type: TaskType = Field(TaskType.NONE)
    behavior: TaskBehavior = Field(TaskBehavior.SEND)
    multi_instance: bool = Field(False)
    application: str = Field("", description="Application bound to the activity")
    sub_process_model_id: str = Field("", description="Model holding the sub-process")
    sub_process_definition_id: str = Field("", description="Sub-process definition id")
    data_mappings: Optional[List[DataMapping]] = Field(None)


class Gateway(ProcessModelRecord):
    """Exclusive (XOR) or parallel (AND) gateway."""

    id: str
    type: GatewayType
    incoming: List[str] = Field(default_factory=list, description="Incoming transition ids")
    outgoing: List[str] = Field(default_factory=list, description="Outgoing transition ids")


class DefaultTransition(ProcessModelRecord):
    """Default edge of an XOR gateway and the activity it leads to."""

    gateway: str
    transition: str
    activity: Optional[str] = Field(None, description="Target of the transition, once resolved")


class Condition(ProcessModelRecord):
    """Guard on a transition comparing a data-store field with a value."""

    model_config = ConfigDict(extra="allow")

    lh_data_storage_id: str = Field("", description="Storage of the left-hand field")
    lh_data_path: str = Field(..., description="Data path of the left-hand field")
    operator: Union[int, str] = Field(..., description="Comparison operator code")
    rh_value: Any = Field(None, description="Right-hand constant")
    rh_data_storage_id: Optional[str] = Field(None)
    data_type: Optional[DataType] = Field(
        None, description="Runtime type of the left-hand field, set by validation"
    )


class Transition(ProcessModelRecord):
    """Sequence flow between two flow nodes."""

    id: str
    source: str
    target: str
    condition: Optional[Condition] = None


class Participant(ProcessModelRecord):
    """Lane that carries performer information."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    tasks: List[str] = Field(default_factory=list, description="Flow node ids in the lane")
    conditional_performer: Optional[bool] = None


class DataStoreField(ProcessModelRecord):
    """Typed field declared on one of the reserved data stores."""

    data_storage_id: str
    data_path: str
    parameter_type: ParameterType


class Process(ProcessModelRecord):
    """A compiled BPMN process."""

    id: str
    name: str = ""
    interface: str = ""
    participants: List[Participant] = Field(default_factory=list)
    tasks: List[Activity] = Field(default_factory=list)
    user_tasks: List[Activity] = Field(default_factory=list)
    send_tasks: List[Activity] = Field(default_factory=list)
    service_tasks: List[Activity] = Field(default_factory=list)
    sub_processes: List[Activity] = Field(default_factory=list)
    xor_gateways: List[Gateway] = Field(default_factory=list)
    and_gateways: List[Gateway] = Field(default_factory=list)
    transitions: List[Transition] = Field(default_factory=list)
    activity_map: Dict[str, str] = Field(
        default_factory=dict, description="Activity id to display name"
    )
    default_transitions: Optional[List[DefaultTransition]] = None

    @property
    def activities(self) -> List[Activity]:
        """All activities in collection order."""
        return [
            *self.tasks,
            *self.user_tasks,
            *self.send_tasks,
            *self.service_tasks,
            *self.sub_processes,
        ]


class Model(ProcessModelRecord):
    """Collaboration-level metadata of a process model."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    version: Tuple[int, int, int]
    private: bool = False
    data_store_fields: List[DataStoreField] = Field(default_factory=list)


class ParseResult(BaseModel):
    """Model plus processes produced by one parse."""

    model: Model
    processes: List[Process] = Field(default_factory=list)

    def get_process(self, process_id: str) -> Optional[Process]:
        return next((p for p in self.processes if p.id == process_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model.to_dict(),
            "processes": [process.to_dict() for process in self.processes],
        }


__all__ = [
    "TaskBehavior",
    "ActivityType",
    "TaskType",
    "GatewayType",
    "Direction",
    "ComparisonOperator",
    "ParameterType",
    "DataType",
    "ProcessModelRecord",
    "DataMapping",
    "Activity",
    "Gateway",
    "DefaultTransition",
    "Condition",
    "Transition",
    "Participant",
    "DataStoreField",
    "Process",
    "Model",
    "ParseResult",
]

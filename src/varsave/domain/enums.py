"""Domain enums — registry value types, notification kinds, and loop phases."""

from enum import Enum, unique


@unique
class VarType(Enum):
    """Typed value kinds held by the variable registry."""

    STR = "str"
    INT16 = "int16"
    UINT16 = "uint16"
    INT32 = "int32"
    UINT32 = "uint32"
    INT64 = "int64"
    UINT64 = "uint64"
    FLOAT = "float"
    BLOB = "blob"


@unique
class EventKind(Enum):
    """Notification kinds delivered on the registry event channel."""

    MODIFIED = "modified"
    CALC = "calc"
    VALIDATE = "validate"
    PRINT = "print"


@unique
class LoopPhase(Enum):
    """Trigger loop states. WAITING_FOR_EVENT is both initial and recurring."""

    WAITING_FOR_EVENT = "waiting_for_event"
    SAVING = "saving"

"""Domain types — NewType aliases for type-safe identifiers."""

from typing import NewType

VarHandle = NewType("VarHandle", int)
InstanceId = NewType("InstanceId", int)

NO_INSTANCE: InstanceId = InstanceId(0)

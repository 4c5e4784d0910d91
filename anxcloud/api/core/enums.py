"""Core enumerations shared by the dispatcher and resource bindings.

Architecture:
    The Operation enum is threaded through every generic API call inside the
    OperationContext. Resource bindings compare against its members to decide
    which endpoint, body or response shape applies.

Design Decisions:
    - String enum: values serialize cleanly into log records and equal the
      plain strings ("Get", "List", ...) used by callers
    - Single-object helper: the dispatcher and the identifier resolver share
      one definition of which operations address a single identified object
"""

from enum import Enum


class Operation(str, Enum):
    """Operation to do on the engine with an object."""

    # Retrieve the given identified object
    GET = "Get"

    # Create the given object
    CREATE = "Create"

    # Update the given identified object with the newly given data
    UPDATE = "Update"

    # Destroy the identified object
    DESTROY = "Destroy"

    # Retrieve objects with attributes matching the ones in the given object
    LIST = "List"

    @property
    def is_single_object(self) -> bool:
        """Whether the operation addresses one identified object."""
        return self in (Operation.GET, Operation.UPDATE, Operation.DESTROY)

    def __str__(self) -> str:
        return self.value

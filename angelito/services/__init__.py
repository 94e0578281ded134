from angelito.services.assignment import (
    AssignmentError,
    InvalidInputError,
    generate_assignment,
    is_valid_assignment,
)
from angelito.services.group_flow import (
    CorruptedAssignmentError,
    GroupError,
    GroupNotFoundError,
    PermissionDeniedError,
)

__all__ = [
    "AssignmentError",
    "InvalidInputError",
    "generate_assignment",
    "is_valid_assignment",
    "CorruptedAssignmentError",
    "GroupError",
    "GroupNotFoundError",
    "PermissionDeniedError",
]

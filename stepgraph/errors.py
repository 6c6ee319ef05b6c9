"""Error taxonomy for step graph operations.

Services raise these; the HTTP layer maps them to status codes:
- NotFound -> 404
- DeletionBlocked / ReorderBlocked / StepValidationError -> 400
- StoreFailure -> 500
"""

from typing import Sequence

from .services.messages import (
    format_deletion_blocked,
    format_reorder_blocked_by_dependents,
    format_reorder_blocked_by_dependencies,
)


class StepGraphError(Exception):
    """Base class for all step graph errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(StepGraphError):
    pass


class StepValidationError(StepGraphError):
    """User-correctable input problem, keyed by form field."""

    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(errors.values()))
        self.errors = errors


class DeletionBlocked(StepGraphError):
    """A step cannot be deleted while later steps still use its output."""

    def __init__(self, deleted_step_num: int, blocking_step_nums: Sequence[int]):
        self.deleted_step_num = deleted_step_num
        self.blocking_step_nums = sorted(blocking_step_nums)
        super().__init__(format_deletion_blocked(deleted_step_num, self.blocking_step_nums))


class ReorderBlocked(StepGraphError):
    """Moving a step would put a consumer ahead of one of its producers.

    `kind` is "dependents" when later steps use the moved step's output and
    "dependencies" when the moved step uses output of the steps in the way.
    """

    def __init__(self, step_num: int, target_step_num: int, blocking_step_nums: Sequence[int], kind: str):
        self.step_num = step_num
        self.target_step_num = target_step_num
        self.blocking_step_nums = sorted(blocking_step_nums)
        self.kind = kind
        if kind == "dependents":
            message = format_reorder_blocked_by_dependents(step_num, target_step_num, self.blocking_step_nums)
        else:
            message = format_reorder_blocked_by_dependencies(step_num, target_step_num, self.blocking_step_nums)
        super().__init__(message)


class StoreFailure(StepGraphError):
    """The persistence layer failed for infrastructure reasons."""
    pass

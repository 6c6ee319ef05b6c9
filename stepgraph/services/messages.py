"""User-facing sentences for blocked step operations.

All messages reference step numbers only, never step titles.
"""

from typing import Sequence


def _step_list(step_nums: Sequence[int]) -> str:
    """Render "Step 2", "Steps 2 and 3" or "Steps 2, 3, and 4"."""
    if not step_nums:
        raise ValueError("At least one step number is required")

    nums = [str(n) for n in step_nums]
    if len(nums) == 1:
        return f"Step {nums[0]}"
    if len(nums) == 2:
        return f"Steps {nums[0]} and {nums[1]}"
    # Oxford comma before the final "and"
    return f"Steps {', '.join(nums[:-1])}, and {nums[-1]}"


def format_deletion_blocked(deleted_step_num: int, blocking_step_nums: Sequence[int]) -> str:
    """
    Build the message shown when a step still has consumers.

    >>> format_deletion_blocked(1, [2, 3, 4])
    'Cannot delete Step 1 because it is used by Steps 2, 3, and 4'
    """
    return f"Cannot delete Step {deleted_step_num} because it is used by {_step_list(blocking_step_nums)}"


def format_reorder_blocked_by_dependents(step_num: int, target_step_num: int, blocking_step_nums: Sequence[int]) -> str:
    verb = "uses" if len(blocking_step_nums) == 1 else "use"
    return (
        f"Cannot move Step {step_num} to position {target_step_num} because "
        f"{_step_list(blocking_step_nums)} {verb} its output"
    )


def format_reorder_blocked_by_dependencies(step_num: int, target_step_num: int, blocking_step_nums: Sequence[int]) -> str:
    return (
        f"Cannot move Step {step_num} to position {target_step_num} because "
        f"it uses output from {_step_list(blocking_step_nums)}"
    )

"""Field limits and validators for step editing.

Validators return an error message, or None when the value is acceptable.
Text limits apply after trimming.
"""

from typing import Iterable, Optional

STEP_TITLE_MAX_LENGTH = 200
STEP_DESCRIPTION_MAX_LENGTH = 5000
UNIT_NAME_MAX_LENGTH = 50
INGREDIENT_NAME_MAX_LENGTH = 100

QUANTITY_MIN = 0.001
QUANTITY_MAX = 99999

STEP_CONTENT_REQUIREMENT_ERROR = "Add at least 1 ingredient or 1 step output use before saving this step."


def validate_step_title(step_title: Optional[str]) -> Optional[str]:
    if not step_title:
        return None
    if len(step_title.strip()) > STEP_TITLE_MAX_LENGTH:
        return "Step title must be 200 characters or less"
    return None


def validate_step_description(description: Optional[str]) -> Optional[str]:
    trimmed = (description or "").strip()
    if not trimmed:
        return "Step description is required"
    if len(trimmed) > STEP_DESCRIPTION_MAX_LENGTH:
        return "Description must be 5,000 characters or less"
    return None


def validate_duration(duration: Optional[int]) -> Optional[str]:
    if duration is not None and duration < 0:
        return "Duration must be zero or more minutes"
    return None


def validate_quantity(quantity: float) -> Optional[str]:
    # NaN fails both comparisons, so check it explicitly
    if quantity != quantity or quantity in (float("inf"), float("-inf")):
        return "Quantity must be a valid number"
    if quantity < QUANTITY_MIN or quantity > QUANTITY_MAX:
        return "Quantity must be between 0.001 and 99,999"
    return None


def validate_unit_name(unit: str) -> Optional[str]:
    trimmed = (unit or "").strip()
    if not trimmed:
        return "Unit name is required"
    if len(trimmed) > UNIT_NAME_MAX_LENGTH:
        return "Unit name must be 50 characters or less"
    return None


def validate_ingredient_name(name: str) -> Optional[str]:
    trimmed = (name or "").strip()
    if not trimmed:
        return "Ingredient name is required"
    if len(trimmed) > INGREDIENT_NAME_MAX_LENGTH:
        return "Ingredient name must be 100 characters or less"
    return None


def validate_step_references(
    uses_steps: Iterable[int], step_num: int, existing_step_nums: Iterable[int]
) -> Optional[str]:
    """First problem with a consumer's declared producers, if any."""
    existing = set(existing_step_nums)
    for output_step_num in sorted(set(uses_steps)):
        if output_step_num >= step_num:
            return f"Step {step_num} can only use output from earlier steps, not Step {output_step_num}"
        if output_step_num not in existing:
            return f"Step {output_step_num} does not exist in this recipe"
    return None


def parse_uses_steps(raw_values) -> tuple[int, ...]:
    """Turn loosely typed form values into sorted, unique step numbers.

    Accepts ints or numeric strings. Raises ValueError on anything else,
    including booleans and non-positive numbers.
    """
    if raw_values is None:
        return ()
    if isinstance(raw_values, (str, int)):
        raw_values = [raw_values]

    parsed: set[int] = set()
    for raw in raw_values:
        if isinstance(raw, bool):
            raise ValueError(f"Invalid step number: {raw!r}")
        if isinstance(raw, int):
            value = raw
        elif isinstance(raw, str) and raw.strip().isdigit():
            value = int(raw.strip())
        else:
            raise ValueError(f"Invalid step number: {raw!r}")
        if value < 1:
            raise ValueError(f"Step numbers start at 1, got {value}")
        parsed.add(value)
    return tuple(sorted(parsed))

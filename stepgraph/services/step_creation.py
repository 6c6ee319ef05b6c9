import logging
from typing import Iterable, Optional

from ..errors import StepValidationError
from ..settings import settings
from .step_store import StepStore
from .validation import (
    STEP_CONTENT_REQUIREMENT_ERROR,
    validate_duration,
    validate_step_description,
    validate_step_references,
    validate_step_title,
)

logger = logging.getLogger("stepgraph.steps")


def clean_step_fields(
    description: Optional[str], step_title: Optional[str], duration: Optional[int]
) -> tuple[str, Optional[str], dict[str, str]]:
    """Trim text fields and collect per-field errors."""
    errors: dict[str, str] = {}

    title_error = validate_step_title(step_title)
    if title_error:
        errors["stepTitle"] = title_error

    description_error = validate_step_description(description)
    if description_error:
        errors["description"] = description_error

    duration_error = validate_duration(duration)
    if duration_error:
        errors["duration"] = duration_error

    cleaned_title = (step_title or "").strip() or None
    return (description or "").strip(), cleaned_title, errors


def create_step(
    store: StepStore,
    recipe_id: str,
    description: str,
    step_title: Optional[str] = None,
    duration: Optional[int] = None,
    uses_steps: Iterable[int] = (),
    *,
    require_dependency: Optional[bool] = None,
):
    """
    Append a step to the recipe together with its incoming dependency edges.

    The step gets the next ordinal after the highest existing one. Each
    entry of `uses_steps` must name an existing earlier step. Step and
    edges are written in one transaction.
    """
    if require_dependency is None:
        require_dependency = settings.require_step_dependency

    uses = sorted(set(uses_steps))
    description, step_title, errors = clean_step_fields(description, step_title, duration)

    with store.transaction():
        steps = store.list_steps(recipe_id)
        next_step_num = steps[-1].step_num + 1 if steps else 1

        # Producers are locked so a concurrent delete either waits for this
        # step or has already removed them from what we see
        producers = store.lock_steps_at(recipe_id, uses)
        reference_error = validate_step_references(uses, next_step_num, [s.step_num for s in producers])
        if reference_error:
            errors["usesSteps"] = reference_error
        elif require_dependency and next_step_num > 1 and not uses:
            errors["usesSteps"] = STEP_CONTENT_REQUIREMENT_ERROR

        if errors:
            raise StepValidationError(errors)

        step = store.create_step_with_edges(
            recipe_id,
            next_step_num,
            description,
            step_title,
            duration,
            uses,
        )
        step_id = step.id

    logger.info(f"Created step {next_step_num} ({step_id}) in recipe {recipe_id} using {uses or 'no'} steps")
    return step

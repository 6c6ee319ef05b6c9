"""Editing an existing step: fields, declared dependencies, ingredients."""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ..errors import NotFound, StepValidationError
from ..settings import settings
from .step_creation import clean_step_fields
from .step_store import StepStore
from .validation import (
    STEP_CONTENT_REQUIREMENT_ERROR,
    validate_ingredient_name,
    validate_quantity,
    validate_step_references,
    validate_unit_name,
)

logger = logging.getLogger("stepgraph.steps")


@dataclass(frozen=True)
class StepOutputUseView:
    """An edge plus the producer's title, for "uses output of" callouts."""
    output_step_num: int
    input_step_num: int
    output_step_title: Optional[str]


def update_step(
    store: StepStore,
    recipe_id: str,
    step_id: str,
    description: str,
    step_title: Optional[str] = None,
    duration: Optional[int] = None,
    uses_steps: Iterable[int] = (),
    *,
    require_dependency: Optional[bool] = None,
):
    """Overwrite a step's fields and replace the set of steps it uses."""
    if require_dependency is None:
        require_dependency = settings.require_step_dependency

    uses = sorted(set(uses_steps))
    description, step_title, errors = clean_step_fields(description, step_title, duration)

    with store.transaction():
        step = store.get_step(recipe_id, step_id, for_update=True)
        if step is None:
            raise NotFound("Step not found")

        producers = store.lock_steps_at(recipe_id, uses)
        reference_error = validate_step_references(uses, step.step_num, [s.step_num for s in producers])
        if reference_error:
            errors["usesSteps"] = reference_error
        elif (
            require_dependency
            and step.step_num > 1
            and not uses
            and not store.list_ingredients(recipe_id, step.step_num)
        ):
            errors["usesSteps"] = STEP_CONTENT_REQUIREMENT_ERROR

        if errors:
            raise StepValidationError(errors)

        store.update_step_fields(step, description=description, step_title=step_title, duration=duration)
        store.replace_edges(recipe_id, step.step_num, uses)

    logger.info(f"Updated step {step_id} in recipe {recipe_id}, now using {uses or 'no'} steps")
    return step


def list_step_output_uses(store: StepStore, recipe_id: str) -> list[StepOutputUseView]:
    """All edges of a recipe ordered by consumer, then producer."""
    titles = {s.step_num: s.step_title for s in store.list_steps(recipe_id)}
    edges = sorted(store.list_edges(recipe_id), key=lambda e: (e.input_step_num, e.output_step_num))
    return [
        StepOutputUseView(
            output_step_num=e.output_step_num,
            input_step_num=e.input_step_num,
            output_step_title=titles.get(e.output_step_num),
        )
        for e in edges
    ]


def list_ingredients(store: StepStore, recipe_id: str, step_id: str):
    step = store.get_step(recipe_id, step_id)
    if step is None:
        raise NotFound("Step not found")
    return store.list_ingredients(recipe_id, step.step_num)


def add_ingredient(store: StepStore, recipe_id: str, step_id: str, quantity: float, unit: str, name: str):
    errors = {}
    quantity_error = validate_quantity(quantity)
    if quantity_error:
        errors["quantity"] = quantity_error
    unit_error = validate_unit_name(unit)
    if unit_error:
        errors["unitName"] = unit_error
    name_error = validate_ingredient_name(name)
    if name_error:
        errors["ingredientName"] = name_error
    if errors:
        raise StepValidationError(errors)

    unit = unit.strip().lower()
    name = name.strip().lower()

    with store.transaction():
        step = store.get_step(recipe_id, step_id)
        if step is None:
            raise NotFound("Step not found")
        if store.find_ingredient_by_name(recipe_id, name) is not None:
            raise StepValidationError({"ingredientName": "This ingredient is already in the recipe"})
        ingredient = store.add_ingredient(recipe_id, step.step_num, quantity, unit, name)

    return ingredient


def delete_ingredient(store: StepStore, recipe_id: str, step_id: str, ingredient_id: str) -> None:
    with store.transaction():
        step = store.get_step(recipe_id, step_id)
        if step is None:
            raise NotFound("Step not found")
        if not store.delete_ingredient(recipe_id, step.step_num, ingredient_id):
            raise NotFound("Ingredient not found")

"""Step deletion with the dependency safety check.

A deletion attempt either ends Blocked (nothing written) or cascades and
ends Deleted. Retrying after removing the blocking consumers is a fresh
attempt.
"""

import logging

from ..errors import DeletionBlocked, NotFound
from .dependency_graph import DependencyGraph
from .step_store import StepStore

logger = logging.getLogger("stepgraph.steps")


def delete_step(store: StepStore, recipe_id: str, step_id: str) -> int:
    """
    Delete a step that no other step consumes.

    Removes the step's own edges to earlier steps and its ingredients along
    with the step row, all in one transaction. Returns the deleted step's
    number.

    Raises:
        NotFound: the step is not part of `recipe_id`.
        DeletionBlocked: later steps still use this step's output.
    """
    with store.transaction():
        step = store.get_step(recipe_id, step_id, for_update=True)
        if step is None:
            raise NotFound("Step not found")

        step_num = step.step_num
        dependents = DependencyGraph(store).dependents_of(recipe_id, step_num)
        if dependents:
            logger.info(f"Blocked delete of step {step_num} in recipe {recipe_id}: used by {list(dependents)}")
            raise DeletionBlocked(step_num, dependents)

        store.delete_step_cascade(recipe_id, step_num)

    logger.info(f"Deleted step {step_num} ({step_id}) from recipe {recipe_id}")
    return step_num

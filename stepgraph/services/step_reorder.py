"""Move a step one position up or down by swapping with its neighbour.

By default the swap does not look at dependency edges, so it can leave a
consumer numbered before its producer. With `check_dependencies` such a
swap is refused instead.
"""

import logging
from typing import Optional

from ..errors import NotFound, ReorderBlocked
from ..settings import settings
from .dependency_graph import DependencyGraph
from .step_store import StepStore

logger = logging.getLogger("stepgraph.steps")

UP = "up"
DOWN = "down"


def _check_swap_keeps_order(graph: DependencyGraph, recipe_id: str, step_num: int, target_step_num: int) -> None:
    if target_step_num > step_num:
        # Moving later: no consumer may end up at or before the new position
        blocking = [n for n in graph.dependents_of(recipe_id, step_num) if n <= target_step_num]
        if blocking:
            raise ReorderBlocked(step_num, target_step_num, blocking, kind="dependents")
    else:
        # Moving earlier: no producer may end up at or after the new position
        blocking = [n for n in graph.dependencies_of(recipe_id, step_num) if n >= target_step_num]
        if blocking:
            raise ReorderBlocked(step_num, target_step_num, blocking, kind="dependencies")


def reorder_step(
    store: StepStore,
    recipe_id: str,
    step_id: str,
    direction: str,
    *,
    check_dependencies: Optional[bool] = None,
) -> bool:
    """
    Swap a step with its neighbour. Returns True if anything moved.

    Moving the first step up, the last step down, or into a gap in the
    numbering is a no-op, as is an unknown direction.
    """
    if check_dependencies is None:
        check_dependencies = settings.reorder_checks_dependencies

    with store.transaction():
        step = store.get_step(recipe_id, step_id, for_update=True)
        if step is None:
            raise NotFound("Step not found")
        if direction not in (UP, DOWN):
            return False

        step_num = step.step_num
        target_step_num = step_num - 1 if direction == UP else step_num + 1
        target = store.get_step_at(recipe_id, target_step_num, for_update=True)
        if target is None:
            return False

        if check_dependencies:
            try:
                _check_swap_keeps_order(DependencyGraph(store), recipe_id, step_num, target_step_num)
            except ReorderBlocked as e:
                logger.info(f"Blocked reorder in recipe {recipe_id}: {e.message}")
                raise

        store.swap_step_nums(recipe_id, step.id, target.id)

    logger.info(f"Moved step {step_num} {direction} to {target_step_num} in recipe {recipe_id}")
    return True

"""Recipe steps API router.

Endpoints:
- GET /api/recipes/{recipe_id}/steps - List steps with their dependencies
- GET /api/recipes/{recipe_id}/step-output-uses - List dependency edges
- POST /api/recipes/{recipe_id}/steps - Append a step
- PATCH /api/recipes/{recipe_id}/steps/{step_id} - Edit a step
- DELETE /api/recipes/{recipe_id}/steps/{step_id} - Delete a step
- POST /api/recipes/{recipe_id}/steps/{step_id}/reorder - Move a step up/down
- GET/POST /api/recipes/{recipe_id}/steps/{step_id}/ingredients - List/add ingredients
- DELETE /api/recipes/{recipe_id}/steps/{step_id}/ingredients/{ingredient_id}

Domain errors raised by the services are rendered by the handlers
registered in main.
"""

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from ..deps import get_owned_recipe, get_store
from ..infra.idempotency import idempotency_precheck, idempotency_store_result, idempotency_clear_key
from ..models import Recipe
from ..schemas import (
    StepCreate, StepUpdate, StepOut, StepOutputUseOut,
    ReorderRequest, ReorderOut, IngredientCreate, IngredientOut,
)
from ..services.dependency_graph import DependencyGraph, GraphView
from ..services.step_creation import create_step
from ..services.step_deletion import delete_step
from ..services.step_editing import (
    update_step, list_step_output_uses, list_ingredients, add_ingredient, delete_ingredient,
)
from ..services.step_reorder import reorder_step
from ..services.step_store import SqlStepStore

router = APIRouter()


def _step_to_out(step, graph: GraphView) -> StepOut:
    return StepOut(
        id=step.id,
        recipe_id=step.recipe_id,
        step_num=step.step_num,
        step_title=step.step_title,
        description=step.description,
        duration=step.duration,
        uses=list(graph.dependencies_of(step.step_num)),
        used_by=list(graph.dependents_of(step.step_num)),
    )


@router.get("/recipes/{recipe_id}/steps", response_model=list[StepOut])
def list_steps(
    recipe: Recipe = Depends(get_owned_recipe),
    store: SqlStepStore = Depends(get_store),
):
    """List a recipe's steps in order, each with the steps it uses and is used by."""
    graph = DependencyGraph(store).snapshot(recipe.id)
    return [_step_to_out(s, graph) for s in store.list_steps(recipe.id)]


@router.get("/recipes/{recipe_id}/step-output-uses", response_model=list[StepOutputUseOut])
def list_output_uses(
    recipe: Recipe = Depends(get_owned_recipe),
    store: SqlStepStore = Depends(get_store),
):
    return list_step_output_uses(store, recipe.id)


@router.post("/recipes/{recipe_id}/steps", response_model=StepOut, status_code=201)
async def create_recipe_step(
    request: Request,
    payload: StepCreate,
    recipe: Recipe = Depends(get_owned_recipe),
    store: SqlStepStore = Depends(get_store),
):
    """Append a step; `uses_steps` declares which earlier steps it consumes."""
    pre = await idempotency_precheck(request, scope_id=recipe.id, route_key="step_create")
    if isinstance(pre, JSONResponse):
        return pre

    try:
        step = create_step(
            store,
            recipe.id,
            payload.description,
            step_title=payload.step_title,
            duration=payload.duration,
            uses_steps=payload.uses_steps,
        )
        out = _step_to_out(step, DependencyGraph(store).snapshot(recipe.id))
    except Exception:
        if pre is not None:
            await idempotency_clear_key(pre[0])
        raise

    if pre is not None:
        redis_key, req_hash = pre
        await idempotency_store_result(redis_key, req_hash, status=201, body=out.model_dump(mode="json"))
    return out


@router.patch("/recipes/{recipe_id}/steps/{step_id}", response_model=StepOut)
def update_recipe_step(
    step_id: str,
    payload: StepUpdate,
    recipe: Recipe = Depends(get_owned_recipe),
    store: SqlStepStore = Depends(get_store),
):
    """Edit a step and replace the set of earlier steps it uses."""
    step = update_step(
        store,
        recipe.id,
        step_id,
        payload.description,
        step_title=payload.step_title,
        duration=payload.duration,
        uses_steps=payload.uses_steps,
    )
    return _step_to_out(step, DependencyGraph(store).snapshot(recipe.id))


@router.delete("/recipes/{recipe_id}/steps/{step_id}", status_code=204)
def delete_recipe_step(
    step_id: str,
    recipe: Recipe = Depends(get_owned_recipe),
    store: SqlStepStore = Depends(get_store),
):
    """Delete a step unless a later step still uses its output."""
    delete_step(store, recipe.id, step_id)
    return Response(status_code=204)


@router.post("/recipes/{recipe_id}/steps/{step_id}/reorder", response_model=ReorderOut)
def reorder_recipe_step(
    step_id: str,
    payload: ReorderRequest,
    recipe: Recipe = Depends(get_owned_recipe),
    store: SqlStepStore = Depends(get_store),
):
    moved = reorder_step(store, recipe.id, step_id, payload.direction)
    return ReorderOut(moved=moved)


@router.post(
    "/recipes/{recipe_id}/steps/{step_id}/ingredients",
    response_model=IngredientOut,
    status_code=201,
)
def add_step_ingredient(
    step_id: str,
    payload: IngredientCreate,
    recipe: Recipe = Depends(get_owned_recipe),
    store: SqlStepStore = Depends(get_store),
):
    return add_ingredient(store, recipe.id, step_id, payload.quantity, payload.unit, payload.name)


@router.get(
    "/recipes/{recipe_id}/steps/{step_id}/ingredients",
    response_model=list[IngredientOut],
)
def list_step_ingredients(
    step_id: str,
    recipe: Recipe = Depends(get_owned_recipe),
    store: SqlStepStore = Depends(get_store),
):
    return list_ingredients(store, recipe.id, step_id)


@router.delete("/recipes/{recipe_id}/steps/{step_id}/ingredients/{ingredient_id}", status_code=204)
def delete_step_ingredient(
    step_id: str,
    ingredient_id: str,
    recipe: Recipe = Depends(get_owned_recipe),
    store: SqlStepStore = Depends(get_store),
):
    delete_ingredient(store, recipe.id, step_id, ingredient_id)
    return Response(status_code=204)

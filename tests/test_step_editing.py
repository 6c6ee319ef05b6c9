import pytest

from stepgraph.errors import NotFound, StepValidationError
from stepgraph.services.step_editing import (
    add_ingredient,
    delete_ingredient,
    list_ingredients,
    list_step_output_uses,
    update_step,
)
from stepgraph.services.validation import STEP_CONTENT_REQUIREMENT_ERROR


def test_update_replaces_only_own_edges(store):
    steps = store.seed("r1", [1, 2, 3, 4], edges=[(1, 3), (3, 4)])

    update_step(store, "r1", steps[3].id, "Mix it all", step_title="Mix", uses_steps=[2])

    assert store.edge_pairs("r1") == {(2, 3), (3, 4)}
    assert steps[3].description == "Mix it all"
    assert steps[3].step_title == "Mix"


def test_update_can_clear_dependencies(store):
    steps = store.seed("r1", [1, 2], edges=[(1, 2)])

    update_step(store, "r1", steps[2].id, "Serve")

    assert store.edge_pairs("r1") == set()


def test_update_rejects_later_step_reference(store):
    steps = store.seed("r1", [1, 2, 3], edges=[(1, 2)])
    before = store.state()

    with pytest.raises(StepValidationError) as exc:
        update_step(store, "r1", steps[2].id, "Serve", uses_steps=[3])

    assert exc.value.errors == {"usesSteps": "Step 2 can only use output from earlier steps, not Step 3"}
    assert store.state() == before


def test_update_dependency_requirement(store):
    steps = store.seed("r1", [1, 2])

    with pytest.raises(StepValidationError) as exc:
        update_step(store, "r1", steps[2].id, "Cook rice", require_dependency=True)
    assert exc.value.errors == {"usesSteps": STEP_CONTENT_REQUIREMENT_ERROR}

    # An ingredient also counts as content
    store.add_ingredient("r1", 2, 1, "cup", "rice")
    update_step(store, "r1", steps[2].id, "Cook rice", require_dependency=True)

    assert store.get_step("r1", steps[2].id).description == "Cook rice"


def test_update_unknown_step(store):
    with pytest.raises(NotFound):
        update_step(store, "r1", "missing", "Serve")


def test_list_step_output_uses_includes_producer_title(store):
    store.seed("r1", [1], title="Dough")
    store.seed("r1", [2, 3], edges=[(1, 3), (2, 3), (1, 2)])

    uses = list_step_output_uses(store, "r1")

    assert [(u.output_step_num, u.input_step_num) for u in uses] == [(1, 2), (1, 3), (2, 3)]
    assert uses[0].output_step_title == "Dough"
    assert uses[2].output_step_title is None


def test_add_ingredient_normalizes_and_rejects_duplicates(store):
    steps = store.seed("r1", [1, 2])

    ingredient = add_ingredient(store, "r1", steps[1].id, 2, " Cups ", " Flour ")
    assert (ingredient.step_num, ingredient.unit, ingredient.name) == (1, "cups", "flour")

    with pytest.raises(StepValidationError) as exc:
        add_ingredient(store, "r1", steps[2].id, 1, "cup", "FLOUR")
    assert exc.value.errors == {"ingredientName": "This ingredient is already in the recipe"}


def test_add_ingredient_validates_fields(store):
    steps = store.seed("r1", [1])

    with pytest.raises(StepValidationError) as exc:
        add_ingredient(store, "r1", steps[1].id, 0, "", "")

    assert set(exc.value.errors) == {"quantity", "unitName", "ingredientName"}
    assert store.ingredients == []


def test_delete_ingredient(store):
    steps = store.seed("r1", [1, 2])
    ingredient = add_ingredient(store, "r1", steps[1].id, 1, "tsp", "salt")

    with pytest.raises(NotFound):
        delete_ingredient(store, "r1", steps[2].id, ingredient.id)

    delete_ingredient(store, "r1", steps[1].id, ingredient.id)
    assert store.ingredients == []


def test_list_ingredients_for_step(store):
    steps = store.seed("r1", [1, 2])
    add_ingredient(store, "r1", steps[2].id, 1, "tsp", "salt")

    assert [i.name for i in list_ingredients(store, "r1", steps[2].id)] == ["salt"]
    assert list_ingredients(store, "r1", steps[1].id) == []
    with pytest.raises(NotFound):
        list_ingredients(store, "r1", "missing")

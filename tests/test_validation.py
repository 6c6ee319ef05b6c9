import pytest
from pydantic import ValidationError

from stepgraph.schemas import StepCreate
from stepgraph.services.validation import (
    parse_uses_steps,
    validate_ingredient_name,
    validate_quantity,
    validate_step_description,
    validate_step_references,
    validate_step_title,
    validate_unit_name,
)


def test_parse_uses_steps_from_form_strings():
    assert parse_uses_steps(["3", "1", " 2 ", "1"]) == (1, 2, 3)


def test_parse_uses_steps_accepts_ints_and_single_values():
    assert parse_uses_steps([2, 1]) == (1, 2)
    assert parse_uses_steps("4") == (4,)
    assert parse_uses_steps(None) == ()
    assert parse_uses_steps([]) == ()


@pytest.mark.parametrize("bad", [["abc"], ["1.5"], [0], ["-1"], [True], [None]])
def test_parse_uses_steps_rejects_garbage(bad):
    with pytest.raises(ValueError):
        parse_uses_steps(bad)


def test_step_create_parses_uses_steps():
    payload = StepCreate(description="Fold together", uses_steps=["2", "1", "2"])
    assert payload.uses_steps == (1, 2)


def test_step_create_rejects_non_numeric_uses_steps():
    with pytest.raises(ValidationError):
        StepCreate(description="Fold together", uses_steps=["two"])


def test_step_references():
    assert validate_step_references([1, 2], 3, [1, 2]) is None
    assert validate_step_references([], 1, []) is None
    assert validate_step_references([3], 3, [1, 2, 3]) == (
        "Step 3 can only use output from earlier steps, not Step 3"
    )
    assert validate_step_references([2], 4, [1, 3]) == "Step 2 does not exist in this recipe"


def test_step_text_limits():
    assert validate_step_title(None) is None
    assert validate_step_title("   ") is None
    assert validate_step_title("x" * 200) is None
    assert validate_step_title("x" * 201) == "Step title must be 200 characters or less"

    assert validate_step_description("  ") == "Step description is required"
    assert validate_step_description("  " + "x" * 5000 + "  ") is None
    assert validate_step_description("x" * 5001) == "Description must be 5,000 characters or less"


def test_ingredient_limits():
    assert validate_quantity(1.5) is None
    assert validate_quantity(0) == "Quantity must be between 0.001 and 99,999"
    assert validate_quantity(100000) == "Quantity must be between 0.001 and 99,999"
    assert validate_quantity(float("nan")) == "Quantity must be a valid number"
    assert validate_unit_name(" ") == "Unit name is required"
    assert validate_unit_name("x" * 51) == "Unit name must be 50 characters or less"
    assert validate_ingredient_name("") == "Ingredient name is required"
    assert validate_ingredient_name("x" * 101) == "Ingredient name must be 100 characters or less"

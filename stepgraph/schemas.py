"""Pydantic schemas for the step graph API.

Request/response models for:
- Recipe steps (with declared step output uses)
- Step output uses (dependency edges)
- Reordering
- Step ingredients
"""

from datetime import datetime
from typing import Optional, Literal

from pydantic import BaseModel, Field, field_validator

from .services.validation import parse_uses_steps


# --- Recipe Step ---

class StepWrite(BaseModel):
    description: str
    step_title: Optional[str] = None
    duration: Optional[int] = None  # minutes
    uses_steps: tuple[int, ...] = ()

    @field_validator("uses_steps", mode="before")
    @classmethod
    def _parse_uses_steps(cls, value):
        # Form clients send step numbers as strings, possibly repeated
        return parse_uses_steps(value)


class StepCreate(StepWrite):
    pass


class StepUpdate(StepWrite):
    pass


class StepOut(BaseModel):
    id: str
    recipe_id: str
    step_num: int
    step_title: Optional[str]
    description: str
    duration: Optional[int]
    uses: list[int] = []
    used_by: list[int] = []

    class Config:
        from_attributes = True


# --- Step Output Use ---

class StepOutputUseOut(BaseModel):
    output_step_num: int
    input_step_num: int
    output_step_title: Optional[str] = None

    class Config:
        from_attributes = True


# --- Reorder ---

class ReorderRequest(BaseModel):
    direction: Literal["up", "down"]


class ReorderOut(BaseModel):
    ok: bool = True
    moved: bool


# --- Ingredient ---

class IngredientCreate(BaseModel):
    quantity: float
    unit: str = Field(..., max_length=200)
    name: str = Field(..., max_length=200)


class IngredientOut(BaseModel):
    id: str
    recipe_id: str
    step_num: int
    quantity: float
    unit: str
    name: str
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

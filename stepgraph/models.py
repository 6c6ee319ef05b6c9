"""SQLAlchemy ORM models for the step graph service.

Tables:
- recipes: Owning recipe (only the fields the step editor needs)
- recipe_steps: Numbered instruction units, unique per (recipe_id, step_num)
- step_output_uses: Dependency edges between steps of one recipe
- ingredients: Ingredient rows scoped to (recipe_id, step_num)

Edges and ingredients point at steps by number, not by id. Cascades are
performed explicitly by the step store, never by ORM relationship rules.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    String,
    DateTime,
    Text,
    Integer,
    Float,
    ForeignKey,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from .db import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


class Recipe(Base):
    """Recipe owned by a chef. Soft-deleted recipes behave as missing."""
    __tablename__ = "recipes"
    __table_args__ = (
        Index("ix_recipes_chef_id", "chef_id"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    chef_id: Mapped[str] = mapped_column(String(36), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class RecipeStep(Base):
    """Numbered step within a recipe.

    step_num is assigned at creation as max + 1 and is not compacted after
    deletions, so gaps are expected.
    """
    __tablename__ = "recipe_steps"
    __table_args__ = (
        UniqueConstraint("recipe_id", "step_num", name="uq_recipe_steps_recipe_step_num"),
        Index("ix_recipe_steps_recipe_id", "recipe_id"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    recipe_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )

    step_num: Mapped[int] = mapped_column(Integer, nullable=False)
    step_title: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # minutes

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class StepOutputUse(Base):
    """Edge: step `input_step_num` consumes the output of `output_step_num`."""
    __tablename__ = "step_output_uses"
    __table_args__ = (
        UniqueConstraint(
            "recipe_id", "output_step_num", "input_step_num",
            name="uq_step_output_uses_edge",
        ),
        Index("ix_step_output_uses_producer", "recipe_id", "output_step_num"),
        Index("ix_step_output_uses_consumer", "recipe_id", "input_step_num"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    recipe_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    output_step_num: Mapped[int] = mapped_column(Integer, nullable=False)
    input_step_num: Mapped[int] = mapped_column(Integer, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class Ingredient(Base):
    """Ingredient used by one step."""
    __tablename__ = "ingredients"
    __table_args__ = (
        Index("ix_ingredients_recipe_step", "recipe_id", "step_num"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    recipe_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    step_num: Mapped[int] = mapped_column(Integer, nullable=False)

    quantity: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String(50), nullable=False)  # lower-cased
    name: Mapped[str] = mapped_column(String(100), nullable=False)  # lower-cased

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

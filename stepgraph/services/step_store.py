"""Persistence boundary for recipe steps, dependency edges and ingredients.

`StepStore` is the contract the step services depend on. `SqlStepStore`
implements it over a SQLAlchemy session. Mutating methods only flush;
callers group reads and writes inside `transaction()`, which commits once
or rolls everything back.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional, Protocol, Sequence

from sqlalchemy import select, or_, and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import StoreFailure
from ..models import RecipeStep, StepOutputUse, Ingredient

logger = logging.getLogger("stepgraph.store")

# Parking ordinal used while two steps trade numbers
_SWAP_PARKING_NUM = -1


class StepStore(Protocol):
    def transaction(self) -> Iterator["StepStore"]: ...

    def get_step(self, recipe_id: str, step_id: str, *, for_update: bool = False): ...

    def get_step_at(self, recipe_id: str, step_num: int, *, for_update: bool = False): ...

    def list_steps(self, recipe_id: str) -> list: ...

    def lock_steps_at(self, recipe_id: str, step_nums: Iterable[int]) -> list: ...

    def list_edges(self, recipe_id: str) -> list: ...

    def create_step_with_edges(
        self,
        recipe_id: str,
        step_num: int,
        description: str,
        step_title: Optional[str],
        duration: Optional[int],
        output_step_nums: Iterable[int],
    ): ...

    def update_step_fields(
        self, step, *, description: str, step_title: Optional[str], duration: Optional[int]
    ): ...

    def replace_edges(self, recipe_id: str, input_step_num: int, output_step_nums: Iterable[int]) -> None: ...

    def delete_step_cascade(self, recipe_id: str, step_num: int) -> None: ...

    def swap_step_nums(self, recipe_id: str, step_id_a: str, step_id_b: str) -> None: ...

    def list_ingredients(self, recipe_id: str, step_num: int) -> list: ...

    def find_ingredient_by_name(self, recipe_id: str, name: str): ...

    def add_ingredient(self, recipe_id: str, step_num: int, quantity: float, unit: str, name: str): ...

    def delete_ingredient(self, recipe_id: str, step_num: int, ingredient_id: str) -> bool: ...


class SqlStepStore:
    """StepStore backed by a SQLAlchemy session (one per request)."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def transaction(self):
        try:
            yield self
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Step store transaction failed: {e}")
            raise StoreFailure("The step store could not complete the request") from e
        except Exception:
            self.db.rollback()
            raise

    # --- Reads ---

    def get_step(self, recipe_id: str, step_id: str, *, for_update: bool = False) -> Optional[RecipeStep]:
        stmt = select(RecipeStep).where(
            RecipeStep.id == step_id,
            RecipeStep.recipe_id == recipe_id,
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.scalar(stmt)

    def get_step_at(self, recipe_id: str, step_num: int, *, for_update: bool = False) -> Optional[RecipeStep]:
        stmt = select(RecipeStep).where(
            RecipeStep.recipe_id == recipe_id,
            RecipeStep.step_num == step_num,
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.scalar(stmt)

    def list_steps(self, recipe_id: str) -> list[RecipeStep]:
        return list(
            self.db.scalars(
                select(RecipeStep)
                .where(RecipeStep.recipe_id == recipe_id)
                .order_by(RecipeStep.step_num)
            )
        )

    def lock_steps_at(self, recipe_id: str, step_nums: Iterable[int]) -> list[RecipeStep]:
        """Lock and return the steps currently holding `step_nums`.

        Numbers with no step are simply missing from the result, so callers
        check existence against what this returns.
        """
        step_nums = sorted(set(step_nums))
        if not step_nums:
            return []
        return list(
            self.db.scalars(
                select(RecipeStep)
                .where(RecipeStep.recipe_id == recipe_id, RecipeStep.step_num.in_(step_nums))
                .order_by(RecipeStep.step_num)
                .with_for_update()
            )
        )

    def list_edges(self, recipe_id: str) -> list[StepOutputUse]:
        return list(
            self.db.scalars(
                select(StepOutputUse)
                .where(StepOutputUse.recipe_id == recipe_id)
                .order_by(StepOutputUse.input_step_num, StepOutputUse.output_step_num)
            )
        )

    def list_ingredients(self, recipe_id: str, step_num: int) -> list[Ingredient]:
        return list(
            self.db.scalars(
                select(Ingredient)
                .where(Ingredient.recipe_id == recipe_id, Ingredient.step_num == step_num)
                .order_by(Ingredient.name)
            )
        )

    def find_ingredient_by_name(self, recipe_id: str, name: str) -> Optional[Ingredient]:
        return self.db.scalar(
            select(Ingredient).where(Ingredient.recipe_id == recipe_id, Ingredient.name == name)
        )

    # --- Writes ---

    def create_step_with_edges(
        self,
        recipe_id: str,
        step_num: int,
        description: str,
        step_title: Optional[str],
        duration: Optional[int],
        output_step_nums: Iterable[int],
    ) -> RecipeStep:
        step = RecipeStep(
            recipe_id=recipe_id,
            step_num=step_num,
            step_title=step_title,
            description=description,
            duration=duration,
        )
        self.db.add(step)
        for output_step_num in sorted(set(output_step_nums)):
            self.db.add(
                StepOutputUse(
                    recipe_id=recipe_id,
                    output_step_num=output_step_num,
                    input_step_num=step_num,
                )
            )
        self.db.flush()
        return step

    def update_step_fields(
        self, step: RecipeStep, *, description: str, step_title: Optional[str], duration: Optional[int]
    ) -> RecipeStep:
        step.description = description
        step.step_title = step_title
        step.duration = duration
        self.db.flush()
        return step

    def replace_edges(self, recipe_id: str, input_step_num: int, output_step_nums: Iterable[int]) -> None:
        """Drop the consumer's existing edges and write the new set."""
        self.db.query(StepOutputUse).filter(
            StepOutputUse.recipe_id == recipe_id,
            StepOutputUse.input_step_num == input_step_num,
        ).delete(synchronize_session=False)
        self.db.flush()
        for output_step_num in sorted(set(output_step_nums)):
            self.db.add(
                StepOutputUse(
                    recipe_id=recipe_id,
                    output_step_num=output_step_num,
                    input_step_num=input_step_num,
                )
            )
        self.db.flush()

    def delete_step_cascade(self, recipe_id: str, step_num: int) -> None:
        """Remove the step's outgoing edges, its ingredients, then the step.

        Edges where the step is the producer are left alone; callers must
        have established that none exist.
        """
        self.db.query(StepOutputUse).filter(
            StepOutputUse.recipe_id == recipe_id,
            StepOutputUse.input_step_num == step_num,
        ).delete(synchronize_session=False)
        self.db.query(Ingredient).filter(
            Ingredient.recipe_id == recipe_id,
            Ingredient.step_num == step_num,
        ).delete(synchronize_session=False)
        self.db.query(RecipeStep).filter(
            RecipeStep.recipe_id == recipe_id,
            RecipeStep.step_num == step_num,
        ).delete(synchronize_session=False)
        self.db.flush()
        # Bulk deletes bypass the identity map
        self.db.expire_all()

    def swap_step_nums(self, recipe_id: str, step_id_a: str, step_id_b: str) -> None:
        """Trade step numbers between two steps of the same recipe.

        Edges and ingredients reference steps by number, so they are
        renumbered to follow their steps.
        """
        step_a = self.get_step(recipe_id, step_id_a, for_update=True)
        step_b = self.get_step(recipe_id, step_id_b, for_update=True)
        if step_a is None or step_b is None:
            raise StoreFailure("Cannot swap steps that are not part of the recipe")

        num_a, num_b = step_a.step_num, step_b.step_num
        swap = {num_a: num_b, num_b: num_a}

        # Steps: park A so (recipe_id, step_num) stays unique at every flush
        step_a.step_num = _SWAP_PARKING_NUM
        self.db.flush()
        step_b.step_num = num_a
        self.db.flush()
        step_a.step_num = num_b
        self.db.flush()

        # Edges: rewrite rows touching either step in one pass
        touched = list(
            self.db.scalars(
                select(StepOutputUse).where(
                    StepOutputUse.recipe_id == recipe_id,
                    or_(
                        StepOutputUse.output_step_num.in_((num_a, num_b)),
                        StepOutputUse.input_step_num.in_((num_a, num_b)),
                    ),
                )
            )
        )
        remapped = [
            (swap.get(e.output_step_num, e.output_step_num), swap.get(e.input_step_num, e.input_step_num))
            for e in touched
        ]
        for edge in touched:
            self.db.delete(edge)
        self.db.flush()
        for output_step_num, input_step_num in remapped:
            self.db.add(
                StepOutputUse(
                    recipe_id=recipe_id,
                    output_step_num=output_step_num,
                    input_step_num=input_step_num,
                )
            )

        # Ingredients: no uniqueness on step_num, renumber in place
        ingredients = list(
            self.db.scalars(
                select(Ingredient).where(
                    and_(Ingredient.recipe_id == recipe_id, Ingredient.step_num.in_((num_a, num_b)))
                )
            )
        )
        for ingredient in ingredients:
            ingredient.step_num = swap[ingredient.step_num]
        self.db.flush()

    def add_ingredient(self, recipe_id: str, step_num: int, quantity: float, unit: str, name: str) -> Ingredient:
        ingredient = Ingredient(
            recipe_id=recipe_id,
            step_num=step_num,
            quantity=quantity,
            unit=unit,
            name=name,
        )
        self.db.add(ingredient)
        self.db.flush()
        return ingredient

    def delete_ingredient(self, recipe_id: str, step_num: int, ingredient_id: str) -> bool:
        ingredient = self.db.scalar(
            select(Ingredient).where(
                Ingredient.id == ingredient_id,
                Ingredient.recipe_id == recipe_id,
                Ingredient.step_num == step_num,
            )
        )
        if ingredient is None:
            return False
        self.db.delete(ingredient)
        self.db.flush()
        return True

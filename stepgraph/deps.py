"""FastAPI dependencies for the step graph API.

Provides:
- Database session and step store
- Caller identity (X-User-Id header)
- Recipe resolution with ownership check
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from .db import get_db
from .models import Recipe
from .services.step_store import SqlStepStore


def get_store(db: Session = Depends(get_db)) -> SqlStepStore:
    return SqlStepStore(db)


def get_user_id(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
) -> str:
    """Identity is established upstream; this layer only reads it."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id


def get_owned_recipe(
    recipe_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
) -> Recipe:
    """Resolve the recipe from the path and require the caller to own it.

    Raises:
        HTTPException 404 if the recipe is missing or soft-deleted
        HTTPException 403 if it belongs to another chef
    """
    recipe = db.get(Recipe, recipe_id)
    if recipe is None or recipe.deleted_at is not None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    if recipe.chef_id != user_id:
        raise HTTPException(status_code=403, detail="Unauthorized")
    return recipe

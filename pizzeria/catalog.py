"""Read-only ingredient and preset listings.

The four ingredient tables share one column set, so every lookup goes
through ``INGREDIENT_MODELS`` instead of a function per table.
"""
from enum import Enum
from typing import List

from sqlalchemy.orm import Session

from . import models
from .errors import NotFoundError


class IngredientKind(str, Enum):
    BASE = "base"
    SAUCE = "sauce"
    CHEESE = "cheese"
    TOPPING = "topping"


INGREDIENT_MODELS = {
    IngredientKind.BASE: models.PizzaBase,
    IngredientKind.SAUCE: models.Sauce,
    IngredientKind.CHEESE: models.Cheese,
    IngredientKind.TOPPING: models.Topping,
}

KIND_LABELS = {
    IngredientKind.BASE: "Pizza Base",
    IngredientKind.SAUCE: "Sauce",
    IngredientKind.CHEESE: "Cheese",
    IngredientKind.TOPPING: "Topping",
}

# /api/ingredients/{category}
CATEGORY_PATHS = {
    "bases": IngredientKind.BASE,
    "sauces": IngredientKind.SAUCE,
    "cheeses": IngredientKind.CHEESE,
    "toppings": IngredientKind.TOPPING,
}


def parse_category(category: str) -> IngredientKind:
    kind = CATEGORY_PATHS.get(category)
    if kind is None:
        raise NotFoundError(f"unknown ingredient category: {category}")
    return kind


def list_ingredients(db: Session, kind: IngredientKind) -> List:
    model = INGREDIENT_MODELS[kind]
    query = db.query(model).filter(model.is_active.is_(True))
    if kind is IngredientKind.TOPPING:
        query = query.order_by(model.category, model.name)
    else:
        query = query.order_by(model.name)
    return query.all()


def list_varieties(db: Session) -> List[models.PizzaVariety]:
    return (
        db.query(models.PizzaVariety)
        .filter(models.PizzaVariety.is_active.is_(True))
        .order_by(models.PizzaVariety.name)
        .all()
    )


def get_ingredient(db: Session, kind: IngredientKind, ingredient_id: int, active_only: bool = False):
    model = INGREDIENT_MODELS[kind]
    ingredient = db.get(model, ingredient_id)
    if ingredient is None or (active_only and not ingredient.is_active):
        raise NotFoundError(f"{KIND_LABELS[kind].lower()} {ingredient_id} not found")
    return ingredient


def get_variety(db: Session, variety_id: int, active_only: bool = False) -> models.PizzaVariety:
    variety = db.get(models.PizzaVariety, variety_id)
    if variety is None or (active_only and not variety.is_active):
        raise NotFoundError(f"pizza variety {variety_id} not found")
    return variety

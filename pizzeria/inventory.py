import logging
from typing import List

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .catalog import INGREDIENT_MODELS, KIND_LABELS, IngredientKind
from .errors import NotFoundError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)


def parse_kind(value) -> IngredientKind:
    try:
        return IngredientKind(value)
    except ValueError:
        raise ValidationError("Invalid inventory type")


def apply_stock_delta(db: Session, kind: IngredientKind, ingredient_id: int, delta: int) -> None:
    """Add ``delta`` to one ingredient's stock without committing.

    Issued as a single ``stock = stock + delta`` statement so concurrent
    adjustments of the same row do not overwrite each other. The caller owns
    the transaction.
    """
    model = INGREDIENT_MODELS[kind]
    result = db.execute(
        update(model)
        .where(model.id == ingredient_id)
        .values(stock=model.stock + delta)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundError(f"{KIND_LABELS[kind].lower()} {ingredient_id} not found")


def update_ingredient_stock(db: Session, kind: IngredientKind, ingredient_id: int, delta: int):
    """Standalone stock adjustment (admin restock); returns the updated row."""
    try:
        apply_stock_delta(db, kind, ingredient_id, delta)
        db.commit()
    except NotFoundError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError("Failed to update stock") from e

    ingredient = db.get(INGREDIENT_MODELS[kind], ingredient_id)
    logger.info("%s %s stock adjusted by %+d to %d", kind.value, ingredient_id, delta, ingredient.stock)
    if ingredient.stock < 0:
        logger.warning("%s %s stock is negative (%d)", kind.value, ingredient_id, ingredient.stock)
    return ingredient


def get_low_stock_items(db: Session) -> List[dict]:
    """Active ingredients at or below their threshold, across all four kinds."""
    low = []
    for kind, model in INGREDIENT_MODELS.items():
        rows = (
            db.query(model)
            .filter(model.is_active.is_(True), model.stock <= model.threshold)
            .order_by(model.id)
            .all()
        )
        low.extend({"type": KIND_LABELS[kind], "kind": kind.value, "item": row} for row in rows)
    return low

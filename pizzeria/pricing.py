"""Money handling and order pricing.

All amounts are ``Decimal`` values quantized to cents; binary floats are
rejected at the boundary so totals never drift.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from . import catalog, config
from .catalog import IngredientKind
from .errors import ValidationError

CENT = Decimal("0.01")


def round_amount(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_money(value) -> Decimal:
    """Parse a price given as text (or an exact number) into a 2-place Decimal."""
    if isinstance(value, (bool, float)):
        raise ValidationError("amount must be a decimal string")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (str, int)):
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(f"invalid amount: {value!r}")
    else:
        raise ValidationError(f"invalid amount: {value!r}")
    if not amount.is_finite():
        raise ValidationError(f"invalid amount: {value!r}")
    if amount < 0:
        raise ValidationError("amount must be non-negative")
    return round_amount(amount)


def line_total(base=None, sauce=None, cheese=None, toppings: Sequence = (), base_pizza_price: Optional[Decimal] = None) -> Decimal:
    """Unit price of a custom pizza: fixed pizza price plus every selected ingredient."""
    if base_pizza_price is None:
        base_pizza_price = config.state.base_pizza_price
    total = parse_money(base_pizza_price)
    for ingredient in (base, sauce, cheese, *toppings):
        if ingredient is not None:
            total += parse_money(ingredient.price)
    return round_amount(total)


def subtotal(lines: Iterable[Tuple[Decimal, int]]) -> Decimal:
    total = Decimal("0.00")
    for unit_price, quantity in lines:
        total += parse_money(unit_price) * quantity
    return round_amount(total)


def order_total(amount: Decimal, delivery_fee: Optional[Decimal] = None, tax: Optional[Decimal] = None) -> Decimal:
    if delivery_fee is None:
        delivery_fee = config.state.delivery_fee
    if tax is None:
        tax = config.state.tax
    return round_amount(parse_money(amount) + parse_money(delivery_fee) + parse_money(tax))


def unit_price(db: Session, item) -> Decimal:
    if item.pizza_variety_id is not None:
        variety = catalog.get_variety(db, item.pizza_variety_id, active_only=True)
        return parse_money(variety.base_price)

    def pick(kind, ingredient_id):
        if ingredient_id is None:
            return None
        return catalog.get_ingredient(db, kind, ingredient_id, active_only=True)

    return line_total(
        base=pick(IngredientKind.BASE, item.pizza_base_id),
        sauce=pick(IngredientKind.SAUCE, item.sauce_id),
        cheese=pick(IngredientKind.CHEESE, item.cheese_id),
        toppings=[pick(IngredientKind.TOPPING, t) for t in item.toppings],
    )


def quote_items(db: Session, items: Sequence) -> dict:
    """Price a cart against the active catalog.

    Each item is either a preset (``pizza_variety_id``) priced at the variety's
    base price, or a custom build priced with ``line_total``. The result is a
    plain dict shaped like ``schemas.Quote``.
    """
    if not items:
        raise ValidationError("At least one item is required")
    lines = []
    for item in items:
        price = unit_price(db, item)
        lines.append({
            "unit_price": price,
            "quantity": item.quantity,
            "line_total": round_amount(price * item.quantity),
        })
    amount = subtotal((line["unit_price"], line["quantity"]) for line in lines)
    return {
        "lines": lines,
        "subtotal": amount,
        "delivery_fee": round_amount(config.state.delivery_fee),
        "tax": round_amount(config.state.tax),
        "total": order_total(amount),
    }

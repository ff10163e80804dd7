"""Runtime configuration for the storefront (toggleable during tests/runtime)."""
import os
from decimal import Decimal
from typing import NamedTuple, Optional


class ConfigState(NamedTuple):
    base_pizza_price: Decimal
    delivery_fee: Decimal
    tax: Decimal
    strict_status_transitions: bool


def _env_flag(name: str) -> bool:
    return os.getenv(name, "0") in ("1", "true", "True")


state = ConfigState(
    base_pizza_price=Decimal(os.getenv("BASE_PIZZA_PRICE", "12.00")),
    delivery_fee=Decimal(os.getenv("DELIVERY_FEE", "2.99")),
    tax=Decimal(os.getenv("TAX", "1.75")),
    strict_status_transitions=_env_flag("STRICT_STATUS_TRANSITIONS"),
)


def set_strict_transitions(value: bool):
    global state
    state = state._replace(strict_status_transitions=bool(value))


def is_strict_transitions() -> bool:
    return state.strict_status_transitions


def set_pricing(
    base_pizza_price: Optional[Decimal] = None,
    delivery_fee: Optional[Decimal] = None,
    tax: Optional[Decimal] = None,
):
    global state
    changes = {}
    if base_pizza_price is not None:
        changes["base_pizza_price"] = Decimal(base_pizza_price)
    if delivery_fee is not None:
        changes["delivery_fee"] = Decimal(delivery_fee)
    if tax is not None:
        changes["tax"] = Decimal(tax)
    state = state._replace(**changes)

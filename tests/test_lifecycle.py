import pytest

from pizzeria import config, crud, lifecycle, schemas
from pizzeria.errors import ValidationError
from pizzeria.lifecycle import OrderStatus

from conftest import order_payload


def test_parse_status():
    assert lifecycle.parse_status("kitchen") is OrderStatus.KITCHEN
    with pytest.raises(ValidationError):
        lifecycle.parse_status("cancelled")


def test_next_status_follows_pipeline():
    assert lifecycle.next_status("received") is OrderStatus.KITCHEN
    assert lifecycle.next_status(OrderStatus.KITCHEN) is OrderStatus.DELIVERY
    assert lifecycle.next_status("delivery") is OrderStatus.DELIVERED
    assert lifecycle.next_status("delivered") is None
    assert lifecycle.is_terminal("delivered")
    assert not lifecycle.is_terminal("received")


def test_any_transition_allowed_by_default():
    assert lifecycle.check_transition("delivered", "received") is OrderStatus.RECEIVED
    assert lifecycle.check_transition("received", "delivered") is OrderStatus.DELIVERED


def test_strict_mode_allows_only_one_step_forward():
    config.set_strict_transitions(True)
    assert lifecycle.check_transition("received", "kitchen") is OrderStatus.KITCHEN
    assert lifecycle.check_transition("kitchen", "kitchen") is OrderStatus.KITCHEN
    with pytest.raises(ValidationError):
        lifecycle.check_transition("received", "delivered")
    with pytest.raises(ValidationError):
        lifecycle.check_transition("delivered", "received")


def test_strict_mode_leaves_order_unchanged_on_rejection(db_session, menu, customer):
    order = crud.place_order(db_session, customer.id, schemas.OrderCreate.model_validate(order_payload()))
    config.set_strict_transitions(True)
    with pytest.raises(ValidationError):
        crud.update_order_status(db_session, order.id, "delivery")
    assert crud.get_order_by_id(db_session, order.id).status == "received"
    crud.update_order_status(db_session, order.id, "kitchen")
    assert crud.get_order_by_id(db_session, order.id).status == "kitchen"

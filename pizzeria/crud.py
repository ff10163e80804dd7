import logging
from typing import List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from . import catalog, inventory, lifecycle, models, schemas
from .catalog import IngredientKind
from .errors import NotFoundError, PersistenceError, PizzeriaError, ValidationError
from .lifecycle import OrderStatus, PaymentStatus
from .pricing import parse_money
from .utils import sanitize_input

logger = logging.getLogger(__name__)

USER_FIELDS = ("email", "first_name", "last_name", "profile_image_url")


# -------------------- Users --------------------
def get_user(db: Session, user_id: str) -> models.User | None:
    return db.get(models.User, user_id)


def upsert_user(db: Session, user: schemas.UserUpsert) -> models.User:
    """Create or refresh the local mirror of an identity-provider user.

    Identity fields always follow the provider. ``is_admin`` is only touched
    when explicitly given, since the provider knows nothing about it.
    """
    db_user = db.get(models.User, user.id)
    if db_user is None:
        db_user = models.User(id=user.id, is_admin=bool(user.is_admin))
        db.add(db_user)
    for field in USER_FIELDS:
        value = getattr(user, field)
        if getattr(db_user, field) != value:
            setattr(db_user, field, value)
    if user.is_admin is not None:
        db_user.is_admin = user.is_admin
    if db.new or db.dirty:
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise ValidationError("email already belongs to another user") from e
        db.refresh(db_user)
    return db_user


# -------------------- Orders --------------------
def create_order(db: Session, user_id: str, total_amount, delivery_address: str) -> models.Order:
    """Add a new order to the session; the caller commits."""
    address = sanitize_input(delivery_address)
    if len(address) < schemas.MIN_ADDRESS_LENGTH:
        raise ValidationError(f"Delivery address must be at least {schemas.MIN_ADDRESS_LENGTH} characters")

    db_order = models.Order(
        user_id=user_id,
        total_amount=parse_money(total_amount),
        delivery_address=address,
        status=OrderStatus.RECEIVED.value,
        payment_status=PaymentStatus.PENDING.value,
    )
    db.add(db_order)
    db.flush()
    return db_order


def create_order_item(db: Session, order: models.Order, item: schemas.OrderItemCreate) -> models.OrderItem:
    """Append a line item to ``order``; referenced rows must exist."""
    if item.pizza_variety_id is not None:
        catalog.get_variety(db, item.pizza_variety_id)
    for kind, ingredient_id in _ingredient_refs(item, with_toppings=False):
        catalog.get_ingredient(db, kind, ingredient_id)

    db_item = models.OrderItem(
        order_id=order.id,
        pizza_variety_id=item.pizza_variety_id,
        pizza_base_id=item.pizza_base_id,
        sauce_id=item.sauce_id,
        cheese_id=item.cheese_id,
        quantity=item.quantity,
        item_price=parse_money(item.item_price),
        is_custom=item.is_custom,
    )
    db.add(db_item)
    db.flush()
    return db_item


def create_order_item_topping(db: Session, order_item: models.OrderItem, topping_id: int) -> models.OrderItemTopping:
    catalog.get_ingredient(db, IngredientKind.TOPPING, topping_id)
    db_topping = models.OrderItemTopping(order_item_id=order_item.id, topping_id=topping_id)
    db.add(db_topping)
    db.flush()
    return db_topping


def _ingredient_refs(item, with_toppings: bool = True):
    refs = [
        (IngredientKind.BASE, item.pizza_base_id),
        (IngredientKind.SAUCE, item.sauce_id),
        (IngredientKind.CHEESE, item.cheese_id),
    ]
    if with_toppings:
        refs.extend((IngredientKind.TOPPING, topping_id) for topping_id in item.toppings)
    return [(kind, ingredient_id) for kind, ingredient_id in refs if ingredient_id is not None]


def place_order(db: Session, user_id: str, order_in: schemas.OrderCreate) -> models.Order:
    """Create an order with its items and consume stock, all in one transaction.

    Every row written here (order, items, topping selections, stock
    decrements) is committed together or rolled back together.
    """
    if not order_in.items:
        raise ValidationError("At least one item is required")

    try:
        order = create_order(db, user_id, order_in.total_amount, order_in.delivery_address)
        for item in order_in.items:
            order_item = create_order_item(db, order, item)
            if item.is_custom:
                for topping_id in item.toppings:
                    create_order_item_topping(db, order_item, topping_id)
            for kind, ingredient_id in _ingredient_refs(item):
                inventory.apply_stock_delta(db, kind, ingredient_id, -item.quantity)
        db.commit()
    except PizzeriaError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        raise ValidationError("integrity error") from e
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError("Failed to create order") from e

    db.refresh(order)
    logger.info("order %s placed by %s with %d item(s)", order.id, user_id, len(order_in.items))
    return order


def _orders_query(db: Session):
    items = models.Order.items
    return db.query(models.Order).options(
        selectinload(items).selectinload(models.OrderItem.toppings).selectinload(models.OrderItemTopping.topping),
        selectinload(items).selectinload(models.OrderItem.pizza_variety),
        selectinload(items).selectinload(models.OrderItem.pizza_base),
        selectinload(items).selectinload(models.OrderItem.sauce),
        selectinload(items).selectinload(models.OrderItem.cheese),
    )


def get_user_orders(db: Session, user_id: str) -> List[models.Order]:
    return (
        _orders_query(db)
        .filter(models.Order.user_id == user_id)
        .order_by(models.Order.created_at.desc(), models.Order.id)
        .all()
    )


def get_all_orders(db: Session) -> List[models.Order]:
    return (
        _orders_query(db)
        .options(selectinload(models.Order.user))
        .order_by(models.Order.created_at.desc(), models.Order.id)
        .all()
    )


def get_order_by_id(db: Session, order_id: str) -> models.Order:
    order = db.get(models.Order, order_id)
    if not order:
        raise NotFoundError("Order not found")
    return order


def _save(db: Session, order: models.Order, action: str) -> models.Order:
    order.updated_at = models.utcnow()
    db.add(order)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Failed to {action}") from e
    db.refresh(order)
    return order


def update_order_status(db: Session, order_id: str, status) -> models.Order:
    target = lifecycle.parse_status(status)
    order = get_order_by_id(db, order_id)
    previous = order.status
    target = lifecycle.check_transition(previous, target)
    order.status = target.value
    order = _save(db, order, "update order status")
    logger.info("order %s status %s -> %s", order_id, previous, target.value)
    return order


def advance_order(db: Session, order_id: str) -> models.Order:
    """Move an order to the next pipeline stage."""
    order = get_order_by_id(db, order_id)
    target = lifecycle.next_status(order.status)
    if target is None:
        raise ValidationError(f"order is already {order.status}")
    return update_order_status(db, order_id, target)


def confirm_payment(db: Session, order_id: str, payment_id: str) -> models.Order:
    """Record a completed payment; the delivery status is left alone."""
    order = get_order_by_id(db, order_id)
    order.payment_status = PaymentStatus.COMPLETED.value
    order.payment_id = payment_id
    order = _save(db, order, "confirm payment")
    logger.info("payment %s confirmed for order %s", payment_id, order_id)
    return order

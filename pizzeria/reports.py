"""Admin dashboard aggregates."""
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import List

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from . import models, schemas
from .lifecycle import OPEN_STATUSES, PaymentStatus
from .pricing import round_amount

POPULAR_LIMIT = 10


def get_order_stats(db: Session) -> schemas.OrderStats:
    total = db.query(func.count(models.Order.id)).scalar() or 0
    pending = (
        db.query(func.count(models.Order.id))
        .filter(models.Order.status.in_([s.value for s in OPEN_STATUSES]))
        .scalar()
        or 0
    )

    # today is the current UTC day, matching how created_at is stored
    start = datetime.combine(models.utcnow().date(), time.min)
    revenue = (
        db.query(func.coalesce(func.sum(models.Order.total_amount), 0))
        .filter(
            models.Order.created_at >= start,
            models.Order.created_at < start + timedelta(days=1),
            models.Order.payment_status == PaymentStatus.COMPLETED.value,
        )
        .scalar()
    )
    return schemas.OrderStats(
        total_orders=total,
        pending_orders=pending,
        today_revenue=round_amount(Decimal(str(revenue or 0))),
    )


def get_popular_items(db: Session) -> List[schemas.PopularItem]:
    """Most selected toppings across all order items, most popular first."""
    order_count = func.count(models.OrderItemTopping.id).label("order_count")
    rows = (
        db.query(models.Topping.name, order_count)
        .join(models.OrderItemTopping, models.OrderItemTopping.topping_id == models.Topping.id)
        .group_by(models.Topping.id, models.Topping.name)
        .order_by(desc(order_count), models.Topping.id)
        .limit(POPULAR_LIMIT)
        .all()
    )
    return [schemas.PopularItem(name=name, order_count=count) for name, count in rows]

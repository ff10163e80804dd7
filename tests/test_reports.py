from datetime import timedelta
from decimal import Decimal

from pizzeria import crud, models, reports, schemas

from conftest import custom_item, order_payload


def _place(db_session, user_id, *items):
    return crud.place_order(db_session, user_id, schemas.OrderCreate.model_validate(order_payload(*items)))


def test_popular_toppings_ranked_by_selection_count(db_session, menu, customer):
    # Pepperoni picked five times, Mushrooms three times
    items = [custom_item(toppings=[2]) for _ in range(2)] + [custom_item(toppings=[1, 2]) for _ in range(3)]
    _place(db_session, customer.id, *items)

    popular = reports.get_popular_items(db_session)
    assert [(p.name, p.order_count) for p in popular] == [("Pepperoni", 5), ("Mushrooms", 3)]


def test_popular_toppings_limited_to_ten(db_session, menu, customer):
    extra = [models.Topping(id=100 + i, name=f"Extra {i}", price=Decimal("0.50"), category="herbs", stock=10) for i in range(12)]
    db_session.add_all(extra)
    db_session.commit()
    _place(db_session, customer.id, custom_item(toppings=[t.id for t in extra]))

    popular = reports.get_popular_items(db_session)
    assert len(popular) == 10
    assert popular[0].name == "Extra 0"


def test_popular_toppings_counted_per_topping_not_per_name(db_session, menu, customer):
    twin = models.Topping(id=50, name="Pepperoni", price=Decimal("2.50"), category="premium", stock=10)
    db_session.add(twin)
    db_session.commit()
    _place(db_session, customer.id, custom_item(toppings=[2]), custom_item(toppings=[50]), custom_item(toppings=[50]))

    popular = reports.get_popular_items(db_session)
    assert [(p.name, p.order_count) for p in popular] == [("Pepperoni", 2), ("Pepperoni", 1)]



def test_order_stats(db_session, menu, customer):
    paid = _place(db_session, customer.id)
    _place(db_session, customer.id)
    done = _place(db_session, customer.id)
    crud.confirm_payment(db_session, paid.id, "pay_1")
    crud.update_order_status(db_session, done.id, "delivered")

    stats = reports.get_order_stats(db_session)
    assert stats.total_orders == 3
    assert stats.pending_orders == 2
    assert stats.today_revenue == Decimal("19.74")


def test_revenue_counts_only_todays_paid_orders(db_session, menu, customer):
    old = _place(db_session, customer.id)
    crud.confirm_payment(db_session, old.id, "pay_old")
    old.created_at = models.utcnow() - timedelta(days=1)
    db_session.commit()
    _place(db_session, customer.id)  # unpaid

    stats = reports.get_order_stats(db_session)
    assert stats.total_orders == 2
    assert stats.today_revenue == Decimal("0.00")

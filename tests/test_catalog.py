import pytest

from pizzeria import catalog
from pizzeria.catalog import IngredientKind
from pizzeria.errors import NotFoundError


def test_ingredients_sorted_by_name(db_session, menu):
    names = [b.name for b in catalog.list_ingredients(db_session, IngredientKind.BASE)]
    assert names == ["Cheese Stuffed", "Thin Crust"]


def test_toppings_sorted_by_category_then_name(db_session, menu):
    names = [t.name for t in catalog.list_ingredients(db_session, IngredientKind.TOPPING)]
    assert names == ["Grilled Chicken", "Pepperoni", "Mushrooms"]


def test_inactive_rows_hidden(db_session, menu):
    menu["sauces"][1].is_active = False
    menu["varieties"][0].is_active = False
    db_session.commit()
    assert [s.name for s in catalog.list_ingredients(db_session, IngredientKind.SAUCE)] == ["Marinara"]
    assert [v.name for v in catalog.list_varieties(db_session)] == ["Pepperoni Supreme"]


def test_parse_category():
    assert catalog.parse_category("cheeses") is IngredientKind.CHEESE
    with pytest.raises(NotFoundError):
        catalog.parse_category("anchovies")


def test_get_ingredient(db_session, menu):
    assert catalog.get_ingredient(db_session, IngredientKind.TOPPING, 2).name == "Pepperoni"
    with pytest.raises(NotFoundError):
        catalog.get_ingredient(db_session, IngredientKind.TOPPING, 99)

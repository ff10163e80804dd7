import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from .db import Base


def utcnow() -> datetime:
    # Stored naive; SQLite drops tzinfo anyway
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    """Local mirror of a user owned by the external identity provider."""
    __tablename__ = "users"

    # subject id issued by the identity provider
    id = Column(String(64), primary_key=True, index=True)
    email = Column(String, nullable=True, unique=True, index=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    profile_image_url = Column(String, nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    orders = relationship("Order", back_populates="user")


class IngredientMixin:
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    # signed, no floor: orders may drive it below zero
    stock = Column(Integer, nullable=False, default=0)
    threshold = Column(Integer, nullable=False, default=20)
    # inactive rows are hidden from the catalog but kept for old orders
    is_active = Column(Boolean, nullable=False, default=True)


class PizzaBase(IngredientMixin, Base):
    __tablename__ = "pizza_bases"


class Sauce(IngredientMixin, Base):
    __tablename__ = "sauces"


class Cheese(IngredientMixin, Base):
    __tablename__ = "cheeses"


class Topping(IngredientMixin, Base):
    __tablename__ = "toppings"

    # vegetables, meats, premium, herbs
    category = Column(String(50), nullable=False, index=True)


class PizzaVariety(Base):
    __tablename__ = "pizza_varieties"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String, nullable=True)
    base_price = Column(Numeric(10, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    # received, kitchen, delivery, delivered
    status = Column(String(50), nullable=False, default="received", index=True)
    total_amount = Column(Numeric(10, 2), nullable=False)
    delivery_address = Column(Text, nullable=False)
    # pending, completed
    payment_status = Column(String(50), nullable=False, default="pending")
    payment_id = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", order_by="OrderItem.id")


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)
    pizza_variety_id = Column(Integer, ForeignKey("pizza_varieties.id"), nullable=True)
    pizza_base_id = Column(Integer, ForeignKey("pizza_bases.id"), nullable=True)
    sauce_id = Column(Integer, ForeignKey("sauces.id"), nullable=True)
    cheese_id = Column(Integer, ForeignKey("cheeses.id"), nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
    # price at checkout time, never recomputed
    item_price = Column(Numeric(10, 2), nullable=False)
    is_custom = Column(Boolean, nullable=False, default=False)

    order = relationship("Order", back_populates="items")
    pizza_variety = relationship("PizzaVariety")
    pizza_base = relationship("PizzaBase")
    sauce = relationship("Sauce")
    cheese = relationship("Cheese")
    toppings = relationship("OrderItemTopping", back_populates="order_item", order_by="OrderItemTopping.id")


class OrderItemTopping(Base):
    __tablename__ = "order_item_toppings"

    id = Column(Integer, primary_key=True, index=True)
    order_item_id = Column(Integer, ForeignKey("order_items.id"), nullable=False, index=True)
    topping_id = Column(Integer, ForeignKey("toppings.id"), nullable=False, index=True)

    order_item = relationship("OrderItem", back_populates="toppings")
    topping = relationship("Topping")

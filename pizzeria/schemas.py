from datetime import datetime
from decimal import Decimal
from typing import Annotated, ClassVar, List, Optional

from pydantic import BaseModel, BeforeValidator, Field, PositiveInt, model_validator
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict

from .pricing import parse_money

MIN_ADDRESS_LENGTH = 10

# Prices arrive as decimal strings ("15.99"); floats are rejected
Money = Annotated[Decimal, BeforeValidator(parse_money)]


class APIModel(BaseModel):
    # JSON bodies are camelCase, Python attributes snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# -------------------- Users --------------------
class UserUpsert(APIModel):
    id: str = Field(..., min_length=1, max_length=64)
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    # None leaves the stored flag alone
    is_admin: Optional[bool] = None


class UserRead(APIModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    is_admin: bool = False


# -------------------- Catalog --------------------
class IngredientRead(APIModel):
    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    stock: int
    threshold: int
    is_active: bool
    # toppings only
    category: Optional[str] = None


class PizzaVarietyRead(APIModel):
    id: int
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    base_price: Decimal
    is_active: bool


# -------------------- Pricing --------------------
class PizzaSelection(APIModel):
    """One pizza: either a preset variety or a custom build, never both."""

    # builder quotes may price a partial build; orders need base, sauce and cheese
    requires_complete_build: ClassVar[bool] = False

    pizza_variety_id: Optional[PositiveInt] = None
    pizza_base_id: Optional[PositiveInt] = None
    sauce_id: Optional[PositiveInt] = None
    cheese_id: Optional[PositiveInt] = None
    toppings: List[PositiveInt] = Field(default_factory=list)
    quantity: int = Field(default=1, ge=1)
    # None means "custom unless a variety is named"
    is_custom: Optional[bool] = None

    @model_validator(mode="after")
    def custom_or_preset(self):
        ingredients = (self.pizza_base_id, self.sauce_id, self.cheese_id)
        custom = self.pizza_variety_id is None if self.is_custom is None else self.is_custom
        if custom:
            if self.pizza_variety_id is not None:
                raise ValueError("custom pizza cannot reference a pizza variety")
            if self.requires_complete_build and any(i is None for i in ingredients):
                raise ValueError("custom pizza needs a base, a sauce and a cheese")
        else:
            if self.pizza_variety_id is None:
                raise ValueError("pizzaVarietyId is required unless isCustom is true")
            if any(i is not None for i in ingredients) or self.toppings:
                raise ValueError("preset pizza cannot carry custom ingredients")
        return self


class QuoteItem(PizzaSelection):
    pass


class QuoteRequest(APIModel):
    items: List[QuoteItem] = Field(..., min_length=1)


class QuoteLine(APIModel):
    unit_price: Decimal
    quantity: int
    line_total: Decimal


class Quote(APIModel):
    lines: List[QuoteLine]
    subtotal: Decimal
    delivery_fee: Decimal
    tax: Decimal
    total: Decimal


# -------------------- Orders --------------------
class OrderItemCreate(PizzaSelection):
    requires_complete_build: ClassVar[bool] = True

    item_price: Money
    is_custom: bool = False



class OrderCreate(APIModel):
    delivery_address: str = Field(..., min_length=MIN_ADDRESS_LENGTH)
    items: List[OrderItemCreate] = Field(..., min_length=1)
    total_amount: Money


class OrderCreated(APIModel):
    order_id: str
    message: str


class PaymentConfirm(APIModel):
    payment_id: str = Field(..., min_length=1, max_length=255)


class StatusUpdate(APIModel):
    status: str


class OrderItemToppingRead(APIModel):
    id: int
    topping_id: int
    topping: Optional[IngredientRead] = None


class OrderItemRead(APIModel):
    id: int
    pizza_variety_id: Optional[int] = None
    pizza_base_id: Optional[int] = None
    sauce_id: Optional[int] = None
    cheese_id: Optional[int] = None
    quantity: int
    item_price: Decimal
    is_custom: bool
    pizza_variety: Optional[PizzaVarietyRead] = None
    pizza_base: Optional[IngredientRead] = None
    sauce: Optional[IngredientRead] = None
    cheese: Optional[IngredientRead] = None
    toppings: List[OrderItemToppingRead] = []


class OrderRead(APIModel):
    id: str
    user_id: str
    status: str
    total_amount: Decimal
    delivery_address: str
    payment_status: str
    payment_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemRead] = []


class AdminOrderRead(OrderRead):
    user: Optional[UserRead] = None


# -------------------- Inventory / admin --------------------
class StockUpdate(APIModel):
    type: str
    id: int
    # signed: negative consumes, positive restocks
    quantity: int


class StockUpdated(APIModel):
    message: str
    stock: int


class LowStockItem(APIModel):
    type: str
    kind: str
    item: IngredientRead


class OrderStats(APIModel):
    total_orders: int
    pending_orders: int
    today_revenue: Decimal


class PopularItem(APIModel):
    name: str
    order_count: int


class Message(APIModel):
    message: str

import logging
import os
from typing import List

import jwt
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from . import auth, catalog, config, crud, inventory, models, pricing, reports, schemas
from .db import SessionLocal, init_db
from .errors import AuthorizationError, PizzeriaError, UnauthenticatedError

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

init_db()

app = FastAPI(title="Pizzeria Storefront")


@app.exception_handler(PizzeriaError)
async def pizzeria_error_handler(request: Request, exc: PizzeriaError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [{"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]} for e in exc.errors()]
    return JSONResponse(status_code=400, content={"detail": "Invalid request data", "errors": errors})


# Dependency to get DB session per request

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(request: Request, db: Session = Depends(get_db)) -> models.User:
    # resolve token: prefer Authorization bearer, fall back to the session cookie
    token = None
    header = request.headers.get("authorization")
    if header and header.lower().startswith("bearer "):
        token = header.split(None, 1)[1]
    elif request.cookies.get(auth.SESSION_COOKIE):
        token = request.cookies[auth.SESSION_COOKIE]
    if not token:
        raise UnauthenticatedError()
    try:
        claims = auth.decode_access_token(token)
    except jwt.PyJWTError:
        raise UnauthenticatedError("invalid token")
    if not claims.get("sub"):
        raise UnauthenticatedError("invalid token")
    return crud.upsert_user(db, auth.claims_to_user(claims))


def require_admin(user: models.User = Depends(get_current_user)) -> models.User:
    if not user.is_admin:
        raise AuthorizationError()
    return user


def ensure_owner_or_admin(order: models.Order, user: models.User):
    if not user.is_admin and order.user_id != user.id:
        raise AuthorizationError()


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api/auth/user", response_model=schemas.UserRead)
async def get_auth_user(user: models.User = Depends(get_current_user)):
    return user


# -------------------- Catalog --------------------
@app.get("/api/ingredients/{category}", response_model=List[schemas.IngredientRead])
async def get_ingredients(category: str, db: Session = Depends(get_db)):
    kind = catalog.parse_category(category)
    return catalog.list_ingredients(db, kind)


@app.get("/api/pizza-varieties", response_model=List[schemas.PizzaVarietyRead])
async def get_pizza_varieties(db: Session = Depends(get_db)):
    return catalog.list_varieties(db)


@app.post("/api/pricing/quote", response_model=schemas.Quote)
async def quote(payload: schemas.QuoteRequest, db: Session = Depends(get_db)):
    return pricing.quote_items(db, payload.items)


# -------------------- Orders --------------------
@app.post("/api/orders", response_model=schemas.OrderCreated, status_code=201)
async def create_order(
    payload: schemas.OrderCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    order = crud.place_order(db, user.id, payload)
    return schemas.OrderCreated(order_id=order.id, message="Order placed successfully")


@app.post("/api/orders/{order_id}/payment", response_model=schemas.Message)
async def confirm_payment(
    order_id: str,
    payload: schemas.PaymentConfirm,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    # Payment is verified by the gateway client-side; here we only record it
    order = crud.get_order_by_id(db, order_id)
    ensure_owner_or_admin(order, user)
    crud.confirm_payment(db, order_id, payload.payment_id)
    return schemas.Message(message="Payment confirmed successfully")


@app.get("/api/orders/user", response_model=List[schemas.OrderRead])
async def get_user_orders(db: Session = Depends(get_db), user: models.User = Depends(get_current_user)):
    return crud.get_user_orders(db, user.id)


@app.get("/api/orders/{order_id}", response_model=schemas.OrderRead)
async def get_order(order_id: str, db: Session = Depends(get_db), user: models.User = Depends(get_current_user)):
    order = crud.get_order_by_id(db, order_id)
    ensure_owner_or_admin(order, user)
    return order


# -------------------- Admin --------------------
@app.get("/api/admin/orders", response_model=List[schemas.AdminOrderRead])
async def admin_get_orders(db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    return crud.get_all_orders(db)


@app.patch("/api/admin/orders/{order_id}/status", response_model=schemas.Message)
async def admin_update_order_status(
    order_id: str,
    payload: schemas.StatusUpdate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    crud.update_order_status(db, order_id, payload.status)
    return schemas.Message(message="Order status updated successfully")


@app.post("/api/admin/orders/{order_id}/advance", response_model=schemas.OrderRead)
async def admin_advance_order(order_id: str, db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    return crud.advance_order(db, order_id)


@app.get("/api/admin/stats", response_model=schemas.OrderStats)
async def admin_stats(db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    return reports.get_order_stats(db)


@app.get("/api/admin/inventory/low-stock", response_model=List[schemas.LowStockItem])
async def admin_low_stock(db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    return inventory.get_low_stock_items(db)


@app.post("/api/admin/inventory/update-stock", response_model=schemas.StockUpdated)
async def admin_update_stock(
    payload: schemas.StockUpdate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    kind = inventory.parse_kind(payload.type)
    ingredient = inventory.update_ingredient_stock(db, kind, payload.id, payload.quantity)
    return schemas.StockUpdated(message="Stock updated successfully", stock=ingredient.stock)


@app.get("/api/admin/analytics/popular", response_model=List[schemas.PopularItem])
async def admin_popular(db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    return reports.get_popular_items(db)


@app.get("/api/admin/config")
async def admin_get_config(admin: models.User = Depends(require_admin)):
    return {"strictStatusTransitions": config.is_strict_transitions()}


@app.post("/api/admin/config/strict-transitions")
async def admin_set_strict_transitions(request: Request, admin: models.User = Depends(require_admin)):
    """Set the strict status-transition flag. Accepts value via query or JSON body."""
    value = request.query_params.get("value")
    if value is None:
        try:
            body = await request.json()
            if isinstance(body, dict):
                value = body.get("value")
        except ValueError:
            value = None

    # Parse boolean-ish values
    if isinstance(value, str):
        val = value.lower() in ("1", "true", "yes", "on")
    else:
        val = bool(value)

    config.set_strict_transitions(val)
    logger.info("strict status transitions %s by %s", "enabled" if val else "disabled", admin.id)
    return {"strictStatusTransitions": config.is_strict_transitions()}

"""
Order placement and order history.

Placing an order is validate-then-commit:

1. every line is checked against the catalog without writing anything;
2. stock is reserved per product with a conditional decrement
   (``stock >= qty``), so two concurrent orders cannot both take the last
   units; if one of the decrements loses a race, the ones already applied in
   this call are put back;
3. the order document is written, and the reservation is released again if
   that write fails.

Line prices are snapshots of the catalog price at purchase time.
"""
import logging
from typing import Callable, Dict, List, Optional, Tuple

from pymongo import DESCENDING
from pymongo.database import Database
from pymongo.errors import PyMongoError

from catalog import Catalog
from database import ORDERS, PRODUCTS, USERS, to_object_id, utcnow, with_id
from errors import InsufficientStock, InternalError, ProductNotFound
from notifications import OrderNotifier
from schemas import (LineItem, Order, OrderCreate, OrderItem, OrderItemIn, OrderUser, OrderView,
                     PlacedOrder, TokenClaims, order_total)

logger = logging.getLogger(__name__)

Reservation = List[Tuple[str, int]]


def _run_now(func, *args):
    func(*args)


class OrderService:
    def __init__(self, db: Database, notifier: Optional[OrderNotifier] = None, catalog: Optional[Catalog] = None):
        self.products = db[PRODUCTS]
        self.orders = db[ORDERS]
        self.users = db[USERS]
        self.notifier = notifier or OrderNotifier()
        self.catalog = catalog or Catalog(db)

    def place_order(self, claims: TokenClaims, payload: OrderCreate,
                    schedule: Optional[Callable] = None) -> PlacedOrder:
        """Reserve stock, store the order and hand the confirmation to ``schedule``.

        ``schedule(func, *args)`` decides when the e-mail goes out; routes pass
        ``BackgroundTasks.add_task``. Without it the notifier runs inline.
        """
        line_items = self._check_lines(payload.products)
        reserved = self._reserve(line_items)

        order = Order(
            user_id=claims.user_id,
            products=[OrderItem(product_id=li.product_id, quantity=li.quantity, price=li.price) for li in line_items],
            total_amount=order_total(line_items),
            shipping_address=payload.shipping_address,
            created_at=utcnow(),
        )
        try:
            result = self.orders.insert_one(order.model_dump(exclude={"id"}))
        except PyMongoError:
            logger.exception("Could not store order for user %s", claims.user_id)
            self._release(reserved)
            raise InternalError()
        order.id = str(result.inserted_id)

        placed = PlacedOrder(
            **order.model_dump(),
            user=self._order_user(claims),
            product_details=line_items,
        )
        logger.info("Order %s placed by user %s: %d line(s), total %.2f",
                    placed.id, claims.user_id, len(line_items), placed.total_amount)

        (schedule or _run_now)(self.notifier.notify, placed)
        return placed

    def list_orders(self, user_id: str) -> List[OrderView]:
        """The user's orders, newest first, with each line's current product attached."""
        docs = list(self.orders.find({"user_id": user_id}).sort([("created_at", DESCENDING), ("_id", DESCENDING)]))
        products = self.catalog.get_products(it["product_id"] for doc in docs for it in doc.get("products", []))

        views = []
        for doc in docs:
            data = with_id(doc)
            data["products"] = [dict(it, product=products.get(it["product_id"])) for it in data.get("products", [])]
            views.append(OrderView.model_validate(data))
        return views

    def _check_lines(self, items: List[OrderItemIn]) -> List[LineItem]:
        line_items = []
        requested: Dict[str, int] = {}
        for item in items:
            product = self.catalog.get_product(item.product_id)
            if product is None:
                raise ProductNotFound(item.product_id)
            requested[product.id] = requested.get(product.id, 0) + item.quantity
            if product.stock < requested[product.id]:
                raise InsufficientStock(product.name, product.id)
            line_items.append(LineItem(product_id=product.id, name=product.name,
                                       price=product.price, quantity=item.quantity))
        return line_items

    def _reserve(self, line_items: List[LineItem]) -> Reservation:
        wanted: Dict[str, int] = {}
        names: Dict[str, str] = {}
        for li in line_items:
            wanted[li.product_id] = wanted.get(li.product_id, 0) + li.quantity
            names[li.product_id] = li.name

        reserved: Reservation = []
        for product_id, quantity in wanted.items():
            updated = self.products.find_one_and_update(
                {"_id": to_object_id(product_id), "stock": {"$gte": quantity}},
                {"$inc": {"stock": -quantity}},
            )
            if updated is None:
                self._release(reserved)
                raise InsufficientStock(names[product_id], product_id)
            reserved.append((product_id, quantity))
        return reserved

    def _release(self, reserved: Reservation):
        for product_id, quantity in reserved:
            self.products.update_one({"_id": to_object_id(product_id)}, {"$inc": {"stock": quantity}})
            logger.warning("Released %d unit(s) of product %s", quantity, product_id)

    def _order_user(self, claims: TokenClaims) -> OrderUser:
        oid = to_object_id(claims.user_id)
        doc = self.users.find_one({"_id": oid}) if oid else None
        if not doc:
            return OrderUser(email=claims.email)
        return OrderUser(name=doc.get("name"), email=doc["email"])

from __future__ import annotations
import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Query
from sqlalchemy import Table, insert, select
from sqlalchemy.engine import Connection

from backend import tables as t
from backend.aggregate import FieldGroup, nest
from backend.database import fetch_all, fetch_one, settings, transaction
from backend.pricing import priced, round2
from backend.schemas import Address, Order, OrderCreated, OrderLine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])

TOTAL_FIELDS = ("total", "subtotal", "shipping_cost")
ADDRESS_FIELDS = (
    "salutation",
    "name",
    "address",
    "additional_address",
    "postcode",
    "city",
    "phone_number",
    "created",
    "timestamp",
)
LINE_FIELDS = (
    "order_item_id",
    "size",
    "quantity",
    "price",
    "original_price",
    "discount_amount",
    "discount_percentage",
)

ORDER_COLUMNS = (
    t.order.c.id,
    t.order.c.email,
    t.order.c.total,
    t.order.c.subtotal,
    t.order.c.shipping_cost,
    t.order.c.payment_method_id,
    t.payment_method.c.name.label("payment_method_name"),
    t.order.c.status,
)


def _address_columns(table: Table, prefix: str) -> list:
    return [table.c.order_id.label(f"{prefix}_order_id")] + [
        table.c[name].label(f"{prefix}_{name}") for name in ADDRESS_FIELDS
    ]


def _address_group(name: str, prefix: str) -> FieldGroup:
    return FieldGroup(
        name,
        {field: f"{prefix}_{field}" for field in ADDRESS_FIELDS},
        identity=[f"{prefix}_order_id"],
    )

ORDER_FIELDS = {
    **{c.name: c.name for c in ORDER_COLUMNS},
    "created": "order_created",
    "timestamp": "order_timestamp",
}
ORDER_GROUPS = [
    FieldGroup(
        "order_items",
        {**{name: name for name in LINE_FIELDS}, "created": "order_item_created", "timestamp": "order_item_timestamp"},
        many=True,
        identity=["line_id"],
    ),
    _address_group("invoice_address", "invoice"),
    _address_group("shipping_address", "shipping"),
]


def _rounded_totals(record: dict[str, Any]) -> dict[str, Any]:
    return {**record, **{name: round2(record[name]) for name in TOTAL_FIELDS if name in record}}


def _line_query(order_id: int):
    return (
        select(*(t.order_item.c[name] for name in LINE_FIELDS), t.order_item.c.created, t.order_item.c.timestamp)
        .where(t.order_item.c.order_id == order_id)
        .order_by(t.order_item.c.line_id)
    )


def _order_exists(order_id: int) -> bool:
    return fetch_one(select(t.order.c.id).where(t.order.c.id == order_id)) is not None

# ---------- Writes ----------

def _insert_items(conn: Connection, order_id: int, lines: list[OrderLine]) -> None:
    conn.execute(
        insert(t.order_item),
        [
            {
                "order_id": order_id,
                "order_item_id": line.id,
                "size": line.variant.size,
                "quantity": line.quantity,
                "price": round2(line.variant.price),
                "original_price": round2(line.variant.original_price),
                "discount_amount": round2(line.variant.discount_amount),
                "discount_percentage": round2(line.variant.discount_percentage),
            }
            for line in lines
        ],
    )


def _insert_address(conn: Connection, table: Table, order_id: int, address: Address) -> None:
    conn.execute(insert(table).values(order_id=order_id, **address.as_row()))


def place_order(payload: Order) -> int:
    """Write the order, its lines and both addresses as one unit."""
    def work(conn: Connection) -> int:
        method = conn.execute(
            select(t.payment_method.c.id).where(t.payment_method.c.id == payload.payment_method)
        ).first()
        if method is None:
            raise HTTPException(status_code=400, detail="Unknown payment method.")
        order_id = conn.execute(
            insert(t.order).values(
                email=payload.email,
                total=round2(payload.order.total),
                subtotal=round2(payload.order.subtotal),
                shipping_cost=round2(payload.order.shipping_cost),
                payment_method_id=payload.payment_method,
                status=0,
            )
        ).inserted_primary_key[0]
        _insert_items(conn, order_id, payload.order.items)
        _insert_address(conn, t.order_shipping_address, order_id, payload.shipping_address)
        _insert_address(conn, t.order_invoice_address, order_id, payload.invoice_address)
        return order_id

    return transaction(work)

# ---------- Routes ----------

@router.get("")
@router.get("/", include_in_schema=False)
def list_orders(email: Optional[str] = Query(None)):
    stmt = (
        select(*ORDER_COLUMNS, t.order.c.created, t.order.c.timestamp)
        .select_from(t.order.join(t.payment_method, t.payment_method.c.id == t.order.c.payment_method_id))
        .order_by(t.order.c.id)
    )
    if email:
        stmt = stmt.where(t.order.c.email == email)
    return [_rounded_totals(row) for row in fetch_all(stmt)]

@router.post("", response_model=OrderCreated, status_code=201)
@router.post("/", response_model=OrderCreated, status_code=201, include_in_schema=False)
def create_order(payload: Order):
    order_id = place_order(payload)
    logger.info("Placed order %s with %d item(s)", order_id, len(payload.order.items))
    return OrderCreated(order_id=order_id)

@router.get("/{order_id}")
def get_order(order_id: int):
    stmt = (
        select(
            *ORDER_COLUMNS,
            t.order.c.created.label("order_created"),
            t.order.c.timestamp.label("order_timestamp"),
            t.order_item.c.line_id,
            *(t.order_item.c[name] for name in LINE_FIELDS),
            t.order_item.c.created.label("order_item_created"),
            t.order_item.c.timestamp.label("order_item_timestamp"),
            *_address_columns(t.order_invoice_address, "invoice"),
            *_address_columns(t.order_shipping_address, "shipping"),
        )
        .select_from(
            t.order.outerjoin(t.order_item, t.order_item.c.order_id == t.order.c.id)
            .outerjoin(t.order_invoice_address, t.order_invoice_address.c.order_id == t.order.c.id)
            .outerjoin(t.order_shipping_address, t.order_shipping_address.c.order_id == t.order.c.id)
            .outerjoin(t.payment_method, t.payment_method.c.id == t.order.c.payment_method_id)
        )
        .where(t.order.c.id == order_id)
        .order_by(t.order_item.c.line_id)
    )
    doc = nest(fetch_all(stmt), ORDER_FIELDS, ORDER_GROUPS)
    if doc is None:
        raise HTTPException(status_code=404, detail="Order not found.")
    doc = _rounded_totals(doc)
    doc["order_items"] = [priced(line, settings.BASE_SIZE) for line in doc["order_items"]]
    return doc

@router.get("/{order_id}/items")
def list_order_items(order_id: int):
    rows = fetch_all(_line_query(order_id))
    if not rows and not _order_exists(order_id):
        raise HTTPException(status_code=404, detail="Order not found.")
    return [priced(row, settings.BASE_SIZE) for row in rows]

@router.get("/{order_id}/items/{item_id}")
def get_order_item(order_id: int, item_id: int):
    row = fetch_one(_line_query(order_id).where(t.order_item.c.order_item_id == item_id))
    if row is None:
        raise HTTPException(status_code=404, detail="Order item not found.")
    return priced(row, settings.BASE_SIZE)


def _address(table: Table, order_id: int, label: str):
    row = fetch_one(select(*(table.c[name] for name in ADDRESS_FIELDS)).where(table.c.order_id == order_id))
    if row is None:
        raise HTTPException(status_code=404, detail=f"{label} not found.")
    return row

@router.get("/{order_id}/invoice_address")
def get_invoice_address(order_id: int):
    return _address(t.order_invoice_address, order_id, "Invoice address")

@router.get("/{order_id}/shipping_address")
def get_shipping_address(order_id: int):
    return _address(t.order_shipping_address, order_id, "Shipping address")

"""
Database Tables

Relational schema of the catalog and the order book, declared with
SQLAlchemy Core. Route modules build their queries from these objects so
every value reaches the database as a bound parameter.

Monetary columns come back as floats (``asdecimal=False``); they are
rounded to two decimals before leaving the API.
"""
from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
)

metadata = MetaData()


def _money(name: str, **kw) -> Column:
    return Column(name, Numeric(10, 2, asdecimal=False), **kw)


def _timestamps() -> list[Column]:
    return [
        Column("created", DateTime, server_default=func.now()),
        Column("timestamp", DateTime, server_default=func.now(), onupdate=func.now()),
    ]

# ---------- Catalog ----------

item_brand = Table(
    "item_brand",
    metadata,
    Column("brand_id", Integer, primary_key=True),
    Column("brand_name", String(255), nullable=False),
)

item_type = Table(
    "item_type",
    metadata,
    Column("type_id", Integer, primary_key=True),
    Column("type_name", String(255), nullable=False),
)

item_category = Table(
    "item_category",
    metadata,
    Column("category_id", Integer, primary_key=True),
    Column("category_name", String(255), nullable=False),
)

item = Table(
    "item",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("brand_id", Integer, ForeignKey("item_brand.brand_id"), nullable=False),
    Column("type_id", Integer, ForeignKey("item_type.type_id"), nullable=False),
    Column("category_id", Integer, ForeignKey("item_category.category_id"), nullable=False),
    Column("name", String(255), nullable=False),
    Column("image", String(500)),
    Column("description", Text),
    Column("instruction", Text),
    *_timestamps(),
)

item_variant = Table(
    "item_variant",
    metadata,
    Column("variant_id", Integer, primary_key=True),
    Column("item_id", Integer, ForeignKey("item.id", ondelete="CASCADE"), nullable=False),
    Column("size", Integer, nullable=False),
    Column("stock", Integer, nullable=False, default=0),
    _money("price", nullable=False),
    _money("original_price"),
    _money("discount_amount"),
    _money("discount_percentage"),
    *_timestamps(),
    UniqueConstraint("item_id", "size"),
)

# ---------- Payments ----------

payment_method = Table(
    "payment_method",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(255), nullable=False),
    Column("description", String(500)),
    Column("image", String(500)),
)

# ---------- Orders ----------

order = Table(
    "order",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("email", String(255), nullable=False),
    _money("total", nullable=False),
    _money("subtotal", nullable=False),
    _money("shipping_cost", nullable=False),
    Column("payment_method_id", Integer, ForeignKey("payment_method.id"), nullable=False),
    Column("status", Integer, nullable=False, default=0),
    *_timestamps(),
)

order_item = Table(
    "order_item",
    metadata,
    Column("line_id", Integer, primary_key=True),
    Column("order_id", Integer, ForeignKey("order.id", ondelete="CASCADE"), nullable=False),
    Column("order_item_id", Integer, nullable=False),
    Column("size", Integer, nullable=False),
    Column("quantity", Integer, nullable=False),
    _money("price", nullable=False),
    _money("original_price"),
    _money("discount_amount"),
    _money("discount_percentage"),
    *_timestamps(),
)


def _address_table(name: str) -> Table:
    return Table(
        name,
        metadata,
        Column("order_id", Integer, ForeignKey("order.id", ondelete="CASCADE"), primary_key=True),
        Column("salutation", String(32), nullable=False, default=""),
        Column("name", String(255), nullable=False),
        Column("address", String(255), nullable=False),
        Column("additional_address", String(255), nullable=False, default=""),
        Column("postcode", String(16), nullable=False),
        Column("city", String(255), nullable=False),
        Column("phone_number", String(64), nullable=False, default=""),
        *_timestamps(),
    )

order_invoice_address = _address_table("order_invoice_address")
order_shipping_address = _address_table("order_shipping_address")

from __future__ import annotations
import logging
from typing import Any

from sqlalchemy import func, insert, select
from sqlalchemy.engine import Connection

from backend import tables as t
from backend.database import transaction

logger = logging.getLogger(__name__)

# Seed data: a small perfume catalog, sizes in ml

BRANDS = ["Lancôme", "Dior", "Chanel", "Giorgio Armani"]
TYPES = ["Eau de Parfum", "Eau de Toilette"]
CATEGORIES = ["Damen", "Herren"]

SEED_ITEMS: list[dict[str, Any]] = [
    {
        "brand": "Lancôme", "type": "Eau de Parfum", "category": "Damen",
        "name": "La vie est belle",
        "image": "https://images.unsplash.com/photo-1594035910387-fea47794261f?q=80&w=1200&auto=format&fit=crop",
        "description": "Iris, jasmine and orange blossom wrapped in gourmand notes.",
        "instruction": "Spray from 20 cm onto warm areas of the skin.",
        "variants": [
            {"size": 30, "stock": 120, "price": 38.95, "original_price": 62.50, "discount_amount": 23.55, "discount_percentage": 38},
            {"size": 50, "stock": 80, "price": 59.95, "original_price": 89.00, "discount_amount": 29.05, "discount_percentage": 33},
            {"size": 100, "stock": 40, "price": 89.95, "original_price": 128.00, "discount_amount": 38.05, "discount_percentage": 30},
        ],
    },
    {
        "brand": "Dior", "type": "Eau de Toilette", "category": "Herren",
        "name": "Sauvage",
        "image": "https://images.unsplash.com/photo-1611930022073-b7a4ba5fcccd?q=80&w=1200&auto=format&fit=crop",
        "description": "Bergamot, pepper and ambroxan.",
        "instruction": "Spray onto neck and wrists.",
        "variants": [
            {"size": 60, "stock": 60, "price": 72.90, "original_price": 84.00, "discount_amount": 11.10, "discount_percentage": 13},
            {"size": 100, "stock": 35, "price": 99.90, "original_price": 115.00, "discount_amount": 15.10, "discount_percentage": 13},
        ],
    },
    {
        "brand": "Chanel", "type": "Eau de Parfum", "category": "Damen",
        "name": "Coco Mademoiselle",
        "image": "https://images.unsplash.com/photo-1605979344330-79b0fd9005d3?q=80&w=1200&auto=format&fit=crop",
        "description": "Orange, rose and patchouli.",
        "instruction": "Spray onto pulse points.",
        "variants": [
            {"size": 35, "stock": 25, "price": 79.00, "original_price": 79.00, "discount_amount": 0, "discount_percentage": 0},
        ],
    },
    {
        "brand": "Giorgio Armani", "type": "Eau de Toilette", "category": "Herren",
        "name": "Acqua di Giò",
        "image": "https://images.unsplash.com/photo-1530124566582-a618bc2615dc?q=80&w=1200&auto=format&fit=crop",
        "description": "Marine notes, bergamot and patchouli.",
        "instruction": "Spray from 20 cm onto the skin.",
        "variants": [
            {"size": 50, "stock": 90, "price": 45.95, "original_price": 68.00, "discount_amount": 22.05, "discount_percentage": 32},
            {"size": 200, "stock": 15, "price": 109.00, "original_price": 135.00, "discount_amount": 26.00, "discount_percentage": 19},
        ],
    },
]

PAYMENT_METHODS = [
    {"name": "Rechnung", "description": "Erst kaufen, dann bezahlen", "image": None},
    {"name": "PayPal", "description": "Bezahlen mit PayPal", "image": None},
    {"name": "Kreditkarte", "description": "Visa, Mastercard, American Express", "image": None},
]


def _insert_named(conn: Connection, table, column: str, names: list[str]) -> dict[str, int]:
    """Insert one row per name and map each name to the id it was given."""
    return {
        name: conn.execute(insert(table).values({column: name})).inserted_primary_key[0]
        for name in names
    }


def _is_empty(conn: Connection, table) -> bool:
    return conn.execute(select(func.count()).select_from(table)).scalar_one() == 0


def _load(conn: Connection) -> int:
    brands = _insert_named(conn, t.item_brand, "brand_name", BRANDS)
    types = _insert_named(conn, t.item_type, "type_name", TYPES)
    categories = _insert_named(conn, t.item_category, "category_name", CATEGORIES)
    if _is_empty(conn, t.payment_method):
        conn.execute(insert(t.payment_method), PAYMENT_METHODS)
    for entry in SEED_ITEMS:
        fields = {k: v for k, v in entry.items() if k not in ("brand", "type", "category", "variants")}
        item_id = conn.execute(
            insert(t.item).values(
                brand_id=brands[entry["brand"]],
                type_id=types[entry["type"]],
                category_id=categories[entry["category"]],
                **fields,
            )
        ).inserted_primary_key[0]
        conn.execute(insert(t.item_variant), [{"item_id": item_id, **v} for v in entry["variants"]])
    return len(SEED_ITEMS)


def seed_catalog() -> int:
    """Insert the sample catalog when it is empty; returns the number of items inserted."""
    def work(conn: Connection) -> int:
        if not (_is_empty(conn, t.item_brand) and _is_empty(conn, t.item)):
            return 0
        return _load(conn)

    inserted = transaction(work)
    if inserted:
        logger.info("Seeded %d catalog items", inserted)
    return inserted

from __future__ import annotations
import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Query
from sqlalchemy import delete, func, insert, select, update

from backend import tables as t
from backend.aggregate import FieldGroup, nest, nest_many
from backend.database import execute, fetch_all, fetch_one, insert_returning_id, settings
from backend.pricing import priced
from backend.schemas import AffectedRows, Brand, BrandCreated, ChangedRows

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/items", tags=["Items"])

# ---------- Query building ----------

SORTS = {
    "id asc": (t.item.c.id,),
    "name asc": (t.item.c.name.asc(), t.item.c.id),
    "name desc": (t.item.c.name.desc(), t.item.c.id),
    "price asc": (t.item_variant.c.price.asc(), t.item.c.id),
    "price desc": (t.item_variant.c.price.desc(), t.item.c.id),
}
DEFAULT_SORT = SORTS["id asc"]

ITEM_COLUMNS = (
    t.item.c.id,
    t.item.c.brand_id,
    t.item_brand.c.brand_name,
    t.item.c.type_id,
    t.item_type.c.type_name,
    t.item.c.category_id,
    t.item.c.name,
    t.item.c.image,
)
DETAIL_COLUMNS = ITEM_COLUMNS + (
    t.item.c.description,
    t.item.c.instruction,
    t.item.c.created,
    t.item.c.timestamp,
)
VARIANT_COLUMNS = (
    t.item_variant.c.variant_id,
    t.item_variant.c.size,
    t.item_variant.c.stock,
    t.item_variant.c.price,
    t.item_variant.c.original_price,
    t.item_variant.c.discount_amount,
    t.item_variant.c.discount_percentage,
)

ITEM_FIELDS = [c.name for c in DETAIL_COLUMNS]
VARIANTS = FieldGroup(
    "variants",
    ["size", "stock", "price", "original_price", "discount_amount", "discount_percentage"],
    many=True,
    identity=["variant_id"],
)


def sort_clause(sort: Optional[str]):
    """Map a ``sort`` query value onto ORDER BY columns; unknown values use id order."""
    return SORTS.get((sort or "").strip().lower(), DEFAULT_SORT)


def parse_ids(raw: Optional[str]) -> Optional[list[int]]:
    if not raw:
        return None
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise HTTPException(status_code=400, detail="Query parameter 'id' must be a comma-separated list of integers.")


def _catalog():
    return (
        t.item.join(t.item_type, t.item_type.c.type_id == t.item.c.type_id)
        .join(t.item_brand, t.item_brand.c.brand_id == t.item.c.brand_id)
        .join(t.item_category, t.item_category.c.category_id == t.item.c.category_id)
    )


def _priced_all(variants: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [priced(v, settings.BASE_SIZE) for v in variants]


def _preview_rows(ids: Optional[list[int]], sort: Optional[str]) -> list[dict[str, Any]]:
    # one variant per item: the earliest one inserted
    first = (
        select(t.item_variant.c.item_id, func.min(t.item_variant.c.variant_id).label("variant_id"))
        .group_by(t.item_variant.c.item_id)
        .subquery("first_variant")
    )
    stmt = (
        select(
            *ITEM_COLUMNS,
            t.item.c.created,
            t.item.c.timestamp,
            t.item_variant.c.size,
            t.item_variant.c.price,
            t.item_variant.c.original_price,
            t.item_variant.c.discount_percentage,
        )
        .select_from(
            _catalog()
            .join(first, first.c.item_id == t.item.c.id)
            .join(t.item_variant, t.item_variant.c.variant_id == first.c.variant_id)
        )
        .order_by(*sort_clause(sort))
    )
    if ids is not None:
        stmt = stmt.where(t.item.c.id.in_(ids))
    rows = fetch_all(stmt)
    return [{**priced(row, settings.BASE_SIZE), "rating": settings.DEFAULT_RATING} for row in rows]


def _nested_rows(ids: Optional[list[int]], sort: Optional[str]) -> list[dict[str, Any]]:
    stmt = (
        select(*DETAIL_COLUMNS, *VARIANT_COLUMNS)
        .select_from(_catalog().join(t.item_variant, t.item_variant.c.item_id == t.item.c.id))
        .order_by(*sort_clause(sort), t.item_variant.c.variant_id)
    )
    if ids is not None:
        stmt = stmt.where(t.item.c.id.in_(ids))
    docs = nest_many(fetch_all(stmt), "id", ITEM_FIELDS, [VARIANTS])
    for doc in docs:
        doc["rating"] = settings.DEFAULT_RATING
        doc["variants"] = _priced_all(doc["variants"])
    return docs

# ---------- Brands ----------

@router.get("/brands")
def list_brands():
    return fetch_all(select(t.item_brand.c.brand_id, t.item_brand.c.brand_name).order_by(t.item_brand.c.brand_id))

@router.get("/brands/{brand_id}")
def get_brand(brand_id: int):
    brand = fetch_one(select(t.item_brand).where(t.item_brand.c.brand_id == brand_id))
    if not brand:
        raise HTTPException(status_code=404, detail="Brand not found.")
    return brand

@router.post("/brands", response_model=BrandCreated, status_code=201)
def create_brand(payload: Brand):
    brand_id = insert_returning_id(insert(t.item_brand).values(brand_name=payload.brand_name.strip()))
    logger.info("Created brand %s (%s)", brand_id, payload.brand_name)
    return BrandCreated(brandId=brand_id)

@router.put("/brands/{brand_id}", response_model=ChangedRows)
def update_brand(brand_id: int, payload: Brand):
    changed = execute(
        update(t.item_brand)
        .where(t.item_brand.c.brand_id == brand_id)
        .values(brand_name=payload.brand_name.strip())
    )
    if not changed:
        raise HTTPException(status_code=404, detail="Brand not found.")
    return ChangedRows(changedRows=changed)

@router.delete("/brands/{brand_id}", response_model=AffectedRows)
def delete_brand(brand_id: int):
    affected = execute(delete(t.item_brand).where(t.item_brand.c.brand_id == brand_id))
    if not affected:
        raise HTTPException(status_code=404, detail="Brand not found.")
    logger.info("Deleted brand %s", brand_id)
    return AffectedRows(affectedRows=affected)

# ---------- Items ----------

@router.get("")
@router.get("/", include_in_schema=False)
def list_items(id: Optional[str] = Query(None), sort: Optional[str] = Query(None)):
    ids = parse_ids(id)
    if settings.ITEM_LIST_VARIANTS == "all":
        return _nested_rows(ids, sort)
    return _preview_rows(ids, sort)

@router.get("/{item_id}")
def get_item(item_id: int):
    stmt = (
        select(*DETAIL_COLUMNS, *VARIANT_COLUMNS)
        .select_from(_catalog().outerjoin(t.item_variant, t.item_variant.c.item_id == t.item.c.id))
        .where(t.item.c.id == item_id)
        .order_by(t.item_variant.c.variant_id)
    )
    doc = nest(fetch_all(stmt), ITEM_FIELDS, [VARIANTS])
    if doc is None:
        raise HTTPException(status_code=404, detail="Item not found.")
    doc["rating"] = settings.DEFAULT_RATING
    doc["variants"] = _priced_all(doc["variants"])
    return doc

def _variant_query(item_id: int):
    return (
        select(
            t.item_variant.c.item_id,
            *VARIANT_COLUMNS[1:],
            t.item_variant.c.created,
            t.item_variant.c.timestamp,
        )
        .where(t.item_variant.c.item_id == item_id)
        .order_by(t.item_variant.c.variant_id)
    )

@router.get("/{item_id}/variants")
def list_variants(item_id: int):
    rows = fetch_all(_variant_query(item_id))
    if not rows and fetch_one(select(t.item.c.id).where(t.item.c.id == item_id)) is None:
        raise HTTPException(status_code=404, detail="Item not found.")
    return _priced_all(rows)

@router.get("/{item_id}/variants/{size}")
def get_variant(item_id: int, size: int):
    row = fetch_one(_variant_query(item_id).where(t.item_variant.c.size == size))
    if row is None:
        raise HTTPException(status_code=404, detail="Variant not found.")
    return priced(row, settings.BASE_SIZE)

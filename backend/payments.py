from fastapi import APIRouter
from sqlalchemy import select

from backend import tables as t
from backend.database import fetch_all

router = APIRouter(prefix="/payments", tags=["Payments"])

@router.get("/methods")
def list_payment_methods():
    return fetch_all(select(t.payment_method).order_by(t.payment_method.c.id))

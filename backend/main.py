from __future__ import annotations
import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from backend import items, orders, payments, users
from backend.database import init_db, settings, table_names
from backend.errors import register_exception_handlers
from backend.seed import seed_catalog

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.CREATE_TABLES:
        init_db()
    logger.info("Catalog API ready (item list mode: %s)", settings.ITEM_LIST_VARIANTS)
    yield

app = FastAPI(title="Catalog API", lifespan=lifespan)

# Allow all origins for the storefront
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

api = APIRouter(prefix="/api/v1")
api.include_router(items.router)
api.include_router(orders.router)
api.include_router(payments.router)
api.include_router(users.router)
app.include_router(api)

@app.get("/")
def root():
    return {"message": "Catalog API running"}

@app.get("/test")
def test_database():
    resp = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if settings.DATABASE_URL else "❌ Not Set",
        "tables": [],
    }
    try:
        resp["tables"] = table_names()
        resp["database"] = "✅ Connected"
    except Exception as e:
        logger.warning("Database check failed: %s", e)
    return resp

class SeedResponse(BaseModel):
    seeded: bool
    inserted: int

@app.post("/seed", response_model=SeedResponse)
def seed():
    # Insert only if the catalog is empty
    inserted = seed_catalog()
    return SeedResponse(seeded=inserted > 0, inserted=inserted)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tonic.config import get_settings
from tonic.db.database import engine, Base
from tonic.api import users, plans, checkins, insights, catalog
from tonic.engine.catalog import get_catalog

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    supplements = get_catalog().supplements
    logger.info(f"Catalog loaded with {len(supplements)} supplements")
    yield


app = FastAPI(
    title="Tonic API",
    description="Supplement plans, daily check-ins and wellness insights",
    version="0.1.0",
    lifespan=lifespan
)

app.include_router(users.router, prefix="/users", tags=["users"])
app.include_router(plans.router, prefix="/plans", tags=["plans"])
app.include_router(checkins.router, prefix="/checkins", tags=["checkins"])
app.include_router(insights.router, prefix="/insights", tags=["insights"])
app.include_router(catalog.router, prefix="/catalog", tags=["catalog"])


@app.get("/")
async def root():
    return {"message": "Tonic API", "docs": "/docs"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}

from contextlib import asynccontextmanager

from fastapi import FastAPI
from app.core.config import settings
from app.core.logger import logger
from app.core.redis import slot_cache
from app.middleware.log_middleware import LogMiddleware

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.PROJECT_NAME} (slot cache {'on' if settings.SLOT_CACHE_ENABLED else 'off'})")
    yield
    await slot_cache.close()

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

from fastapi.middleware.cors import CORSMiddleware

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(LogMiddleware)

@app.get("/")
async def root():
    return {"message": "Welcome to CareSchedule API"}

from app.api.api import api_router
app.include_router(api_router, prefix=settings.API_V1_STR)

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockdata.api.api import api_router
from stockdata.core.config import settings
from stockdata.core.logging import configure_logging
from stockdata.db.base import Base
from stockdata.db.session import engine
import stockdata.models  # noqa: F401  (registers tables on Base.metadata)

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def prepare_storage() -> None:
    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    prepare_storage()
    logger.info("startup env=%s upload_dir=%s", settings.ENV, settings.UPLOAD_DIR)
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/healthz")
def healthz():
    return {"status": "ok"}

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from scoreboard.api import router
from scoreboard.api.errors import setup_error_handlers
from scoreboard.config import settings
from scoreboard.db import engine
from scoreboard.logging import get_logger, setup_logging
from scoreboard.models import Base

setup_logging()
logger = get_logger(__name__)

app = FastAPI(title="Scoreboard API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS if settings.CORS_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
setup_error_handlers(app)
app.include_router(router)


@app.get("/health/live")
def health_live() -> dict[str, str]:
    return {"status": "alive"}


@app.get("/health/ready")
def health_ready() -> dict[str, str]:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"status": "ready"}


@app.on_event("startup")
def on_startup() -> None:
    if settings.AUTO_CREATE_SCHEMA:
        Base.metadata.create_all(bind=engine)
    logger.info("api_started", auto_register_on_unlock=settings.AUTO_REGISTER_ON_UNLOCK)

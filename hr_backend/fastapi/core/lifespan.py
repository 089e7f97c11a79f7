import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from hr_backend.fastapi.core.init_settings import global_settings
from hr_backend.fastapi.core.logging_config import configure_logging
from hr_backend.fastapi.dependencies.database import init_engine, init_db, dispose_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(global_settings.LOG_LEVEL)

    # Initialize the database connection and schema
    init_engine(global_settings.DB_URL, echo=global_settings.SQL_ECHO)
    init_db()
    logger.info("%s %s started", global_settings.APP_NAME, global_settings.APP_VERSION)

    yield

    dispose_engine()
    logger.info("%s stopped", global_settings.APP_NAME)

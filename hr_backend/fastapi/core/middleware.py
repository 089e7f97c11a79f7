import os
import logging
from fastapi.middleware.cors import CORSMiddleware
from hr_backend.fastapi.core.init_settings import global_settings

logger = logging.getLogger(__name__)


def cors_origins():
    """Allowed origins from CLIENT_URL, API_BASE_URL and ADDITIONAL_CORS_ORIGINS."""
    origins = [
        global_settings.CLIENT_URL,
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    if global_settings.API_BASE_URL and global_settings.API_BASE_URL != global_settings.CLIENT_URL:
        origins.append(global_settings.API_BASE_URL)

    additional_origins = os.getenv("ADDITIONAL_CORS_ORIGINS", "")
    if additional_origins:
        origins.extend([origin.strip() for origin in additional_origins.split(",")])

    # Remove empty strings and duplicates, keep order
    return list(dict.fromkeys(origin for origin in origins if origin))


def setup_cors(app):
    origins = cors_origins()
    logger.info("CORS allowed origins: %s", origins)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["Authorization", "Content-Type", "Accept"],
    )

from fastapi import FastAPI

from hr_backend.fastapi.core.init_settings import global_settings
from hr_backend.fastapi.core.lifespan import lifespan
from hr_backend.fastapi.core.middleware import setup_cors
from hr_backend.fastapi.core.routers import setup_routers


def create_app() -> FastAPI:
    app = FastAPI(
        title=global_settings.APP_NAME,
        version=global_settings.APP_VERSION,
        description="Payroll records, adjustments and net salary recalculation",
        lifespan=lifespan,
    )

    setup_cors(app)
    setup_routers(app)

    return app


app = create_app()

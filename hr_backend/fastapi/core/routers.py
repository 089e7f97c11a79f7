from fastapi import FastAPI
from hr_backend.fastapi.api.v1.endpoints import health, payroll, payroll_adjustment

def setup_routers(app: FastAPI):
    # Liveness probe
    app.include_router(health.router, prefix="", tags=["health"])

    # Adjustment routes come first so "/adjustments" is not read as a payroll ID
    app.include_router(payroll_adjustment.router, prefix="/api/v1/payroll/adjustments", tags=["payroll-adjustments"])

    # Payroll management routes
    app.include_router(payroll.router, prefix="/api/v1/payroll", tags=["payroll-management"])

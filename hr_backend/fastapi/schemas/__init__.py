from hr_backend.fastapi.schemas.employee import EmployeeSummary
from hr_backend.fastapi.schemas.payroll import (
    PayrollCreate,
    PayrollUpdate,
    PayrollRead,
    PayrollListResponse
)
from hr_backend.fastapi.schemas.payroll_adjustment import (
    AdjustmentCreate,
    AdjustmentUpdate,
    AdjustmentRead,
    AdjustmentListResponse
)

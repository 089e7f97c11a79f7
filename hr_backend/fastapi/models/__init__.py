from hr_backend.fastapi.models.employee import Employee
from hr_backend.fastapi.models.payroll import Payroll
from hr_backend.fastapi.models.payroll_adjustment import PayrollAdjustment

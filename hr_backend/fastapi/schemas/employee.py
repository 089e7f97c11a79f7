"""
Employee Pydantic schemas embedded in payroll responses.
"""

from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict


class EmployeeSummary(BaseModel):
    """Employee fields shown alongside payroll records and adjustments."""

    id: UUID = Field(..., description="Unique identifier of the employee")
    first_name: str = Field(..., description="Given name")
    last_name: str = Field(..., description="Family name")
    email: str = Field(..., description="Work email")

    model_config = ConfigDict(from_attributes=True)

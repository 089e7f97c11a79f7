"""
Payroll adjustment Pydantic schemas.
"""

from uuid import UUID
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, field_validator

from hr_backend.fastapi.core.enums import AdjustmentType
from hr_backend.fastapi.schemas.employee import EmployeeSummary


class AdjustmentCreate(BaseModel):
    """Schema for creating a payroll adjustment."""

    payroll_id: UUID = Field(
        ...,
        description="ID of an existing payroll record"
    )

    type: AdjustmentType = Field(
        ...,
        description="Adjustment type"
    )

    amount: Decimal = Field(
        ...,
        ge=0,
        decimal_places=2,
        max_digits=12,
        description="Adjustment amount (never negative)"
    )

    description: Optional[str] = Field(
        None,
        max_length=500,
        description="Description of the adjustment"
    )

    approved: bool = Field(
        default=False,
        description="Whether the amount counts toward payroll totals"
    )

    approved_by: Optional[UUID] = Field(
        None,
        description="Approver identity; defaults to the caller when approved"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "payroll_id": "789e0123-e89b-12d3-a456-426614174000",
                "type": "BONUS",
                "amount": "300.00",
                "description": "Quarterly bonus",
                "approved": True
            }
        }
    )


class AdjustmentUpdate(BaseModel):
    """Schema for patching a payroll adjustment. Unset fields are left alone."""

    type: Optional[AdjustmentType] = Field(None, description="Updated adjustment type")
    amount: Optional[Decimal] = Field(
        None,
        ge=0,
        decimal_places=2,
        max_digits=12,
        description="Updated amount"
    )
    description: Optional[str] = Field(None, max_length=500, description="Updated description")
    approved: Optional[bool] = Field(None, description="Updated approval flag")
    approved_by: Optional[UUID] = Field(None, description="Updated approver identity")

    @field_validator("type", "amount", "approved")
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "approved": True
            }
        }
    )


class AdjustmentRead(BaseModel):
    """Schema for reading a payroll adjustment."""

    id: UUID = Field(..., description="Unique identifier of the adjustment")
    payroll_id: UUID = Field(..., description="ID of the payroll record")
    type: AdjustmentType = Field(..., description="Adjustment type")
    amount: Decimal = Field(..., description="Adjustment amount")
    description: Optional[str] = Field(None, description="Description")
    approved: bool = Field(..., description="Approval flag")
    approved_by: Optional[UUID] = Field(None, description="Approver identity")
    approved_at: Optional[datetime] = Field(None, description="When the adjustment was approved")
    created_at: datetime = Field(..., description="When the adjustment was created")
    updated_at: datetime = Field(..., description="When the adjustment last changed")
    employee: Optional[EmployeeSummary] = Field(None, description="Employee of the parent payroll record")

    model_config = ConfigDict(from_attributes=True)


class AdjustmentListResponse(BaseModel):
    """Schema for paginated adjustment listing."""

    adjustments: List[AdjustmentRead] = Field(..., description="List of adjustments")
    total: int = Field(..., description="Total number of matching adjustments")
    skip: int = Field(..., description="Number of records skipped")
    limit: int = Field(..., description="Maximum number of records returned")

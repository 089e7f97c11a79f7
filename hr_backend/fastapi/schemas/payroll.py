"""
Payroll Pydantic schemas for request/response validation.

This module defines the data validation schemas for Payroll-related
API operations using Pydantic models.
"""

from uuid import UUID
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from hr_backend.fastapi.core.enums import PaymentMethod, PayrollStatus
from hr_backend.fastapi.schemas.employee import EmployeeSummary


class PayrollCreate(BaseModel):
    """Schema for creating a new payroll record."""

    employee_id: UUID = Field(
        ...,
        description="ID of the employee this payroll record belongs to"
    )

    pay_period_start: date = Field(
        ...,
        description="First day of the pay period"
    )

    pay_period_end: date = Field(
        ...,
        description="Last day of the pay period (after the start)"
    )

    base_salary: Decimal = Field(
        ...,
        ge=0,
        decimal_places=2,
        max_digits=12,
        description="Base salary for the period"
    )

    tax: Decimal = Field(
        default=Decimal("0.00"),
        ge=0,
        decimal_places=2,
        max_digits=12,
        description="Tax withheld for the period"
    )

    status: PayrollStatus = Field(
        default=PayrollStatus.DRAFT,
        description="Initial payroll status"
    )

    payment_date: Optional[datetime] = Field(
        None,
        description="When the payroll was paid"
    )

    payment_method: Optional[PaymentMethod] = Field(
        None,
        description="BANK_TRANSFER, CHECK, CASH or OTHER"
    )

    notes: Optional[str] = Field(
        None,
        max_length=500,
        description="Additional notes about the payroll"
    )

    @model_validator(mode="after")
    def validate_pay_period(self):
        """Pay period must start before it ends."""
        if self.pay_period_start >= self.pay_period_end:
            raise ValueError("pay_period_start must be before pay_period_end")
        return self

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "employee_id": "123e4567-e89b-12d3-a456-426614174000",
                "pay_period_start": "2025-11-01",
                "pay_period_end": "2025-11-30",
                "base_salary": "5000.00",
                "tax": "500.00",
                "status": "DRAFT",
                "payment_method": "BANK_TRANSFER",
                "notes": "November payroll"
            }
        }
    )


class PayrollUpdate(BaseModel):
    """
    Schema for the administrative override of a payroll record.

    Derived totals are not accepted here; they only change through
    adjustments.
    """

    base_salary: Optional[Decimal] = Field(
        None,
        ge=0,
        decimal_places=2,
        max_digits=12,
        description="Updated base salary"
    )

    tax: Optional[Decimal] = Field(
        None,
        ge=0,
        decimal_places=2,
        max_digits=12,
        description="Updated tax"
    )

    status: Optional[PayrollStatus] = Field(
        None,
        description="Updated payroll status"
    )

    payment_method: Optional[PaymentMethod] = Field(
        None,
        description="Updated payment method (null clears it)"
    )

    notes: Optional[str] = Field(
        None,
        max_length=500,
        description="Updated notes"
    )

    @field_validator("base_salary", "tax", "status")
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "base_salary": "5500.00",
                "notes": "Salary review"
            }
        }
    )


class PayrollRead(BaseModel):
    """Schema for reading payroll information."""

    id: UUID = Field(..., description="Unique identifier of the payroll record")
    employee_id: UUID = Field(..., description="ID of the employee")
    pay_period_start: date = Field(..., description="First day of the pay period")
    pay_period_end: date = Field(..., description="Last day of the pay period")
    base_salary: Decimal = Field(..., description="Base salary for the period")
    tax: Decimal = Field(..., description="Tax withheld for the period")
    allowances: Decimal = Field(..., description="Sum of approved additive adjustments")
    deductions: Decimal = Field(..., description="Sum of approved subtractive adjustments")
    net_salary: Decimal = Field(..., description="base_salary + allowances - tax - deductions")
    status: PayrollStatus = Field(..., description="Payroll status")
    payment_date: Optional[datetime] = Field(None, description="When the payroll was paid")
    payment_method: Optional[PaymentMethod] = Field(None, description="How the payroll is paid out")
    notes: Optional[str] = Field(None, description="Additional notes")
    created_at: datetime = Field(..., description="When the payroll record was created")
    updated_at: datetime = Field(..., description="When the payroll record last changed")
    employee: Optional[EmployeeSummary] = Field(None, description="Employee the record belongs to")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "789e0123-e89b-12d3-a456-426614174000",
                "employee_id": "123e4567-e89b-12d3-a456-426614174000",
                "pay_period_start": "2025-11-01",
                "pay_period_end": "2025-11-30",
                "base_salary": "5000.00",
                "tax": "500.00",
                "allowances": "300.00",
                "deductions": "0.00",
                "net_salary": "4800.00",
                "status": "DRAFT",
                "payment_date": None,
                "payment_method": "BANK_TRANSFER",
                "notes": "November payroll",
                "created_at": "2025-11-01T10:30:00Z",
                "updated_at": "2025-11-02T08:00:00Z"
            }
        }
    )


class PayrollListResponse(BaseModel):
    """Schema for paginated payroll listing."""

    payroll_records: List[PayrollRead] = Field(
        ...,
        description="List of payroll records"
    )

    total: int = Field(
        ...,
        description="Total number of matching payroll records"
    )

    skip: int = Field(
        ...,
        description="Number of records skipped"
    )

    limit: int = Field(
        ...,
        description="Maximum number of records returned"
    )

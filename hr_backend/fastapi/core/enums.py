"""
Enumerations shared by models, schemas and services.
"""

from enum import Enum


class PayrollStatus(str, Enum):
    """Lifecycle status of a payroll record (informational only)."""
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    PAID = "PAID"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"


class PaymentMethod(str, Enum):
    """How a payroll record is paid out."""
    BANK_TRANSFER = "BANK_TRANSFER"
    CHECK = "CHECK"
    CASH = "CASH"
    OTHER = "OTHER"


class AdjustmentType(str, Enum):
    """Kinds of payroll adjustment."""
    BONUS = "BONUS"
    COMMISSION = "COMMISSION"
    DEDUCTION = "DEDUCTION"
    ALLOWANCE = "ALLOWANCE"
    OVERTIME = "OVERTIME"
    OTHER = "OTHER"


class AdjustmentEffect(str, Enum):
    """Which payroll total an adjustment contributes to."""
    ADDITION = "ADDITION"
    DEDUCTION = "DEDUCTION"


class UserRole(str, Enum):
    """Roles supplied by the identity provider."""
    SUPERADMIN = "SUPERADMIN"
    ADMIN = "ADMIN"
    HR = "HR"
    FINANCE = "FINANCE"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


# Single source of truth for how each adjustment type moves net salary.
# OVERTIME is counted as a deduction, matching the totals already stored
# for existing payroll records.
ADJUSTMENT_EFFECTS = {
    AdjustmentType.BONUS: AdjustmentEffect.ADDITION,
    AdjustmentType.COMMISSION: AdjustmentEffect.ADDITION,
    AdjustmentType.ALLOWANCE: AdjustmentEffect.ADDITION,
    AdjustmentType.DEDUCTION: AdjustmentEffect.DEDUCTION,
    AdjustmentType.OVERTIME: AdjustmentEffect.DEDUCTION,
    AdjustmentType.OTHER: AdjustmentEffect.DEDUCTION,
}

# Roles allowed to read and change payroll data
PAYROLL_ROLES = frozenset({
    UserRole.SUPERADMIN,
    UserRole.ADMIN,
    UserRole.HR,
    UserRole.FINANCE,
})

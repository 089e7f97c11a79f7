"""
Net salary arithmetic.

Pure functions over Decimal amounts; no database access.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from hr_backend.fastapi.core.enums import ADJUSTMENT_EFFECTS, AdjustmentEffect, AdjustmentType

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class AdjustmentTotals:
    additions: Decimal = ZERO
    deductions: Decimal = ZERO


def sum_adjustments(adjustments: Iterable) -> AdjustmentTotals:
    """
    Split adjustments into additions and deductions and sum each side.

    Callers pass only the adjustments that should count (the approved ones).
    Each item needs ``type`` and ``amount`` attributes.
    """
    additions = ZERO
    deductions = ZERO
    for adjustment in adjustments:
        if ADJUSTMENT_EFFECTS[AdjustmentType(adjustment.type)] is AdjustmentEffect.ADDITION:
            additions += adjustment.amount
        else:
            deductions += adjustment.amount
    return AdjustmentTotals(additions=additions, deductions=deductions)


def compute_net_salary(
    base_salary: Decimal,
    allowances: Decimal,
    tax: Decimal,
    deductions: Decimal
) -> Decimal:
    return base_salary + allowances - tax - deductions

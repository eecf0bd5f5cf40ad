"""Payroll calculation helpers."""

from payslip_engine.calculators.aggregation import (
    PayslipTotals,
    aggregate_payslip,
    round_to_cents,
    sum_overtime_hours,
    sum_reimbursements,
)

__all__ = [
    "PayslipTotals",
    "aggregate_payslip",
    "round_to_cents",
    "sum_overtime_hours",
    "sum_reimbursements",
]

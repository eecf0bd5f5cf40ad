"""Payslip engine: payroll aggregation and audited mutations for HR attendance data."""

__version__ = "0.1.0"

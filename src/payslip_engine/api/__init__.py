"""HTTP API for the payslip engine."""

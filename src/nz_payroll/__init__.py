"""New Zealand payroll tax, deduction and leave calculation engine."""

__version__ = "0.1.0"

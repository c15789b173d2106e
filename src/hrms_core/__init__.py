"""HRMS backend: organizations, employees, access control, compliance, leave and payroll."""

__version__ = "0.1.0"

"""Payroll System package.

This package is organized by feature modules (employees, attendance, periods,
payroll) with a thin Flask controller layer and service/repository layers.
"""

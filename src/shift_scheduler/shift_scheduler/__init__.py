"""Shift Scheduler package.

Feature modules (business_day, shifts, roles, templates, reports, ...) each carry
their own model/repository/service layers, with a thin Flask controller on top.
"""
